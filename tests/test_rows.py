import json
import os

from callreport.models import AnalysisRecord, FileEntry
from callreport.rows import RowBuilder, call_direction, classify, flatten_analysis


def _entry(folder, name):
    path = os.path.join(folder, name)
    with open(path, "wb") as handle:
        handle.write(b"")
    return FileEntry(path=path, name=name, extension=os.path.splitext(name)[1], is_directory=False)


def _write_analysis(folder, stem, payload):
    with open(os.path.join(folder, f"{stem}_analysis.json"), "w", encoding="utf-8") as handle:
        if isinstance(payload, str):
            handle.write(payload)
        else:
            json.dump(payload, handle)


def test_tags_deduplicate_case_insensitively_and_deactivation_wins():
    record = AnalysisRecord.from_dict(
        {"call_tags": [{"tag": "Intro"}, {"tag": "intro"}, {"tag": " "}, {"tag": "Deactivation"}]}
    )
    flat = flatten_analysis(record)
    assert flat["call_tags_count"] == "2"
    assert flat["call_tags"] == "Intro | Deactivation"
    assert classify("outgoing", record.tag_names()) == "deactivation"


def test_call_type_casing_does_not_matter():
    assert classify("Outgoing", []) == "outgoing"
    assert classify("outgoing", []) == "outgoing"
    assert classify("INCOMING", []) == "incoming"
    assert classify("incomming", []) == "incoming"
    assert classify("missed", []) is None
    assert call_direction("N/A") is None


def test_flatten_defaults_missing_nested_fields():
    flat = flatten_analysis(AnalysisRecord.from_dict({"sentiment": "positive", "confidence": 0.85}))
    assert flat["sentiment"] == "positive"
    assert flat["confidence"] == "0.85"
    assert flat["emotional_state"] == ""
    assert flat["rapport_score"] == ""
    assert flat["missed_opportunity"] == ""
    assert flat["concerns_count"] == ""
    assert flat["todo"] == ""
    assert flat["call_tags_count"] == "0"


def test_flatten_nested_and_list_fields():
    record = AnalysisRecord.from_dict(
        {
            "concerns": ["price", "timing"],
            "todo": ["call back", "send quote"],
            "payment_intent": True,
            "advanced_insights": {
                "emotional_state": "calm",
                "conversion_probability": 0.4,
                "urgency_level": "high",
                "agent_feedback": {"rapport_score": 8, "missed_opportunity": "upsell"},
            },
        }
    )
    flat = flatten_analysis(record)
    assert flat["concerns_count"] == "2"
    assert flat["todo"] == "call back | send quote"
    assert flat["payment_intent"] == "true"
    assert flat["emotional_state"] == "calm"
    assert flat["conversion_probability"] == "0.4"
    assert flat["rapport_score"] == "8"
    assert flat["missed_opportunity"] == "upsell"


def test_flatten_structured_values_render_as_json():
    record = AnalysisRecord.from_dict(
        {
            "next_best_action": {"action": "call back", "when": "mañana"},
            "payment_intent": ["card", "cash"],
            "todo": [{"task": "send quote"}, "follow up"],
        }
    )
    flat = flatten_analysis(record)
    assert flat["next_best_action"] == '{"action": "call back", "when": "mañana"}'
    assert json.loads(flat["next_best_action"]) == {"action": "call back", "when": "mañana"}
    assert flat["payment_intent"] == '["card", "cash"]'
    assert flat["todo"] == '{"task": "send quote"} | follow up'


def test_build_row_with_sidecars(tmp_path):
    folder = str(tmp_path)
    name = "a-TP11755659148284TP3123TP4Outgoing.amr"
    entry = _entry(folder, name)
    stem = os.path.splitext(name)[0]
    (tmp_path / f"{stem}.txt").write_text("hello", encoding="utf-8")
    _write_analysis(folder, stem, {"gender": "female", "call_tags": [{"tag": "Pricing"}]})

    row = RowBuilder(duration_provider=lambda path: "00:01:30").build(entry, folder)
    assert row.duration == "00:01:30"
    assert row.has_transcription and row.has_analysis
    assert row.metadata.phone_number == "123"
    assert row.gender == "female"
    assert row.classification == "outgoing"

    values = row.csv_values()
    assert len(values) == 21
    assert values[2:4] == ["Yes", "Yes"]

    entry_json = row.bucket_entry()
    assert entry_json["filename"] == name
    assert entry_json["duration"] == "00:01:30"
    assert entry_json["callType"] == "Outgoing"
    assert entry_json["gender"] == "female"


def test_build_row_without_sidecars_or_duration(tmp_path):
    entry = _entry(str(tmp_path), "unknown.mp3")
    row = RowBuilder(duration_provider=lambda path: None).build(entry, str(tmp_path))
    assert row.duration == "N/A"
    assert not row.has_transcription
    assert not row.has_analysis
    assert row.classification is None
    assert row.csv_values()[4:7] == ["N/A", "N/A", "N/A"]


def test_corrupt_analysis_counts_as_present_but_empty(tmp_path):
    name = "b-TP4incoming.wav"
    entry = _entry(str(tmp_path), name)
    _write_analysis(str(tmp_path), "b-TP4incoming", "{not json")
    row = RowBuilder(duration_provider=lambda path: None).build(entry, str(tmp_path))
    assert row.has_analysis
    assert row.analysis is None
    assert row.sentiment == ""
    assert row.classification is None
