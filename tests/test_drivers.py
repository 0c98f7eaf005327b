import json

from callreport.analyzer import analyze_folder, analyze_text
from callreport.models import Segment
from callreport.transcriber import NO_SPEECH, transcribe_folder


def test_transcribe_folder_skips_existing_transcripts(tmp_path):
    (tmp_path / "one.mp3").write_bytes(b"")
    (tmp_path / "two.mp3").write_bytes(b"")
    (tmp_path / "two.txt").write_text("already done", encoding="utf-8")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "three.wav").write_bytes(b"")
    (sub / "cover.jpg").write_bytes(b"")

    calls = []

    def fake(path):
        calls.append(path)
        if path.endswith("three.wav"):
            return []
        return [Segment(0.0, 1.0, "Hello"), Segment(1.0, 2.0, "there")]

    stats = transcribe_folder(str(tmp_path), fake)
    assert stats.processed == 2
    assert stats.skipped == 1
    assert stats.directories == 1
    assert len(calls) == 2
    assert (tmp_path / "one.txt").read_text(encoding="utf-8") == "Hello\nthere"
    assert (tmp_path / "two.txt").read_text(encoding="utf-8") == "already done"
    assert (sub / "three.txt").read_text(encoding="utf-8") == NO_SPEECH


def test_transcription_failure_is_recorded(tmp_path):
    (tmp_path / "bad.amr").write_bytes(b"")

    def boom(path):
        raise ValueError("decoder error")

    stats = transcribe_folder(str(tmp_path), boom)
    assert stats.failed == 1
    assert (tmp_path / "bad.txt").read_text(encoding="utf-8") == (
        "[Transcription failed: decoder error]"
    )


def test_analyze_text_sentiment():
    record = analyze_text("Thank you, that was great. I have a problem with the bill today.")
    assert record["sentiment"] == "positive"
    assert record["metadata"]["positive_score"] == 2
    assert record["metadata"]["negative_score"] == 1
    assert record["concerns"] == ["I have a problem with the bill today"]
    assert record["call_tags"] == []


def test_analyze_folder_writes_missing_sidecars_only(tmp_path):
    (tmp_path / "a.mp3").write_bytes(b"")
    (tmp_path / "a.txt").write_text("I am angry about this issue.", encoding="utf-8")
    (tmp_path / "b.mp3").write_bytes(b"")
    (tmp_path / "b.txt").write_text("fine", encoding="utf-8")
    (tmp_path / "b_analysis.json").write_text("{}", encoding="utf-8")
    (tmp_path / "c.mp3").write_bytes(b"")

    stats = analyze_folder(str(tmp_path))
    assert stats.processed == 1
    assert stats.skipped == 1
    record = json.loads((tmp_path / "a_analysis.json").read_text(encoding="utf-8"))
    assert record["sentiment"] == "negative"
    assert not (tmp_path / "c_analysis.json").exists()
