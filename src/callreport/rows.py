"""Summary row assembly for a single recording."""

from __future__ import annotations

import json
import logging
import os
from typing import Callable, Dict, Iterable, Optional

from .audio_utils import get_audio_duration
from .filename_parsers import FilenameParserRegistry
from .models import NOT_AVAILABLE, AnalysisRecord, FileEntry, SummaryRow
from .sidecars import has_analysis, has_transcript, load_analysis

logger = logging.getLogger("callreport")

DurationProvider = Callable[[str], Optional[str]]

TAG_SEPARATOR = " | "


def call_direction(call_type: Optional[str]) -> Optional[str]:
    """``outgoing``/``incoming`` from a call type, checked in that order."""
    value = (call_type or "").lower()
    if "outgoing" in value:
        return "outgoing"
    if "incoming" in value or "incomming" in value:
        return "incoming"
    return None


def classify(call_type: Optional[str], tag_names: Iterable[str]) -> Optional[str]:
    """Bucket for an analysed call; a deactivation tag beats the call type."""
    if any(name.strip().lower() == "deactivation" for name in tag_names):
        return "deactivation"
    return call_direction(call_type)


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def flatten_analysis(record: Optional[AnalysisRecord]) -> Dict[str, str]:
    if record is None:
        return {}
    insights = record.advanced_insights
    feedback = insights.agent_feedback
    tags = record.tag_names()
    return {
        "gender": _text(record.gender),
        "sentiment": _text(record.sentiment),
        "confidence": _text(record.confidence),
        "emotional_state": _text(insights.emotional_state),
        "rapport_score": _text(feedback.rapport_score),
        "call_tags": TAG_SEPARATOR.join(tags),
        "call_tags_count": str(len(tags)),
        "payment_intent": _text(record.payment_intent),
        "next_best_action": _text(record.next_best_action),
        "todo": TAG_SEPARATOR.join(_text(item) for item in record.todo)
        if record.todo is not None
        else "",
        "concerns_count": str(len(record.concerns)) if record.concerns is not None else "",
        "conversion_probability": _text(insights.conversion_probability),
        "urgency_level": _text(insights.urgency_level),
        "missed_opportunity": _text(feedback.missed_opportunity),
    }


class RowBuilder:
    def __init__(
        self,
        registry: Optional[FilenameParserRegistry] = None,
        duration_provider: DurationProvider = get_audio_duration,
    ) -> None:
        self.registry = registry or FilenameParserRegistry.from_names()
        self.duration_provider = duration_provider

    def build(self, entry: FileEntry, folder: str) -> SummaryRow:
        path = entry.path or os.path.join(folder, entry.name)
        metadata = self.registry.resolve(entry.name)

        duration = self.duration_provider(path) or NOT_AVAILABLE
        transcript = has_transcript(path)
        if transcript:
            logger.debug("Found transcription for %s", entry.name)

        analysis_exists = has_analysis(path)
        record = load_analysis(path) if analysis_exists else None

        row = SummaryRow(
            filename=entry.name,
            duration=duration,
            has_transcription=transcript,
            has_analysis=analysis_exists,
            metadata=metadata,
            analysis=record,
            **flatten_analysis(record),
        )
        if record is not None:
            row.classification = classify(metadata.call_type, record.tag_names())
        return row
