"""Keyword-based transcript analysis.

Produces an ``_analysis.json`` sidecar for transcripts that do not have one
yet. The record uses the same field names as the richer analyses the
summary reads, so both kinds flow through the same reports.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, Iterable, Optional

from .audio_utils import SUPPORTED_EXTENSIONS
from .sidecars import analysis_path, has_sidecar, transcript_path
from .storage import list_entries, read_text, write_json_atomic
from .transcriber import WalkStats

logger = logging.getLogger("callreport")

POSITIVE_WORDS = ("thank", "great", "excellent", "good", "happy", "satisfied")
NEGATIVE_WORDS = ("problem", "issue", "complaint", "disappointed", "angry", "frustrated")

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def _count(text: str, words: Iterable[str]) -> int:
    return sum(text.count(word) for word in words)


def analyze_text(text: str, file_name: str = "") -> Dict[str, Any]:
    lower = text.lower()
    lines = [line for line in text.split("\n") if line.strip()]
    word_count = len(text.split())
    positive = _count(lower, POSITIVE_WORDS)
    negative = _count(lower, NEGATIVE_WORDS)

    sentiment = "neutral"
    if positive > negative:
        sentiment = "positive"
    elif negative > positive:
        sentiment = "negative"

    hits = positive + negative
    confidence = round(abs(positive - negative) / hits, 2) if hits else 0.0

    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if len(s.strip()) > 10]
    concerns = [s for s in sentences if any(word in s.lower() for word in NEGATIVE_WORDS)]

    return {
        "summary": (
            f"Analysis of {file_name}: {word_count} words, {len(lines)} lines, "
            f"{sentiment} sentiment."
        ),
        "key_points": sentences[:5],
        "sentiment": sentiment,
        "confidence": confidence,
        "call_tags": [],
        "concerns": concerns,
        "todo": [],
        "metadata": {
            "word_count": word_count,
            "line_count": len(lines),
            "positive_score": positive,
            "negative_score": negative,
            "file_name": file_name,
        },
    }


def analyze_transcript(path: str) -> Dict[str, Any]:
    return analyze_text(read_text(path), os.path.basename(path))


def analyze_folder(
    folder: str,
    extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    stats: Optional[WalkStats] = None,
) -> WalkStats:
    """Write analysis sidecars for transcribed recordings that lack one."""
    allowed = {ext.lower() for ext in extensions}
    stats = stats or WalkStats()

    for entry in list_entries(folder):
        if entry.is_directory:
            stats.directories += 1
            analyze_folder(entry.path, allowed, stats)
            continue
        if entry.extension not in allowed:
            continue

        txt_path = transcript_path(entry.path)
        json_path = analysis_path(entry.path)
        if not has_sidecar(txt_path):
            logger.debug("No transcription for %s; nothing to analyse", entry.name)
            continue
        if has_sidecar(json_path):
            logger.info("Skipping %s: analysis already exists", entry.name)
            stats.skipped += 1
            continue

        try:
            record = analyze_transcript(txt_path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to analyse %s: %s", txt_path, exc)
            stats.failed += 1
            continue
        write_json_atomic(json_path, record)
        logger.info("Analysis written: %s", json_path)
        stats.processed += 1

    return stats
