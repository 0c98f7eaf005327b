"""Derived artifacts stored next to each recording."""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from .models import AnalysisRecord

logger = logging.getLogger("callreport")

TRANSCRIPT_SUFFIX = ".txt"
ANALYSIS_SUFFIX = "_analysis.json"


def sidecar_base(audio_path: str) -> str:
    root, _ext = os.path.splitext(audio_path)
    return root


def transcript_path(audio_path: str) -> str:
    return sidecar_base(audio_path) + TRANSCRIPT_SUFFIX


def analysis_path(audio_path: str) -> str:
    return sidecar_base(audio_path) + ANALYSIS_SUFFIX


def has_sidecar(path: str) -> bool:
    # Existence only: an empty or corrupt sidecar still counts.
    return os.path.exists(path)


def has_transcript(audio_path: str) -> bool:
    return has_sidecar(transcript_path(audio_path))


def has_analysis(audio_path: str) -> bool:
    return has_sidecar(analysis_path(audio_path))


def load_analysis_file(path: str) -> Optional[AnalysisRecord]:
    """Read an analysis sidecar; missing or unparsable files yield None."""
    if not has_sidecar(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable analysis file %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring analysis file %s: expected a JSON object", path)
        return None
    return AnalysisRecord.from_dict(data)


def load_analysis(audio_path: str) -> Optional[AnalysisRecord]:
    return load_analysis_file(analysis_path(audio_path))
