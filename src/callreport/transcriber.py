"""Transcription with Faster-Whisper."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .audio_utils import SUPPORTED_EXTENSIONS
from .models import Segment
from .sidecars import has_sidecar, transcript_path
from .storage import list_entries, write_text_atomic

logger = logging.getLogger("callreport")

NO_SPEECH = "[No speech detected]"


class TranscriptionUnavailable(RuntimeError):
    pass


@dataclass
class WalkStats:
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    directories: int = 0


def transcribe_audio(
    audio_path: str,
    model_name: str = "small",
    language: str | None = None,
    device: str | None = None,
    compute_type: str | None = None,
) -> List[Segment]:
    try:
        from faster_whisper import WhisperModel
    except Exception as exc:  # pragma: no cover - optional dependency
        raise TranscriptionUnavailable(
            "faster-whisper is required for transcription."
        ) from exc

    kwargs = {}
    if device:
        kwargs["device"] = device
    if compute_type:
        kwargs["compute_type"] = compute_type
    model = WhisperModel(model_name, **kwargs)
    segments, _info = model.transcribe(audio_path, language=language)
    return [Segment(start=seg.start, end=seg.end, text=seg.text.strip()) for seg in segments]


def segments_to_text(segments: Iterable[Segment]) -> str:
    lines = [seg.text for seg in segments if seg.text]
    return "\n".join(lines) if lines else NO_SPEECH


def transcribe_folder(
    folder: str,
    transcribe: Optional[Callable[[str], List[Segment]]] = None,
    extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    stats: Optional[WalkStats] = None,
) -> WalkStats:
    """Write a ``.txt`` transcript next to every recording that lacks one."""
    transcribe = transcribe or transcribe_audio
    allowed = {ext.lower() for ext in extensions}
    stats = stats or WalkStats()

    for entry in list_entries(folder):
        if entry.is_directory:
            stats.directories += 1
            transcribe_folder(entry.path, transcribe, allowed, stats)
            continue
        if entry.extension not in allowed:
            continue

        txt_path = transcript_path(entry.path)
        if has_sidecar(txt_path):
            logger.info("Skipping %s: transcription already exists", entry.name)
            stats.skipped += 1
            continue

        logger.info("Transcribing %s", entry.path)
        try:
            text = segments_to_text(transcribe(entry.path))
        except TranscriptionUnavailable:
            raise
        except Exception as exc:
            logger.error("Failed to transcribe %s: %s", entry.path, exc)
            write_text_atomic(txt_path, f"[Transcription failed: {exc}]")
            stats.failed += 1
            continue
        write_text_atomic(txt_path, text)
        stats.processed += 1

    return stats
