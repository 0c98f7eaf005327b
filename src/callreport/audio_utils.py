"""Audio helpers."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from typing import Optional

import soundfile as sf

logger = logging.getLogger("callreport")

SUPPORTED_EXTENSIONS = (".mp3", ".wav", ".mp4", ".m4a", ".flac", ".ogg", ".amr")

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(text: str) -> int:
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else 0


def hms_to_seconds(value: Optional[str]) -> int:
    """Parse ``H:MM:SS``, ``MM:SS`` or a bare integer; bad parts count as 0."""
    if value is None:
        return 0
    parts = str(value).strip().split(":")
    if len(parts) == 3:
        hours, minutes, seconds = (_leading_int(p) for p in parts)
        return hours * 3600 + minutes * 60 + seconds
    if len(parts) == 2:
        minutes, seconds = (_leading_int(p) for p in parts)
        return minutes * 60 + seconds
    return _leading_int(parts[0])


def seconds_to_hms(total: int) -> str:
    total = max(0, int(total))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def is_longer_than_one_minute(duration: Optional[str]) -> bool:
    return hms_to_seconds(duration) > 60


def _ffprobe_seconds(path: str) -> Optional[float]:
    """Container duration via ffprobe; covers formats libsndfile cannot open."""
    ffprobe = shutil.which("ffprobe")
    if not ffprobe:
        logger.debug("ffprobe not found; no duration for %s", path)
        return None
    cmd = [
        ffprobe,
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        path,
    ]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("ffprobe failed for %s: %s", path, exc)
        return None
    if proc.returncode != 0:
        logger.debug("ffprobe exited %s for %s: %s", proc.returncode, path, proc.stderr.strip())
        return None
    try:
        return float(proc.stdout.strip().splitlines()[0])
    except (IndexError, ValueError):
        return None


def get_audio_duration(path: str) -> Optional[str]:
    """Return the duration of ``path`` as ``HH:MM:SS``, or None if unreadable.

    soundfile handles wav/flac/ogg/mp3; anything else (amr, m4a, mp4) goes
    through ffprobe when it is on PATH.
    """
    try:
        info = sf.info(path)
    except (RuntimeError, OSError) as exc:
        logger.debug("soundfile could not read %s: %s", path, exc)
    else:
        if info.samplerate:
            return seconds_to_hms(int(info.frames // info.samplerate))

    seconds = _ffprobe_seconds(path)
    if seconds is None:
        return None
    return seconds_to_hms(int(seconds))
