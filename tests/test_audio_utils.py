import os
import subprocess
import tempfile

import numpy as np
import soundfile as sf

from callreport import audio_utils
from callreport.audio_utils import (
    get_audio_duration,
    hms_to_seconds,
    is_longer_than_one_minute,
    seconds_to_hms,
)


def test_hms_to_seconds_formats():
    assert hms_to_seconds("01:02:03") == 3723
    assert hms_to_seconds("1:02:03") == 3723
    assert hms_to_seconds("02:03") == 123
    assert hms_to_seconds("45") == 45
    assert hms_to_seconds("N/A") == 0
    assert hms_to_seconds("") == 0
    assert hms_to_seconds("aa:01:bb") == 60
    assert hms_to_seconds(None) == 0


def test_seconds_round_trip():
    for value in (0, 1, 59, 60, 61, 3599, 3600, 86399, 360000):
        assert hms_to_seconds(seconds_to_hms(value)) == value
    assert seconds_to_hms(240) == "00:04:00"


def test_longer_than_one_minute_is_strict():
    assert not is_longer_than_one_minute("00:01:00")
    assert is_longer_than_one_minute("00:01:01")


def test_get_audio_duration_reads_wav():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "tone.wav")
        sf.write(path, np.zeros(8000 * 65, dtype=np.float32), 8000)
        assert get_audio_duration(path) == "00:01:05"


def test_get_audio_duration_unreadable_returns_none(monkeypatch):
    monkeypatch.setattr(audio_utils.shutil, "which", lambda name: None)
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "broken.amr")
        with open(path, "wb") as handle:
            handle.write(b"not audio")
        assert get_audio_duration(path) is None


def test_get_audio_duration_amr_falls_back_to_ffprobe(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="125.873000\n", stderr="")

    monkeypatch.setattr(audio_utils.shutil, "which", lambda name: "/usr/bin/ffprobe")
    monkeypatch.setattr(audio_utils.subprocess, "run", fake_run)
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "call.amr")
        with open(path, "wb") as handle:
            handle.write(b"#!AMR\n" + b"\x00" * 64)
        assert get_audio_duration(path) == "00:02:05"

    assert len(calls) == 1
    assert calls[0][0] == "/usr/bin/ffprobe"
    assert "format=duration" in calls[0]
    assert calls[0][-1] == path


def test_get_audio_duration_ffprobe_failure_returns_none(monkeypatch):
    monkeypatch.setattr(audio_utils.shutil, "which", lambda name: "/usr/bin/ffprobe")
    monkeypatch.setattr(
        audio_utils.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, stdout="", stderr="Invalid data"),
    )
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "call.m4a")
        with open(path, "wb") as handle:
            handle.write(b"junk")
        assert get_audio_duration(path) is None


def test_get_audio_duration_wav_does_not_call_ffprobe(monkeypatch):
    def fail_run(cmd, **kwargs):
        raise AssertionError("ffprobe should not run for a readable wav")

    monkeypatch.setattr(audio_utils.subprocess, "run", fail_run)
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "tone.wav")
        sf.write(path, np.zeros(8000 * 2, dtype=np.float32), 8000)
        assert get_audio_duration(path) == "00:00:02"
