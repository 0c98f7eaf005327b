"""Storage utilities."""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, List

from .models import FileEntry


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def list_entries(folder: str) -> List[FileEntry]:
    """Sorted directory listing. ``OSError`` propagates to the caller."""
    entries = []
    with os.scandir(folder) as it:
        for item in it:
            _root, ext = os.path.splitext(item.name)
            entries.append(
                FileEntry(
                    path=item.path,
                    name=item.name,
                    extension=ext.lower(),
                    is_directory=item.is_dir(),
                )
            )
    entries.sort(key=lambda entry: entry.name)
    return entries


def write_text_atomic(path: str, text: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(
        prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=directory
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def write_json_atomic(path: str, payload: Any) -> None:
    write_text_atomic(path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()
