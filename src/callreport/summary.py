"""Per-folder summary generation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from . import csv_codec
from .audio_utils import SUPPORTED_EXTENSIONS
from .models import BUCKET_NAMES, SUMMARY_HEADERS, FolderResult, SummaryRow
from .rows import RowBuilder
from .storage import list_entries, write_json_atomic, write_text_atomic

logger = logging.getLogger("callreport")

SUMMARY_FILENAME = "summary.csv"
BUCKET_FILENAMES = {name: f"{name}_calls.json" for name in BUCKET_NAMES}


@dataclass
class SummaryAccumulator:
    """Collects rows and folder results across a whole tree walk."""

    rows: List[SummaryRow] = field(default_factory=list)
    folders: List[FolderResult] = field(default_factory=list)

    def add_row(self, row: SummaryRow) -> None:
        self.rows.append(row)

    def add_folder(self, result: FolderResult) -> None:
        self.folders.append(result)


def write_summary_csv(folder: str, rows: Iterable[SummaryRow]) -> str:
    path = os.path.join(folder, SUMMARY_FILENAME)
    text = csv_codec.serialize(SUMMARY_HEADERS, (row.csv_values() for row in rows))
    write_text_atomic(path, text)
    logger.info("CSV file generated: %s", path)
    return path


def write_grouped_json(folder: str, buckets: Dict[str, List[Dict[str, Any]]]) -> bool:
    """Write the three bucket files; failures are logged, never raised."""
    ok = True
    for name in BUCKET_NAMES:
        path = os.path.join(folder, BUCKET_FILENAMES[name])
        try:
            write_json_atomic(path, buckets.get(name, []))
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to write grouped JSON %s: %s", path, exc)
            ok = False
    return ok


class FolderAggregator:
    def __init__(
        self,
        row_builder: Optional[RowBuilder] = None,
        extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    ) -> None:
        self.row_builder = row_builder or RowBuilder()
        self.extensions = {ext.lower() for ext in extensions}

    def aggregate(
        self, folder: str, accumulator: Optional[SummaryAccumulator] = None
    ) -> FolderResult:
        """Summarise ``folder`` after recursing into each subdirectory in turn."""
        entries = list_entries(folder)
        logger.info("Scanning %s (%d items)", folder, len(entries))

        result = FolderResult(folder=folder)
        for entry in entries:
            if entry.is_directory:
                self.aggregate(entry.path, accumulator)
                continue
            if entry.extension not in self.extensions:
                logger.debug("Skipping %s (unsupported format)", entry.name)
                continue

            row = self.row_builder.build(entry, folder)
            result.rows.append(row)
            if accumulator is not None:
                accumulator.add_row(row)
            if row.classification:
                result.buckets[row.classification].append(row.bucket_entry())

        if result.rows:
            write_summary_csv(folder, result.rows)
        write_grouped_json(folder, result.buckets)

        if accumulator is not None:
            accumulator.add_folder(result)
        logger.info(
            "Summarised %s: %d files, %s",
            folder,
            len(result.rows),
            ", ".join(f"{name}={len(result.buckets[name])}" for name in BUCKET_NAMES),
        )
        return result
