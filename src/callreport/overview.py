"""Whole-tree overview built from the per-folder summaries.

Runs after every folder has its ``summary.csv``. Two passes share the same
folder discovery step: the CSV pass merges the folder summaries and computes
the statistics, the JSON pass rebuilds the grouped call files at the root
straight from the analysis sidecars.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from . import csv_codec
from .audio_utils import SUPPORTED_EXTENSIONS, hms_to_seconds, seconds_to_hms
from .filename_parsers import FilenameParserRegistry
from .models import (
    BUCKET_NAMES,
    HOURLY_HEADERS,
    OVERVIEW_HEADERS,
    HourBucket,
    OverviewReport,
    OverviewRow,
)
from .rows import call_direction, classify
from .sidecars import ANALYSIS_SUFFIX, load_analysis_file
from .storage import list_entries, read_text, write_text_atomic
from .summary import SUMMARY_FILENAME, write_grouped_json

logger = logging.getLogger("callreport")

OVERVIEW_FILENAME = "overview.csv"
HOURLY_FILENAME = "overview-by-hour.csv"
OVERALL_LABEL = "OVERALL"


def hour_of(timestamp: Optional[str]) -> Optional[int]:
    """Hour from a ``YYYY-MM-DD HH:MM:SS`` string, read at offsets 11-13."""
    if not timestamp or len(timestamp) < 13:
        return None
    text = timestamp[11:13]
    if not text.isdigit():
        return None
    hour = int(text)
    if 0 <= hour <= 23:
        return hour
    return None


class HourlyHistogram:
    def __init__(self) -> None:
        self.seconds = np.zeros(24, dtype=np.int64)
        self.calls = np.zeros(24, dtype=np.int64)

    def add(self, timestamp: str, duration: str) -> bool:
        hour = hour_of(timestamp)
        if hour is None:
            return False
        self.seconds[hour] += hms_to_seconds(duration)
        self.calls[hour] += 1
        return True

    def buckets(self) -> List[HourBucket]:
        return [
            HourBucket(hour=hour, total_seconds=int(self.seconds[hour]), calls=int(self.calls[hour]))
            for hour in range(24)
        ]


@dataclass
class FolderStats:
    folder: str
    total: int = 0
    phones: Set[str] = field(default_factory=set)
    over_minute: int = 0
    incoming: int = 0
    outgoing: int = 0
    talk_seconds: int = 0
    outgoing_long_phones: Set[str] = field(default_factory=set)

    def merge(self, other: "FolderStats") -> None:
        self.total += other.total
        self.phones |= other.phones
        self.over_minute += other.over_minute
        self.incoming += other.incoming
        self.outgoing += other.outgoing
        self.talk_seconds += other.talk_seconds
        self.outgoing_long_phones |= other.outgoing_long_phones

    def to_row(self) -> OverviewRow:
        return OverviewRow(
            folder=self.folder,
            total_calls=self.total,
            unique_phones=len(self.phones),
            calls_over_1min=self.over_minute,
            incoming=self.incoming,
            outgoing=self.outgoing,
            unique_outgoing_long=len(self.outgoing_long_phones),
            total_talk_time=seconds_to_hms(self.talk_seconds),
        )


def compute_folder_stats(
    label: str,
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    histogram: Optional[HourlyHistogram] = None,
) -> FolderStats:
    duration_idx = csv_codec.find_column(headers, "duration")
    phone_idx = csv_codec.find_column(headers, "phone number")
    type_idx = csv_codec.find_column(headers, "call type")
    timestamp_idx = csv_codec.find_column(headers, "timestamp")

    stats = FolderStats(folder=label)
    for row in rows:
        duration = csv_codec.field_at(row, duration_idx)
        phone = csv_codec.field_at(row, phone_idx).strip()
        direction = call_direction(csv_codec.field_at(row, type_idx))
        timestamp = csv_codec.field_at(row, timestamp_idx)
        seconds = hms_to_seconds(duration)

        stats.total += 1
        stats.talk_seconds += seconds
        if phone:
            stats.phones.add(phone)
        if seconds > 60:
            stats.over_minute += 1
        if direction == "incoming":
            stats.incoming += 1
        elif direction == "outgoing":
            stats.outgoing += 1
            if seconds > 60 and phone:
                stats.outgoing_long_phones.add(phone)

        if histogram is not None and timestamp.strip() and duration.strip():
            histogram.add(timestamp, duration)
    return stats


def find_summary_files(base_folder: str) -> List[Tuple[str, str]]:
    """``(folder, summary path)`` for every subdirectory holding a summary, pre-order."""
    found: List[Tuple[str, str]] = []

    def _walk(folder: str) -> None:
        for entry in list_entries(folder):
            if not entry.is_directory:
                continue
            candidate = os.path.join(entry.path, SUMMARY_FILENAME)
            if os.path.isfile(candidate):
                found.append((entry.path, candidate))
            _walk(entry.path)

    _walk(base_folder)
    return found


def _normalized(headers: Sequence[str]) -> List[str]:
    return [header.strip().lower() for header in headers]


class SummaryMerger:
    """Concatenates folder summaries under the first header seen.

    Rows from a file with the same header are copied verbatim. Rows from a
    file whose header differs are re-projected onto the first header by
    column name.
    """

    def __init__(self) -> None:
        self.header_record: Optional[str] = None
        self.headers: List[str] = []
        self.records: List[str] = []

    def add(self, path: str, records: List[str]) -> None:
        if not records:
            return
        headers = csv_codec.parse_row(records[0])
        if self.header_record is None:
            self.header_record = records[0]
            self.headers = headers

        if _normalized(headers) == _normalized(self.headers):
            self.records.extend(records[1:])
            return

        logger.warning("Header of %s differs from the first summary; remapping columns", path)
        mapping = [csv_codec.find_column(headers, name) for name in self.headers]
        for record in records[1:]:
            row = csv_codec.parse_row(record)
            self.records.append(
                csv_codec.serialize_row(csv_codec.field_at(row, idx) for idx in mapping)
            )

    def text(self) -> Optional[str]:
        if self.header_record is None:
            return None
        return "\n".join([self.header_record] + self.records) + "\n"


class TreeOverviewAggregator:
    def __init__(
        self,
        registry: Optional[FilenameParserRegistry] = None,
        extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    ) -> None:
        self.registry = registry or FilenameParserRegistry.from_names()
        self.extensions = {ext.lower() for ext in extensions}

    def aggregate(self, base_folder: str) -> OverviewReport:
        report = OverviewReport(base_folder=base_folder)
        summaries = find_summary_files(base_folder)
        report.summary_files = [path for _folder, path in summaries]
        logger.info("Found %d folder summaries under %s", len(summaries), base_folder)

        merger = SummaryMerger()
        histogram = HourlyHistogram()
        overall = FolderStats(folder=OVERALL_LABEL)
        for folder, path in summaries:
            records = csv_codec.split_records(read_text(path))
            merger.add(path, records)

            headers, rows = csv_codec.parse("\n".join(records))
            label = os.path.relpath(folder, base_folder)
            stats = compute_folder_stats(label, headers, rows, histogram)
            overall.merge(stats)
            report.rows.append(stats.to_row())
        report.rows.append(overall.to_row())
        report.hours = histogram.buckets()

        merged = merger.text()
        if merged is not None:
            merged_path = os.path.join(base_folder, SUMMARY_FILENAME)
            write_text_atomic(merged_path, merged)
            logger.info("Merged %d summaries into %s", len(summaries), merged_path)

        self._write_overview(base_folder, report)
        report.buckets = self.rebuild_grouped_json(
            base_folder, [folder for folder, _path in summaries]
        )
        return report

    def _write_overview(self, base_folder: str, report: OverviewReport) -> None:
        overview_path = os.path.join(base_folder, OVERVIEW_FILENAME)
        write_text_atomic(
            overview_path,
            csv_codec.serialize(OVERVIEW_HEADERS, (row.csv_values() for row in report.rows)),
        )
        hourly_path = os.path.join(base_folder, HOURLY_FILENAME)
        write_text_atomic(
            hourly_path,
            csv_codec.serialize(HOURLY_HEADERS, (hour.csv_values() for hour in report.hours)),
        )
        logger.info("Overview written: %s, %s", overview_path, hourly_path)

    def rebuild_grouped_json(
        self, base_folder: str, folders: Iterable[str]
    ) -> Dict[str, List[Dict[str, Any]]]:
        buckets: Dict[str, List[Dict[str, Any]]] = {name: [] for name in BUCKET_NAMES}
        for folder in folders:
            entries = list_entries(folder)
            audio_names = {
                os.path.splitext(entry.name)[0]: entry.name
                for entry in entries
                if not entry.is_directory and entry.extension in self.extensions
            }
            for entry in entries:
                if entry.is_directory or not entry.name.endswith(ANALYSIS_SUFFIX):
                    continue
                record = load_analysis_file(entry.path)
                if record is None:
                    continue
                stem = entry.name[: -len(ANALYSIS_SUFFIX)]
                filename = audio_names.get(stem, stem)
                metadata = self.registry.resolve(filename)
                bucket = classify(metadata.call_type, record.tag_names())
                if bucket is None:
                    continue
                item = dict(record.raw)
                item["filename"] = filename
                item.update(metadata.as_json())
                buckets[bucket].append(item)

        write_grouped_json(base_folder, buckets)
        return buckets
