"""Plain-text rendering for the console."""

from __future__ import annotations

from typing import List, Sequence

from .models import (
    BUCKET_NAMES,
    HOURLY_HEADERS,
    OVERVIEW_HEADERS,
    FolderResult,
    OverviewReport,
)


def _display(value: object) -> str:
    text = "" if value is None else str(value)
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    return text


def render_table(headers: Sequence[object], rows: Sequence[Sequence[object]]) -> str:
    header_cells = [_display(h) for h in headers]
    body = [[_display(cell) for cell in row] for row in rows]

    widths = [len(cell) for cell in header_cells]
    for row in body:
        for idx, cell in enumerate(row):
            if idx < len(widths):
                widths[idx] = max(widths[idx], len(cell))
            else:
                widths.append(len(cell))

    def _line(cells: List[str]) -> str:
        padded = [cells[idx].ljust(widths[idx]) if idx < len(cells) else " " * widths[idx]
                  for idx in range(len(widths))]
        return " | ".join(padded).rstrip()

    lines = [_line(header_cells), "-+-".join("-" * width for width in widths)]
    lines.extend(_line(row) for row in body)
    return "\n".join(lines)


def render_overview(report: OverviewReport) -> str:
    lines: List[str] = []
    lines.append(f"Overview: {report.base_folder}")
    lines.append("")
    lines.append(render_table(OVERVIEW_HEADERS, [row.csv_values() for row in report.rows]))
    lines.append("")
    lines.append("Talk time by hour")
    lines.append("")
    lines.append(render_table(HOURLY_HEADERS, [hour.csv_values() for hour in report.hours]))
    return "\n".join(lines)


def render_folder_summary(result: FolderResult) -> str:
    transcribed = sum(1 for row in result.rows if row.has_transcription)
    analysed = sum(1 for row in result.rows if row.has_analysis)
    buckets = ", ".join(f"{name}: {len(result.buckets.get(name, []))}" for name in BUCKET_NAMES)
    return (
        f"{result.folder}: {len(result.rows)} recordings, "
        f"{transcribed} transcribed, {analysed} analysed ({buckets})"
    )
