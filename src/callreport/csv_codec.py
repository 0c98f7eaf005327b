"""CSV dialect used by summary and overview files.

Every emitted field is wrapped in double quotes and embedded quotes are
doubled. Parsing is a character-level state machine: commas and newlines
only separate fields and records outside quotes, and ``""`` inside quotes is
a literal quote. Unbalanced quotes never raise; the parser keeps going with
whatever field boundaries it has.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple


def escape(value: object) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def serialize_row(values: Iterable[object]) -> str:
    return ",".join(escape(value) for value in values)


def serialize(headers: Sequence[object], rows: Iterable[Sequence[object]]) -> str:
    lines = [serialize_row(headers)]
    lines.extend(serialize_row(row) for row in rows)
    return "\n".join(lines) + "\n"


def split_records(text: str) -> List[str]:
    """Split raw text into record strings, keeping quoted newlines intact.

    Blank records are dropped. Each returned record is the verbatim source
    text of one row, minus its line terminator.
    """
    records: List[str] = []
    current: List[str] = []
    in_quotes = False
    for ch in text:
        if ch == '"':
            in_quotes = not in_quotes
            current.append(ch)
        elif ch == "\n" and not in_quotes:
            records.append("".join(current))
            current = []
        else:
            current.append(ch)
    if current:
        records.append("".join(current))

    output = []
    for record in records:
        if record.endswith("\r"):
            record = record[:-1]
        if record.strip():
            output.append(record)
    return output


def parse_row(record: str) -> List[str]:
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    while i < len(record):
        ch = record[i]
        if ch == '"':
            if in_quotes and i + 1 < len(record) and record[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def parse(text: str) -> Tuple[List[str], List[List[str]]]:
    """Parse CSV text into ``(headers, rows)``. No header validation."""
    parsed = []
    for record in split_records(text):
        row = parse_row(record)
        if len(row) == 1 and row[0] == "":
            continue
        parsed.append(row)
    if not parsed:
        return [], []
    return parsed[0], parsed[1:]


def find_column(headers: Sequence[str], name: str) -> int:
    """Index of ``name`` in ``headers`` (case-insensitive), or -1."""
    wanted = name.strip().lower()
    for index, header in enumerate(headers):
        if header.strip().lower() == wanted:
            return index
    return -1


def field_at(row: Sequence[str], index: int) -> str:
    if 0 <= index < len(row):
        return row[index]
    return ""
