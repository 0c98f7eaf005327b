"""Filename metadata extraction.

Recorder apps encode call details in the filename in several incompatible
ways. Each encoding is handled by one parser; the registry tries them in
registration order and the first whose ``can_parse`` accepts the name wins.
The patterns overlap, so the order is part of the configuration.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Type

from .models import NOT_AVAILABLE, CallMetadata

logger = logging.getLogger("callreport")

_EXTENSION_RE = re.compile(r"\.[^.]+$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DEFAULT_PREFIX = "Call recording "


def strip_extension(filename: str) -> str:
    return _EXTENSION_RE.sub("", filename)


def normalize_phone(raw: str) -> str:
    phone = re.sub(r"[^+\d]", "", raw or "")
    if phone.startswith("+"):
        phone = phone[1:]
    return phone or NOT_AVAILABLE


def millis_to_timestamp(millis: int) -> str:
    """Render a millisecond Unix timestamp as ``YYYY-MM-DD HH:MM:SS`` (UTC)."""
    moment = _EPOCH + timedelta(milliseconds=millis)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


class FilenameParser:
    name = "base"

    def can_parse(self, filename: str) -> bool:
        raise NotImplementedError

    def parse(self, filename: str) -> CallMetadata:
        raise NotImplementedError


class TokenFilenameParser(FilenameParser):
    """``TP1<millis>`` timestamp, ``TP3<phone>`` number, ``TP4<type>`` call type."""

    name = "token"

    _TP1 = re.compile(r"TP1(\d+)")
    _TP3 = re.compile(r"TP3([+\d]+)")
    _TP4 = re.compile(r"TP4(\w+)")
    _NEXT_TOKEN = re.compile(r"TP\d")

    def can_parse(self, filename: str) -> bool:
        return "TP1" in filename or "TP3" in filename or "TP4" in filename

    def parse(self, filename: str) -> CallMetadata:
        base = strip_extension(filename)
        timestamp = phone = call_type = NOT_AVAILABLE

        match = self._TP1.search(base)
        if match:
            try:
                timestamp = millis_to_timestamp(int(match.group(1)))
            except (OverflowError, ValueError):
                logger.warning("Timestamp token out of range in %s", filename)

        match = self._TP3.search(base)
        if match:
            phone = match.group(1)
            if phone.startswith("+"):
                phone = phone[1:]
            phone = phone or NOT_AVAILABLE

        if self._TP4.search(base):
            rest = base[base.index("TP4") + 3 :]
            following = self._NEXT_TOKEN.search(rest)
            if following:
                rest = rest[: following.start()]
            call_type = rest.strip() or NOT_AVAILABLE

        return CallMetadata(timestamp=timestamp, phone_number=phone, call_type=call_type)


class PatternFilenameParser(FilenameParser):
    """``<phone> YYYY-MM-DD HH-MM-SS`` or compact ``<phone>-YYMMDDHHMM``."""

    name = "pattern"

    _SPACED = re.compile(
        r"^([+]?[\d\s-]+?)\s+(\d{4}-\d{2}-\d{2})\s+(\d{2})-(\d{2})-(\d{2})$"
    )
    _COMPACT = re.compile(r"^([+]?\d+)-(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})$")

    def can_parse(self, filename: str) -> bool:
        base = strip_extension(filename)
        return bool(self._SPACED.match(base) or self._COMPACT.match(base))

    def parse(self, filename: str) -> CallMetadata:
        base = strip_extension(filename)

        match = self._SPACED.match(base)
        if match:
            phone, day, hour, minute, second = match.groups()
            return CallMetadata(
                timestamp=f"{day} {hour}:{minute}:{second}",
                phone_number=normalize_phone(phone),
            )

        match = self._COMPACT.match(base)
        if match:
            phone, year, month, day, hour, minute = match.groups()
            return CallMetadata(
                timestamp=f"20{year}-{month}-{day} {hour}:{minute}:00",
                phone_number=normalize_phone(phone),
            )

        return CallMetadata()


class PrefixFilenameParser(FilenameParser):
    """``<prefix><phone>_<YYMMDD>_<HHMMSS>``; never carries a call type."""

    name = "prefix"

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        self.prefix = prefix

    def can_parse(self, filename: str) -> bool:
        return bool(self.prefix) and filename.startswith(self.prefix)

    def parse(self, filename: str) -> CallMetadata:
        base = strip_extension(filename)
        if base.startswith(self.prefix):
            base = base[len(self.prefix) :]
        base = base.lstrip()

        parts = base.split("_")
        if len(parts) < 3:
            return CallMetadata()

        phone_text, date_text, time_text = parts[0], parts[1], parts[2]
        phone = phone_text[1:] if phone_text.startswith("+") else phone_text
        timestamp = NOT_AVAILABLE
        if len(date_text) == 6 and len(time_text) == 6:
            timestamp = (
                f"20{date_text[0:2]}-{date_text[2:4]}-{date_text[4:6]} "
                f"{time_text[0:2]}:{time_text[2:4]}:{time_text[4:6]}"
            )
        return CallMetadata(timestamp=timestamp, phone_number=phone or NOT_AVAILABLE)


PARSER_TYPES: Dict[str, Type[FilenameParser]] = {
    TokenFilenameParser.name: TokenFilenameParser,
    PatternFilenameParser.name: PatternFilenameParser,
    PrefixFilenameParser.name: PrefixFilenameParser,
}

DEFAULT_ORDER = [TokenFilenameParser.name, PatternFilenameParser.name, PrefixFilenameParser.name]


def create_parser(name: str, prefix: str = DEFAULT_PREFIX) -> FilenameParser:
    try:
        parser_type = PARSER_TYPES[name]
    except KeyError:
        known = ", ".join(sorted(PARSER_TYPES))
        raise ValueError(f"Unknown filename parser '{name}' (known: {known})") from None
    if parser_type is PrefixFilenameParser:
        return PrefixFilenameParser(prefix)
    return parser_type()


class FilenameParserRegistry:
    """Ordered parser chain with an optional override slot."""

    def __init__(self, parsers: Optional[Iterable[FilenameParser]] = None) -> None:
        self._parsers: List[FilenameParser] = list(parsers or [])
        self._override: Optional[FilenameParser] = None

    @classmethod
    def from_names(
        cls,
        names: Iterable[str] = DEFAULT_ORDER,
        override: Optional[str] = None,
        prefix: str = DEFAULT_PREFIX,
    ) -> "FilenameParserRegistry":
        registry = cls(create_parser(name, prefix) for name in names)
        if override:
            registry.set_override(create_parser(override, prefix))
        return registry

    def register(self, parser: FilenameParser) -> None:
        self._parsers.append(parser)

    def set_override(self, parser: Optional[FilenameParser]) -> None:
        self._override = parser

    @property
    def override(self) -> Optional[FilenameParser]:
        return self._override

    @property
    def parsers(self) -> List[FilenameParser]:
        return list(self._parsers)

    def names(self) -> List[str]:
        return [parser.name for parser in self._parsers]

    def resolve(self, filename: str) -> CallMetadata:
        if self._override is not None:
            logger.debug("Using override filename parser %s for %s", self._override.name, filename)
            return self._override.parse(filename)

        for parser in self._parsers:
            if parser.can_parse(filename):
                logger.debug("Using filename parser %s for %s", parser.name, filename)
                return parser.parse(filename)

        logger.warning("No suitable filename parser for %s", filename)
        return CallMetadata()
