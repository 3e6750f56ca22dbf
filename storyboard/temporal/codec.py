"""
Regex Date Codec
================

Default implementation of the DateCodec collaborator contract.

Decoding accepts the value shapes a host document's metadata produces:
integers (a bare year), date/datetime objects, and strings. Strings are
tried against the configured parser regex first; for three-group
[year, month, day] settings the common ISO, slash, dot and
"Wed May 08 2028" shapes are recognised as well.

Encoding renders each segment through its token rule and substitutes it
into the display template.
"""

from __future__ import annotations
import logging
import re
from datetime import date, datetime
from typing import Optional, Pattern, Sequence

from ..contracts.base import AbstractDate, DateCodecError
from ..contracts.codec import (
    ConditionalFormat,
    DateFormatSettings,
    DateToken,
    DEFAULT_DATE_FORMAT_SETTINGS,
    NumberToken,
    StringToken,
)

logger = logging.getLogger(__name__)


_ISO = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_SLASH = re.compile(r"^(-?\d+)/(\d{1,2})/(\d{1,2})")
_DOT = re.compile(r"^(-?\d+)\.(\d{1,2})\.(\d{1,2})")
_DATE_STRING = re.compile(r"\w+ (\w+) (\d+) (\d{4})")
_JS_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")

_MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}


def compile_parser_regex(pattern: str) -> Pattern[str]:
    """Compile a parser regex, accepting JS-style `(?<name>...)` groups."""
    return re.compile(_JS_NAMED_GROUP.sub("(?P<", pattern))


class RegexDateCodec:
    """
    DateCodec driven by DateFormatSettings.

    decode() never raises: an unparsable value yields None so the
    extraction step can skip the record.
    """

    def __init__(self, settings: Optional[DateFormatSettings] = None):
        self._settings = settings or DEFAULT_DATE_FORMAT_SETTINGS
        self._groups = tuple(g.strip() for g in self._settings.group_priority)
        try:
            self._regex: Optional[Pattern[str]] = compile_parser_regex(self._settings.parser_regex)
        except re.error as e:
            logger.warning("Date parser regex %r does not compile: %s", self._settings.parser_regex, e)
            self._regex = None

    @property
    def settings(self) -> DateFormatSettings:
        return self._settings

    # =========================================================================
    # DECODE
    # =========================================================================

    def decode(self, raw: object) -> Optional[AbstractDate]:
        if raw is None or isinstance(raw, bool):
            return None

        if isinstance(raw, int):
            # A bare number is the most significant segment; pad the rest with 1
            return (raw,) + (1,) * max(0, len(self._groups) - 1)

        if isinstance(raw, (date, datetime)):
            return (raw.year, raw.month, raw.day)

        text = str(raw).strip()
        if not text:
            return None

        parsed = self._parse_configured(text)
        if parsed is not None:
            return parsed

        if len(self._groups) == 3:
            parsed = self._parse_gregorian(text)
            if parsed is not None:
                return parsed

        normalized = re.sub(r"[/.]", "-", text)
        if normalized != text:
            parsed = self._parse_configured(normalized)
            if parsed is not None:
                return parsed

        logger.debug("Could not decode date value %r", raw)
        return None

    def _parse_configured(self, text: str) -> Optional[AbstractDate]:
        if self._regex is None:
            return None
        match = self._regex.search(text)
        if not match:
            return None

        captured = match.groupdict()
        segments = []
        for group in self._groups:
            value = captured.get(group)
            if value is None:
                return None
            segment = self._segment_from_text(group, value)
            if segment is None:
                return None
            segments.append(segment)
        return tuple(segments)

    def _segment_from_text(self, group: str, value: str) -> Optional[int]:
        try:
            return int(value, 10)
        except ValueError:
            pass
        token = self._settings.token(group)
        if isinstance(token, StringToken):
            lowered = value.strip().lower()
            for index, entry in enumerate(token.dictionary):
                if entry.lower() == lowered:
                    return index
        return None

    @staticmethod
    def _parse_gregorian(text: str) -> Optional[AbstractDate]:
        for pattern in (_ISO, _SLASH, _DOT):
            match = pattern.match(text)
            if match:
                return tuple(int(g, 10) for g in match.groups())

        match = _DATE_STRING.search(text)
        if match:
            month = _MONTHS.get(match.group(1))
            if month:
                return (int(match.group(3)), month, int(match.group(2)))
        return None

    # =========================================================================
    # ENCODE
    # =========================================================================

    def encode(self, date_value: Sequence[int]) -> str:
        output = self._settings.display_format
        for index, name in enumerate(self._groups):
            token = self._settings.token(name)
            if token is None:
                raise DateCodecError(f'No date token configuration found for "{name}"')
            segment = date_value[index] if index < len(date_value) else 0
            rendered = self._apply_conditional(format_token(segment, token), segment, token)
            output = output.replace("{" + name + "}", rendered, 1)
        return output

    def _apply_conditional(self, rendered: str, segment: int, token: DateToken) -> str:
        if not self._settings.apply_conditional_formatting:
            return rendered
        for fmt in token.formatting:
            if _passes(fmt, segment):
                rendered = fmt.format.replace("{value}", rendered)
        return rendered


def _passes(fmt: ConditionalFormat, segment: int) -> bool:
    if not fmt.evaluations:
        return False
    results = (e.condition.evaluate(segment, e.value) for e in fmt.evaluations)
    return any(results) if fmt.conditions_are_exclusive else all(results)


def format_token(segment: int, token: DateToken) -> str:
    """Render one segment according to its token rule."""
    if isinstance(token, NumberToken):
        if segment == 0 and not token.display_when_zero:
            return ""
        text = str(abs(segment)).zfill(max(0, token.min_length))
        if not token.hide_sign and segment < 0:
            text = "-" + text
        return text
    if isinstance(token, StringToken):
        if 0 <= segment < len(token.dictionary):
            return token.dictionary[segment]
        return str(segment)
    raise DateCodecError("Corrupted date token configuration")
