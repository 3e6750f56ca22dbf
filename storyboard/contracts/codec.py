"""
Date Codec Contracts

Settings types for the date string codec collaborator.
The core never parses or formats dates itself; it calls a DateCodec.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Tuple, Union

from .base import AbstractDate


class Condition(Enum):
    """Numerical comparison used by conditional token formatting."""
    GREATER = "GREATER"
    LESS = "LESS"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOTEQUAL"
    GREATER_OR_EQUAL = "GREATEROREQUAL"
    LESS_OR_EQUAL = "LESSOREQUAL"

    def evaluate(self, a: int, b: int) -> bool:
        if self is Condition.GREATER:
            return a > b
        if self is Condition.LESS:
            return a < b
        if self is Condition.EQUAL:
            return a == b
        if self is Condition.NOT_EQUAL:
            return a != b
        if self is Condition.GREATER_OR_EQUAL:
            return a >= b
        return a <= b


@dataclass(frozen=True)
class Evaluation:
    condition: Condition
    value: int


@dataclass(frozen=True)
class ConditionalFormat:
    """
    Extra formatting applied to a token when its evaluations pass.

    `format` uses `{value}` for the pre-formatted token output.
    Exclusive conditions pass when ANY evaluation holds, otherwise ALL must.
    """
    evaluations: Tuple[Evaluation, ...]
    format: str
    conditions_are_exclusive: bool = False


@dataclass(frozen=True)
class NumberToken:
    """Numeric segment: zero padding and sign display."""
    name: str
    min_length: int = 0
    display_when_zero: bool = True
    hide_sign: bool = False
    formatting: Tuple[ConditionalFormat, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class StringToken:
    """Dictionary segment: the integer indexes a name table (months, moons...)."""
    name: str
    dictionary: Tuple[str, ...] = field(default_factory=tuple)
    formatting: Tuple[ConditionalFormat, ...] = field(default_factory=tuple)


DateToken = Union[NumberToken, StringToken]


@dataclass(frozen=True)
class DateFormatSettings:
    """
    Parser regex, capture-group priority, display template and per-segment
    token rules. Named groups may use Python `(?P<y>...)` or JS `(?<y>...)`.
    """
    parser_regex: str = r"(?P<y>-?\d+)[-/.](?P<M>\d+)[-/.](?P<d>\d+)"
    group_priority: Tuple[str, ...] = ("y", "M", "d")
    display_format: str = "{y}-{M}-{d}"
    tokens: Tuple[DateToken, ...] = (
        NumberToken(name="y", min_length=4, hide_sign=False),
        NumberToken(name="M", min_length=2, hide_sign=True),
        NumberToken(name="d", min_length=2, hide_sign=True),
    )
    apply_conditional_formatting: bool = False

    def token(self, name: str) -> Optional[DateToken]:
        for token in self.tokens:
            if token.name == name:
                return token
        return None


DEFAULT_DATE_FORMAT_SETTINGS = DateFormatSettings()


class DateCodec(Protocol):
    """External collaborator contract: string <-> AbstractDate."""

    def decode(self, raw: object) -> Optional[AbstractDate]:
        ...

    def encode(self, date: AbstractDate) -> str:
        ...
