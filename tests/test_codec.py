"""
Date Codec Tests
================

Decoding host metadata values into AbstractDates and rendering them back
through the token rules.
"""

from datetime import date, datetime

import pytest

from storyboard.contracts.base import DateCodecError
from storyboard.contracts.codec import (
    Condition, ConditionalFormat, DateFormatSettings, Evaluation, NumberToken, StringToken
)
from storyboard.temporal.codec import RegexDateCodec, compile_parser_regex, format_token


SEASONS = ("Deepwinter", "Thaw", "Highsun", "Harvest")


def fantasy_settings(**overrides) -> DateFormatSettings:
    values = dict(
        parser_regex=r"(?<d>\d+) (?<M>[A-Za-z]+) (?<y>-?\d+)",
        group_priority=("y", "M", "d"),
        display_format="{d} {M} {y}",
        tokens=(
            NumberToken(name="y", hide_sign=True, formatting=(
                ConditionalFormat(
                    evaluations=(Evaluation(Condition.LESS, 0),),
                    format="{value} BR",
                ),
            )),
            StringToken(name="M", dictionary=SEASONS),
            NumberToken(name="d"),
        ),
        apply_conditional_formatting=True,
    )
    values.update(overrides)
    return DateFormatSettings(**values)


class TestDecodeDefaults:

    @pytest.mark.parametrize("raw, expected", [
        ("2024-01-10", (2024, 1, 10)),
        ("2024/3/4", (2024, 3, 4)),
        ("2024.12.31", (2024, 12, 31)),
        ("-44-3-15", (-44, 3, 15)),
        ("Wed May 08 2028", (2028, 5, 8)),
        (2024, (2024, 1, 1)),
        (date(2023, 7, 9), (2023, 7, 9)),
        (datetime(2023, 7, 9, 12, 30), (2023, 7, 9)),
    ])
    def test_accepted_shapes(self, raw, expected):
        assert RegexDateCodec().decode(raw) == expected

    @pytest.mark.parametrize("raw", [None, True, "", "   ", "someday", "May 2028"])
    def test_unparsable_is_none(self, raw):
        assert RegexDateCodec().decode(raw) is None


class TestDecodeCustom:

    def test_js_named_groups(self):
        settings = DateFormatSettings(
            parser_regex=r"(?<y>\d+)\|(?<M>\d+)",
            group_priority=("y", "M"),
            display_format="{y}|{M}",
            tokens=(NumberToken(name="y"), NumberToken(name="M")),
        )
        assert RegexDateCodec(settings).decode("12|3") == (12, 3)

    def test_bare_number_is_padded_to_group_count(self):
        settings = DateFormatSettings(group_priority=("a", "b", "c", "d"))
        assert RegexDateCodec(settings).decode(7) == (7, 1, 1, 1)

    def test_dictionary_names_decode_to_index(self):
        codec = RegexDateCodec(fantasy_settings())
        assert codec.decode("3 Thaw 1042") == (1042, 1, 3)
        assert codec.decode("3 thaw 1042") == (1042, 1, 3)
        assert codec.decode("3 Nowhen 1042") is None

    def test_broken_regex_never_raises(self):
        codec = RegexDateCodec(DateFormatSettings(parser_regex="(unclosed"))
        assert codec.decode("2024-01-10") == (2024, 1, 10)
        assert codec.decode("garbage") is None

    def test_compile_keeps_lookbehind(self):
        assert compile_parser_regex(r"(?<=x)(?<y>\d)").search("x5").group("y") == "5"


class TestEncode:

    def test_default_display(self):
        assert RegexDateCodec().encode((2024, 1, 12)) == "2024-01-12"
        assert RegexDateCodec().encode((-5, 1, 2)) == "-0005-01-02"

    def test_dictionary_and_conditional_formatting(self):
        codec = RegexDateCodec(fantasy_settings())
        assert codec.encode((1042, 1, 3)) == "3 Thaw 1042"
        assert codec.encode((-50, 0, 1)) == "1 Deepwinter 50 BR"

    def test_conditional_formatting_can_be_disabled(self):
        codec = RegexDateCodec(fantasy_settings(apply_conditional_formatting=False))
        assert codec.encode((-50, 0, 1)) == "1 Deepwinter 50"

    def test_missing_token_raises(self):
        settings = DateFormatSettings(tokens=(NumberToken(name="y"),))
        with pytest.raises(DateCodecError):
            RegexDateCodec(settings).encode((2024, 1, 1))

    def test_missing_segments_render_as_zero(self):
        assert RegexDateCodec().encode((2024,)) == "2024-00-00"


class TestFormatToken:

    @pytest.mark.parametrize("segment, token, expected", [
        (5, NumberToken("y", min_length=4), "0005"),
        (-5, NumberToken("y", min_length=2), "-05"),
        (-5, NumberToken("y", hide_sign=True), "5"),
        (0, NumberToken("d", display_when_zero=False), ""),
        (2, StringToken("M", dictionary=SEASONS), "Highsun"),
        (9, StringToken("M", dictionary=SEASONS), "9"),
    ])
    def test_rules(self, segment, token, expected):
        assert format_token(segment, token) == expected

    def test_exclusive_conditions(self):
        fmt = ConditionalFormat(
            evaluations=(Evaluation(Condition.LESS, 0), Evaluation(Condition.GREATER, 100)),
            format="<{value}>",
            conditions_are_exclusive=True,
        )
        settings = DateFormatSettings(
            tokens=(
                NumberToken("y", formatting=(fmt,)),
                NumberToken("M", min_length=2, hide_sign=True),
                NumberToken("d", min_length=2, hide_sign=True),
            ),
            apply_conditional_formatting=True,
        )
        codec = RegexDateCodec(settings)
        assert codec.encode((500, 1, 1)) == "<500>-01-01"
        assert codec.encode((50, 1, 1)) == "50-01-01"

    @pytest.mark.parametrize("exclusive", [False, True])
    def test_format_without_evaluations_never_applies(self, exclusive):
        fmt = ConditionalFormat(evaluations=(), format="<{value}>", conditions_are_exclusive=exclusive)
        settings = DateFormatSettings(
            tokens=(
                NumberToken("y", formatting=(fmt,)),
                NumberToken("M", min_length=2, hide_sign=True),
                NumberToken("d", min_length=2, hide_sign=True),
            ),
            apply_conditional_formatting=True,
        )
        assert RegexDateCodec(settings).encode((500, 1, 1)) == "500-01-01"
