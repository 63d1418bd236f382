"""Unit tests for shared setting and directive value parsing helpers."""

import math

import pytest

from elevenlabs_tts.parsing import (
    normalize_optional_string,
    optional_flag,
    optional_number,
    optional_text,
    parse_permissive_boolean,
    parse_required_boolean,
    parse_required_float,
)


def test_normalize_optional_string_handles_blank_values() -> None:
    """Normalization should return `None` for `None` and blank textual values."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("") is None
    assert normalize_optional_string("   ") is None
    assert normalize_optional_string("  value  ") == "value"


@pytest.mark.parametrize(
    ("token", "expected"),
    [("TrUe", True), ("  ON ", True), ("YeS", True), ("FALSE", False), (" oFf ", False), ("0", False)],
)
def test_parse_permissive_boolean_accepts_mixed_case_tokens(token: str, expected: bool) -> None:
    """Permissive parsing should accept valid tokens case-insensitively."""

    assert parse_permissive_boolean(token) is expected


def test_parse_required_boolean_raises_for_invalid_token() -> None:
    """Strict boolean parsing should name the offending setting."""

    with pytest.raises(ValueError, match=r"`speaker_boost` must be a boolean value"):
        parse_required_boolean("maybe", "speaker_boost")


@pytest.mark.parametrize(("value", "expected"), [("0.25", 0.25), (" 3 ", 3.0), (2, 2.0)])
def test_parse_required_float_accepts_numbers_and_numeric_text(
    value: object, expected: float
) -> None:
    """Numeric settings should parse from numbers and trimmed numeric strings."""

    assert parse_required_float(value, "stability") == expected


@pytest.mark.parametrize("value", ["abc", "", True, "nan", "inf"])
def test_parse_required_float_rejects_invalid_values(value: object) -> None:
    """Booleans, blanks, and non-finite values should be rejected."""

    with pytest.raises(ValueError, match="`stability` must be a"):
        parse_required_float(value, "stability")


def test_optional_helpers_accept_only_the_expected_json_types() -> None:
    """Directive projections should keep only correctly typed values."""

    assert optional_number(3) == 3
    assert optional_number(0.5) == 0.5
    assert optional_number(True) is None
    assert optional_number("1") is None
    assert optional_number(math.inf) is None
    assert optional_text("v") == "v"
    assert optional_text("  ") is None
    assert optional_text(7) is None
    assert optional_flag(False) is False
    assert optional_flag(0) is None
