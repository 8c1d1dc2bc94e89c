"""Tests for text canonicalization and cell coercion."""

import math

import pytest

from configurator.canon import (
    canon,
    clean_str,
    is_blank,
    normalize_header,
    parse_flexible_boolean,
    parse_number,
    parse_price_type,
)
from configurator.errors import MalformedCell
from configurator.models import PriceType


class TestCanon:
    """Tests for canon()."""

    def test_spacing_variants_match(self):
        assert canon("Head  Stock") == canon("headstock")

    def test_punctuation_and_case_ignored(self):
        assert canon("Head-Stock") == "headstock"
        assert canon("HEADSTOCK") == "headstock"
        assert canon("  Tone Ring ") == "tonering"

    def test_nbsp_treated_as_space(self):
        assert canon("Tone\u00a0Ring") == canon("Tone Ring")

    def test_none_and_blank(self):
        assert canon(None) == ""
        assert canon("   ") == ""
        assert canon("---") == ""

    def test_numbers_kept(self):
        assert canon("Legacy '35") == "legacy35"

    @pytest.mark.parametrize("text", [
        "Head  Stock",
        "Hearts & Flowers",
        "  Tone\u00a0Ring  ",
        "ÉCLAT",
        "",
        "Neck Wood (Curly)",
    ])
    def test_idempotent(self, text):
        assert canon(canon(text)) == canon(text)

    def test_never_raises_on_non_strings(self):
        assert canon(200) == "200"
        assert canon(True) == "true"


class TestCleanStr:
    """Tests for clean_str() and normalize_header()."""

    def test_none_is_empty(self):
        assert clean_str(None) == ""

    def test_strips_and_maps_nbsp(self):
        assert clean_str("\u00a0Bronze \u00a0") == "Bronze"

    def test_stringifies_numbers(self):
        assert clean_str(75) == "75"

    def test_normalize_header(self):
        assert normalize_header("Item ID") == "itemid"
        assert normalize_header("item_id") == "itemid"
        assert normalize_header(" Sale_Price ") == "saleprice"


class TestIsBlank:
    """Tests for is_blank()."""

    def test_blank_values(self):
        assert is_blank(None)
        assert is_blank("")
        assert is_blank("  \u00a0")
        assert is_blank(float("nan"))

    def test_non_blank_values(self):
        assert not is_blank("0")
        assert not is_blank(0)
        assert not is_blank(False)


class TestParseFlexibleBoolean:
    """Tests for parse_flexible_boolean()."""

    @pytest.mark.parametrize("value", [True, "true", "TRUE", " True ", 1, 1.0, "1"])
    def test_truthy(self, value):
        assert parse_flexible_boolean(value) is True

    @pytest.mark.parametrize("value", [False, "false", "FALSE", 0, "0", "yes", "no", 2])
    def test_falsy(self, value):
        assert parse_flexible_boolean(value, default_when_absent=True) is False

    def test_blank_uses_default(self):
        assert parse_flexible_boolean("", default_when_absent=True) is True
        assert parse_flexible_boolean(None, default_when_absent=True) is True
        assert parse_flexible_boolean("", default_when_absent=False) is False


class TestParseNumber:
    """Tests for parse_number()."""

    def test_plain_numbers(self):
        assert parse_number("150") == 150.0
        assert parse_number(-50) == -50.0
        assert parse_number("2.5") == 2.5

    def test_currency_noise(self):
        assert parse_number("$1,150.00") == 1150.0
        assert parse_number(" 200 ") == 200.0

    @pytest.mark.parametrize("value", ["abc", "12abc", "", True, math.inf, "nan"])
    def test_malformed(self, value):
        with pytest.raises(MalformedCell):
            parse_number(value)

    def test_malformed_cell_is_value_error(self):
        with pytest.raises(ValueError):
            parse_number("n/a")


class TestParsePriceType:
    """Tests for parse_price_type()."""

    def test_aliases(self):
        assert parse_price_type("add") is PriceType.ADD
        assert parse_price_type("flat") is PriceType.ADD
        assert parse_price_type("PCT") is PriceType.PCT
        assert parse_price_type("percent") is PriceType.PCT
        assert parse_price_type("%") is PriceType.PCT
        assert parse_price_type("abs") is PriceType.ABS

    def test_unrecognized(self):
        assert parse_price_type("bogus") is None
        assert parse_price_type("") is None
        assert parse_price_type(None) is None
