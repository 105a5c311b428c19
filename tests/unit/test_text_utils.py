"""
Unit tests for key and header normalization.
"""

import pytest

from utils.text_utils import (
    gid_numeric_id,
    matches_search,
    normalize_header,
    normalize_key,
    normalize_secondary_key,
)


class TestNormalizeKey:

    def test_trims(self):
        assert normalize_key("  ABC-1 ") == "ABC-1"

    def test_keeps_case_and_inner_space(self):
        assert normalize_key("ab C") == "ab C"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_is_none(self, value):
        assert normalize_key(value) is None


class TestNormalizeSecondaryKey:

    def test_strips_zero_fraction(self):
        assert normalize_secondary_key("0123456789012.0") == "0123456789012"

    @pytest.mark.parametrize("value", ["1.5", "1e12", "12.30", "ABC.0"])
    def test_other_values_untouched(self, value):
        assert normalize_secondary_key(value) == value


class TestGidNumericId:

    def test_numeric_tail(self):
        assert gid_numeric_id("gid://shopify/ProductVariant/44012345678") == "44012345678"

    def test_rejects_non_numeric(self):
        with pytest.raises(ValueError):
            gid_numeric_id("gid://shopify/ProductVariant/x")


def test_normalize_header_strips_accents():
    assert normalize_header("  Código  Producto ") == "codigo producto"


def test_matches_search_is_case_insensitive():
    assert matches_search("oak", "Oak Plank", None)
    assert not matches_search("oak", "Slate")
    assert matches_search("   ", "anything")
