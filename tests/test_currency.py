import pytest

from src.formatters.currency import currency_symbol, format_currency, format_percentage


class TestFormatCurrency:
    def test_nan_usd(self):
        assert format_currency(float("nan"), "usd") == "$0.00"

    def test_none_eur(self):
        assert format_currency(None, "eur") == "€0.00"

    def test_none_unknown_currency(self):
        assert format_currency(None, "xyz") == "$0.00"

    def test_full_precision(self):
        assert format_currency(1234.5, "usd") == "$1,234.50"
        assert format_currency(1234.567, "inr") == "₹1,234.57"

    def test_uppercase_code(self):
        assert format_currency(10, "EUR") == "€10.00"

    def test_negative(self):
        assert format_currency(-1234.5, "usd") == "-$1,234.50"

    def test_compact_millions(self):
        assert format_currency(1_234_567, "usd", compact=True) == "$1.23M"
        assert format_currency(2_500_000_000, "usd", compact=True) == "$2.50B"
        assert format_currency(1_900_000_000_000, "eur", compact=True) == "€1.90T"

    def test_compact_below_threshold_is_full(self):
        assert format_currency(999_999.99, "usd", compact=True) == "$999,999.99"

    def test_crypto_fallback(self):
        assert format_currency(1.5, "btc") == "₿1.50"
        assert format_currency(2, "eth") == "Ξ2.00"

    def test_unknown_currency_defaults_to_dollar(self):
        assert format_currency(12, "zzz") == "$12.00"

    def test_infinity_is_zero(self):
        assert format_currency(float("inf"), "usd") == "$0.00"


class TestFormatPercentage:
    @pytest.mark.parametrize("value", [None, float("nan")])
    def test_missing(self, value):
        assert format_percentage(value) == "0.00%"

    def test_negative_rounding(self):
        assert format_percentage(-3.456) == "-3.46%"

    def test_positive(self):
        assert format_percentage(5) == "5.00%"


def test_currency_symbol_default():
    assert currency_symbol("usd") == "$"
    assert currency_symbol("gbp") == "$"
    assert currency_symbol("") == "$"
