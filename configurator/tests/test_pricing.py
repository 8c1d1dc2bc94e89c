"""Tests for price calculation."""

import pytest

from configurator.models import PriceType, Product
from configurator.pricing import PriceQuote, apply_option, calculate_price, quote_price


@pytest.fixture
def groups(make_option):
    return {
        "finish": [
            make_option("Natural", "Finish"),
            make_option("Sunburst", "Finish", price_delta=150),
        ],
        "neckwood": [
            make_option("Curly Walnut", "Neck Wood", price_delta=10, price_type=PriceType.PCT),
        ],
        "inlay": [
            make_option("Hearts", "Inlay", price_delta=5, price_type=PriceType.PCT),
        ],
        "case": [
            make_option("Gig Bag", "Case", price_delta=-50),
            make_option("Hardshell", "Case", price_delta=50, price_type=PriceType.ABS),
        ],
    }


class TestCalculatePrice:
    """Tests for calculate_price()."""

    def test_flat(self, groups):
        assert calculate_price(1000, {"finish": "Sunburst"}, groups) == 1150

    def test_percent(self, groups):
        assert calculate_price(1000, {"neckwood": "Curly Walnut"}, groups) == pytest.approx(1100)

    def test_percent_does_not_compound(self, groups):
        selection = {"neckwood": "Curly Walnut", "inlay": "Hearts"}
        assert calculate_price(1000, selection, groups) == pytest.approx(1150)

    def test_negative_delta(self, groups):
        assert calculate_price(1000, {"case": "Gig Bag"}, groups) == 950

    def test_abs_adds_delta(self, groups):
        assert calculate_price(1000, {"case": "Hardshell"}, groups) == 1050

    def test_unmatched_entries_skipped(self, groups):
        selection = {"finish": "Gold", "tailpiece": "Kerschner", "case": "Gig Bag"}
        assert calculate_price(1000, selection, groups) == 950

    def test_name_match_is_exact(self, groups):
        assert calculate_price(1000, {"finish": "sunburst"}, groups) == 1000

    def test_empty_selection(self, groups):
        assert calculate_price(1000, {}, groups) == 1000


class TestQuotePrice:
    """Tests for quote_price() and PriceQuote."""

    def test_sale_duplication(self, make_option):
        product = Product(model_id="A", title="A", base_price=1000, sale_price=800, sale_label="Spring Sale", sale_active=True)
        groups = {"case": [make_option("Hardshell", "Case", price_delta=50)]}

        quote = quote_price(product, {"case": "Hardshell"}, groups)

        assert quote.regular == 1050
        assert quote.sale == 850
        assert quote.sale_active
        assert quote.sale_label == "Spring Sale"
        assert quote.effective == 850

    def test_sale_percent_uses_sale_base(self, make_option):
        product = Product(model_id="A", title="A", base_price=1000, sale_price=800, sale_active=True)
        groups = {"neckwood": [make_option("Walnut", "Neck Wood", price_delta=10, price_type=PriceType.PCT)]}

        quote = quote_price(product, {"neckwood": "Walnut"}, groups)

        assert quote.regular == pytest.approx(1100)
        assert quote.sale == pytest.approx(880)

    def test_no_sale(self, groups):
        product = Product(model_id="A", title="A", base_price=1000, sale_price=800, sale_label="Old Sale")
        quote = quote_price(product, {"finish": "Sunburst"}, groups)

        assert quote.sale is None
        assert not quote.sale_active
        assert quote.sale_label == ""
        assert quote.effective == 1150

    def test_apply_option(self, make_option):
        pct = make_option("Walnut", "Neck Wood", price_delta=10, price_type=PriceType.PCT)
        assert apply_option(1100, 1000, pct) == pytest.approx(1200)

    def test_quote_defaults(self):
        quote = PriceQuote(base_price=1000, regular=1000)
        assert quote.effective == 1000
        assert not quote.sale_active
