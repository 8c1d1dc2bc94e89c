"""Price calculation for a product and its selected options."""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from configurator.models import Option, PriceType, Product

__all__ = ["PriceQuote", "apply_option", "calculate_price", "quote_price"]


@dataclass(frozen=True)
class PriceQuote:
    """Regular total plus, when a sale is active, the parallel sale total."""

    base_price: float
    regular: float
    sale: Optional[float] = None
    sale_label: str = ""

    @property
    def sale_active(self) -> bool:
        return self.sale is not None

    @property
    def effective(self) -> float:
        """The price a customer would pay."""
        return self.sale if self.sale is not None else self.regular


def apply_option(total: float, base: float, option: Option) -> float:
    """Add one option's delta to a running total.

    Percentages are taken of ``base`` (the original price), never of the
    running total, so several percentage options do not compound.
    """
    if option.price_type is PriceType.PCT:
        return total + base * (option.price_delta / 100)
    return total + option.price_delta


def calculate_price(
    base: float,
    selection: Mapping[str, str],
    groups: Mapping[str, List[Option]],
) -> float:
    """Total price for a base price and a selection.

    Each selected name is looked up by exact match within its group;
    entries that match nothing are skipped.

    Args:
        base: Base price of the product.
        selection: Group key -> selected option name, in selection order.
        groups: Group key -> options.

    Returns:
        The total price.
    """
    total = base
    for group_key, option_name in selection.items():
        option = next((o for o in groups.get(group_key, []) if o.name == option_name), None)
        if option is None:
            continue
        total = apply_option(total, base, option)
    return total


def quote_price(
    product: Product,
    selection: Mapping[str, str],
    groups: Mapping[str, List[Option]],
) -> PriceQuote:
    """Regular and (when active) sale totals for the current selection."""
    regular = calculate_price(product.base_price, selection, groups)
    sale = None
    if product.sale_active:
        sale = calculate_price(product.sale_price, selection, groups)
    return PriceQuote(
        base_price=product.base_price,
        regular=regular,
        sale=sale,
        sale_label=product.sale_label if product.sale_active else "",
    )
