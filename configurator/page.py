"""Product page initializer and view model.

``ProductPage`` ties one page view together: it resolves the model key,
loads the sheets, builds the catalog and engine, and exposes a plain-dict
view (header, price, option blocks, specs, notification config) that a
template or JSON adapter can render. A product that cannot be loaded
yields an explicit unavailable view, never a half-initialized one.
"""

import re
from typing import Any, Dict, List, Optional

from configurator.canon import clean_str
from configurator.config import BRAND_NAME, PRODUCT_COLUMNS, SETTLE_MAX_PASSES, get_variant_config
from configurator.engine import ResolutionEngine
from configurator.errors import ProductUnavailable
from configurator.logging_config import get_logger, log_engine_event
from configurator.models import Catalog, Option, PriceType, Product
from configurator.normalizer import normalize_catalog, normalize_product
from configurator.pricing import quote_price
from configurator.sheets import CsvSheetSource

__all__ = [
    "ProductPage",
    "format_usd",
    "option_label",
    "display_title",
    "resolve_model_key",
    "product_card",
    "load_product_cards",
    "sort_product_cards",
    "list_products",
    "list_series",
]

logger = get_logger("page")

UNAVAILABLE_PRICE_TEXT = "Price unavailable"
UNAVAILABLE_OPTIONS_TEXT = "Options are not available for this model right now."


def format_usd(amount: Any) -> str:
    """Format a number as US dollars, e.g. 1150 -> "$1,150.00"."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _format_number(value: float) -> str:
    return f"{value:g}"


def option_label(option: Option) -> str:
    """Option text with its price bump, e.g. "Bronze (+$200.00)" or "Gold (+10%)"."""
    delta = option.price_delta
    if not delta:
        return option.name
    sign = "+" if delta > 0 else "-"
    if option.price_type is PriceType.PCT:
        return f"{option.name} ({sign}{_format_number(abs(delta))}%)"
    return f"{option.name} ({sign}{format_usd(abs(delta))})"


def display_title(product: Product, suffix: Optional[str] = None, fallback: Optional[str] = None) -> str:
    """Product title for headings; neck pages always end in "Neck"."""
    title = product.title or fallback or product.model_id
    if suffix and title and not title.lower().endswith(f" {suffix.lower()}"):
        title = f"{title} {suffix}"
    return title


def resolve_model_key(variant_config: Dict[str, Any], key: Optional[str] = None) -> str:
    """Requested key, else the variant default; upper-cased where the variant says so."""
    resolved = clean_str(key)
    if not resolved:
        resolved = variant_config["default_key"]
        logger.warning(f"No model key given; falling back to {resolved}")
    if variant_config.get("uppercase_key"):
        resolved = resolved.upper()
    return resolved


def _require_variant(variant: str) -> Dict[str, Any]:
    config = get_variant_config(variant)
    if config is None:
        raise ValueError(f"Unknown page variant: {variant!r}")
    return config


def _natural_key(text: str) -> List[Any]:
    """Sort key comparing digit runs as numbers: "LB-3" before "LB-11"."""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", text)]


def product_card(product: Product) -> Dict[str, Any]:
    """Listing card for a product: title, series and its starting price."""
    quote = quote_price(product, {}, {})
    return {
        "key": product.model_id,
        "title": product.title or product.model_id,
        "series": product.series,
        "regular": quote.regular,
        "sale": quote.sale,
        "sale_label": quote.sale_label,
        "effective": quote.effective,
        "price_text": f"Starting at {format_usd(quote.regular)}" if quote.regular else "",
        "sale_text": f"Now {format_usd(quote.sale)}" if quote.sale_active else "",
    }


def load_product_cards(source: Any, variant: str, prefix: Optional[str] = None) -> List[Dict[str, Any]]:
    """Cards for every visible product on a variant's sheet, in sheet order.

    Hidden products are left out. ``prefix`` keeps only keys of one series,
    e.g. "LEGACY35" matches "LEGACY35-LB-3".
    """
    config = _require_variant(variant)
    rows = source.rows(config["sheets"]["products"])
    prefix = clean_str(prefix).upper()

    cards = []
    seen = set()
    for row in rows:
        key = clean_str(row.get(PRODUCT_COLUMNS["key"]))
        if not key or key in seen:
            continue
        seen.add(key)
        if prefix and not key.upper().startswith(f"{prefix}-"):
            continue
        try:
            product = normalize_product(key, rows)
        except ProductUnavailable as e:
            logger.debug(f"Leaving {key} out of the listing: {e}")
            continue
        cards.append(product_card(product))
    return cards


def _card_name_key(card: Dict[str, Any]) -> Any:
    return (_natural_key(card["title"]), card["effective"])


def _card_price_key(card: Dict[str, Any]) -> Any:
    return (card["effective"], _natural_key(card["title"]))


def sort_product_cards(
    cards: List[Dict[str, Any]],
    variant: str,
    sort_by: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """Sort cards by a field the variant allows; the variant's default when none is given.

    Raises:
        ValueError: The variant does not sort by ``sort_by``.
    """
    fields = _require_variant(variant)["card_sort_fields"]
    field = clean_str(sort_by).lower() or fields[0]
    if field not in fields:
        raise ValueError(f"{variant} listings sort by {', '.join(fields)}, not {sort_by!r}")

    key = _card_name_key if field == "name" else _card_price_key
    return sorted(cards, key=key, reverse=descending)


def list_products(
    source: Any,
    variant: str,
    prefix: Optional[str] = None,
    sort_by: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """Visible product cards for a variant, sorted."""
    cards = load_product_cards(source, variant, prefix)
    return sort_product_cards(cards, variant, sort_by, descending)


def list_series(
    source: Any,
    variant: str,
    prefix: Optional[str] = None,
    sort_by: Optional[str] = None,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """Visible product cards grouped by series.

    Series keep the order they first appear in on the sheet; cards within
    a series are sorted.
    """
    cards = load_product_cards(source, variant, prefix)
    order = []
    for card in cards:
        if card["series"] not in order:
            order.append(card["series"])

    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for card in sort_product_cards(cards, variant, sort_by, descending):
        grouped.setdefault(card["series"], []).append(card)
    return [{"series": name, "products": grouped[name]} for name in order]


class ProductPage:
    """One product page view: catalog, engine and rendering state.

    Args:
        variant: Page variant name ("banjo", "neck", "custom").
        source: Sheet source with a ``rows(sheet_name)`` method.
        key: Requested model key (None for the variant default).
        max_passes: Settlement passes per change.
    """

    def __init__(
        self,
        variant: str = "banjo",
        source: Optional[Any] = None,
        key: Optional[str] = None,
        max_passes: int = SETTLE_MAX_PASSES,
    ):
        config = _require_variant(variant)

        self.variant = variant
        self.config = config
        self.source = source or CsvSheetSource()
        self.model_key = resolve_model_key(config, key)
        self.max_passes = max_passes

        self.catalog: Optional[Catalog] = None
        self.engine: Optional[ResolutionEngine] = None
        self.error: Optional[ProductUnavailable] = None

    @property
    def available(self) -> bool:
        return self.engine is not None

    def load(self, selection: Optional[Dict[str, str]] = None) -> bool:
        """Load sheets and initialize the selection.

        Returns:
            True if the product is available; False leaves the page in the
            unavailable state.
        """
        sheets = self.config["sheets"]
        product_rows = self.source.rows(sheets["products"])
        option_rows = self.source.rows(sheets["options"])
        spec_rows = self.source.rows(sheets["specs"])

        try:
            catalog = normalize_catalog(self.model_key, product_rows, option_rows, spec_rows)
        except ProductUnavailable as e:
            self.catalog = None
            self.engine = None
            self.error = e
            log_engine_event("product_unavailable", {
                "message": str(e),
                "model_id": self.model_key,
                "variant": self.variant,
            }, logger_name="page")
            return False

        if self.engine is None:
            self.engine = ResolutionEngine(catalog, selection, max_passes=self.max_passes)
            self.engine.initialize()
        else:
            self.engine.reload(catalog, selection)
        self.catalog = catalog
        self.error = None
        return True

    def select(self, group: str, option_name: str) -> bool:
        if self.engine is None:
            return False
        return self.engine.select(group, option_name)

    def set_custom_text(self, group: str, text: str) -> bool:
        if self.engine is None:
            return False
        return self.engine.set_custom_text(group, text)

    # ------------------------------------------------------------------
    # View model
    # ------------------------------------------------------------------

    def title(self) -> str:
        if self.catalog is None:
            return self.config["unavailable_title"]
        return display_title(
            self.catalog.product,
            self.config.get("title_suffix"),
            self.config.get("fallback_title"),
        )

    def series(self) -> str:
        if self.catalog is None:
            return ""
        return self.catalog.product.series or self.config.get("fallback_series", "")

    def header(self) -> Dict[str, str]:
        title = self.title()
        series = self.series()
        if self.catalog is None:
            return {"series_text": BRAND_NAME, "title": title, "document_title": title}
        return {
            "series_text": f"{BRAND_NAME}: {series}" if series else BRAND_NAME,
            "title": title,
            "document_title": f"{title} | {BRAND_NAME}",
        }

    def price(self) -> Dict[str, Any]:
        if self.engine is None:
            return {"available": False, "display": UNAVAILABLE_PRICE_TEXT}

        quote = self.engine.quote()
        return {
            "available": True,
            "base": quote.base_price,
            "regular": quote.regular,
            "sale": quote.sale,
            "sale_label": quote.sale_label,
            "effective": quote.effective,
            "display": format_usd(quote.effective),
            "regular_display": format_usd(quote.regular),
            "base_display": f"Base price: {format_usd(quote.base_price)}",
        }

    def option_blocks(self) -> List[Dict[str, Any]]:
        """One block per group that currently has something to offer."""
        if self.engine is None:
            return []

        blocks = []
        for group_key in self.engine.ordered_groups():
            options = self.engine.visible_options(group_key)
            if not options:
                continue
            label = self.catalog.display_name(group_key)
            current = self.engine.selection.get(group_key)
            text_option = next((o for o in options if o.accepts_text), None)
            blocks.append({
                "group": group_key,
                "label": label,
                "field_name": "_".join(label.split()),
                "dependent": self.engine.is_dependent(group_key),
                "panel": options[0].panel,
                "selected": current,
                "options": [
                    {"name": o.name, "label": option_label(o), "selected": o.name == current}
                    for o in options
                ],
                "text_input": {
                    "option": text_option.name,
                    "shown": current == text_option.name,
                    "value": self.engine.custom_text.get(group_key, ""),
                } if text_option else None,
            })
        return blocks

    def panels(self) -> List[Dict[str, Any]]:
        if self.catalog is None:
            return []
        return [
            {"key": p.key, "name": p.name, "open": p.open, "groups": list(p.groups)}
            for p in self.catalog.panels
        ]

    def spec_sections(self) -> List[Dict[str, Any]]:
        if self.catalog is None:
            return []
        return [
            {"section": section, "rows": [{"label": e.label, "value": e.value} for e in entries]}
            for section, entries in self.catalog.specs.items()
        ]

    def get_config(self) -> Dict[str, Any]:
        """Configuration summary for the inquiry notification."""
        if self.engine is None:
            return {"id": self.model_key, "available": False, "selections": {}}

        product = self.catalog.product
        quote = self.engine.quote()
        return {
            "id": product.model_id,
            "model": product.model_id,
            "title": self.title(),
            "series": self.series(),
            "base_price": product.base_price,
            "final_price": quote.effective,
            "regular_price": quote.regular,
            "sale_price": quote.sale,
            "selections": self.engine.notification_selections(),
        }

    def view(self) -> Dict[str, Any]:
        """Everything needed to render the page."""
        view = {
            "variant": self.variant,
            "model_key": self.model_key,
            "available": self.available,
            "header": self.header(),
            "price": self.price(),
            "options": self.option_blocks(),
            "panels": self.panels(),
            "specs": self.spec_sections(),
            "config": self.get_config(),
        }
        if not self.available:
            view["message"] = UNAVAILABLE_OPTIONS_TEXT
            view["error"] = str(self.error) if self.error else None
        else:
            view["selection"] = dict(self.engine.selection)
            view["description"] = self.catalog.product.description
        return view
