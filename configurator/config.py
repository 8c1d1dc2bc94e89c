"""Configuration and constants for the configurator."""

import os
from typing import Any, Dict, Optional

from configurator.models import ColumnSpec

__all__ = [
    "BRAND_NAME",
    "DATA_DIR",
    "SETTLE_MAX_PASSES",
    "SETTLE_PASS_LIMIT",
    "CUSTOM_TEXT_MAX_LENGTH",
    "OPTION_VISIBLE_WHEN_BLANK",
    "PRODUCT_VISIBLE_WHEN_BLANK",
    "DEFAULT_PANEL_NAME",
    "DEFAULT_PANEL_SORT",
    "PRODUCT_COLUMNS",
    "OPTION_COLUMNS",
    "SPEC_COLUMNS",
    "PAGE_VARIANTS",
    "get_variant_config",
]

BRAND_NAME = "Lemon Banjos"

# Directory holding CSV exports of the sheets (one file per sheet name)
DATA_DIR = os.getenv("CONFIGURATOR_DATA_DIR", "data")

# Settlement passes per change. 1 = single prune+normalize pass, which is
# enough while dependents only depend on provider groups. Raise it for
# multi-hop chains; settle() stops early once the selection is stable.
SETTLE_MAX_PASSES = int(os.getenv("SETTLE_MAX_PASSES", "1"))
SETTLE_PASS_LIMIT = 25

# Custom text entries (e.g. name block engraving)
CUSTOM_TEXT_MAX_LENGTH = 20

# Blank visibility cells: options stay hidden, products stay visible
OPTION_VISIBLE_WHEN_BLANK = False
PRODUCT_VISIBLE_WHEN_BLANK = True

DEFAULT_PANEL_NAME = "General"
DEFAULT_PANEL_SORT = 999.0


# =============================================================================
# Sheet Column Layouts
# =============================================================================
# Positions follow the sheet columns (A=0). Header aliases are used instead
# when the rows carry a header row.

PRODUCT_COLUMNS: Dict[str, ColumnSpec] = {
    "key": ColumnSpec(0, ("key", "model_id", "model key", "item_id")),
    "title": ColumnSpec(1, ("title",)),
    "series": ColumnSpec(2, ("series", "series_label")),
    "base_price": ColumnSpec(3, ("base_price", "price")),
    "sale_price": ColumnSpec(4, ("sale_price",)),
    "sale_label": ColumnSpec(5, ("sale_label",)),
    "sale_active": ColumnSpec(6, ("sale_active",)),
    "image_count": ColumnSpec(7, ("image_count",)),
    "video_url": ColumnSpec(8, ("video_url", "video")),
    "visible": ColumnSpec(10, ("visible",)),
    "description": ColumnSpec(11, ("description", "short_description")),
}

OPTION_COLUMNS: Dict[str, ColumnSpec] = {
    "key": ColumnSpec(0, ("model_id", "key", "model key")),
    "group": ColumnSpec(1, ("group", "group_name")),
    "option_name": ColumnSpec(2, ("option_name", "option")),
    "price_delta": ColumnSpec(3, ("price_delta", "delta")),
    "price_type": ColumnSpec(4, ("price_type",)),
    "is_default": ColumnSpec(5, ("is_default", "default")),
    "sort": ColumnSpec(6, ("sort",)),
    "visible": ColumnSpec(7, ("visible",)),
    "dep_group": ColumnSpec(8, ("dep_group", "depends_on")),
    "dep_value": ColumnSpec(9, ("dep_value",)),
    "panel": ColumnSpec(10, ("panel", "panel_name")),
    "panel_sort": ColumnSpec(11, ("panel_sort",)),
    "panel_open": ColumnSpec(12, ("panel_open",)),
    "ui_type": ColumnSpec(13, ("ui_type",)),
}

SPEC_COLUMNS: Dict[str, ColumnSpec] = {
    "key": ColumnSpec(0, ("model_id", "key", "item_id")),
    "section": ColumnSpec(1, ("section",)),
    "label": ColumnSpec(2, ("label",)),
    "value": ColumnSpec(3, ("value",)),
    "sort": ColumnSpec(4, ("sort",)),
}


# =============================================================================
# Page Variants
# =============================================================================
# Each page variant maps to:
#   - sheets: sheet names for products / options / specs (None = no sheet)
#   - default_key: model key used when the page is opened without one
#   - uppercase_key: whether incoming keys are upper-cased
#   - title_suffix: word appended to the product title when missing
#   - unavailable_title: heading shown when the product cannot be loaded
#   - card_sort_fields: fields the series listing may sort by, default first

VariantConfig = Dict[str, Any]

PAGE_VARIANTS: Dict[str, VariantConfig] = {
    "banjo": {
        "sheets": {"products": "Products", "options": "Options", "specs": "Specs"},
        "default_key": "LEGACY35-LB-00",
        "uppercase_key": True,
        "title_suffix": None,
        "unavailable_title": "Banjo Not Available",
        "card_sort_fields": ("price",),
    },
    "neck": {
        "sheets": {"products": "Necks", "options": "Neck_Options", "specs": "Neck_Specs"},
        "default_key": "NECK-DEFAULT",
        "uppercase_key": False,
        "title_suffix": "Neck",
        "unavailable_title": "Neck Not Available",
        "card_sort_fields": ("name", "price"),
    },
    "custom": {
        "sheets": {"products": "CustomBuilder", "options": "CustomBuilderOptions", "specs": None},
        "default_key": "CUSTOM",
        "uppercase_key": True,
        "title_suffix": None,
        "unavailable_title": "Custom Builder Not Available",
        "card_sort_fields": ("price",),
        "fallback_title": "Custom Banjo Builder",
        "fallback_series": "Custom Series",
    },
}


def get_variant_config(variant: str) -> Optional[VariantConfig]:
    """Get the configuration for a page variant."""
    return PAGE_VARIANTS.get(variant)
