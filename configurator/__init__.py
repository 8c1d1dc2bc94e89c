"""Sheet-driven product configurator: option resolution and pricing."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from configurator.canon import canon, clean_str, parse_flexible_boolean
from configurator.config import PAGE_VARIANTS, get_variant_config
from configurator.engine import ResolutionEngine, choose_default, classify_groups, dependency_satisfied
from configurator.errors import (
    ConfiguratorError,
    MalformedCell,
    ProductHidden,
    ProductNotFound,
    ProductUnavailable,
)
from configurator.models import Catalog, Option, PriceType, Product, Row
from configurator.normalizer import normalize_catalog
from configurator.page import ProductPage
from configurator.pricing import PriceQuote, calculate_price, quote_price
from configurator.sheets import CsvSheetSource, load_sheet_csv, parse_gviz_payload

__all__ = [
    # Version
    "__version__",
    # Config
    "PAGE_VARIANTS",
    "get_variant_config",
    # Models
    "Catalog",
    "Option",
    "PriceType",
    "Product",
    "Row",
    # Errors
    "ConfiguratorError",
    "MalformedCell",
    "ProductHidden",
    "ProductNotFound",
    "ProductUnavailable",
    # Core functions
    "canon",
    "clean_str",
    "parse_flexible_boolean",
    "normalize_catalog",
    "ResolutionEngine",
    "classify_groups",
    "choose_default",
    "dependency_satisfied",
    "PriceQuote",
    "calculate_price",
    "quote_price",
    "ProductPage",
    # Sheet sources
    "CsvSheetSource",
    "load_sheet_csv",
    "parse_gviz_payload",
]
