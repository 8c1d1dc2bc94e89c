"""Data models for product catalogs and sheet rows."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

__all__ = [
    "PriceType",
    "ColumnSpec",
    "Row",
    "Option",
    "Product",
    "SpecEntry",
    "Panel",
    "Catalog",
    "normalize_header",
]

_HEADER_SEPARATORS = re.compile(r"[\s_]+")


def normalize_header(name: Any) -> str:
    """Normalize a header label so "Item ID", "item_id" and "ItemID" match."""
    if name is None:
        return ""
    return _HEADER_SEPARATORS.sub("", str(name).lower())


class PriceType(str, Enum):
    """How an option's price delta is applied."""

    ADD = "add"  # flat amount
    PCT = "pct"  # percentage of the base price
    ABS = "abs"  # absolute amount, accumulated like ADD


@dataclass(frozen=True)
class ColumnSpec:
    """Where a field lives in a sheet row.

    ``position`` is the zero-based column (A=0); ``headers`` are the header
    labels that may name the column when rows carry a header row.
    """

    position: int
    headers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Row:
    """One sheet row: positional cells plus an optional header index.

    ``header_index`` maps normalized header labels to column positions.
    When it is present, fields are addressed by header and a missing
    header yields None; otherwise fields are addressed by position.
    """

    cells: Tuple[Any, ...]
    header_index: Optional[Dict[str, int]] = field(default=None, compare=False, hash=False)

    @classmethod
    def from_cells(cls, cells: Sequence[Any], header_index: Optional[Dict[str, int]] = None) -> "Row":
        return cls(tuple(cells), header_index or None)

    def at(self, position: int) -> Any:
        if 0 <= position < len(self.cells):
            return self.cells[position]
        return None

    def has(self, column: ColumnSpec) -> bool:
        """True if the row carries the column at all, blank or not."""
        if self.header_index is None:
            return 0 <= column.position < len(self.cells)
        return any(normalize_header(h) in self.header_index for h in column.headers)

    def get(self, column: ColumnSpec) -> Any:
        """Look up a field by header when possible, else by position."""
        if self.header_index is None:
            return self.at(column.position)

        for header in column.headers:
            index = self.header_index.get(normalize_header(header))
            if index is not None:
                return self.at(index)
        return None


@dataclass(frozen=True)
class Option:
    """A single choice within an option group."""

    name: str
    group_key: str
    group_name: str
    price_delta: float = 0.0
    price_type: PriceType = PriceType.ADD
    is_default: bool = False
    sort: float = 0.0
    visible: bool = False

    # Dependency: only valid while `dep_group` holds `dep_value`
    dep_group: Optional[str] = None
    dep_value: Optional[str] = None

    panel: str = ""
    ui_type: str = ""

    @property
    def has_dependency(self) -> bool:
        return bool(self.dep_group)

    @property
    def accepts_text(self) -> bool:
        return self.ui_type == "text"


@dataclass(frozen=True)
class Product:
    """The product record shown on one page view."""

    model_id: str
    title: str
    series: str = ""
    base_price: float = 0.0
    sale_price: float = 0.0
    sale_label: str = ""
    sale_active: bool = False

    image_count: int = 1
    video_url: str = ""
    description: str = ""
    visible: bool = True


@dataclass(frozen=True)
class SpecEntry:
    """One label/value line of a spec section."""

    label: str
    value: str
    sort: float = 0.0


@dataclass(frozen=True)
class Panel:
    """A collapsible panel grouping option groups (custom builder)."""

    key: str
    name: str
    sort: float = 999.0
    open: bool = False
    groups: Tuple[str, ...] = ()


@dataclass
class Catalog:
    """Typed in-memory catalog for one product.

    ``groups`` maps canonical group key to its options in sort order;
    ``group_names`` maps the same keys to the first-seen display spelling.
    Dict insertion order follows the order groups first appear in the rows.
    """

    product: Product
    groups: Dict[str, List[Option]] = field(default_factory=dict)
    group_names: Dict[str, str] = field(default_factory=dict)
    specs: Dict[str, List[SpecEntry]] = field(default_factory=dict)
    panels: List[Panel] = field(default_factory=list)

    # Malformed-cell notes collected during normalization
    warnings: List[str] = field(default_factory=list)

    def display_name(self, group_key: str) -> str:
        return self.group_names.get(group_key, group_key)

    def find_option(self, group_key: str, option_name: str) -> Optional[Option]:
        """Find an option by exact display name within a group."""
        for option in self.groups.get(group_key, []):
            if option.name == option_name:
                return option
        return None
