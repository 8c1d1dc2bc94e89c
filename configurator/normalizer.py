"""Catalog normalization: raw sheet rows -> typed Catalog.

All coercion happens here. Malformed numeric cells never abort a load;
they fall back to a default and are recorded in ``Catalog.warnings``.
A missing or hidden product row is fatal for the page and raises.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from configurator.canon import (
    canon,
    clean_str,
    is_blank,
    parse_flexible_boolean,
    parse_number,
    parse_price_type,
)
from configurator.config import (
    DEFAULT_PANEL_NAME,
    DEFAULT_PANEL_SORT,
    OPTION_COLUMNS,
    OPTION_VISIBLE_WHEN_BLANK,
    PRODUCT_COLUMNS,
    PRODUCT_VISIBLE_WHEN_BLANK,
    SPEC_COLUMNS,
)
from configurator.errors import MalformedCell, ProductHidden, ProductNotFound
from configurator.logging_config import get_logger, log_engine_event
from configurator.models import Catalog, ColumnSpec, Option, Panel, PriceType, Product, Row, SpecEntry

__all__ = [
    "normalize_catalog",
    "normalize_product",
    "normalize_options",
    "normalize_specs",
]

logger = get_logger("normalizer")


def _number(
    row: Row,
    column: ColumnSpec,
    field_name: str,
    default: float,
    warnings: List[str],
) -> float:
    """Read a numeric cell; blank -> default, malformed -> default + warning."""
    value = row.get(column)
    if is_blank(value):
        return default
    try:
        return parse_number(value)
    except MalformedCell as e:
        note = f"{field_name}: {e}; using {default}"
        warnings.append(note)
        logger.warning(f"Malformed cell, {note}")
        return default


def _row_matches_key(row: Row, column: ColumnSpec, model_key: str) -> bool:
    """Rows from a sheet without a key column are assumed pre-filtered to the model.

    Where the column exists, a blank key cell belongs to no model.
    """
    if not row.has(column):
        return True
    return clean_str(row.get(column)) == clean_str(model_key)


def normalize_product(
    model_key: str,
    rows: Sequence[Row],
    visible_when_blank: bool = PRODUCT_VISIBLE_WHEN_BLANK,
    warnings: Optional[List[str]] = None,
) -> Product:
    """Build the Product record for ``model_key``.

    Raises:
        ProductNotFound: No row carries the requested key.
        ProductHidden: The row is marked not visible.
    """
    warnings = warnings if warnings is not None else []
    cols = PRODUCT_COLUMNS
    wanted = clean_str(model_key)

    row = next((r for r in rows if wanted and clean_str(r.get(cols["key"])) == wanted), None)
    if row is None:
        logger.error(f"No product row found for key {model_key!r}")
        raise ProductNotFound(model_key)

    visible = parse_flexible_boolean(row.get(cols["visible"]), visible_when_blank)
    if not visible:
        logger.warning(f"Product {model_key!r} is marked not visible")
        raise ProductHidden(model_key)

    sale_price = _number(row, cols["sale_price"], "sale_price", 0.0, warnings)
    sale_flag = parse_flexible_boolean(row.get(cols["sale_active"]), False)
    image_count = int(_number(row, cols["image_count"], "image_count", 0.0, warnings)) or 1

    return Product(
        model_id=wanted,
        title=clean_str(row.get(cols["title"])),
        series=clean_str(row.get(cols["series"])),
        base_price=_number(row, cols["base_price"], "base_price", 0.0, warnings),
        sale_price=sale_price,
        sale_label=clean_str(row.get(cols["sale_label"])),
        sale_active=sale_flag and sale_price > 0,
        image_count=image_count,
        video_url=clean_str(row.get(cols["video_url"])),
        description=clean_str(row.get(cols["description"])),
        visible=visible,
    )


def normalize_options(
    rows: Sequence[Row],
    model_key: Optional[str] = None,
    visible_when_blank: bool = OPTION_VISIBLE_WHEN_BLANK,
    warnings: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Group option rows by canonical group key.

    Returns:
        Dict with ``groups`` (key -> options sorted by sort rank, stable),
        ``group_names`` (key -> first-seen display name) and ``panels``.
    """
    warnings = warnings if warnings is not None else []
    cols = OPTION_COLUMNS

    groups: Dict[str, List[Option]] = {}
    group_names: Dict[str, str] = {}
    panel_meta: Dict[str, Dict[str, Any]] = {}
    uses_panels = False

    for row in rows:
        if model_key is not None and not _row_matches_key(row, cols["key"], model_key):
            continue

        group_name = clean_str(row.get(cols["group"]))
        option_name = clean_str(row.get(cols["option_name"]))
        if not group_name or not option_name:
            continue

        group_key = canon(group_name)
        if not group_key:
            continue

        raw_type = row.get(cols["price_type"])
        price_type = parse_price_type(raw_type)
        if price_type is None:
            if not is_blank(raw_type):
                warnings.append(f"price_type: unrecognized {raw_type!r}; using add")
                logger.debug(f"Unrecognized price type {raw_type!r} for {option_name!r}")
            price_type = PriceType.ADD

        raw_dep_group = row.get(cols["dep_group"])
        dep_group = canon(raw_dep_group) or None
        dep_value = clean_str(row.get(cols["dep_value"])) or None
        if dep_group and dep_value is None:
            logger.warning(
                f"Option {option_name!r} depends on {clean_str(raw_dep_group)!r} "
                "without a required value; it will never be offered"
            )

        raw_panel = row.get(cols["panel"])
        if not is_blank(raw_panel):
            uses_panels = True
        panel_name = clean_str(raw_panel) or DEFAULT_PANEL_NAME
        panel_key = canon(panel_name)
        if panel_key not in panel_meta:
            panel_meta[panel_key] = {
                "name": panel_name,
                "sort": _number(row, cols["panel_sort"], "panel_sort", DEFAULT_PANEL_SORT, warnings),
                "open": parse_flexible_boolean(row.get(cols["panel_open"]), False),
                "groups": [],
            }

        if group_key not in groups:
            groups[group_key] = []
            group_names[group_key] = group_name
            panel_meta[panel_key]["groups"].append(group_key)

        groups[group_key].append(
            Option(
                name=option_name,
                group_key=group_key,
                group_name=group_name,
                price_delta=_number(row, cols["price_delta"], "price_delta", 0.0, warnings),
                price_type=price_type,
                is_default=parse_flexible_boolean(row.get(cols["is_default"]), False),
                sort=_number(row, cols["sort"], "sort", 0.0, warnings),
                visible=parse_flexible_boolean(row.get(cols["visible"]), visible_when_blank),
                dep_group=dep_group,
                dep_value=dep_value,
                ui_type=canon(row.get(cols["ui_type"])),
            )
        )

    # sorted() is stable, so equal ranks keep sheet order
    for group_key, options in groups.items():
        groups[group_key] = sorted(options, key=lambda o: o.sort)

    panels: List[Panel] = []
    if uses_panels:
        panels = sorted(
            (
                Panel(key=key, name=meta["name"], sort=meta["sort"], open=meta["open"], groups=tuple(meta["groups"]))
                for key, meta in panel_meta.items()
                if meta["groups"]
            ),
            key=lambda p: p.sort,
        )
        panel_of = {g: p.key for p in panels for g in p.groups}
        for group_key, options in groups.items():
            groups[group_key] = [replace(o, panel=panel_of.get(group_key, "")) for o in options]

    return {"groups": groups, "group_names": group_names, "panels": panels}


def normalize_specs(
    rows: Sequence[Row],
    model_key: Optional[str] = None,
    warnings: Optional[List[str]] = None,
) -> Dict[str, List[SpecEntry]]:
    """Group spec rows into sections, each sorted by its sort column."""
    warnings = warnings if warnings is not None else []
    cols = SPEC_COLUMNS
    specs: Dict[str, List[SpecEntry]] = {}

    for row in rows:
        if model_key is not None and not _row_matches_key(row, cols["key"], model_key):
            continue
        section = clean_str(row.get(cols["section"]))
        label = clean_str(row.get(cols["label"]))
        value = clean_str(row.get(cols["value"]))
        if not section or not label or not value:
            continue
        sort = _number(row, cols["sort"], "spec sort", 0.0, warnings)
        specs.setdefault(section, []).append(SpecEntry(label=label, value=value, sort=sort))

    return {section: sorted(entries, key=lambda e: e.sort) for section, entries in specs.items()}


def normalize_catalog(
    model_key: str,
    product_rows: Sequence[Row],
    option_rows: Sequence[Row],
    spec_rows: Sequence[Row] = (),
    option_visible_when_blank: bool = OPTION_VISIBLE_WHEN_BLANK,
    product_visible_when_blank: bool = PRODUCT_VISIBLE_WHEN_BLANK,
) -> Catalog:
    """Build the typed catalog for one product.

    Args:
        model_key: Requested model key (e.g. "LEGACY35-LB-3").
        product_rows: Product sheet rows; the first row with the key wins.
        option_rows: Option sheet rows for the model.
        spec_rows: Spec sheet rows for the model.
        option_visible_when_blank: Visibility of options with a blank cell.
        product_visible_when_blank: Visibility of a product with a blank cell.

    Returns:
        Catalog with product, groups, group names, specs and panels.

    Raises:
        ProductNotFound: No product row for the key.
        ProductHidden: The product row is marked not visible.
    """
    warnings: List[str] = []
    product = normalize_product(model_key, product_rows, product_visible_when_blank, warnings)
    options = normalize_options(option_rows, product.model_id, option_visible_when_blank, warnings)
    specs = normalize_specs(spec_rows, product.model_id, warnings)

    catalog = Catalog(
        product=product,
        groups=options["groups"],
        group_names=options["group_names"],
        specs=specs,
        panels=options["panels"],
        warnings=warnings,
    )

    log_engine_event("catalog_loaded", {
        "model_id": product.model_id,
        "groups": len(catalog.groups),
        "options": sum(len(o) for o in catalog.groups.values()),
        "spec_sections": len(catalog.specs),
        "warnings": len(warnings),
    }, logger_name="normalizer")

    return catalog
