"""JSON API over the configurator.

Each request builds its own page (catalog + engine) from the sheet
exports, replays the client's choices in order and returns the resulting
view. Nothing is kept between requests.

Endpoints:
- GET  /api/variants
- GET  /api/<variant>/products?sort=name|price&order=asc|desc&prefix=LEGACY35
- GET  /api/<variant>/products/<key>
- POST /api/<variant>/products/<key>/configure
"""

from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from configurator.config import PAGE_VARIANTS
from configurator.logging_config import get_logger
from configurator.page import ProductPage, list_series, sort_product_cards
from configurator.sheets import CsvSheetSource

__all__ = ["api"]

logger = get_logger("api")

# Create blueprint for API
api = Blueprint("api", __name__, url_prefix="/api")


def _source() -> CsvSheetSource:
    return CsvSheetSource(current_app.config["DATA_DIR"])


def _error(message: str, status: int, **extra: Any) -> Tuple[Response, int]:
    return jsonify({"error": message, **extra}), status


def _unknown_variant(variant: str) -> Optional[Tuple[Response, int]]:
    if variant not in PAGE_VARIANTS:
        return _error(f"Unknown variant: {variant}", 404, variants=list(PAGE_VARIANTS))
    return None


def _parse_changes(payload: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Read the ordered list of {"group", "option"} changes.

    Raises:
        ValueError: If the list or one of its entries is malformed.
    """
    changes = payload.get("changes") or []
    if not isinstance(changes, list):
        raise ValueError("'changes' must be a list")

    parsed = []
    for change in changes:
        if not isinstance(change, dict) or not change.get("group") or "option" not in change:
            raise ValueError("each change needs 'group' and 'option'")
        parsed.append((str(change["group"]), str(change["option"])))
    return parsed


def _string_map(payload: Dict[str, Any], field: str) -> Dict[str, str]:
    value = payload.get(field) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{field}' must be an object")
    return {str(k): str(v) for k, v in value.items()}


@api.route("/variants", methods=["GET"])
def variants() -> Response:
    """List page variants and their default keys."""
    return jsonify({
        "variants": [
            {"key": name, "default_key": cfg["default_key"], "sheets": cfg["sheets"]}
            for name, cfg in PAGE_VARIANTS.items()
        ]
    })


@api.route("/<variant>/products", methods=["GET"])
def products(variant: str):
    """Visible products on a variant's sheet, grouped by series and sorted."""
    error = _unknown_variant(variant)
    if error:
        return error

    order = request.args.get("order", "asc").strip().lower()
    if order not in ("asc", "desc"):
        return _error("'order' must be 'asc' or 'desc'", 400)

    sort_by = request.args.get("sort")
    descending = order == "desc"
    try:
        series = list_series(_source(), variant, request.args.get("prefix"), sort_by, descending)
    except ValueError as e:
        return _error(str(e), 400)

    cards = [card for group in series for card in group["products"]]
    return jsonify({
        "variant": variant,
        "series": series,
        "products": sort_product_cards(cards, variant, sort_by, descending),
    })


@api.route("/<variant>/products/<key>", methods=["GET"])
def product_view(variant: str, key: str):
    """Default configuration and price of a product."""
    error = _unknown_variant(variant)
    if error:
        return error

    page = ProductPage(variant, source=_source(), key=key)
    if not page.load():
        return jsonify(page.view()), 404
    return jsonify(page.view())


@api.route("/<variant>/products/<key>/configure", methods=["POST"])
def configure(variant: str, key: str):
    """Apply a sequence of choices and return the settled view.

    Request body::

        {
          "selection": {"Tone Ring": "Bronze"},     # optional starting state
          "changes": [{"group": "Engraving", "option": "Custom"}],
          "text": {"Name Block": "Lemon"}           # optional custom text
        }

    Choices that are not currently available are skipped and reported in
    ``rejected``.
    """
    error = _unknown_variant(variant)
    if error:
        return error

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("Request body must be a JSON object", 400)

    try:
        selection = _string_map(payload, "selection")
        changes = _parse_changes(payload)
        texts = _string_map(payload, "text")
    except ValueError as e:
        return _error(str(e), 400)

    page = ProductPage(variant, source=_source(), key=key)
    if not page.load(selection=selection):
        return jsonify(page.view()), 404

    rejected = []
    for group, option_name in changes:
        if not page.select(group, option_name):
            rejected.append({"group": group, "option": option_name})
    for group, text in texts.items():
        if not page.set_custom_text(group, text):
            rejected.append({"group": group, "text": text})

    if rejected:
        logger.info(f"Rejected {len(rejected)} change(s) for {page.model_key}")

    view = page.view()
    view["rejected"] = rejected
    return jsonify(view)
