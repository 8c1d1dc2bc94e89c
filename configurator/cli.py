"""Command-line interface for pricing a configuration from sheet exports."""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

__all__ = ["main", "parse_args", "parse_assignment"]

from configurator.canon import clean_str
from configurator.config import DATA_DIR, PAGE_VARIANTS, SETTLE_MAX_PASSES
from configurator.logging_config import setup_logging
from configurator.page import ProductPage, format_usd, list_series
from configurator.sheets import CsvSheetSource


def parse_assignment(text: str) -> Tuple[str, str]:
    """Split "Group=Option" into its parts."""
    group, sep, value = text.partition("=")
    if not sep or not clean_str(group):
        raise argparse.ArgumentTypeError(f"expected GROUP=VALUE, got {text!r}")
    return clean_str(group), clean_str(value)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve option defaults and price a product configuration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default configuration and price of a banjo
  python -m configurator.cli --key LEGACY35-LB-3

  # Pick options (applied in order, each followed by a settlement pass)
  python -m configurator.cli --key LEGACY35-LB-3 --select "Tone Ring=Bronze" --select "Engraving=Custom"

  # Neck page, output the full view as JSON
  python -m configurator.cli --variant neck --key NECK-LB3 --json

  # Custom builder with name block text
  python -m configurator.cli --variant custom --select "Name Block=Custom Text" --text "Name Block=Lemon"

  # List the visible models on a variant's product sheet, grouped by series
  python -m configurator.cli --variant neck --list-products --sort price --descending

  # Only one series
  python -m configurator.cli --list-products --prefix LEGACY35
        """,
    )

    parser.add_argument(
        "--variant",
        choices=list(PAGE_VARIANTS.keys()),
        default="banjo",
        help="Page variant (default: banjo)",
    )
    parser.add_argument(
        "--key",
        help="Model key (default: the variant's default key)",
    )
    parser.add_argument(
        "--data-dir",
        default=DATA_DIR,
        help=f"Directory of sheet CSV exports (default: {DATA_DIR})",
    )
    parser.add_argument(
        "--select",
        action="append",
        type=parse_assignment,
        default=[],
        metavar="GROUP=OPTION",
        help="Choose an option; may be repeated",
    )
    parser.add_argument(
        "--text",
        action="append",
        type=parse_assignment,
        default=[],
        metavar="GROUP=TEXT",
        help="Custom text for a group whose selected option takes text",
    )
    parser.add_argument(
        "--max-passes",
        type=int,
        default=SETTLE_MAX_PASSES,
        help=f"Settlement passes per change (default: {SETTLE_MAX_PASSES})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the page view as JSON",
    )
    parser.add_argument(
        "--list-products",
        action="store_true",
        help="List the visible models on the variant's product sheet and exit",
    )
    parser.add_argument(
        "--sort",
        choices=["name", "price"],
        help="Listing order (default: name for necks, price otherwise)",
    )
    parser.add_argument(
        "--descending",
        action="store_true",
        help="Reverse the listing order",
    )
    parser.add_argument(
        "--prefix",
        help="Only list models whose key starts with PREFIX- (e.g. LEGACY35)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    return parser.parse_args(argv)


def _print_summary(page: ProductPage) -> None:
    view = page.view()
    header = view["header"]
    price = view["price"]

    print(f"\n{'='*50}")
    print(f"{header['series_text']}")
    print(f"{header['title']}")
    print(f"{'='*50}")

    print("\nOptions:")
    for block in view["options"]:
        print(f"  {block['label']}: {block['selected']}")
        for option in block["options"]:
            marker = "*" if option["selected"] else " "
            print(f"    {marker} {option['label']}")
        text = block["text_input"]
        if text and text["shown"] and text["value"]:
            print(f"    text: {text['value']}")

    print(f"\n{price['base_display']}")
    if price["sale"] is not None:
        label = price["sale_label"] or "Sale"
        print(f"Regular: {price['regular_display']}")
        print(f"{label}: {format_usd(price['sale'])}")
    else:
        print(f"Total: {price['display']}")
    print()


def _print_listing(variant: str, series: List[Dict[str, Any]]) -> None:
    print(f"Products on {PAGE_VARIANTS[variant]['sheets']['products']}:")
    for group in series:
        print(f"\n{group['series'] or 'Other'}")
        for card in group["products"]:
            price = card["price_text"]
            if card["sale_text"]:
                label = card["sale_label"] or "Sale"
                price = f"{price} ({label}: {card['sale_text']})"
            print(f"  {card['key']:<20} {card['title']:<24} {price}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING, log_to_file=False)

    source = CsvSheetSource(args.data_dir)

    if args.list_products:
        try:
            series = list_series(source, args.variant, args.prefix, args.sort, args.descending)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if args.json:
            print(json.dumps(series, indent=2, ensure_ascii=False))
        else:
            _print_listing(args.variant, series)
        return 0

    page = ProductPage(args.variant, source=source, key=args.key, max_passes=args.max_passes)
    if not page.load():
        print(f"{page.title()}: {page.error}", file=sys.stderr)
        return 1

    for group, option_name in args.select:
        if not page.select(group, option_name):
            print(f"Warning: '{option_name}' is not available for '{group}'", file=sys.stderr)
    for group, text in args.text:
        if not page.set_custom_text(group, text):
            print(f"Warning: '{group}' does not take custom text", file=sys.stderr)

    if args.json:
        print(json.dumps(page.view(), indent=2, ensure_ascii=False))
    else:
        _print_summary(page)
    return 0


if __name__ == "__main__":
    sys.exit(main())
