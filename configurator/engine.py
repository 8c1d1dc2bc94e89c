"""Option dependency resolution.

The engine owns one page view's catalog and selection. Option groups are
split once into providers (no option depends on anything) and dependents
(at least one option is only valid while another group holds a given
value). After every change a settlement pass prunes dependents whose
choice is no longer valid and re-defaults them, so the selection always
references visible, dependency-satisfied options.

Nothing here raises on inconsistent data: invalid entries are dropped or
replaced by a default.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from configurator.canon import canon, clean_str
from configurator.config import CUSTOM_TEXT_MAX_LENGTH, SETTLE_MAX_PASSES, SETTLE_PASS_LIMIT
from configurator.logging_config import get_logger, log_engine_event
from configurator.models import Catalog, Option
from configurator.pricing import PriceQuote, quote_price

__all__ = [
    "ResolutionEngine",
    "classify_groups",
    "choose_default",
    "dependency_satisfied",
]

logger = get_logger("engine")


def classify_groups(groups: Mapping[str, Sequence[Option]]) -> Tuple[List[str], List[str]]:
    """Split group keys into (providers, dependents), keeping catalog order."""
    providers: List[str] = []
    dependents: List[str] = []
    for group_key, options in groups.items():
        if any(o.has_dependency for o in options):
            dependents.append(group_key)
        else:
            providers.append(group_key)
    return providers, dependents


def dependency_satisfied(option: Option, selection: Mapping[str, str]) -> bool:
    """True if the option has no dependency or its required value is selected.

    Both sides are canonicalized, so "Bronze", "bronze" and " BRONZE " match.
    """
    if not option.has_dependency:
        return True
    selected = selection.get(option.dep_group)
    if not selected:
        return False
    return canon(selected) == canon(option.dep_value)


def choose_default(valid: Sequence[Option], current: Optional[str] = None) -> Optional[str]:
    """Pick the option name a group should hold.

    Keeps ``current`` if it is still among ``valid``; otherwise the first
    option flagged default; otherwise the first option in sort order.
    Returns None when nothing is valid.
    """
    if not valid:
        return None
    if current and any(o.name == current for o in valid):
        return current
    for option in valid:
        if option.is_default:
            return option.name
    return valid[0].name


class ResolutionEngine:
    """Selection state and settlement for one product page view.

    Args:
        catalog: Normalized catalog.
        selection: Optional starting selection (group name or key -> option
            name). Entries for unknown groups are discarded.
        max_passes: Settlement passes per change. 1 runs prune+normalize
            exactly once; larger values repeat until the selection is stable.
    """

    def __init__(
        self,
        catalog: Catalog,
        selection: Optional[Mapping[str, str]] = None,
        max_passes: int = SETTLE_MAX_PASSES,
    ):
        self.catalog = catalog
        self.max_passes = max(1, min(int(max_passes), SETTLE_PASS_LIMIT))
        self.selection: Dict[str, str] = {}
        self.custom_text: Dict[str, str] = {}
        self._seed(selection)

        self.providers, self.dependents = classify_groups(catalog.groups)
        self._drop_unknown_groups()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_dependent(self, group_key: str) -> bool:
        return group_key in self.dependents

    def visible_options(self, group_key: str) -> List[Option]:
        """Options to offer for a group: visible and dependency-satisfied."""
        return [
            o for o in self.catalog.groups.get(group_key, [])
            if o.visible and dependency_satisfied(o, self.selection)
        ]

    def ordered_groups(self) -> List[str]:
        """Render order: providers first, then dependents."""
        return self.providers + self.dependents

    def selected_option(self, group_key: str) -> Optional[Option]:
        name = self.selection.get(group_key)
        if name is None:
            return None
        return self.catalog.find_option(group_key, name)

    def quote(self) -> PriceQuote:
        return quote_price(self.catalog.product, self.selection, self.catalog.groups)

    def notification_selections(self) -> Dict[str, str]:
        """Display group name -> chosen option, for an outbound summary."""
        selections: Dict[str, str] = {}
        for group_key, option_name in self.selection.items():
            label = self.catalog.display_name(group_key)
            selections[label] = option_name
            text = self.custom_text.get(group_key)
            if text:
                selections[f"{label} (Custom Text)"] = text
        return selections

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def establish_provider_defaults(self) -> None:
        """Give every provider group a valid choice, keeping valid ones."""
        for group_key in self.providers:
            visible = [o for o in self.catalog.groups[group_key] if o.visible]
            if not visible:
                self.selection.pop(group_key, None)
                continue
            choice = choose_default(visible, self.selection.get(group_key))
            if choice:
                self.selection[group_key] = choice

    def prune_invalid_dependents(self) -> None:
        """Drop dependent groups that have no valid option left."""
        for group_key in self.dependents:
            if not self.visible_options(group_key):
                self.selection.pop(group_key, None)

    def normalize_dependents(self) -> None:
        """Re-default dependent groups against their valid options."""
        for group_key in self.dependents:
            choice = choose_default(self.visible_options(group_key), self.selection.get(group_key))
            if choice:
                self.selection[group_key] = choice
            else:
                self.selection.pop(group_key, None)

    def settle(self) -> bool:
        """Bring the selection back to a consistent state.

        Returns:
            True if the selection changed.
        """
        before = dict(self.selection)
        passes = 0
        for passes in range(1, self.max_passes + 1):
            snapshot = dict(self.selection)
            self.prune_invalid_dependents()
            self.normalize_dependents()
            if self.selection == snapshot:
                break
        self._drop_stale_custom_text()

        changed = self.selection != before
        log_engine_event("settled", {
            "model_id": self.catalog.product.model_id,
            "passes": passes,
            "changed": changed,
            "selection": dict(self.selection),
        }, level=logging.DEBUG, logger_name="engine")
        return changed

    def initialize(self) -> "ResolutionEngine":
        """Establish provider defaults and settle dependents."""
        self.establish_provider_defaults()
        self.settle()
        return self

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------

    def select(self, group: str, option_name: str) -> bool:
        """Apply a user choice and settle.

        Choices for unknown groups, or of options not currently offered,
        are ignored.

        Returns:
            True if the choice was applied.
        """
        group_key = canon(group)
        name = clean_str(option_name)
        if group_key not in self.catalog.groups:
            logger.warning(f"Ignoring selection for unknown group {group!r}")
            return False
        if not any(o.name == name for o in self.visible_options(group_key)):
            logger.warning(f"Ignoring unavailable option {name!r} for group {group!r}")
            return False

        previous = self.selection.get(group_key)
        self.selection[group_key] = name
        self.settle()

        log_engine_event("selection_changed", {
            "model_id": self.catalog.product.model_id,
            "group": group_key,
            "previous": previous,
            "option": name,
        }, logger_name="engine")
        return True

    def set_custom_text(self, group: str, text: str) -> bool:
        """Store free text for a group whose selected option takes text.

        Text is trimmed to CUSTOM_TEXT_MAX_LENGTH; empty text clears it.

        Returns:
            True if the group's current option accepts text.
        """
        group_key = canon(group)
        option = self.selected_option(group_key)
        if option is None or not option.accepts_text:
            logger.warning(f"Group {group!r} does not take custom text right now")
            return False

        value = clean_str(text)[:CUSTOM_TEXT_MAX_LENGTH]
        if value:
            self.custom_text[group_key] = value
        else:
            self.custom_text.pop(group_key, None)
        return True

    def reload(self, catalog: Catalog, selection: Optional[Mapping[str, str]] = None) -> None:
        """Swap in a freshly loaded catalog, keeping still-valid choices.

        Entries in ``selection`` replace the current choice for their group
        before the new catalog is settled.
        """
        self.catalog = catalog
        self._seed(selection)
        self.providers, self.dependents = classify_groups(catalog.groups)
        self._drop_unknown_groups()
        self.establish_provider_defaults()
        self.settle()

    def _seed(self, selection: Optional[Mapping[str, str]]) -> None:
        for group, option_name in (selection or {}).items():
            self.selection[canon(group)] = clean_str(option_name)

    def _drop_unknown_groups(self) -> None:
        for group_key in list(self.selection):
            if group_key not in self.catalog.groups:
                del self.selection[group_key]
        for group_key in list(self.custom_text):
            if group_key not in self.catalog.groups:
                del self.custom_text[group_key]

    def _drop_stale_custom_text(self) -> None:
        for group_key in list(self.custom_text):
            option = self.selected_option(group_key)
            if option is None or not option.accepts_text:
                del self.custom_text[group_key]
