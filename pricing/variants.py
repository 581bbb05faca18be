"""Variant selection store.

Tracks which variant options (Color=Red, Size=L, ...) are selected for the
product on screen and at what quantity. A synthetic *base variant* is always
injected on ``init_variants`` so that a product without real variant groups
still has a quantity control.

Quantity semantics:

- The base-variant quantity is the order quantity. It drives the base-price
  line and the combo-tier lookup.
- Every other selection carries its own independent quantity, used only for
  its surcharge (``option.price * quantity``). It never adds to the order
  quantity.
- A selection at quantity 0 is kept as a record (so the UI can toggle it back
  cheaply) but is treated exactly like an absent one.

Add policy: ``add_variant`` is multi-select and idempotent. Adding a pair that
is already active does nothing; adding a pair whose record sits at 0 revives
it at quantity 1. Use ``update_variant_quantity`` to change a quantity and
``toggle_variant`` for on/off buttons.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from pricing.coercion import to_non_negative, to_quantity
from pricing.config import PricingConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Catalog shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VariantOption:
    """One selectable choice inside a variant group."""

    value: str
    price: float = 0.0
    image: dict[str, Any] | None = None
    stock: int | None = None

    @classmethod
    def coerce(cls, raw: "VariantOption | Mapping[str, Any] | None") -> "VariantOption | None":
        """Build an option from a catalog dict. Returns None without a value."""
        if isinstance(raw, VariantOption):
            return raw
        if not isinstance(raw, Mapping):
            return None
        value = raw.get("value")
        if value is None or value == "":
            return None
        image = raw.get("image")
        stock = raw.get("stock")
        return cls(
            value=str(value),
            price=to_non_negative(raw.get("price")),
            image=dict(image) if isinstance(image, Mapping) else None,
            stock=to_quantity(stock) if stock is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value, "price": self.price}
        if self.image is not None:
            data["image"] = self.image
        if self.stock is not None:
            data["stock"] = self.stock
        return data


@dataclass(frozen=True)
class VariantGroup:
    """A named collection of options, e.g. "Color"."""

    group: str
    items: tuple[VariantOption, ...] = ()

    @classmethod
    def coerce(cls, raw: "VariantGroup | Mapping[str, Any] | None") -> "VariantGroup | None":
        if isinstance(raw, VariantGroup):
            return raw
        if not isinstance(raw, Mapping) or not raw.get("group"):
            return None
        items = tuple(
            option
            for option in (VariantOption.coerce(item) for item in raw.get("items") or [])
            if option is not None
        )
        return cls(group=str(raw["group"]), items=items)

    def find(self, value: str) -> VariantOption | None:
        for option in self.items:
            if option.value == value:
                return option
        return None


@dataclass
class VariantSelection:
    """One active (group, option) pair with its quantity."""

    group: str
    item: VariantOption
    quantity: int = 1
    is_base_variant: bool = False

    @property
    def is_active(self) -> bool:
        return self.quantity > 0

    def matches(self, group: str, value: str) -> bool:
        return self.group == group and self.item.value == value

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group,
            "item": self.item.to_dict(),
            "quantity": self.quantity,
            "isBaseVariant": self.is_base_variant,
        }


def resolve_total_quantity(selections: Sequence[VariantSelection]) -> int:
    """Order quantity for a selection list.

    The base variant's quantity when one is present; otherwise the sum of
    the active selections' quantities.
    """
    for selection in selections:
        if selection.is_base_variant:
            return max(0, selection.quantity)
    return sum(s.quantity for s in selections if s.is_active)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

@dataclass
class VariantSelectionState:
    """Selection state for the product currently on screen.

    Owned by whoever renders the product (a page or a checkout session);
    there is no process-wide instance. Usage::

        state = VariantSelectionState()
        state.init_variants(product["variants"], product)
        state.add_variant("Color", {"value": "Red", "price": 75})
        state.update_variant_quantity("Color", "Red", 2)
        state.total_quantity  # base-variant quantity

    No operation raises: unknown (group, value) pairs are ignored and
    quantities are clamped to >= 0.
    """

    config: PricingConfig = field(default_factory=PricingConfig)
    groups: list[VariantGroup] = field(default_factory=list)
    selections: list[VariantSelection] = field(default_factory=list)

    # -- Lifecycle --

    def init_variants(
        self,
        variant_groups: Iterable[VariantGroup | Mapping[str, Any]] | None = None,
        product: Mapping[str, Any] | None = None,
    ) -> None:
        """Reset for a new product, seeding only the base variant."""
        self.groups = [
            group
            for group in (VariantGroup.coerce(raw) for raw in variant_groups or [])
            if group is not None
        ]
        self.selections = [self._make_base_variant(product)]

    def clear_variants(self) -> None:
        self.selections = []

    def _make_base_variant(self, product: Mapping[str, Any] | None) -> VariantSelection:
        stock = product.get("stockQuantity") if isinstance(product, Mapping) else None
        option = VariantOption(
            value=self.config.base_variant_value,
            price=0.0,
            stock=to_quantity(stock) if stock is not None else None,
        )
        return VariantSelection(
            group=self.config.base_variant_group,
            item=option,
            quantity=to_quantity(self.config.base_variant_seed_quantity),
            is_base_variant=True,
        )

    # -- Lookups --

    def _find(self, group: str, value: str) -> VariantSelection | None:
        for selection in self.selections:
            if selection.matches(group, value):
                return selection
        return None

    def _resolve_option(self, group: str, option: VariantOption) -> VariantOption | None:
        """Return the catalog's copy of an option, or None if it is unknown.

        Without a loaded catalog any option is accepted as given.
        """
        if not self.groups:
            return option
        for known in self.groups:
            if known.group == group:
                return known.find(option.value)
        return None

    def _is_reserved(self, group: str) -> bool:
        """The base group holds only the base variant; add and toggle skip it."""
        return group == self.config.base_variant_group

    def get_variant_quantity(self, group: str, value: str) -> int:
        selection = self._find(group, value)
        return selection.quantity if selection else 0

    # -- Mutations --

    def add_variant(self, group: str, option: VariantOption | Mapping[str, Any]) -> None:
        """Select ``option`` in ``group`` at quantity 1 (idempotent)."""
        if self._is_reserved(group):
            logger.debug("Ignoring add to reserved group %r", group)
            return
        coerced = VariantOption.coerce(option)
        if coerced is None:
            logger.debug("Ignoring malformed variant option for group %r", group)
            return

        existing = self._find(group, coerced.value)
        if existing is not None:
            if not existing.is_active:
                existing.quantity = 1
            return

        resolved = self._resolve_option(group, coerced)
        if resolved is None:
            logger.debug("Ignoring unknown variant %s=%s", group, coerced.value)
            return
        self.selections.append(VariantSelection(group=group, item=resolved, quantity=1))

    def toggle_variant(self, group: str, option: VariantOption | Mapping[str, Any]) -> None:
        """Switch a pair off (quantity 0, record kept) or on (quantity 1)."""
        if self._is_reserved(group):
            return
        coerced = VariantOption.coerce(option)
        if coerced is None:
            return
        existing = self._find(group, coerced.value)
        if existing is not None and existing.is_active:
            existing.quantity = 0
            return
        self.add_variant(group, coerced)

    def update_variant_quantity(self, group: str, value: str, new_quantity: Any) -> None:
        """Set the quantity of an existing pair; negatives clamp to 0."""
        selection = self._find(group, value)
        if selection is None:
            logger.debug("No selection %s=%s to update", group, value)
            return
        selection.quantity = to_quantity(new_quantity)

    def remove_variant(self, group: str, value: str) -> None:
        """Drop a selection. The base variant is zeroed, never removed."""
        selection = self._find(group, value)
        if selection is None:
            return
        if selection.is_base_variant:
            selection.quantity = 0
            return
        self.selections = [s for s in self.selections if s is not selection]

    # -- Derived --

    @property
    def base_variant(self) -> VariantSelection | None:
        for selection in self.selections:
            if selection.is_base_variant:
                return selection
        return None

    @property
    def active_selections(self) -> list[VariantSelection]:
        """Selections with quantity > 0, in selection order."""
        return [s for s in self.selections if s.is_active]

    @property
    def total_quantity(self) -> int:
        return resolve_total_quantity(self.selections)

    def set_quantity(self, quantity: Any) -> None:
        """Set the order quantity (the base variant's quantity)."""
        base = self.base_variant
        if base is not None:
            base.quantity = to_quantity(quantity)
