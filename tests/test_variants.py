"""Test the variant selection store."""
from pricing.config import PricingConfig
from pricing.variants import (
    VariantOption,
    VariantSelection,
    VariantSelectionState,
    resolve_total_quantity,
)

VARIANTS = [
    {"group": "Color", "items": [
        {"value": "Red", "price": 75, "image": {"url": "red.jpg"}},
        {"value": "Blue", "price": 0},
    ]},
    {"group": "Size", "items": [{"value": "L", "price": 20}]},
]


def _state(**config):
    state = VariantSelectionState(config=PricingConfig(**config))
    state.init_variants(VARIANTS, {"stockQuantity": 12})
    return state


def test_init_seeds_base_variant():
    state = _state()
    assert len(state.selections) == 1
    base = state.base_variant
    assert base.is_base_variant
    assert base.group == "Quantity"
    assert base.item.value == "unit"
    assert base.item.stock == 12
    assert state.total_quantity == 1


def test_init_seed_quantity_zero():
    state = _state(base_variant_seed_quantity=0)
    assert state.total_quantity == 0
    assert state.active_selections == []


def test_init_resets_previous_selections():
    state = _state()
    state.add_variant("Color", {"value": "Red"})
    state.set_quantity(5)
    state.init_variants(VARIANTS, {})
    assert len(state.selections) == 1
    assert state.total_quantity == 1


def test_add_variant_is_idempotent():
    state = _state()
    state.add_variant("Color", {"value": "Red"})
    state.add_variant("Color", {"value": "Red"})
    assert state.get_variant_quantity("Color", "Red") == 1
    assert len(state.selections) == 2


def test_add_variant_is_multi_select():
    state = _state()
    state.add_variant("Color", {"value": "Red"})
    state.add_variant("Color", {"value": "Blue"})
    assert state.get_variant_quantity("Color", "Red") == 1
    assert state.get_variant_quantity("Color", "Blue") == 1


def test_add_variant_uses_catalog_price():
    state = _state()
    state.add_variant("Color", {"value": "Red", "price": 1})
    selection = state.active_selections[-1]
    assert selection.item.price == 75
    assert selection.item.image == {"url": "red.jpg"}


def test_add_variant_revives_zero_record():
    state = _state()
    state.add_variant("Size", {"value": "L"})
    state.update_variant_quantity("Size", "L", 0)
    state.add_variant("Size", {"value": "L"})
    assert state.get_variant_quantity("Size", "L") == 1


def test_unknown_variants_are_ignored():
    state = _state()
    state.add_variant("Color", {"value": "Green"})
    state.add_variant("Material", {"value": "Wool"})
    state.add_variant("Color", {"price": 10})
    state.update_variant_quantity("Color", "Green", 3)
    state.remove_variant("Color", "Green")
    assert len(state.selections) == 1


def test_base_group_is_reserved():
    state = _state()
    state.add_variant("Quantity", {"value": "pack"})
    assert len(state.selections) == 1


def test_base_group_add_does_not_revive_zeroed_base():
    state = _state()
    state.remove_variant("Quantity", "unit")
    state.add_variant("Quantity", {"value": "unit"})
    assert state.total_quantity == 0
    state.toggle_variant("Quantity", {"value": "unit"})
    assert state.total_quantity == 0

    state.set_quantity(2)
    state.toggle_variant("Quantity", {"value": "unit"})
    assert state.total_quantity == 2


def test_any_option_accepted_without_catalog():
    state = VariantSelectionState()
    state.init_variants(None, None)
    state.add_variant("Flavor", {"value": "Mint", "price": 5})
    assert state.get_variant_quantity("Flavor", "Mint") == 1
    assert state.base_variant.item.stock is None


def test_toggle_keeps_record():
    state = _state()
    state.toggle_variant("Color", {"value": "Red"})
    assert state.get_variant_quantity("Color", "Red") == 1

    state.toggle_variant("Color", {"value": "Red"})
    assert state.get_variant_quantity("Color", "Red") == 0
    assert len(state.selections) == 2
    assert len(state.active_selections) == 1

    state.toggle_variant("Color", {"value": "Red"})
    assert state.get_variant_quantity("Color", "Red") == 1


def test_update_quantity_clamps():
    state = _state()
    state.add_variant("Color", {"value": "Red"})
    state.update_variant_quantity("Color", "Red", -4)
    assert state.get_variant_quantity("Color", "Red") == 0
    state.update_variant_quantity("Color", "Red", "abc")
    assert state.get_variant_quantity("Color", "Red") == 0
    state.update_variant_quantity("Color", "Red", 3)
    assert state.get_variant_quantity("Color", "Red") == 3


def test_variant_quantity_does_not_change_order_quantity():
    state = _state()
    state.set_quantity(2)
    state.add_variant("Color", {"value": "Red"})
    state.update_variant_quantity("Color", "Red", 7)
    assert state.total_quantity == 2


def test_remove_base_variant_zeroes_it():
    state = _state()
    state.remove_variant("Quantity", "unit")
    assert state.base_variant is not None
    assert state.total_quantity == 0


def test_remove_variant_drops_record():
    state = _state()
    state.add_variant("Color", {"value": "Red"})
    state.remove_variant("Color", "Red")
    assert state.get_variant_quantity("Color", "Red") == 0
    assert len(state.selections) == 1


def test_clear_variants():
    state = _state()
    state.clear_variants()
    assert state.selections == []
    assert state.base_variant is None
    assert state.total_quantity == 0


def test_total_quantity_without_base_sums_active():
    selections = [
        VariantSelection(group="Color", item=VariantOption("Red", 10), quantity=2),
        VariantSelection(group="Size", item=VariantOption("L", 5), quantity=0),
        VariantSelection(group="Size", item=VariantOption("M", 5), quantity=3),
    ]
    assert resolve_total_quantity(selections) == 5


def test_selection_to_dict():
    selection = VariantSelection(group="Color", item=VariantOption("Red", 75.0), quantity=2)
    assert selection.to_dict() == {
        "group": "Color",
        "item": {"value": "Red", "price": 75.0},
        "quantity": 2,
        "isBaseVariant": False,
    }
