from __future__ import annotations

import pytest

from thali.db.inventory import (
    create_inventory_item,
    delete_inventory_item,
    get_inventory_item,
    list_inventory,
    list_low_stock,
    update_inventory_item,
)
from thali.errors import DuplicateKey, NotFoundError


def test_inventory_starts_empty_and_lists_by_category():
    assert list_inventory() == []

    create_inventory_item(name="Tomato", quantity=500, unit="g", category="vegetables")
    create_inventory_item(name="Basmati Rice", quantity=1, unit="kg", category="grains")
    create_inventory_item(name="Onion", quantity=2, unit="kg", category="vegetables")

    assert [item.name for item in list_inventory()] == ["Basmati Rice", "Onion", "Tomato"]


def test_duplicate_names_are_rejected_case_insensitively():
    create_inventory_item(name="Paneer", quantity=200, unit="g")

    with pytest.raises(DuplicateKey):
        create_inventory_item(name="  PANEER ", quantity=100, unit="g")


def test_update_clamps_quantity_and_clears_threshold():
    item = create_inventory_item(name="Milk", quantity=1, unit="l", low_stock_at=0.5)

    updated = update_inventory_item(item.id, quantity=-3)
    assert updated.quantity == 0
    assert updated.low_stock_at == 0.5

    cleared = update_inventory_item(item.id, low_stock_at=None)
    assert cleared.low_stock_at is None


def test_rename_onto_existing_item_is_rejected():
    create_inventory_item(name="Curd", quantity=400, unit="g")
    other = create_inventory_item(name="Dahi", quantity=200, unit="g")

    with pytest.raises(DuplicateKey):
        update_inventory_item(other.id, name="curd")


def test_low_stock_lists_items_at_or_below_threshold():
    create_inventory_item(name="Ghee", quantity=100, unit="g", low_stock_at=100)
    create_inventory_item(name="Atta", quantity=5, unit="kg", low_stock_at=1)
    create_inventory_item(name="Salt", quantity=1, unit="kg")

    assert [item.name for item in list_low_stock()] == ["Ghee"]


def test_delete_inventory_item():
    item = create_inventory_item(name="Poha", quantity=500, unit="g")

    delete_inventory_item(item.id)

    assert get_inventory_item(item.id) is None
    with pytest.raises(NotFoundError):
        delete_inventory_item(item.id)
