"""
Item catalog and equipment transforms.

This module provides:
- ItemCatalog: Loads item definitions from the JSON content files
- equip_item / unequip_item / toggle_two_handed: Equipment slot transforms
- add_to_inventory / remove_from_inventory: Inventory transforms
"""

from rpg_rules.items.equipment import (
    add_to_inventory,
    equip_item,
    remove_from_inventory,
    toggle_two_handed,
    unequip_item,
)
from rpg_rules.items.item_catalog import ItemCatalog

__all__ = [
    "ItemCatalog",
    "add_to_inventory",
    "equip_item",
    "remove_from_inventory",
    "toggle_two_handed",
    "unequip_item",
]
