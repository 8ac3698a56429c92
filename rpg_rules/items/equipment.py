"""
Equipment and inventory transforms.

Each function takes a snapshot and returns a new one; nothing is mutated.
A rejected move raises InvalidChoiceError and leaves the input untouched.

Hand rules:
- Equipping a two-handed weapon in the main hand sends the off-hand item
  back to the inventory.
- Equipping an off-hand item while a two-handed weapon is held sends the
  main-hand weapon back; a versatile weapon held in both hands is simply
  returned to one-handed grip.
"""

import logging
from typing import Optional, Union

from rpg_rules.data_models import CharacterSnapshot, InventoryStack, Item, ItemSlot
from rpg_rules.errors import InvalidChoiceError
from rpg_rules.observability.run_log import get_run_log

logger = logging.getLogger(__name__)


# =============================================================================
# INVENTORY HELPERS
# =============================================================================


def _add_stack(inventory: tuple[InventoryStack, ...], item: Item, quantity: int = 1) -> tuple[InventoryStack, ...]:
    """Inventory with `quantity` of an item added; only stackable items merge."""
    if item.stackable:
        stacks = list(inventory)
        for index, stack in enumerate(stacks):
            if stack.item.item_key == item.item_key:
                stacks[index] = InventoryStack(stack.item, stack.quantity + quantity)
                return tuple(stacks)
        return inventory + (InventoryStack(item, quantity),)
    return inventory + tuple(InventoryStack(item, 1) for _ in range(quantity))


def _take_one(inventory: tuple[InventoryStack, ...], index: int) -> tuple[Item, tuple[InventoryStack, ...]]:
    """Remove one item from the stack at index."""
    stacks = list(inventory)
    stack = stacks[index]
    if stack.quantity > 1:
        stacks[index] = InventoryStack(stack.item, stack.quantity - 1)
    else:
        del stacks[index]
    return stack.item, tuple(stacks)


def _parse_slot(slot: Union[ItemSlot, str]) -> ItemSlot:
    try:
        return ItemSlot(slot)
    except ValueError:
        raise InvalidChoiceError([f"Unknown equipment slot: {slot!r}"]) from None


def _holds_two_handed(snapshot: CharacterSnapshot) -> bool:
    main = snapshot.equipped(ItemSlot.MAIN_HAND)
    return main is not None and main.is_two_handed


# =============================================================================
# TRANSFORMS
# =============================================================================


def add_to_inventory(snapshot: CharacterSnapshot, item: Item, quantity: int = 1) -> CharacterSnapshot:
    """
    Add items to the inventory.

    Stackable items merge into an existing stack of the same key; anything
    else gets one stack per item.

    Raises:
        InvalidChoiceError: If quantity is not positive
    """
    if quantity < 1:
        raise InvalidChoiceError([f"Quantity must be positive, got {quantity}"])
    result = snapshot.evolve(inventory=_add_stack(snapshot.inventory, item, quantity))
    get_run_log().log_transform(
        "add_to_inventory",
        snapshot.character_id,
        {"item": item.item_key, "quantity": quantity},
    )
    return result


def remove_from_inventory(snapshot: CharacterSnapshot, inventory_index: int, quantity: int = 1) -> CharacterSnapshot:
    """
    Remove a quantity from one inventory stack.

    Raises:
        InvalidChoiceError: If the index is out of range or the stack is too small
    """
    if not 0 <= inventory_index < len(snapshot.inventory):
        raise InvalidChoiceError([f"No inventory entry at index {inventory_index}"])
    stack = snapshot.inventory[inventory_index]
    if quantity < 1 or quantity > stack.quantity:
        raise InvalidChoiceError([f"Cannot remove {quantity} of {stack.item.name} (have {stack.quantity})"])

    stacks = list(snapshot.inventory)
    if quantity == stack.quantity:
        del stacks[inventory_index]
    else:
        stacks[inventory_index] = InventoryStack(stack.item, stack.quantity - quantity)
    get_run_log().log_transform(
        "remove_from_inventory",
        snapshot.character_id,
        {"item": stack.item.item_key, "quantity": quantity},
    )
    return snapshot.evolve(inventory=tuple(stacks))


def equip_item(
    snapshot: CharacterSnapshot,
    inventory_index: int,
    slot: Union[ItemSlot, str],
) -> CharacterSnapshot:
    """
    Move one item from the inventory into an equipment slot.

    The previous occupant of the slot returns to the inventory, as does any
    item displaced by the two-handed rules.

    Args:
        snapshot: Character to change
        inventory_index: Index of the inventory stack to take from
        slot: Target slot

    Returns:
        New snapshot with the item equipped

    Raises:
        InvalidChoiceError: Unknown slot, bad index, or an item that cannot go in the slot
    """
    target = _parse_slot(slot)
    if not 0 <= inventory_index < len(snapshot.inventory):
        raise InvalidChoiceError([f"No inventory entry at index {inventory_index}"])

    candidate = snapshot.inventory[inventory_index].item
    if target not in candidate.compatible_slots():
        raise InvalidChoiceError([f"{candidate.name} cannot be equipped in {target.value}"])

    item, inventory = _take_one(snapshot.inventory, inventory_index)
    equipment = dict(snapshot.equipment)
    two_handed_grip = snapshot.main_hand_two_handed
    displaced: list[Item] = []

    previous = equipment.get(target.value)
    if previous is not None:
        displaced.append(previous)
    equipment[target.value] = item

    if target == ItemSlot.MAIN_HAND:
        two_handed_grip = False
        off_hand = equipment.get(ItemSlot.OFF_HAND.value)
        if item.is_two_handed and off_hand is not None:
            displaced.append(off_hand)
            equipment[ItemSlot.OFF_HAND.value] = None
    elif target == ItemSlot.OFF_HAND:
        if _holds_two_handed(snapshot):
            displaced.append(equipment[ItemSlot.MAIN_HAND.value])
            equipment[ItemSlot.MAIN_HAND.value] = None
        two_handed_grip = False

    for returned in displaced:
        inventory = _add_stack(inventory, returned)

    logger.debug(f"{snapshot.name} equips {item.name} in {target.value}")
    get_run_log().log_transform(
        "equip",
        snapshot.character_id,
        {
            "item": item.item_key,
            "slot": target.value,
            "returned_to_inventory": [i.item_key for i in displaced],
        },
    )
    return snapshot.evolve(
        equipment=equipment,
        inventory=inventory,
        main_hand_two_handed=two_handed_grip,
    )


def unequip_item(snapshot: CharacterSnapshot, slot: Union[ItemSlot, str]) -> CharacterSnapshot:
    """
    Return the item in a slot to the inventory.

    Raises:
        InvalidChoiceError: If the slot is unknown or empty
    """
    target = _parse_slot(slot)
    item: Optional[Item] = snapshot.equipped(target)
    if item is None:
        raise InvalidChoiceError([f"Nothing equipped in {target.value}"])

    equipment = dict(snapshot.equipment)
    equipment[target.value] = None
    two_handed_grip = snapshot.main_hand_two_handed and target != ItemSlot.MAIN_HAND

    get_run_log().log_transform(
        "unequip",
        snapshot.character_id,
        {"item": item.item_key, "slot": target.value},
    )
    return snapshot.evolve(
        equipment=equipment,
        inventory=_add_stack(snapshot.inventory, item),
        main_hand_two_handed=two_handed_grip,
    )


def toggle_two_handed(snapshot: CharacterSnapshot) -> CharacterSnapshot:
    """
    Switch a versatile main-hand weapon between one- and two-handed grip.

    Taking the two-handed grip frees the off hand: its item returns to the
    inventory.

    Raises:
        InvalidChoiceError: If the main hand does not hold a versatile weapon
    """
    weapon = snapshot.equipped(ItemSlot.MAIN_HAND)
    if weapon is None or not weapon.is_versatile:
        raise InvalidChoiceError(["Only a versatile main-hand weapon can change grip"])

    grip = not snapshot.main_hand_two_handed
    equipment = dict(snapshot.equipment)
    inventory = snapshot.inventory
    off_hand = equipment.get(ItemSlot.OFF_HAND.value)
    if grip and off_hand is not None:
        equipment[ItemSlot.OFF_HAND.value] = None
        inventory = _add_stack(inventory, off_hand)

    get_run_log().log_transform(
        "toggle_two_handed",
        snapshot.character_id,
        {"item": weapon.item_key, "two_handed": grip},
    )
    return snapshot.evolve(equipment=equipment, inventory=inventory, main_hand_two_handed=grip)
