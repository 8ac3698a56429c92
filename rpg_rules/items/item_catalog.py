"""
Item catalog loader.

Loads item definitions from the bundled content/items.json, or from an
override directory. The file groups items by category:

    {
        "_metadata": {"content_type": "items"},
        "categories": [
            {"category": "weapons", "items": [{"item_key": "longsword", ...}]},
            ...
        ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from rpg_rules.data_models import Item, ItemType

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"
ITEMS_FILE = "items.json"


class ItemCatalog:
    """
    Catalog of items loaded from JSON.

    Loading is lazy: the first lookup reads the file. Malformed entries are
    logged and skipped so one bad item never hides the rest.
    """

    def __init__(self, content_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the item catalog.

        Args:
            content_dir: Directory holding items.json (defaults to the bundled content)
        """
        self.content_dir = Path(content_dir) if content_dir else DEFAULT_CONTENT_DIR
        self._items: dict[str, Item] = {}
        self._categories: dict[str, list[str]] = {}
        self._loaded = False

    @property
    def items_file(self) -> Path:
        return self.content_dir / ITEMS_FILE

    def load(self) -> None:
        """Load the items file."""
        self._loaded = True
        if not self.items_file.exists():
            logger.warning(f"Items file not found: {self.items_file}")
            return

        try:
            with open(self.items_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading {self.items_file}: {e}")
            return

        for group in data.get("categories", []):
            category = group.get("category", "uncategorized")
            for entry in group.get("items", []):
                self._load_entry(category, entry)

        logger.info(f"Loaded {len(self._items)} items in {len(self._categories)} categories")

    def _load_entry(self, category: str, entry: dict) -> None:
        item_key = entry.get("item_key")
        if not item_key:
            logger.warning(f"Item without item_key in category {category!r}; skipping")
            return
        try:
            item = Item.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed item {item_key!r}: {e}; skipping")
            return

        if item_key in self._items:
            logger.warning(f"Duplicate item_key '{item_key}' - overwriting")
        self._items[item_key] = item
        self._categories.setdefault(category, []).append(item_key)

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def register(self, item: Item, category: str = "custom") -> None:
        """Add an item definition directly (tests, homebrew)."""
        self._ensure_loaded()
        self._items[item.item_key] = item
        self._categories.setdefault(category, []).append(item.item_key)

    def get(self, item_key: str) -> Optional[Item]:
        """
        Get an item by key.

        Args:
            item_key: The item identifier

        Returns:
            The Item or None if not in the catalog
        """
        self._ensure_loaded()
        return self._items.get(item_key)

    def get_by_category(self, category: str) -> list[Item]:
        self._ensure_loaded()
        return [self._items[key] for key in self._categories.get(category, []) if key in self._items]

    def search(
        self,
        name_contains: Optional[str] = None,
        item_type: Optional[ItemType] = None,
        has_property: Optional[str] = None,
    ) -> list[Item]:
        """
        Search for items matching criteria.

        Args:
            name_contains: Substring to match in item name (case-insensitive)
            item_type: Filter by item type
            has_property: Filter by property tag (e.g. "versatile")

        Returns:
            List of matching items
        """
        self._ensure_loaded()
        results = []
        for item in self._items.values():
            if name_contains and name_contains.lower() not in item.name.lower():
                continue
            if item_type and item.item_type != item_type:
                continue
            if has_property and not item.has_property(has_property):
                continue
            results.append(item)
        return results

    def all_items(self) -> list[Item]:
        self._ensure_loaded()
        return list(self._items.values())

    def list_categories(self) -> list[str]:
        self._ensure_loaded()
        return list(self._categories.keys())

    def __contains__(self, item_key: str) -> bool:
        self._ensure_loaded()
        return item_key in self._items

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._items)
