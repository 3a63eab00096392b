"""Grocery list entities: items of a generated list and the saved-list history record."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

from mealsync.utilities.errors import MalformedRecord


@dataclass
class GroceryItem:
    category: str
    item: str
    quantity: str = ""
    checked: bool = False

    @staticmethod
    def from_dict(data: Any) -> "GroceryItem":
        if not isinstance(data, dict) or not data.get("item"):
            raise MalformedRecord(f"Bad grocery item: {data!r}")
        return GroceryItem(
            category=str(data.get("category") or ""),
            item=str(data["item"]),
            quantity=str(data.get("quantity") or ""),
            checked=bool(data.get("checked", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "item": self.item,
                "quantity": self.quantity, "checked": self.checked}


@dataclass
class SavedGroceryList:
    id: str
    name: str
    items: List[GroceryItem] = field(default_factory=list)
    date_range: str = ""
    created_at: str = ""

    @staticmethod
    def from_dict(data: Any) -> "SavedGroceryList":
        try:
            return SavedGroceryList(
                id=str(data["id"]),
                name=str(data.get("name") or ""),
                items=[GroceryItem.from_dict(i) for i in (data.get("items") or [])],
                date_range=str(data.get("dateRange") or ""),
                created_at=str(data.get("createdAt") or ""),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise MalformedRecord(f"Bad saved grocery list: {e}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "items": [i.to_dict() for i in self.items],
            "dateRange": self.date_range,
            "createdAt": self.created_at,
        }
