"""Meal history entry: one accepted meal on one date, optionally rated."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from mealsync.utilities.errors import MalformedRecord


class MealType(Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"

    @property
    def slot(self) -> str:
        return self.value.lower()


RATINGS = ("liked", "disliked")


@dataclass
class MealHistoryEntry:
    date: str
    type: MealType
    meal_name: str
    rating: Optional[str] = None

    def __post_init__(self):
        if self.rating is not None and self.rating not in RATINGS:
            raise MalformedRecord(f"Unknown rating '{self.rating}'")

    def to_dict(self) -> Dict[str, Any]:
        data = {"date": self.date, "type": self.type.value, "mealName": self.meal_name}
        if self.rating:
            data["rating"] = self.rating
        return data
