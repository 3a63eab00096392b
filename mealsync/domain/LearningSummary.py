"""MealLearningSummary: derived digest of recent calendar history, never persisted."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MealLearningSummary:
    accepted_breakfasts: List[str] = field(default_factory=list)
    accepted_lunches: List[str] = field(default_factory=list)
    accepted_dinners: List[str] = field(default_factory=list)
    recent_meals: List[str] = field(default_factory=list)
    total_meal_count: int = 0
    oldest_date: Optional[str] = None
    newest_date: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.total_meal_count == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "acceptedBreakfasts": list(self.accepted_breakfasts),
            "acceptedLunches": list(self.accepted_lunches),
            "acceptedDinners": list(self.accepted_dinners),
            "recentMeals": list(self.recent_meals),
            "totalMealCount": self.total_meal_count,
            "oldestDate": self.oldest_date,
            "newestDate": self.newest_date,
        }
