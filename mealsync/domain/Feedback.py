"""User feedback about the planner, stored remotely only."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict

from mealsync.utilities.errors import MalformedRecord


@dataclass
class Feedback:
    rating: int
    what_works: str = ""
    what_needs_improvement: str = ""
    suggestions: str = ""

    def __post_init__(self):
        if not 1 <= self.rating <= 5:
            raise MalformedRecord(f"Rating must be between 1 and 5, got {self.rating}")

    def to_row(self) -> Dict[str, Any]:
        return {
            "rating": self.rating,
            "what_works": self.what_works,
            "what_needs_improvement": self.what_needs_improvement,
            "suggestions": self.suggestions,
        }
