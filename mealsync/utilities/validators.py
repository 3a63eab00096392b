"""
Input validation schemas using Pydantic for request bodies.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Literal, Optional

from mealsync.domain.Feedback import Feedback
from mealsync.domain.GroceryList import GroceryItem
from mealsync.domain.Plan import DayPlan, WeeklyPlan
from mealsync.domain.Preferences import PreferenceProfile
from mealsync.utilities.constants import MEAL_SLOTS, PLAN_LENGTH_DAYS


class DayPlanInput(BaseModel):
    """One day of meals; ``day`` is a weekday label in a draft, ignored for calendar writes."""
    day: str = ""
    breakfast: str = ""
    lunch: str = ""
    dinner: str = ""

    @field_validator('day', 'breakfast', 'lunch', 'dinner', mode='before')
    @classmethod
    def strip_whitespace(cls, v):
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_domain(self) -> DayPlan:
        return DayPlan(day=self.day, breakfast=self.breakfast, lunch=self.lunch, dinner=self.dinner)


class WeeklyPlanInput(BaseModel):
    days: List[DayPlanInput]
    profile_id: Optional[str] = None

    @field_validator('days')
    @classmethod
    def validate_length(cls, v):
        """A draft week always has exactly seven days."""
        if len(v) != PLAN_LENGTH_DAYS:
            raise ValueError(f'Plan must have exactly {PLAN_LENGTH_DAYS} days, got {len(v)}')
        return v

    def to_domain(self) -> WeeklyPlan:
        return WeeklyPlan(days=[d.to_domain() for d in self.days])


class ArchiveRequest(BaseModel):
    """Archive a plan into the calendar; the stored draft is used when ``plan`` is omitted."""
    start_date: str = Field(..., min_length=1)
    overwrite: bool = True
    plan: Optional[WeeklyPlanInput] = None


class LoadWeekRequest(BaseModel):
    """Any date inside the calendar week to load; ``save`` replaces the stored draft."""
    date: str = Field(..., min_length=1)
    save: bool = True


class MealTransferRequest(BaseModel):
    source_date: str
    source_slot: str
    target_date: str
    target_slot: str
    move: bool = False

    @field_validator('source_slot', 'target_slot')
    @classmethod
    def validate_slot(cls, v):
        slot = v.strip().lower()
        if slot not in MEAL_SLOTS:
            raise ValueError(f"Unknown meal slot '{v}'")
        return slot


class GroceryItemInput(BaseModel):
    category: str = ""
    item: str = Field(..., min_length=1, max_length=200)
    quantity: str = ""
    checked: bool = False

    def to_domain(self) -> GroceryItem:
        return GroceryItem(category=self.category, item=self.item.strip(),
                           quantity=self.quantity, checked=self.checked)


class GroceryHistoryInput(BaseModel):
    items: List[GroceryItemInput]
    date_range: str = ""
    name: Optional[str] = Field(None, max_length=200)

    @field_validator('items')
    @classmethod
    def validate_items(cls, v):
        if not v:
            raise ValueError('Grocery list must have at least one item')
        return v


class RowChangePayload(BaseModel):
    """Database webhook body sent by the remote store on row changes."""
    type: Literal['INSERT', 'UPDATE', 'DELETE']
    table: str
    record: Optional[Dict[str, Any]] = None
    old_record: Optional[Dict[str, Any]] = None

    def owner(self) -> Optional[str]:
        for row in (self.record, self.old_record):
            if row and row.get('user_id'):
                return str(row['user_id'])
        return None

    def date(self) -> Optional[str]:
        for row in (self.record, self.old_record):
            if row and row.get('date'):
                return str(row['date'])
        return None


class ProfileInput(BaseModel):
    """Preference profile body; lists use the same camelCase keys as stored profiles."""
    name: str = Field(..., min_length=1, max_length=100)
    dietaryType: str = ""
    allergies: List[str] = Field(default_factory=list)
    dislikes: List[str] = Field(default_factory=list)
    breakfastPreferences: List[str] = Field(default_factory=list)
    lunchPreferences: List[str] = Field(default_factory=list)
    dinnerPreferences: List[str] = Field(default_factory=list)
    specialInstructions: str = ""
    pantryStaples: List[str] = Field(default_factory=list)

    @field_validator('allergies', 'dislikes', 'breakfastPreferences', 'lunchPreferences',
                     'dinnerPreferences', 'pantryStaples')
    @classmethod
    def drop_blank_entries(cls, v):
        return [item.strip() for item in v if item and item.strip()]

    def to_domain(self, profile_id: str) -> PreferenceProfile:
        data = self.model_dump()
        data["id"] = profile_id
        return PreferenceProfile.from_dict(data)


class SettingsInput(BaseModel):
    """Partial update of the synced settings; omitted fields stay as they are."""
    cook_name: Optional[str] = Field(None, max_length=100)
    cook_contact_number: Optional[str] = Field(None, max_length=30)


class ApiKeyInput(BaseModel):
    api_key: str = ""


class FeedbackInput(BaseModel):
    """Star rating plus free text; ``anonymous`` submits without an owner."""
    rating: int = Field(..., ge=1, le=5)
    what_works: str = Field("", max_length=2000)
    what_needs_improvement: str = Field("", max_length=2000)
    suggestions: str = Field("", max_length=2000)
    anonymous: bool = False

    @field_validator('what_works', 'what_needs_improvement', 'suggestions', mode='before')
    @classmethod
    def strip_whitespace(cls, v):
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_domain(self) -> Feedback:
        return Feedback(rating=self.rating, what_works=self.what_works,
                        what_needs_improvement=self.what_needs_improvement,
                        suggestions=self.suggestions)
