"""Preference domain entities: UserPreferences value object and named PreferenceProfile."""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List

from mealsync.utilities.errors import MalformedRecord

# snake_case attribute -> camelCase JSON key
_CAMEL = {
    "dietary_type": "dietaryType",
    "allergies": "allergies",
    "dislikes": "dislikes",
    "breakfast_preferences": "breakfastPreferences",
    "lunch_preferences": "lunchPreferences",
    "dinner_preferences": "dinnerPreferences",
    "special_instructions": "specialInstructions",
    "pantry_staples": "pantryStaples",
}


def _string_list(value: Any, name: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MalformedRecord(f"Field '{name}' must be a list of strings")
    return list(value)


def _string(value: Any, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecord(f"Field '{name}' must be a string")
    return value


@dataclass
class UserPreferences:
    dietary_type: str = ""
    allergies: List[str] = field(default_factory=list)
    dislikes: List[str] = field(default_factory=list)
    breakfast_preferences: List[str] = field(default_factory=list)
    lunch_preferences: List[str] = field(default_factory=list)
    dinner_preferences: List[str] = field(default_factory=list)
    special_instructions: str = ""
    pantry_staples: List[str] = field(default_factory=list)

    @classmethod
    def _values_from(cls, data: Dict[str, Any], key_of) -> Dict[str, Any]:
        values = {}
        for f in fields(UserPreferences):
            raw = data.get(key_of(f.name))
            if f.name in ("dietary_type", "special_instructions"):
                values[f.name] = _string(raw, f.name)
            else:
                values[f.name] = _string_list(raw, f.name)
        return values

    @classmethod
    def from_dict(cls, data: Any) -> "UserPreferences":
        """Build from the camelCase JSON shape used in local storage."""
        if not isinstance(data, dict):
            raise MalformedRecord("Preferences must be an object")
        return cls(**cls._values_from(data, _CAMEL.get))

    def to_dict(self) -> Dict[str, Any]:
        return {_CAMEL[f.name]: getattr(self, f.name) for f in fields(UserPreferences)}


@dataclass
class PreferenceProfile(UserPreferences):
    id: str = ""
    name: str = ""
    is_default: bool = False

    @property
    def preferences(self) -> UserPreferences:
        return UserPreferences(**{f.name: getattr(self, f.name) for f in fields(UserPreferences)})

    @classmethod
    def from_dict(cls, data: Any) -> "PreferenceProfile":
        if not isinstance(data, dict):
            raise MalformedRecord("Profile must be an object")
        profile_id = _string(data.get("id"), "id")
        if not profile_id:
            raise MalformedRecord("Profile is missing an id")
        return cls(
            id=profile_id,
            name=_string(data.get("name"), "name"),
            is_default=data.get("isDefault") is True,
            **cls._values_from(data, _CAMEL.get),
        )

    @classmethod
    def from_preferences(cls, profile_id: str, name: str, prefs: UserPreferences,
                         is_default: bool = False) -> "PreferenceProfile":
        return cls(id=profile_id, name=name, is_default=is_default,
                   **{f.name: getattr(prefs, f.name) for f in fields(UserPreferences)})

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "name": self.name}
        data.update(super().to_dict())
        data["isDefault"] = self.is_default
        return data
