from typing import Final

ISO_DATE_FORMAT: Final[str] = "%Y-%m-%d"
LOCAL_USER_ID: Final[str] = "local"
ANON_USER_ID: Final[str] = "anon"
MEAL_SLOTS: Final[tuple[str, ...]] = ("breakfast", "lunch", "dinner")
WEEKDAYS: Final[tuple[str, ...]] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
)
PLAN_LENGTH_DAYS: Final[int] = 7
RECENT_MEALS_CAP: Final[int] = 21  # ~3 weeks of 3 meals/day
MEAL_HISTORY_DEFAULT_LIMIT: Final[int] = 100
LOCAL_LIST_PREFIX: Final[str] = "local_"

DEFAULT_PROFILE_NAME: Final[str] = "Default Preferences"
DEFAULT_PREFERENCES: Final[dict] = {
    "dietaryType": "Vegetarian (with Eggs)",
    "allergies": [],
    "dislikes": [
        "Gawar (Cluster Beans)",
        "Repeat of same meal within 2 weeks",
    ],
    "breakfastPreferences": [
        "Idli with Sambar & Coconut Chutney",
        "Besan Cheela with Grated Paneer",
        "Poha (Paneer Poha)",
        "Vegetable Sandwich with Cheese",
    ],
    "lunchPreferences": [
        "Dal, Rice & Seasonal Sabzi",
        "Rajma Chawal",
    ],
    "dinnerPreferences": [
        "Roti with Paneer Sabzi",
        "Khichdi with Curd",
    ],
    "specialInstructions": "",
    "pantryStaples": ["Rice", "Atta", "Dal", "Onion", "Tomato"],
}
