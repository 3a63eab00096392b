from pathlib import Path

from mealsync.utilities.config import DATA_DIR

# Local storage keys: one JSON blob per entity (single source of truth)
SETTINGS_KEY = 'settings'
API_KEY_KEY = 'api_key'
PROFILES_KEY = 'profiles'
CURRENT_PROFILE_ID_KEY = 'current_profile_id'
PLAN_KEY = 'plan'
SCHEDULE_KEY = 'schedule'
GROCERY_HISTORY_KEY = 'grocery_history'


def blob_path(data_dir: Path, key: str) -> Path:
    return Path(data_dir) / f"{key}.json"


__all__ = ['DATA_DIR', 'blob_path', 'SETTINGS_KEY', 'API_KEY_KEY', 'PROFILES_KEY',
           'CURRENT_PROFILE_ID_KEY', 'PLAN_KEY', 'SCHEDULE_KEY', 'GROCERY_HISTORY_KEY']
