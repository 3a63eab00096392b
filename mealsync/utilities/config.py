"""Configuration management for mealsync."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Remote store (Supabase / PostgREST). Both must be set for online mode.
REMOTE_STORE_URL: Final[str] = os.getenv('REMOTE_STORE_URL', '').rstrip('/')
REMOTE_STORE_KEY: Final[str] = os.getenv('REMOTE_STORE_KEY', '')
REMOTE_TIMEOUT_SECONDS: Final[float] = float(os.getenv('REMOTE_TIMEOUT_SECONDS', '10'))

# Shared secret expected on database webhook calls
WEBHOOK_SECRET: Final[str] = os.getenv('WEBHOOK_SECRET', '')

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Learning / history
LEARNING_MONTHS_BACK: Final[int] = int(os.getenv('LEARNING_MONTHS_BACK', '3'))
GROCERY_HISTORY_LIMIT: Final[int] = int(os.getenv('GROCERY_HISTORY_LIMIT', '10'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))


def is_remote_configured() -> bool:
    """True when the deployment carries a remote store URL and key."""
    return bool(REMOTE_STORE_URL and REMOTE_STORE_KEY)
