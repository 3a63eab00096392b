"""Settings persistence.

The API key is device-local in every mode: it is kept under its own local
storage key and never handed to the remote backend. Only the cook contact
fields are synced.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from mealsync.domain.Session import Session
from mealsync.domain.Settings import UserSettings
from mealsync.infra.dual_mode import DualModeRepository, LocalBackend, RemoteBackend
from mealsync.infra.paths import API_KEY_KEY, SETTINGS_KEY
from mealsync.utilities.errors import NotFound

logger = logging.getLogger(__name__)

# domain field -> local JSON key / remote column
_LOCAL_KEYS = {"cook_name": "cookName", "cook_contact_number": "cookContactNumber"}
_COLUMNS = {"cook_name": "cook_name", "cook_contact_number": "cook_whatsapp_number"}


def _text(value) -> str:
    return value if isinstance(value, str) else ""


class LocalSettingsStore(LocalBackend):
    async def get_synced(self, session: Session) -> Dict[str, str]:
        blob = self.storage.get_item(SETTINGS_KEY)
        if not isinstance(blob, dict):
            blob = {}
        return {name: _text(blob.get(key)) for name, key in _LOCAL_KEYS.items()}

    async def save_synced(self, session: Session, changes: Dict[str, str]) -> None:
        blob = self.storage.get_item(SETTINGS_KEY)
        if not isinstance(blob, dict):
            blob = {}
        for name, value in changes.items():
            blob[_LOCAL_KEYS[name]] = value
        self.storage.set_item(SETTINGS_KEY, blob)


class RemoteSettingsStore(RemoteBackend):
    TABLE = "user_settings"

    async def get_synced(self, session: Session) -> Dict[str, str]:
        try:
            row = await self.store.select(session, self.TABLE, columns=",".join(_COLUMNS.values()), single=True)
        except NotFound:
            row = {}
        return {name: _text((row or {}).get(column)) for name, column in _COLUMNS.items()}

    async def save_synced(self, session: Session, changes: Dict[str, str]) -> None:
        row = {"updated_at": datetime.now(timezone.utc).isoformat()}
        for name, value in changes.items():
            row[_COLUMNS[name]] = value
        await self.store.upsert(session, self.TABLE, row, on_conflict="user_id")


class SettingsRepository(DualModeRepository):
    def __init__(self, storage, remote_store, resolver):
        super().__init__(LocalSettingsStore(storage), RemoteSettingsStore(remote_store), resolver)
        self.storage = storage

    async def get(self, session: Session) -> UserSettings:
        synced = await self.backend(session).get_synced(session)
        return UserSettings(api_key_secret=self.get_api_key(), **synced)

    async def save(self, session: Session, cook_name: Optional[str] = None,
                   cook_contact_number: Optional[str] = None) -> None:
        """Partial update of the synced fields; ``None`` leaves a field untouched."""
        changes = {}
        if cook_name is not None:
            changes["cook_name"] = cook_name
        if cook_contact_number is not None:
            changes["cook_contact_number"] = cook_contact_number
        if not changes:
            return
        await self.backend(session).save_synced(session, changes)

    def get_api_key(self) -> str:
        return _text(self.storage.get_item(API_KEY_KEY))

    def set_api_key(self, key: str) -> None:
        self.storage.set_item(API_KEY_KEY, key or "")
        logger.info("API key updated in local storage")
