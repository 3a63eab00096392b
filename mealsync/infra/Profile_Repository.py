"""Preference profile persistence plus the per-user active-profile pointer."""
import logging
import uuid
from typing import Any, Dict, List, Optional

from mealsync.domain.Preferences import PreferenceProfile, UserPreferences
from mealsync.domain.Session import Session
from mealsync.infra.dual_mode import DualModeRepository, LocalBackend, RemoteBackend
from mealsync.infra.paths import CURRENT_PROFILE_ID_KEY, PROFILES_KEY
from mealsync.infra.remote_store import eq
from mealsync.utilities.constants import DEFAULT_PREFERENCES, DEFAULT_PROFILE_NAME
from mealsync.utilities.errors import MalformedRecord, NoMatchingEntity, NotFound

logger = logging.getLogger(__name__)


# ---------- Row mapping helpers ----------

def _row_to_profile(row: Dict[str, Any]) -> PreferenceProfile:
    if not isinstance(row, dict) or "id" not in row:
        raise MalformedRecord(f"Bad preference_profiles row: {row!r}")
    return PreferenceProfile.from_dict({
        "id": row["id"],
        "name": row.get("name"),
        "dietaryType": row.get("dietary_type"),
        "allergies": row.get("allergies"),
        "dislikes": row.get("dislikes"),
        "breakfastPreferences": row.get("breakfast_preferences"),
        "lunchPreferences": row.get("lunch_preferences"),
        "dinnerPreferences": row.get("dinner_preferences"),
        "specialInstructions": row.get("special_instructions"),
        "pantryStaples": row.get("pantry_staples"),
        "isDefault": row.get("is_default"),
    })


def _profile_to_row(profile: PreferenceProfile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "name": profile.name,
        "dietary_type": profile.dietary_type,
        "allergies": profile.allergies,
        "dislikes": profile.dislikes,
        "breakfast_preferences": profile.breakfast_preferences,
        "lunch_preferences": profile.lunch_preferences,
        "dinner_preferences": profile.dinner_preferences,
        "special_instructions": profile.special_instructions,
        "pantry_staples": profile.pantry_staples,
        "is_default": profile.is_default,
    }


class LocalProfileStore(LocalBackend):
    def _load(self) -> List[PreferenceProfile]:
        raw = self.storage.get_item(PROFILES_KEY)
        if not isinstance(raw, list):
            return []
        profiles = []
        for entry in raw:
            try:
                profiles.append(PreferenceProfile.from_dict(entry))
            except MalformedRecord as e:
                logger.warning(f"Skipping unreadable local profile: {e}")
        return profiles

    def _store(self, profiles: List[PreferenceProfile]) -> None:
        self.storage.set_item(PROFILES_KEY, [p.to_dict() for p in profiles])

    async def list(self, session: Session) -> List[PreferenceProfile]:
        return self._load()

    async def get(self, session: Session, profile_id: str) -> PreferenceProfile:
        for profile in self._load():
            if profile.id == profile_id:
                return profile
        raise NoMatchingEntity(f"No profile with id '{profile_id}'")

    async def save(self, session: Session, profile: PreferenceProfile) -> PreferenceProfile:
        profiles = self._load()
        for i, existing in enumerate(profiles):
            if existing.id == profile.id:
                profiles[i] = profile
                break
        else:
            profiles.append(profile)
        self._store(profiles)
        return profile

    async def delete(self, session: Session, profile_id: str) -> None:
        profiles = self._load()
        remaining = [p for p in profiles if p.id != profile_id]
        if len(remaining) == len(profiles):
            raise NoMatchingEntity(f"No profile with id '{profile_id}'")
        self._store(remaining)


class RemoteProfileStore(RemoteBackend):
    TABLE = "preference_profiles"

    async def list(self, session: Session) -> List[PreferenceProfile]:
        rows = await self.store.select(session, self.TABLE, order="created_at.asc")
        return [_row_to_profile(r) for r in rows or []]

    async def get(self, session: Session, profile_id: str) -> PreferenceProfile:
        try:
            row = await self.store.select(session, self.TABLE, filters=[("id", eq(profile_id))], single=True)
        except NotFound:
            raise NoMatchingEntity(f"No profile with id '{profile_id}'")
        return _row_to_profile(row)

    async def save(self, session: Session, profile: PreferenceProfile) -> PreferenceProfile:
        rows = await self.store.upsert(session, self.TABLE, _profile_to_row(profile), on_conflict="id")
        if not rows:
            raise MalformedRecord("Remote store returned no row for saved profile")
        return _row_to_profile(rows[0])

    async def delete(self, session: Session, profile_id: str) -> None:
        rows = await self.store.delete(session, self.TABLE, filters=[("id", eq(profile_id))])
        if not rows:
            raise NoMatchingEntity(f"No profile with id '{profile_id}'")


class ProfileRepository(DualModeRepository):
    def __init__(self, storage, remote_store, resolver):
        super().__init__(LocalProfileStore(storage), RemoteProfileStore(remote_store), resolver)
        self.storage = storage

    async def list(self, session: Session) -> List[PreferenceProfile]:
        return await self.backend(session).list(session)

    async def get(self, session: Session, profile_id: str) -> PreferenceProfile:
        return await self.backend(session).get(session, profile_id)

    async def save(self, session: Session, profile: PreferenceProfile) -> PreferenceProfile:
        if not profile.id:
            raise MalformedRecord("Profile id is required")
        return await self.backend(session).save(session, profile)

    async def delete(self, session: Session, profile_id: str) -> None:
        await self.backend(session).delete(session, profile_id)
        if self._pointers().get(session.user_id) == profile_id:
            self._write_pointer(session.user_id, None)

    async def create_default(self, session: Session) -> PreferenceProfile:
        default = PreferenceProfile.from_preferences(
            str(uuid.uuid4()), DEFAULT_PROFILE_NAME, UserPreferences.from_dict(DEFAULT_PREFERENCES),
            is_default=True,
        )
        saved = await self.save(session, default)
        self.set_active_id(session, saved.id)
        logger.info(f"Created default preference profile {saved.id}")
        return saved

    async def ensure_default(self, session: Session) -> List[PreferenceProfile]:
        """Profiles for the session, creating the default one when there are none."""
        profiles = await self.list(session)
        if profiles:
            return profiles
        return [await self.create_default(session)]

    # Active-profile pointer: device-local, never synced, one per user id

    def _pointers(self) -> Dict[str, str]:
        raw = self.storage.get_item(CURRENT_PROFILE_ID_KEY)
        if not isinstance(raw, dict):
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str) and v}

    def _write_pointer(self, user_id: str, profile_id: Optional[str]) -> None:
        pointers = self._pointers()
        if profile_id:
            pointers[user_id] = profile_id
        else:
            pointers.pop(user_id, None)
        self.storage.set_item(CURRENT_PROFILE_ID_KEY, pointers)

    def get_active_id(self, session: Session) -> Optional[str]:
        """The session's explicit choice, else the pointer stored for its user."""
        if session.active_profile_id:
            return session.active_profile_id
        return self._pointers().get(session.user_id)

    def set_active_id(self, session: Session, profile_id: str) -> None:
        self._write_pointer(session.user_id, profile_id)
