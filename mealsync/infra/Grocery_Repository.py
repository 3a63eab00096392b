"""Grocery list persistence: saved-list history and the ephemeral generated list."""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from mealsync.domain.GroceryList import GroceryItem, SavedGroceryList
from mealsync.domain.Session import Session
from mealsync.infra.dual_mode import DualModeRepository, LocalBackend, RemoteBackend
from mealsync.infra.paths import GROCERY_HISTORY_KEY
from mealsync.infra.remote_store import eq
from mealsync.utilities.config import GROCERY_HISTORY_LIMIT
from mealsync.utilities.constants import LOCAL_LIST_PREFIX
from mealsync.utilities.errors import MalformedRecord, NoMatchingEntity

logger = logging.getLogger(__name__)


def default_list_name(date_range: str) -> str:
    return f"Grocery List - {date_range}"


def _row_to_saved_list(row: Dict[str, Any]) -> SavedGroceryList:
    if not isinstance(row, dict):
        raise MalformedRecord(f"Bad grocery_list_history row: {row!r}")
    return SavedGroceryList.from_dict({
        "id": row.get("id"),
        "name": row.get("name"),
        "items": row.get("items"),
        "dateRange": row.get("date_range"),
        "createdAt": row.get("created_at"),
    })


class LocalGroceryStore(LocalBackend):
    """Ring buffer of the most recent saved lists, newest first."""

    def __init__(self, storage, limit: int = GROCERY_HISTORY_LIMIT):
        super().__init__(storage)
        self.limit = limit

    def _load(self) -> List[SavedGroceryList]:
        raw = self.storage.get_item(GROCERY_HISTORY_KEY)
        if not isinstance(raw, list):
            return []
        lists = []
        for entry in raw:
            try:
                lists.append(SavedGroceryList.from_dict(entry))
            except MalformedRecord as e:
                logger.warning(f"Skipping unreadable local grocery list: {e}")
        return lists

    def _store(self, lists: List[SavedGroceryList]) -> None:
        self.storage.set_item(GROCERY_HISTORY_KEY, [g.to_dict() for g in lists])

    async def history(self, session: Session) -> List[SavedGroceryList]:
        return self._load()

    async def save_to_history(self, session: Session, items: List[GroceryItem],
                              date_range: str, name: str) -> SavedGroceryList:
        lists = self._load()
        taken = {g.id for g in lists}
        stamp = int(time.time() * 1000)
        while f"{LOCAL_LIST_PREFIX}{stamp}" in taken:
            stamp += 1
        saved = SavedGroceryList(
            id=f"{LOCAL_LIST_PREFIX}{stamp}",
            name=name,
            items=list(items),
            date_range=date_range,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        lists.insert(0, saved)
        self._store(lists[: self.limit])
        return saved

    async def delete(self, session: Session, list_id: str) -> None:
        lists = self._load()
        remaining = [g for g in lists if g.id != list_id]
        if len(remaining) == len(lists):
            raise NoMatchingEntity(f"No grocery list with id '{list_id}'")
        self._store(remaining)

    async def save_items(self, session: Session, items: List[GroceryItem], plan_id: Optional[str]) -> None:
        # The generated list is ephemeral on the device
        logger.debug("Offline mode: grocery list not persisted")


class RemoteGroceryStore(RemoteBackend):
    HISTORY_TABLE = "grocery_list_history"
    LISTS_TABLE = "grocery_lists"

    async def history(self, session: Session) -> List[SavedGroceryList]:
        rows = await self.store.select(session, self.HISTORY_TABLE, order="created_at.desc")
        return [_row_to_saved_list(r) for r in rows or []]

    async def save_to_history(self, session: Session, items: List[GroceryItem],
                              date_range: str, name: str) -> SavedGroceryList:
        rows = await self.store.insert(session, self.HISTORY_TABLE, {
            "name": name,
            "items": [i.to_dict() for i in items],
            "date_range": date_range,
        })
        if not rows:
            raise MalformedRecord("Remote store returned no row for the saved grocery list")
        return _row_to_saved_list(rows[0])

    async def delete(self, session: Session, list_id: str) -> None:
        rows = await self.store.delete(session, self.HISTORY_TABLE, filters=[("id", eq(list_id))])
        if not rows:
            raise NoMatchingEntity(f"No grocery list with id '{list_id}'")

    async def save_items(self, session: Session, items: List[GroceryItem], plan_id: Optional[str]) -> None:
        await self.store.insert(session, self.LISTS_TABLE, {
            "plan_id": plan_id,
            "items": [i.to_dict() for i in items],
        })


class GroceryListRepository(DualModeRepository):
    def __init__(self, storage, remote_store, resolver, limit: int = GROCERY_HISTORY_LIMIT):
        super().__init__(LocalGroceryStore(storage, limit), RemoteGroceryStore(remote_store), resolver)

    async def history(self, session: Session) -> List[SavedGroceryList]:
        return await self.backend(session).history(session)

    async def save_to_history(self, session: Session, items: List[GroceryItem], date_range: str,
                              name: Optional[str] = None) -> SavedGroceryList:
        return await self.backend(session).save_to_history(
            session, items, date_range, name or default_list_name(date_range)
        )

    async def delete(self, session: Session, list_id: str) -> None:
        # Lists saved while offline keep living on the device after sign-in
        if list_id.startswith(LOCAL_LIST_PREFIX):
            await self.local.delete(session, list_id)
        else:
            await self.backend(session).delete(session, list_id)

    async def save_items(self, session: Session, items: List[GroceryItem], plan_id: Optional[str] = None) -> None:
        await self.backend(session).save_items(session, items, plan_id)
