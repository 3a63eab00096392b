import unittest
import tempfile
from pathlib import Path

from mealsync.domain.GroceryList import GroceryItem
from mealsync.domain.Session import Session
from mealsync.infra.Grocery_Repository import GroceryListRepository
from mealsync.infra.local_storage import LocalStorage
from mealsync.infra.mode import ModeResolver
from mealsync.tests.fakes import FakeRemoteStore
from mealsync.utilities.errors import NoMatchingEntity

OFFLINE = Session.local()
ONLINE = Session("user-1", access_token="jwt")
ITEMS = [GroceryItem("Vegetables", "Onion", "1 kg"), GroceryItem("Dairy", "Paneer", "200 g", checked=True)]


class TestGroceryListRepository(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(Path(self._tmp.name))
        self.remote = FakeRemoteStore()
        self.repo = GroceryListRepository(self.storage, self.remote, ModeResolver(True), limit=3)

    def tearDown(self):
        self._tmp.cleanup()

    async def test_offline_history_is_capped_newest_first(self):
        for week in range(1, 6):
            await self.repo.save_to_history(OFFLINE, ITEMS, f"Week {week}")
        history = await self.repo.history(OFFLINE)
        self.assertEqual([g.date_range for g in history], ["Week 5", "Week 4", "Week 3"])
        self.assertEqual(len({g.id for g in history}), 3)
        self.assertTrue(all(g.id.startswith("local_") for g in history))

    async def test_default_name_uses_date_range(self):
        saved = await self.repo.save_to_history(OFFLINE, ITEMS, "Jan 5 - Jan 11")
        self.assertEqual(saved.name, "Grocery List - Jan 5 - Jan 11")
        named = await self.repo.save_to_history(OFFLINE, ITEMS, "Jan 5 - Jan 11", name="Party")
        self.assertEqual(named.name, "Party")

    async def test_items_survive_round_trip(self):
        for session in (OFFLINE, ONLINE):
            saved = await self.repo.save_to_history(session, ITEMS, "Week 1")
            self.assertEqual((await self.repo.history(session))[0].items, ITEMS)
            self.assertEqual(saved.items, ITEMS)

    async def test_delete_offline_and_online(self):
        local = await self.repo.save_to_history(OFFLINE, ITEMS, "Week 1")
        remote = await self.repo.save_to_history(ONLINE, ITEMS, "Week 1")
        await self.repo.delete(OFFLINE, local.id)
        await self.repo.delete(ONLINE, remote.id)
        self.assertEqual(await self.repo.history(OFFLINE), [])
        self.assertEqual(await self.repo.history(ONLINE), [])

    async def test_local_ids_are_deleted_locally_even_online(self):
        local = await self.repo.save_to_history(OFFLINE, ITEMS, "Week 1")
        await self.repo.delete(ONLINE, local.id)
        self.assertEqual(await self.repo.history(OFFLINE), [])
        self.assertEqual(self.remote.payloads("delete", "grocery_list_history"), [])

    async def test_delete_unknown_id(self):
        with self.assertRaises(NoMatchingEntity):
            await self.repo.delete(OFFLINE, "local_1")
        with self.assertRaises(NoMatchingEntity):
            await self.repo.delete(ONLINE, "abc")

    async def test_generated_list_only_persisted_online(self):
        await self.repo.save_items(OFFLINE, ITEMS)
        await self.repo.save_items(ONLINE, ITEMS, plan_id="plan-1")
        rows = self.remote.tables["grocery_lists"]
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["plan_id"], "plan-1")


if __name__ == "__main__":
    unittest.main()
