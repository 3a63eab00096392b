import asyncio
import unittest
import tempfile
from pathlib import Path

from mealsync.domain.Plan import DayPlan
from mealsync.domain.Session import Session
from mealsync.events.Event_Bus import EventBus, SCHEDULE_CHANGED, publish_schedule_change
from mealsync.events.schedule_observers import ChangeNotifier
from mealsync.infra.Schedule_Repository import ScheduleRepository
from mealsync.infra.local_storage import LocalStorage
from mealsync.infra.mode import ModeResolver
from mealsync.tests.fakes import FakeRemoteStore, FlakyScheduleRepo
from mealsync.utilities.errors import StorageUnavailable

ONLINE = Session("user-1", access_token="jwt")


class GatedScheduleRepo:
    """Online schedule repo whose fetch waits until released."""

    def __init__(self):
        self.release = asyncio.Event()
        self.fetches = 0

    def is_offline(self, session):
        return False

    async def get(self, session, start=None, end=None):
        self.fetches += 1
        await self.release.wait()
        return {}


class TestChangeNotifier(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.remote = FakeRemoteStore()
        self.schedule = ScheduleRepository(LocalStorage(Path(self._tmp.name)), self.remote, ModeResolver(True))
        self.bus = EventBus()
        self.notifier = ChangeNotifier(self.schedule, self.bus)
        self.received = []

    def tearDown(self):
        self._tmp.cleanup()

    def publish(self, user_id="user-1", change="UPDATE"):
        publish_schedule_change(user_id, change, "2026-01-05", bus=self.bus)

    async def test_offline_subscription_is_inert(self):
        sub = self.notifier.subscribe(Session.local(), self.received.append)
        self.assertFalse(sub.active)
        self.assertEqual(self.bus.subscriber_count(SCHEDULE_CHANGED), 0)
        self.publish("local")
        await self.notifier.drain()
        self.assertEqual(self.received, [])
        sub.unsubscribe()

    async def test_any_event_triggers_full_refetch(self):
        await self.schedule.upsert_day(ONLINE, "2026-01-05", DayPlan("x", lunch="Rajma"))
        self.notifier.subscribe(ONLINE, self.received.append)
        for change in ("INSERT", "UPDATE", "DELETE"):
            self.publish(change=change)
            await self.notifier.drain()
        self.assertEqual(len(self.received), 3)
        self.assertEqual(self.received[-1]["2026-01-05"].lunch, "Rajma")

    async def test_events_for_other_users_are_ignored(self):
        self.notifier.subscribe(ONLINE, self.received.append)
        self.publish("user-2")
        await self.notifier.drain()
        self.assertEqual(self.received, [])

    async def test_burst_coalesces_into_one_follow_up(self):
        gate = asyncio.Event()

        async def on_change(schedule):
            self.received.append(schedule)
            await gate.wait()

        self.notifier.subscribe(ONLINE, on_change)
        self.publish()
        await asyncio.sleep(0)
        for _ in range(3):
            self.publish()
        gate.set()
        await self.notifier.drain()
        self.assertEqual(len(self.received), 2)

    async def test_unsubscribe_is_idempotent_and_final(self):
        sub = self.notifier.subscribe(ONLINE, self.received.append)
        self.assertTrue(sub.active)
        sub.unsubscribe()
        sub.unsubscribe()
        self.assertFalse(sub.active)
        self.assertEqual(self.bus.subscriber_count(SCHEDULE_CHANGED), 0)
        self.publish()
        await self.notifier.drain()
        self.assertEqual(self.received, [])

    async def test_result_discarded_when_unsubscribed_mid_fetch(self):
        repo = GatedScheduleRepo()
        notifier = ChangeNotifier(repo, self.bus)
        sub = notifier.subscribe(ONLINE, self.received.append)
        self.publish()
        await asyncio.sleep(0)
        self.assertEqual(repo.fetches, 1)
        sub.unsubscribe()
        repo.release.set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        self.assertEqual(self.received, [])

    async def test_refetch_failure_is_swallowed(self):
        notifier = ChangeNotifier(FlakyScheduleRepo(StorageUnavailable("down")), self.bus)
        sub = notifier.subscribe(ONLINE, self.received.append)
        with self.assertLogs("mealsync.events.schedule_observers", level="WARNING"):
            self.publish()
            await notifier.drain()
        self.assertEqual(self.received, [])
        self.assertTrue(sub.active)

    async def test_callback_failure_does_not_break_subscription(self):
        def boom(schedule):
            raise RuntimeError("ui exploded")

        self.notifier.subscribe(ONLINE, boom)
        self.notifier.subscribe(ONLINE, self.received.append)
        self.publish()
        await self.notifier.drain()
        self.assertEqual(len(self.received), 1)


if __name__ == "__main__":
    unittest.main()
