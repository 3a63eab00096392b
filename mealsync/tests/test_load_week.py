import tempfile
import unittest
from datetime import date
from pathlib import Path

from mealsync.domain.Plan import DayPlan
from mealsync.domain.Session import Session
from mealsync.infra.Schedule_Repository import ScheduleRepository
from mealsync.infra.local_storage import LocalStorage
from mealsync.infra.mode import ModeResolver
from mealsync.logic.calendar.week import load_week, week_bounds, week_label
from mealsync.tests.fakes import FakeRemoteStore
from mealsync.utilities.constants import WEEKDAYS
from mealsync.utilities.errors import InvalidDateRange

OFFLINE = Session.local()
ONLINE = Session("user-1", access_token="jwt")


class TestWeekBounds(unittest.TestCase):
    def test_any_day_maps_to_monday_through_sunday(self):
        for day in ("2026-01-05", "2026-01-08", "2026-01-11"):
            self.assertEqual(week_bounds(day), (date(2026, 1, 5), date(2026, 1, 11)))

    def test_week_across_new_year(self):
        monday, sunday = week_bounds(date(2026, 1, 1))
        self.assertEqual((monday, sunday), (date(2025, 12, 29), date(2026, 1, 4)))
        self.assertEqual(week_label(monday, sunday), "Dec 29 - Jan 4, 2026")

    def test_bad_date(self):
        with self.assertRaises(InvalidDateRange):
            week_bounds("Monday")


class TestLoadWeek(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.remote = FakeRemoteStore()
        self.schedule = ScheduleRepository(LocalStorage(Path(self._tmp.name)), self.remote, ModeResolver(True))

    def tearDown(self):
        self._tmp.cleanup()

    async def test_partial_week_fills_missing_days(self):
        for session in (OFFLINE, ONLINE):
            await self.schedule.upsert_day(session, "2026-01-05", DayPlan("x", breakfast="Idli"))
            await self.schedule.upsert_day(session, "2026-01-09", DayPlan("x", dinner="Khichdi"))
            # outside the week
            await self.schedule.upsert_day(session, "2026-01-12", DayPlan("x", lunch="Pulao"))

            week = await load_week(self.schedule, session, "2026-01-07")
            self.assertEqual((week.start_date, week.end_date), ("2026-01-05", "2026-01-11"))
            days = week.plan.days
            self.assertEqual([d.day for d in days], list(WEEKDAYS))
            self.assertEqual(days[0], DayPlan("Monday", breakfast="Idli"))
            self.assertEqual(days[4], DayPlan("Friday", dinner="Khichdi"))
            self.assertTrue(all(days[i].is_empty() for i in (1, 2, 3, 5, 6)))

    async def test_empty_week(self):
        week = await load_week(self.schedule, OFFLINE, "2026-03-04")
        self.assertEqual(len(week.plan.days), 7)
        self.assertTrue(all(d.is_empty() for d in week.plan.days))
        self.assertEqual(week.label, "Mar 2 - Mar 8, 2026")

    async def test_online_reads_only_the_week_range(self):
        await load_week(self.schedule, ONLINE, "2026-01-07")
        filters = self.remote.payloads("select", "scheduled_meals")[-1]["filters"]
        self.assertEqual(filters, [("date", "gte.2026-01-05"), ("date", "lte.2026-01-11")])


if __name__ == "__main__":
    unittest.main()
