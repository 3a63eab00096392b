import tempfile
import unittest
from datetime import date
from pathlib import Path

from mealsync.context import build_context
from mealsync.domain.Plan import DayPlan, WeeklyPlan
from mealsync.domain.Session import Session
from mealsync.logic.generation import generate_draft
from mealsync.tests.fakes import FakeRemoteStore
from mealsync.utilities.constants import WEEKDAYS
from mealsync.utilities.errors import NoMatchingEntity

OFFLINE = Session.local()


class RecordingGenerator:
    def __init__(self):
        self.calls = []

    async def generate(self, preferences, summary=None):
        self.calls.append((preferences, summary))
        return WeeklyPlan([DayPlan(day, breakfast="Upma", lunch="Pulao", dinner="Roti") for day in WEEKDAYS])


class TestGenerateDraft(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.ctx = build_context(Path(self._tmp.name), remote=FakeRemoteStore())
        self.generator = RecordingGenerator()

    def tearDown(self):
        self._tmp.cleanup()

    async def test_without_profiles(self):
        with self.assertRaises(NoMatchingEntity):
            await generate_draft(self.ctx, OFFLINE, self.generator)

    async def test_generated_plan_becomes_draft(self):
        profiles = await self.ctx.profiles.ensure_default(OFFLINE)
        plan = await generate_draft(self.ctx, OFFLINE, self.generator)
        self.assertEqual(await self.ctx.plans.get_current(OFFLINE), plan)
        preferences, summary = self.generator.calls[0]
        self.assertEqual(preferences, profiles[0].preferences)
        # empty calendar means no learning context
        self.assertIsNone(summary)

    async def test_history_is_passed_when_available(self):
        await self.ctx.profiles.ensure_default(OFFLINE)
        await self.ctx.archive.archive(OFFLINE, await generate_draft(self.ctx, OFFLINE, self.generator),
                                       date.today().isoformat(), True)
        await generate_draft(self.ctx, OFFLINE, self.generator)
        summary = self.generator.calls[-1][1]
        self.assertIsNotNone(summary)
        self.assertEqual(summary.accepted_lunches, ["Pulao"])
