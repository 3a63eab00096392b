import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from mealsync.api.api_run import app
from mealsync.api.routes import hooks
from mealsync.context import build_context, set_context
from mealsync.events import web_observers
from mealsync.events.Event_Bus import GLOBAL_EVENT_BUS, SCHEDULE_CHANGED
from mealsync.tests.fakes import FakeRemoteStore
from mealsync.utilities.constants import WEEKDAYS

ONLINE_HEADERS = {"X-User-Id": "user-1", "Authorization": "Bearer jwt"}


def plan_body(lunch=""):
    return {"days": [{"day": d, "breakfast": "Idli", "lunch": lunch, "dinner": "Dal"} for d in WEEKDAYS]}


class TestApiRoutes(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.remote = FakeRemoteStore()
        self.ctx = build_context(Path(self._tmp.name), remote=self.remote)
        set_context(self.ctx)
        self.client = TestClient(app)

    def tearDown(self):
        set_context(None)
        self._tmp.cleanup()

    def test_archive_draft_end_to_end(self):
        self.assertEqual(self.client.put("/api/plan", json=plan_body()).status_code, 200)
        resp = self.client.post("/api/archive", json={"start_date": "2026-01-05", "overwrite": True})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()["written"]), 7)

        schedule = self.client.get("/api/schedule", params={"start": "2026-01-05", "end": "2026-01-05"}).json()
        self.assertEqual(schedule["schedule"]["2026-01-05"],
                         {"day": "2026-01-05", "breakfast": "Idli", "lunch": "", "dinner": "Dal"})
        self.assertIsNone(self.client.get("/api/plan").json()["plan"])

    def test_archive_preserve_and_conflicts(self):
        self.client.put("/api/schedule/2026-01-06", json={"lunch": "Rajma"})
        conflicts = self.client.get("/api/archive/conflicts", params={"start_date": "2026-01-05"}).json()
        self.assertEqual(conflicts["conflicts"], ["2026-01-06"])

        resp = self.client.post("/api/archive", json={
            "start_date": "2026-01-05", "overwrite": False, "plan": plan_body(lunch="Pulao"),
        })
        self.assertEqual(resp.json()["preserved"], ["2026-01-06"])
        day = self.client.get("/api/schedule").json()["schedule"]["2026-01-06"]
        self.assertEqual(day["lunch"], "Rajma")

        self.assertEqual(self.client.post("/api/archive/revert").status_code, 200)
        self.assertEqual(self.client.post("/api/archive/revert").status_code, 404)

    def test_error_mapping(self):
        resp = self.client.post("/api/archive", json={"start_date": "not-a-date", "plan": plan_body()})
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["error"], "InvalidDateRange")
        # no draft stored
        self.assertEqual(self.client.post("/api/archive", json={"start_date": "2026-01-05"}).status_code, 404)
        self.assertEqual(self.client.delete("/api/grocery-history/local_1").status_code, 404)
        self.assertEqual(self.client.put("/api/plan", json={"days": []}).status_code, 422)

        self.remote.fail("select", "scheduled_meals")
        self.assertEqual(self.client.get("/api/schedule", headers=ONLINE_HEADERS).status_code, 503)

    def test_online_requests_are_scoped_to_caller(self):
        self.client.put("/api/schedule/2026-01-05", json={"dinner": "Dal"}, headers=ONLINE_HEADERS)
        self.assertEqual(self.remote.tables["scheduled_meals"][0]["user_id"], "user-1")
        other = self.client.get("/api/schedule", headers={"X-User-Id": "user-2", "Authorization": "Bearer jwt-2"}).json()
        self.assertEqual(other["count"], 0)
        local = self.client.get("/api/schedule").json()
        self.assertEqual(local["count"], 0)

    def test_signed_in_identity_needs_a_token(self):
        resp = self.client.get("/api/schedule", headers={"X-User-Id": "user-2"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(self.remote.calls, [])

    def test_load_week_into_plan(self):
        self.client.put("/api/schedule/2026-01-06", json={"lunch": "Rajma"})
        resp = self.client.post("/api/plan/load-week", json={"date": "2026-01-08"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual((body["start_date"], body["end_date"]), ("2026-01-05", "2026-01-11"))
        self.assertEqual(body["label"], "Jan 5 - Jan 11, 2026")
        self.assertEqual(body["plan"]["days"][1], {"day": "Tuesday", "breakfast": "", "lunch": "Rajma", "dinner": ""})
        self.assertEqual(self.client.get("/api/plan").json()["plan"], body["plan"])
        self.assertEqual(self.client.post("/api/plan/load-week", json={"date": "next week"}).status_code, 422)

    def test_feedback(self):
        feedback = {"rating": 4, "what_works": "Archiving", "suggestions": " More dals "}
        self.assertEqual(self.client.post("/api/feedback", json=feedback, headers=ONLINE_HEADERS).status_code, 204)
        row = self.remote.tables["feedback"][0]
        self.assertEqual((row["user_id"], row["rating"], row["suggestions"]), ("user-1", 4, "More dals"))

        self.assertEqual(self.client.post("/api/feedback", json=feedback).status_code, 503)
        anonymous = self.client.post("/api/feedback", json={**feedback, "anonymous": True})
        self.assertEqual(anonymous.status_code, 204)
        self.assertIsNone(self.remote.tables["feedback"][1]["user_id"])
        self.assertEqual(self.client.post("/api/feedback", json={"rating": 0}).status_code, 422)

    def test_grocery_history(self):
        resp = self.client.post("/api/grocery-history", json={
            "items": [{"category": "Dairy", "item": "Paneer", "quantity": "200 g"}],
            "date_range": "Jan 5 - Jan 11",
        })
        self.assertEqual(resp.status_code, 201)
        saved = resp.json()
        self.assertEqual(saved["name"], "Grocery List - Jan 5 - Jan 11")
        self.assertEqual(self.client.get("/api/grocery-history").json()["count"], 1)
        self.assertEqual(self.client.delete(f"/api/grocery-history/{saved['id']}").status_code, 204)

    def test_transfer_and_learning_summary(self):
        self.client.put("/api/schedule/2026-01-05", json={"lunch": "Rajma"})
        resp = self.client.post("/api/schedule/transfer", json={
            "source_date": "2026-01-05", "source_slot": "Lunch",
            "target_date": "2026-01-06", "target_slot": "dinner", "move": True,
        })
        self.assertEqual(resp.status_code, 200)
        summary = self.client.get("/api/learning-summary", params={"months_back": 24}).json()
        self.assertIn("recentMeals", summary)
        self.assertEqual(self.client.get("/api/learning-summary", params={"months_back": -1}).status_code, 422)


class TestProfileAndSettingsRoutes(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.remote = FakeRemoteStore()
        set_context(build_context(Path(self._tmp.name), remote=self.remote))
        self.client = TestClient(app)

    def tearDown(self):
        set_context(None)
        self._tmp.cleanup()

    def test_profile_crud_and_activation(self):
        created = self.client.post("/api/profiles", json={
            "name": "Weekdays", "dietaryType": "Vegan", "dislikes": ["Okra", " "],
        }).json()
        self.assertEqual(created["dislikes"], ["Okra"])
        pid = created["id"]

        updated = self.client.put(f"/api/profiles/{pid}", json={"name": "Weeknights"}).json()
        self.assertEqual(updated["name"], "Weeknights")
        self.assertEqual(self.client.put(f"/api/profiles/{pid}/active").json()["active_id"], pid)
        self.assertEqual(self.client.get("/api/profiles").json()["active_id"], pid)

        self.assertEqual(self.client.delete(f"/api/profiles/{pid}").status_code, 204)
        self.assertEqual(self.client.put("/api/profiles/missing", json={"name": "x"}).status_code, 404)

    def test_settings_never_echo_or_sync_api_key(self):
        self.assertEqual(self.client.put("/api/settings/api-key", json={"api_key": "sk-1"}).status_code, 204)
        body = self.client.put("/api/settings", json={"cook_name": "Asha"}, headers=ONLINE_HEADERS).json()
        self.assertEqual(body, {"cookName": "Asha", "cookContactNumber": "", "hasApiKey": True})
        self.assertNotIn("sk-1", repr(self.remote.calls))

    def test_workspace_and_history(self):
        self.client.put("/api/schedule/2026-01-05", json={"breakfast": "Idli", "dinner": "Dal"})
        ws = self.client.get("/api/workspace").json()
        self.assertEqual(len(ws["profiles"]), 1)
        self.assertEqual(ws["active_profile"]["id"], ws["profiles"][0]["id"])
        self.assertEqual(ws["errors"], {})

        history = self.client.get("/api/meal-history").json()
        self.assertFalse(history["authoritative"])
        self.assertEqual([e["mealName"] for e in history["entries"]], ["Idli", "Dal"])
        online = self.client.get("/api/meal-history", headers=ONLINE_HEADERS).json()
        self.assertTrue(online["authoritative"])


class TestScheduleWebhook(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.remote = FakeRemoteStore(users={"jwt-1": "user-1", "jwt-2": "user-2"})
        set_context(build_context(Path(self._tmp.name), remote=self.remote))
        self.client = TestClient(app)
        self.events = []
        self._listener = lambda name, payload: self.events.append(payload)
        GLOBAL_EVENT_BUS.subscribe(SCHEDULE_CHANGED, self._listener)
        self._secret = hooks.WEBHOOK_SECRET
        hooks.WEBHOOK_SECRET = "s3cret"

    def tearDown(self):
        GLOBAL_EVENT_BUS.unsubscribe(SCHEDULE_CHANGED, self._listener)
        hooks.WEBHOOK_SECRET = self._secret
        set_context(None)
        self._tmp.cleanup()

    def payload(self, **overrides):
        body = {"type": "UPDATE", "table": "scheduled_meals",
                "record": {"user_id": "user-1", "date": "2026-01-05"}, "old_record": None}
        body.update(overrides)
        return body

    def test_valid_call_publishes_owner_event(self):
        resp = self.client.post("/hooks/scheduled-meals", json=self.payload(),
                                headers={"X-Webhook-Secret": "s3cret"})
        self.assertEqual(resp.status_code, 202)
        self.assertEqual(self.events, [{"user_id": "user-1", "change": "UPDATE", "date": "2026-01-05"}])

    def test_delete_uses_old_record_owner(self):
        self.client.post("/hooks/scheduled-meals", headers={"X-Webhook-Secret": "s3cret"},
                         json=self.payload(type="DELETE", record=None,
                                           old_record={"user_id": "user-9", "date": "2026-01-07"}))
        self.assertEqual(self.events[0]["user_id"], "user-9")

    def test_bad_secret_rejected(self):
        resp = self.client.post("/hooks/scheduled-meals", json=self.payload(),
                                headers={"X-Webhook-Secret": "nope"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(self.events, [])

    def test_payload_without_owner_rejected(self):
        resp = self.client.post("/hooks/scheduled-meals", json=self.payload(record={"date": "2026-01-05"}),
                                headers={"X-Webhook-Secret": "s3cret"})
        self.assertEqual(resp.status_code, 422)

    def test_events_can_be_polled(self):
        web_observers.start()
        user_1 = {"X-User-Id": "user-1", "Authorization": "Bearer jwt-1"}
        user_2 = {"X-User-Id": "user-2", "Authorization": "Bearer jwt-2"}
        before = self.client.get("/api/events", headers=user_1).json()["next_cursor"]
        self.client.post("/hooks/scheduled-meals", json=self.payload(), headers={"X-Webhook-Secret": "s3cret"})
        polled = self.client.get("/api/events", params={"since": before}, headers=user_1).json()
        self.assertEqual([e["date"] for e in polled["events"]], ["2026-01-05"])
        other = self.client.get("/api/events", params={"since": before}, headers=user_2).json()
        self.assertEqual(other["events"], [])

    def test_events_need_a_verified_token(self):
        web_observers.start()
        self.client.post("/hooks/scheduled-meals", json=self.payload(), headers={"X-Webhook-Secret": "s3cret"})
        unsigned = self.client.get("/api/events", headers={"X-User-Id": "user-1"})
        self.assertEqual(unsigned.status_code, 401)
        borrowed = self.client.get("/api/events", headers={"X-User-Id": "user-1", "Authorization": "Bearer jwt-2"})
        self.assertEqual(borrowed.status_code, 403)
        forged = self.client.get("/api/events", headers={"X-User-Id": "user-1", "Authorization": "Bearer forged"})
        self.assertEqual(forged.status_code, 403)


if __name__ == "__main__":
    unittest.main()
