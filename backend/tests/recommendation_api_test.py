import sys
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient


# Ensure `backend/` is on sys.path so `import app...` works
REPO_ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = REPO_ROOT / "backend"
sys.path.insert(0, str(BACKEND_DIR))

from promo_engine.campus_calendar import get_default_catalog  # noqa: E402
from promo_engine.errors import CatalogError  # noqa: E402
from promo_engine.settings import ScoringConfig  # noqa: E402

from app.dependencies.services import get_recommendation_service  # noqa: E402
from app.main import app  # noqa: E402
from app.services.recommendation_service import RecommendationService  # noqa: E402


ORIENTATION_DAY = "2026-01-12T10:00:00"


def _template(record_id, code, category, **extra):
    row = {
        "id": record_id,
        "code": code,
        "category": category,
        "discount_type": "percentage",
        "discount_value": 20,
    }
    row.update(extra)
    return row


class RecommendationApiTests(unittest.TestCase):
    def setUp(self):
        service = RecommendationService(get_default_catalog(), ScoringConfig())
        app.dependency_overrides[get_recommendation_service] = lambda: service
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_rank_templates_during_orientation(self):
        payload = {
            "goal": "roi",
            "as_of": ORIENTATION_DAY,
            "records": [
                _template("A", "WELCOME", "acquisition", roi_score=91, times_redeemed=32),
                _template("B", "WEEKEND", "seasonal", roi_score=84, times_redeemed=14),
                _template("C", "DORMANT", "retention"),
            ],
        }

        resp = self.client.post("/api/v1/recommendations", json=payload)

        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["goal"], "roi")
        self.assertEqual(data["goal_label"], "ROI Score")
        self.assertEqual([r["record_id"] for r in data["recommendations"]], ["A", "B"])
        self.assertEqual(data["recommendations"][0]["display_value"], "91%")
        self.assertEqual(len(data["recommendations"][0]["rationale"]), 3)
        self.assertEqual(
            data["recommendations"][0]["rationale"][1],
            "Currently active: New Student Orientation — +120% new user signups, high first-order rate",
        )
        self.assertEqual(data["recommendations"][1]["rationale"], ["ROI score of 84% ranks #2 across all templates"])
        self.assertIn('"WELCOME"', data["headline"])
        self.assertEqual(data["context"]["today"], "2026-01-12")
        self.assertEqual(data["context"]["active_events"][0]["id"], "new-student-orientation")
        self.assertEqual(data["context"]["current_season"]["name"], "Harmattan Season")

    def test_no_history_is_empty_not_error(self):
        payload = {"goal": "revenue", "as_of": ORIENTATION_DAY, "records": [_template("A", "NEW", "seasonal")]}

        resp = self.client.post("/api/v1/recommendations", json=payload)

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["recommendations"], [])
        self.assertIsNone(resp.json()["headline"])

    def test_malformed_record_is_excluded(self):
        bad = _template("X", "BROKEN", "seasonal", discount_value=150, roi_score=99)
        good = _template("Y", "FINE", "seasonal", roi_score=60, times_redeemed=4)

        resp = self.client.post(
            "/api/v1/recommendations",
            json={"goal": "roi", "as_of": ORIENTATION_DAY, "records": [bad, good]},
        )

        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([r["record_id"] for r in data["recommendations"]], ["Y"])
        self.assertEqual(data["excluded_record_ids"], ["X"])

    def test_unknown_goal_returns_400(self):
        resp = self.client.post("/api/v1/recommendations", json={"goal": "clicks", "records": []})

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"]["code"], "VALIDATION_ERROR")

    def test_top_n_out_of_range_returns_400(self):
        resp = self.client.post("/api/v1/recommendations", json={"goal": "roi", "top_n": 0, "records": []})

        self.assertEqual(resp.status_code, 400)

    def test_duplicate_ids_return_400(self):
        rows = [
            _template("A", "ONE", "seasonal", roi_score=10, times_redeemed=1),
            _template("A", "TWO", "seasonal", roi_score=20, times_redeemed=1),
        ]

        resp = self.client.post("/api/v1/recommendations", json={"goal": "roi", "records": rows})

        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["error"]["code"], "VALIDATION_ERROR")
        self.assertEqual(body["error"]["details"]["duplicate_ids"], ["A"])

    def test_metrics_endpoint(self):
        payload = {
            "as_of": ORIENTATION_DAY,
            "records": [_template("A", "TEN", "seasonal", times_redeemed=10)],
        }

        resp = self.client.post("/api/v1/metrics", json=payload)

        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["total_discount_given"], 200)
        self.assertEqual(data["total_revenue_influenced"], 1500)
        self.assertEqual(data["roi"], 650)
        self.assertEqual(data["cost_per_acquisition"], 20)
        # 60 * 0.4 + 40 + 20 (one live record out of one)
        self.assertEqual(data["effectiveness_score"], 84)
        self.assertEqual(data["records"][0]["cap_utilization"], None)

    def test_calendar_context_endpoint(self):
        resp = self.client.get("/api/v1/calendar/context", params={"as_of": "2026-03-08"})

        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([e["id"] for e in data["active_events"]], ["sports-day"])
        self.assertEqual([e["id"] for e in data["upcoming_events"]], ["spring-festival"])
        self.assertIsNone(data["current_season"])


class CatalogUnavailableTests(unittest.TestCase):
    def test_missing_catalog_returns_503(self):
        client = TestClient(app)
        with patch(
            "app.dependencies.services.get_default_catalog",
            side_effect=CatalogError("Cannot read calendar catalog"),
        ):
            resp = client.get("/api/v1/calendar/context", params={"as_of": "2026-03-08"})

        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["error"]["code"], "CATALOG_UNAVAILABLE")


if __name__ == "__main__":
    unittest.main()
