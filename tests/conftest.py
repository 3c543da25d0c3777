"""
Shared fixtures for the engine test suite.
"""

import pytest

from promo_engine.campus_calendar import parse_catalog
from promo_engine.models import DiscountKind, PromotionCategory, PromotionRecord
from promo_engine.settings import ScoringConfig


@pytest.fixture
def make_record():
    """Factory for PromotionRecord with sensible defaults; override any field by keyword."""

    def _make(record_id="r1", **overrides) -> PromotionRecord:
        fields = {
            "id": record_id,
            "code": f"CODE-{record_id}",
            "category": PromotionCategory.SEASONAL,
            "discount_kind": DiscountKind.PERCENTAGE,
            "discount_value": 20.0,
            "min_order_amount": 0.0,
            "times_redeemed": 0,
        }
        fields.update(overrides)
        return PromotionRecord(**fields)

    return _make


@pytest.fixture
def config() -> ScoringConfig:
    """Default scoring constants, independent of the environment."""
    return ScoringConfig()


@pytest.fixture
def edge_catalog():
    """Small catalog around 2026-06-01 for boundary checks."""
    return parse_catalog(
        {
            "version": "test",
            "events": [
                {"id": "past", "name": "Past Fair", "kind": "festival",
                 "start": "2026-05-01", "end": "2026-05-03", "impact": "low"},
                {"id": "today", "name": "One Day Drive", "kind": "sports",
                 "start": "2026-06-01", "end": "2026-06-01", "impact": "medium",
                 "category_affinity": ["engagement"]},
                {"id": "plus7", "name": "Week Out Expo", "kind": "festival",
                 "start": "2026-06-08", "end": "2026-06-09", "impact": "high",
                 "category_affinity": ["seasonal"]},
                {"id": "plus8", "name": "Too Far Gala", "kind": "holiday",
                 "start": "2026-06-09", "end": "2026-06-10", "impact": "high"},
            ],
            "seasons": [
                {"name": "Early Summer", "months": [6], "avg_order_increase": 30,
                 "peak_days": ["Friday", "Saturday", "Sunday"],
                 "category_affinity": ["seasonal"]},
                {"name": "Shadowed Summer", "months": [6, 7], "avg_order_increase": 10},
            ],
        }
    )
