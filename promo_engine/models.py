"""
Data models for the Campaign Effectiveness & Recommendation Engine.
All models are frozen dataclasses: the engine reads snapshots, it never mutates them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class PromotionCategory(str, Enum):
    SEASONAL = "seasonal"
    ACQUISITION = "acquisition"
    RETENTION = "retention"
    CLEARANCE = "clearance"
    ENGAGEMENT = "engagement"


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


class EventKind(str, Enum):
    EXAM = "exam"
    FESTIVAL = "festival"
    SEMESTER_BREAK = "semester_break"
    ORIENTATION = "orientation"
    SPORTS = "sports"
    HOLIDAY = "holiday"


class ImpactTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CampaignGoal(str, Enum):
    """Optimization target for a ranking request."""

    ROI = "roi"
    REDEMPTION_RATE = "redemption_rate"
    REVENUE = "revenue"

    @property
    def label(self) -> str:
        return _GOAL_LABELS[self]


_GOAL_LABELS = {
    CampaignGoal.ROI: "ROI Score",
    CampaignGoal.REDEMPTION_RATE: "Redemption Rate",
    CampaignGoal.REVENUE: "Revenue",
}


@dataclass(frozen=True)
class PromotionRecord:
    """
    An issued promo code or a reusable promotion template.

    Fields:
    - id: opaque identifier from the persistence layer
    - code: human code or template name (e.g., "WELCOME500")
    - category: promotion category tag used for calendar matching
    - discount_kind: 'percentage' | 'flat' (None marks a malformed record)
    - discount_value: percentage in (0, 100] or flat currency amount > 0
    - min_order_amount: optional minimum basket (0 means unset)
    - max_discount_amount: optional cap, informational for percentage codes
    - usage_limit: redemption cap, None for unlimited
    - duration_days: validity window, None for unlimited
    - applicable_order_types: order types the code applies to ('food', 'store', ...)
    - times_redeemed: observed redemptions
    - roi_score / redemption_rate / revenue_generated: optional precomputed metrics
    """
    id: str
    code: str
    category: PromotionCategory
    discount_kind: Optional[DiscountKind]
    discount_value: float
    description: str = ""
    min_order_amount: float = 0.0
    max_discount_amount: Optional[float] = None
    usage_limit: Optional[int] = None
    duration_days: Optional[int] = None
    applicable_order_types: tuple[str, ...] = ("food", "store")
    times_redeemed: int = 0
    roi_score: Optional[float] = None
    redemption_rate: Optional[float] = None
    revenue_generated: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_active: bool = True
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class CampusEvent:
    """
    A curated campus calendar event.

    Fields:
    - kind: event type, drives the category heuristics in the rationale
    - category_affinity: promotion categories the event boosts
    - start / end: inclusive date range
    - order_behavior: short text describing observed order deltas
    """
    id: str
    name: str
    kind: EventKind
    start: date
    end: date
    impact: ImpactTier
    category_affinity: frozenset = frozenset()
    description: str = ""
    order_behavior: str = ""


@dataclass(frozen=True)
class SeasonalPattern:
    name: str
    months: frozenset
    avg_order_increase: float
    peak_days: tuple[str, ...] = ()
    category_affinity: frozenset = frozenset()
    description: str = ""


@dataclass(frozen=True)
class CalendarCatalog:
    """Loaded event and season tables. Declaration order is significant."""
    version: str
    events: tuple[CampusEvent, ...]
    seasons: tuple[SeasonalPattern, ...]


@dataclass(frozen=True)
class CalendarContext:
    today: date
    active_events: tuple[CampusEvent, ...]
    upcoming_events: tuple[CampusEvent, ...]
    current_season: Optional[SeasonalPattern] = None


@dataclass(frozen=True)
class PromotionMetrics:
    """
    Derived metrics for a single promotion record.

    Monetary fields are rounded to integer currency units.
    cap_utilization is None when the record has no redemption cap.
    """
    record_id: str
    discount_given: int
    revenue_influenced: int
    roi: int
    cost_per_redemption: int
    effectiveness_score: int
    redemption_component: float
    cap_utilization: Optional[int] = None


@dataclass(frozen=True)
class PortfolioMetrics:
    """Totals across a set of promotion records, plus per-record metrics."""
    record_count: int
    active_count: int
    total_redemptions: int
    total_discount_given: int
    total_revenue_influenced: int
    roi: int
    cost_per_acquisition: int
    effectiveness_score: int
    records: tuple[PromotionMetrics, ...] = ()
    excluded_ids: tuple[str, ...] = ()


@dataclass
class RankedRecommendation:
    """
    One shortlisted promotion record.

    Fields:
    - rank: 1-based position after sorting and truncation
    - metric_value: value of the active goal's metric
    - display_value: formatted metric (e.g., "91%", "142k")
    - rationale: up to 3 justification strings
    """
    record: PromotionRecord
    rank: int
    metric_value: float
    display_value: str = ""
    rationale: list[str] = field(default_factory=list)


@dataclass
class RecommendationResult:
    """
    The complete recommendation output for a ranking request.

    Fields:
    - recommendations: ranked shortlist, empty when nothing is eligible
    - context: calendar context shared by every candidate
    - headline: one-sentence insight about the top pick, None when empty
    - excluded_ids: malformed records skipped during ranking
    """
    goal: CampaignGoal
    recommendations: list[RankedRecommendation]
    context: CalendarContext
    headline: Optional[str] = None
    excluded_ids: list[str] = field(default_factory=list)
