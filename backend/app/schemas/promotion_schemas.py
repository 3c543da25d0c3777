"""
Promotion Analytics Schemas - DTOs for the recommendation and metrics endpoints.

This module defines Pydantic models for structured data transfer between:
- API Request Layer → RecommendationService (promotion snapshots)
- RecommendationService → API Response Layer (ranked shortlist, metrics, calendar)

Design Philosophy:
- Type and sign checks only: discount-shape problems are reported as excluded
  records, not rejected requests, so one bad row never blocks a ranking
- Snapshots arrive with the request; nothing here reads storage
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from promo_engine.models import CampaignGoal, DiscountKind, PromotionCategory


class PromotionRecordIn(BaseModel):
    """
    One promo code or template snapshot as supplied by the caller.

    Usage:
        record = PromotionRecordIn(
            id="2",
            code="New User Welcome",
            category="acquisition",
            discount_kind="flat",
            discount_value=500,
            min_order_amount=1000,
            times_redeemed=32,
            roi_score=91
        )
    """
    model_config = ConfigDict(populate_by_name=True)

    # Identity
    id: str = Field(..., description="Opaque record identifier")
    code: str = Field(..., description="Promo code or template name")
    description: str = Field(default="", description="Free-text description")
    category: PromotionCategory = Field(..., description="seasonal/acquisition/retention/clearance/engagement")

    # Discount shape
    discount_kind: Optional[DiscountKind] = Field(
        None, alias="discount_type", description="percentage or flat; missing marks the record malformed"
    )
    discount_value: float = Field(..., description="Percentage (0-100] or flat amount > 0")
    min_order_amount: float = Field(default=0, ge=0, description="Minimum basket, 0 when unset")
    max_discount_amount: Optional[float] = Field(None, ge=0, description="Informational cap for percentage codes")

    # Usage constraints
    usage_limit: Optional[int] = Field(None, description="Redemption cap, null for unlimited")
    duration_days: Optional[int] = Field(None, description="Validity window in days, null for unlimited")
    applicable_order_types: List[str] = Field(default_factory=lambda: ["food", "store"])

    # Observed counters
    times_redeemed: int = Field(default=0, ge=0, description="Completed redemptions")
    roi_score: Optional[float] = Field(None, description="Precomputed ROI score, used before recomputation")
    redemption_rate: Optional[float] = Field(None, description="Precomputed redemption rate")
    revenue_generated: Optional[float] = Field(None, ge=0, description="Precomputed revenue")

    # Lifecycle
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_active: bool = True
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Prevent empty codes/names"""
        if not v.strip():
            raise ValueError("Code must be non-empty")
        return v.strip()

    @field_validator("usage_limit", "duration_days")
    @classmethod
    def validate_positive_or_unlimited(cls, v: Optional[int]) -> Optional[int]:
        """Caps and durations are positive; null means unlimited."""
        if v is not None and v <= 0:
            raise ValueError("Must be a positive integer or null for unlimited")
        return v

    @field_validator("applicable_order_types")
    @classmethod
    def validate_order_types(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("At least one applicable order type is required")
        return v


class RecommendationRequest(BaseModel):
    """
    API request schema for ranking templates.

    Example:
        POST /api/v1/recommendations
        {
            "records": [{"id": "2", "code": "New User Welcome", ...}],
            "goal": "roi",
            "top_n": 3,
            "as_of": "2026-01-12"
        }
    """
    records: List[PromotionRecordIn] = Field(default_factory=list)
    goal: CampaignGoal = Field(..., description="roi | redemption_rate | revenue")
    top_n: int = Field(default=3, ge=1, le=20, description="Shortlist length")
    as_of: Optional[datetime] = Field(None, description="Reference time; server UTC now if omitted")


class MetricsRequest(BaseModel):
    records: List[PromotionRecordIn] = Field(default_factory=list)
    as_of: Optional[datetime] = Field(None, description="Reference time for the expiry check")


class CampusEventOut(BaseModel):
    id: str
    name: str
    kind: str
    start: date
    end: date
    impact: str
    description: str
    order_behavior: str
    category_affinity: List[str]


class SeasonalPatternOut(BaseModel):
    name: str
    months: List[int]
    avg_order_increase: float
    peak_days: List[str]
    category_affinity: List[str]
    description: str


class CalendarContextOut(BaseModel):
    today: date
    active_events: List[CampusEventOut]
    upcoming_events: List[CampusEventOut]
    current_season: Optional[SeasonalPatternOut] = None


class RankedRecommendationOut(BaseModel):
    """
    One shortlisted template.

    Example:
        {
            "record_id": "2",
            "code": "New User Welcome",
            "category": "acquisition",
            "rank": 1,
            "metric_value": 91.0,
            "display_value": "91%",
            "rationale": ["ROI score of 91% ranks #1 across all templates", ...]
        }
    """
    record_id: str
    code: str
    category: str
    rank: int = Field(..., ge=1)
    metric_value: float
    display_value: str
    rationale: List[str]


class RecommendationResponse(BaseModel):
    goal: CampaignGoal
    goal_label: str
    recommendations: List[RankedRecommendationOut]
    headline: Optional[str] = Field(None, description="Insight about the top pick; null when nothing ranked")
    context: CalendarContextOut
    excluded_record_ids: List[str] = Field(default_factory=list, description="Malformed records skipped")


class PromotionMetricsOut(BaseModel):
    record_id: str
    discount_given: int
    revenue_influenced: int
    roi: int
    cost_per_redemption: int
    effectiveness_score: int = Field(..., ge=0, le=100)
    cap_utilization: Optional[int] = None


class PortfolioMetricsResponse(BaseModel):
    record_count: int
    active_count: int
    total_redemptions: int
    total_discount_given: int
    total_revenue_influenced: int
    roi: int
    cost_per_acquisition: int
    effectiveness_score: int = Field(..., ge=0, le=100)
    records: List[PromotionMetricsOut]
    excluded_record_ids: List[str] = Field(default_factory=list)
