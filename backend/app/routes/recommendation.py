"""
Promotion Recommendation Routes - API endpoints for template ranking and campaign metrics.

Endpoints:
- POST /api/v1/recommendations - Rank templates for a campaign goal with rationale
- POST /api/v1/metrics - Portfolio and per-record effectiveness metrics
- GET /api/v1/calendar/context - Campus events and seasonal pattern for a date
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.dependencies.services import get_recommendation_service
from app.schemas.promotion_schemas import (
    CalendarContextOut,
    MetricsRequest,
    PortfolioMetricsResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from app.services.recommendation_service import RecommendationService


router = APIRouter(prefix="/api/v1", tags=["recommendation"])


@router.post("/recommendations", response_model=RecommendationResponse)
def rank_templates(
    payload: RecommendationRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> RecommendationResponse:
    """Rank the supplied templates for one campaign goal.

    Must-have behavior:
    - Records with no redemption history are never ranked.
    - An empty `recommendations` list is the "not enough data yet" state, not an error.
    - Malformed records are skipped and listed in `excluded_record_ids`.
    """
    return service.recommend(payload)


@router.post("/metrics", response_model=PortfolioMetricsResponse)
def campaign_metrics(
    payload: MetricsRequest,
    service: RecommendationService = Depends(get_recommendation_service),
) -> PortfolioMetricsResponse:
    """ROI, cost per acquisition and effectiveness for a snapshot of promo codes."""
    return service.portfolio_metrics(payload)


@router.get("/calendar/context", response_model=CalendarContextOut)
def calendar_context(
    as_of: Optional[date] = Query(default=None, description="Reference date (YYYY-MM-DD)"),
    service: RecommendationService = Depends(get_recommendation_service),
) -> CalendarContextOut:
    return service.calendar_context(as_of)
