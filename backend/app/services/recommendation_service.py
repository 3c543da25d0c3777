from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

from promo_engine.campus_calendar import get_context
from promo_engine.metrics import compute_portfolio_metrics
from promo_engine.models import (
    CalendarCatalog,
    CalendarContext,
    CampaignGoal,
    CampusEvent,
    PromotionRecord,
    SeasonalPattern,
)
from promo_engine.recommender import build_report
from promo_engine.settings import ScoringConfig

from app.schemas.promotion_schemas import (
    CalendarContextOut,
    CampusEventOut,
    MetricsRequest,
    PortfolioMetricsResponse,
    PromotionMetricsOut,
    PromotionRecordIn,
    RankedRecommendationOut,
    RecommendationRequest,
    RecommendationResponse,
    SeasonalPatternOut,
)
from app.services.errors import ServiceError

logger = logging.getLogger(__name__)


class RecommendationService:
    """
    Request-scoped adapter between the HTTP layer and the promotion engine.

    Pattern: Constructor injection for the calendar catalog and scoring config
    (facilitates testing). The service never reads or writes storage: every
    call works on the snapshot carried by the request.

    Usage:
        service = RecommendationService(catalog)
        response = service.recommend(RecommendationRequest(records=[...], goal="roi"))
    """

    def __init__(self, catalog: CalendarCatalog, config: Optional[ScoringConfig] = None):
        self.catalog = catalog
        self.config = config

    @staticmethod
    def to_record(item: PromotionRecordIn) -> PromotionRecord:
        return PromotionRecord(
            id=item.id,
            code=item.code,
            description=item.description,
            category=item.category,
            discount_kind=item.discount_kind,
            discount_value=item.discount_value,
            min_order_amount=item.min_order_amount,
            max_discount_amount=item.max_discount_amount,
            usage_limit=item.usage_limit,
            duration_days=item.duration_days,
            applicable_order_types=tuple(item.applicable_order_types),
            times_redeemed=item.times_redeemed,
            roi_score=item.roi_score,
            redemption_rate=item.redemption_rate,
            revenue_generated=item.revenue_generated,
            created_at=item.created_at,
            updated_at=item.updated_at,
            is_active=item.is_active,
            expires_at=item.expires_at,
        )

    def _to_records(self, items: Iterable[PromotionRecordIn]) -> list[PromotionRecord]:
        records = [self.to_record(item) for item in items]
        ids = [r.id for r in records]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ServiceError(
                status_code=400,
                code="VALIDATION_ERROR",
                message="Promotion record ids must be unique.",
                details={"duplicate_ids": duplicates},
            )
        return records

    def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        """Return the ranked, annotated shortlist for the requested goal."""
        records = self._to_records(request.records)
        now = request.as_of or datetime.now(timezone.utc)

        result = build_report(
            records,
            request.goal,
            now=now,
            catalog=self.catalog,
            top_n=request.top_n,
            config=self.config,
        )
        if not result.recommendations:
            logger.info(
                "No eligible templates among %d records for goal %s",
                len(records), result.goal.value,
            )

        return RecommendationResponse(
            goal=result.goal,
            goal_label=CampaignGoal(result.goal).label,
            recommendations=[
                RankedRecommendationOut(
                    record_id=item.record.id,
                    code=item.record.code,
                    category=item.record.category.value,
                    rank=item.rank,
                    metric_value=item.metric_value,
                    display_value=item.display_value,
                    rationale=item.rationale,
                )
                for item in result.recommendations
            ],
            headline=result.headline,
            context=self._context_out(result.context),
            excluded_record_ids=result.excluded_ids,
        )

    def portfolio_metrics(self, request: MetricsRequest) -> PortfolioMetricsResponse:
        """Return portfolio totals and per-record metrics for the snapshot."""
        records = self._to_records(request.records)
        portfolio = compute_portfolio_metrics(records, now=request.as_of, config=self.config)

        return PortfolioMetricsResponse(
            record_count=portfolio.record_count,
            active_count=portfolio.active_count,
            total_redemptions=portfolio.total_redemptions,
            total_discount_given=portfolio.total_discount_given,
            total_revenue_influenced=portfolio.total_revenue_influenced,
            roi=portfolio.roi,
            cost_per_acquisition=portfolio.cost_per_acquisition,
            effectiveness_score=portfolio.effectiveness_score,
            records=[
                PromotionMetricsOut(
                    record_id=m.record_id,
                    discount_given=m.discount_given,
                    revenue_influenced=m.revenue_influenced,
                    roi=m.roi,
                    cost_per_redemption=m.cost_per_redemption,
                    effectiveness_score=m.effectiveness_score,
                    cap_utilization=m.cap_utilization,
                )
                for m in portfolio.records
            ],
            excluded_record_ids=list(portfolio.excluded_ids),
        )

    def calendar_context(self, as_of: Optional[Union[date, datetime]] = None) -> CalendarContextOut:
        now = as_of or datetime.now(timezone.utc)
        return self._context_out(get_context(now, self.catalog))

    @staticmethod
    def _event_out(event: CampusEvent) -> CampusEventOut:
        return CampusEventOut(
            id=event.id,
            name=event.name,
            kind=event.kind.value,
            start=event.start,
            end=event.end,
            impact=event.impact.value,
            description=event.description,
            order_behavior=event.order_behavior,
            category_affinity=sorted(c.value for c in event.category_affinity),
        )

    @staticmethod
    def _season_out(season: Optional[SeasonalPattern]) -> Optional[SeasonalPatternOut]:
        if season is None:
            return None
        return SeasonalPatternOut(
            name=season.name,
            months=sorted(season.months),
            avg_order_increase=season.avg_order_increase,
            peak_days=list(season.peak_days),
            category_affinity=sorted(c.value for c in season.category_affinity),
            description=season.description,
        )

    def _context_out(self, context: CalendarContext) -> CalendarContextOut:
        return CalendarContextOut(
            today=context.today,
            active_events=[self._event_out(e) for e in context.active_events],
            upcoming_events=[self._event_out(e) for e in context.upcoming_events],
            current_season=self._season_out(context.current_season),
        )
