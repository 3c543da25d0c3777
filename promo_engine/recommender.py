"""
Recommendation assembler with calendar-aware rationale.
Orchestrates context lookup, ranking and explanation into the final shortlist.
"""

from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

from promo_engine.campus_calendar import get_context
from promo_engine.formatting import format_metric_value
from promo_engine.metrics import partition_records
from promo_engine.models import (
    CalendarCatalog,
    CampaignGoal,
    RankedRecommendation,
    RecommendationResult,
)
from promo_engine.ranking import DEFAULT_TOP_N, rank
from promo_engine.rationale import explain
from promo_engine.settings import ScoringConfig


def goal_headline(top: RankedRecommendation, goal: CampaignGoal) -> str:
    """One-sentence insight about the top pick for the goal."""
    goal = CampaignGoal(goal)
    name = top.record.code
    value = format_metric_value(top.metric_value, goal)
    if goal == CampaignGoal.ROI:
        return (
            f'"{name}" delivers the highest return on spend with a {value} ROI score '
            "— ideal for cost-efficient campaigns."
        )
    if goal == CampaignGoal.REDEMPTION_RATE:
        return (
            f'"{name}" achieves the highest redemption rate at {value} '
            "— best for maximizing customer engagement."
        )
    return f'"{name}" has generated the most revenue ({value}) — optimal for revenue-driven campaigns.'


def build_report(
    records: Iterable,
    goal: CampaignGoal,
    now: Optional[Union[date, datetime]] = None,
    catalog: Optional[CalendarCatalog] = None,
    top_n: int = DEFAULT_TOP_N,
    config: Optional[ScoringConfig] = None,
) -> RecommendationResult:
    """
    Rank promotion records for a goal and annotate each pick.

    Args:
        records: PromotionRecord snapshots supplied by the caller
        goal: CampaignGoal (or its string value)
        now: reference timestamp; current UTC time if not provided
        catalog: Optional CalendarCatalog (packaged default if not provided)
        top_n: shortlist length
        config: Optional ScoringConfig

    Returns:
        RecommendationResult; `recommendations` is empty when no record has activity

    Raises:
        ValueError: If goal is unknown or top_n < 1
    """
    goal = CampaignGoal(goal)
    if now is None:
        now = datetime.now(timezone.utc)

    valid, excluded = partition_records(records)

    # One context for every candidate
    context = get_context(now, catalog)

    ranked = rank(valid, goal, top_n=top_n, config=config)
    for item in ranked:
        item.display_value = format_metric_value(item.metric_value, goal)
        item.rationale = explain(
            item.record,
            goal,
            item.rank,
            active_events=context.active_events,
            upcoming_events=context.upcoming_events,
            current_season=context.current_season,
            metric_value=item.metric_value,
            today=context.today,
        )

    return RecommendationResult(
        goal=goal,
        recommendations=ranked,
        context=context,
        headline=goal_headline(ranked[0], goal) if ranked else None,
        excluded_ids=excluded,
    )


def recommend(
    records: Iterable,
    goal: CampaignGoal,
    now: Optional[Union[date, datetime]] = None,
    catalog: Optional[CalendarCatalog] = None,
    top_n: int = DEFAULT_TOP_N,
    config: Optional[ScoringConfig] = None,
) -> list[RankedRecommendation]:
    """
    Generate the ranked, annotated shortlist for a campaign goal.

    This is the entry point for callers; it is a pure function of its
    arguments except for the wall-clock default of `now`.
    """
    return build_report(records, goal, now, catalog, top_n, config).recommendations
