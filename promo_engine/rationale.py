"""
Rationale generator: short, human-readable reasons for a shortlisted promotion.

Checks run in a fixed order and the list is cut at MAX_REASONS:
    1. performance statement (always present)
    2. first matching calendar event (active before upcoming)
    3. seasonal pattern
    4. category heuristics (orientation / exam / festival)
    5. duration fit with the next upcoming event
Calendar signals only explain a ranking; they never change it.
"""

from datetime import date, datetime, timezone
from typing import Optional, Sequence

from promo_engine.formatting import abbreviate_amount, format_percent, ordinal
from promo_engine.models import (
    CampaignGoal,
    CampusEvent,
    EventKind,
    PromotionCategory,
    PromotionRecord,
    SeasonalPattern,
)
from promo_engine.ranking import goal_metric

MAX_REASONS = 3

# Duration may overrun the days until the next event by this much.
DURATION_FIT_SLACK_DAYS = 3

CATEGORY_HEURISTICS = (
    (
        PromotionCategory.ACQUISITION,
        EventKind.ORIENTATION,
        "New Student Orientation window — ideal for first-time user acquisition campaigns",
    ),
    (
        PromotionCategory.RETENTION,
        EventKind.EXAM,
        "Exam period loyalty boost — retained users order 3.2× more during high-stress weeks",
    ),
    (
        PromotionCategory.SEASONAL,
        EventKind.FESTIVAL,
        "Festival season amplifier — seasonal promos see 2.1× higher share rates during events",
    ),
)


def performance_statement(goal: CampaignGoal, rank: int, metric_value: float) -> str:
    goal = CampaignGoal(goal)
    if goal == CampaignGoal.ROI:
        return f"ROI score of {format_percent(metric_value)} ranks #{rank} across all templates"
    if goal == CampaignGoal.REDEMPTION_RATE:
        position = "highest" if rank == 1 else f"{ordinal(rank)} highest"
        return f"{format_percent(metric_value)} redemption rate — {position} in your library"
    standing = "top earner" if rank == 1 else f"#{rank} revenue performer"
    return f"Generated {abbreviate_amount(metric_value)} revenue — {standing}"


def _event_signal(
    category: PromotionCategory,
    active_events: Sequence[CampusEvent],
    upcoming_events: Sequence[CampusEvent],
) -> Optional[str]:
    for timing, events in (("Currently active", active_events), ("Starting soon", upcoming_events)):
        for event in events:
            if category in event.category_affinity:
                return f"{timing}: {event.name} — {event.order_behavior}"
    return None


def _season_signal(category: PromotionCategory, season: Optional[SeasonalPattern]) -> Optional[str]:
    if season is None or category not in season.category_affinity:
        return None
    days = " & ".join(season.peak_days[:2])
    increase = format_percent(season.avg_order_increase)
    line = f"{season.name} pattern: +{increase} avg order increase"
    return f"{line} on {days}" if days else line


def _heuristic_signals(category: PromotionCategory, events: Sequence[CampusEvent]) -> list[str]:
    kinds = {event.kind for event in events}
    return [
        sentence
        for wanted_category, event_kind, sentence in CATEGORY_HEURISTICS
        if category == wanted_category and event_kind in kinds
    ]


def _duration_signal(
    record: PromotionRecord,
    upcoming_events: Sequence[CampusEvent],
    today: date,
) -> Optional[str]:
    if not record.duration_days or not upcoming_events:
        return None
    event = upcoming_events[0]
    days_until = (event.start - today).days
    if record.duration_days <= days_until + DURATION_FIT_SLACK_DAYS:
        return f"{record.duration_days}-day duration aligns well with upcoming {event.name} window"
    return None


def explain(
    record: PromotionRecord,
    goal: CampaignGoal,
    rank: int,
    active_events: Sequence[CampusEvent] = (),
    upcoming_events: Sequence[CampusEvent] = (),
    current_season: Optional[SeasonalPattern] = None,
    metric_value: Optional[float] = None,
    today: Optional[date] = None,
) -> list[str]:
    """
    Build the ordered justification list for a ranked record.

    Args:
        record: the ranked PromotionRecord
        goal: active CampaignGoal
        rank: 1-based rank of the record
        active_events / upcoming_events: from the calendar context, in catalog order
        current_season: from the calendar context, may be None
        metric_value: goal metric already computed by the ranking (computed here if None)
        today: reference date for the duration fit (UTC today if None)

    Returns:
        Between 1 and 3 strings; the performance statement is always first
    """
    if metric_value is None:
        metric_value = goal_metric(record, goal)
    if today is None:
        today = datetime.now(timezone.utc).date()

    category = record.category
    reasons: list[Optional[str]] = [performance_statement(goal, rank, metric_value)]
    reasons.append(_event_signal(category, active_events, upcoming_events))
    reasons.append(_season_signal(category, current_season))
    reasons.extend(_heuristic_signals(category, [*active_events, *upcoming_events]))
    reasons.append(_duration_signal(record, upcoming_events, today))

    return [reason for reason in reasons if reason][:MAX_REASONS]
