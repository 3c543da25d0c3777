"""
Ranking engine: orders promotion templates by a single campaign goal.
"""

import logging
from typing import Iterable, Optional

from promo_engine.metrics import compute_metrics, partition_records, redemption_component
from promo_engine.models import CampaignGoal, PromotionRecord, RankedRecommendation
from promo_engine.settings import ScoringConfig, get_scoring_config

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 3


def has_activity(record: PromotionRecord) -> bool:
    """A record is rankable only once it has some historical signal."""
    return (
        record.times_redeemed > 0
        or (record.roi_score or 0) > 0
        or (record.revenue_generated or 0) > 0
    )


def goal_metric(
    record: PromotionRecord,
    goal: CampaignGoal,
    config: Optional[ScoringConfig] = None,
) -> float:
    """
    Value of the goal's metric for a record.

    Stored metrics are treated as a cache and used when present; otherwise
    the value is computed from the raw counters:
    - roi: computed ROI percentage
    - redemption_rate: cap utilization, or the neutral uncapped rate (60/20)
    - revenue: revenue influenced
    """
    config = config or get_scoring_config()
    goal = CampaignGoal(goal)

    if goal == CampaignGoal.ROI:
        if record.roi_score is not None:
            return float(record.roi_score)
        return float(compute_metrics(record, config=config).roi)

    if goal == CampaignGoal.REDEMPTION_RATE:
        if record.redemption_rate is not None:
            return float(record.redemption_rate)
        return float(redemption_component(record, config))

    if record.revenue_generated is not None:
        return float(record.revenue_generated)
    return float(compute_metrics(record, config=config).revenue_influenced)


def rank(
    records: Iterable[PromotionRecord],
    goal: CampaignGoal,
    top_n: int = DEFAULT_TOP_N,
    config: Optional[ScoringConfig] = None,
) -> list[RankedRecommendation]:
    """
    Select and order the top promotion records for a goal.

    Rules:
    - Malformed records are skipped (see metrics.partition_records)
    - Records without any activity signal are not eligible
    - Sort descending by the goal metric; ties keep input order (stable sort)
    - Truncate to top_n and assign 1-based ranks

    Returns:
        List of RankedRecommendation with empty rationale; empty when nothing is eligible

    Raises:
        ValueError: If top_n < 1
    """
    if top_n < 1:
        raise ValueError(f"top_n must be >= 1, got {top_n}")
    config = config or get_scoring_config()
    goal = CampaignGoal(goal)

    valid, _ = partition_records(records)
    eligible = [r for r in valid if has_activity(r)]

    scored = [(goal_metric(r, goal, config), r) for r in eligible]
    scored.sort(key=lambda pair: pair[0], reverse=True)

    ranked = [
        RankedRecommendation(record=record, rank=position, metric_value=value)
        for position, (value, record) in enumerate(scored[:top_n], start=1)
    ]
    logger.debug(
        "Ranked %d of %d eligible records by %s",
        len(ranked), len(eligible), goal.value,
    )
    return ranked
