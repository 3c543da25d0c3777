"""
Metrics Calculator: turns redemption counters into financial and behavioral metrics.

Per-redemption math (all money in Decimal, rounded half-up to integer units at the end):
    basket              = max(min_order_amount, reference_basket)
    per_redemption      = flat value, or (percentage / 100) * basket
    discount_given      = per_redemption * times_redeemed
    revenue_influenced  = basket * order_uplift * times_redeemed
    roi                 = (revenue - discount) / discount * 100   (0 when discount is 0)
    cost_per_redemption = discount / times_redeemed               (0 when unused)

Effectiveness score (clamped to 0-100):
    redemption_component * 0.4 + min(roi / 5, 40) + active_coverage * 20

active_coverage is a portfolio-level ratio; it is 0 when a record is scored alone.
"""

import logging
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from promo_engine.errors import MalformedRecordError
from promo_engine.models import DiscountKind, PortfolioMetrics, PromotionMetrics, PromotionRecord
from promo_engine.settings import ScoringConfig, get_scoring_config

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


def _round_half_up(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def _clamp_score(value: Decimal) -> int:
    return max(0, min(100, _round_half_up(value)))


def validate_record(record: PromotionRecord) -> None:
    """
    Reject records whose discount shape would produce a nonsensical metric.

    Raises:
        MalformedRecordError: If the discount kind is missing, a percentage is
            outside (0, 100], a flat amount is <= 0, or a counter is negative
    """
    value = record.discount_value
    if record.discount_kind is None:
        raise MalformedRecordError(record.id, "missing discount kind")
    if value is None or not math.isfinite(value):
        raise MalformedRecordError(record.id, f"discount value {value!r} is not a number")
    if record.discount_kind == DiscountKind.PERCENTAGE and not (0 < value <= 100):
        raise MalformedRecordError(record.id, f"percentage {value} outside (0, 100]")
    if record.discount_kind == DiscountKind.FLAT and value <= 0:
        raise MalformedRecordError(record.id, f"flat amount {value} must be > 0")
    if record.times_redeemed < 0:
        raise MalformedRecordError(record.id, f"times_redeemed {record.times_redeemed} is negative")
    min_order = record.min_order_amount or 0
    if not math.isfinite(min_order) or min_order < 0:
        raise MalformedRecordError(record.id, f"min_order_amount {min_order} is negative")


def partition_records(records: Iterable[PromotionRecord]) -> tuple[list[PromotionRecord], list[str]]:
    """
    Split records into scorable ones and the ids of malformed ones.

    Malformed records are data-quality issues for the caller to surface;
    they are logged and left out, never scored.
    """
    valid: list[PromotionRecord] = []
    excluded: list[str] = []
    for record in records:
        try:
            validate_record(record)
        except MalformedRecordError as exc:
            logger.warning("Excluding promotion record: %s", exc)
            excluded.append(record.id)
            continue
        valid.append(record)
    return valid, excluded


def _basket(record: PromotionRecord, config: ScoringConfig) -> Decimal:
    return max(_dec(record.min_order_amount or 0), _dec(config.reference_basket))


def per_redemption_discount(record: PromotionRecord, config: Optional[ScoringConfig] = None) -> Decimal:
    """Discount granted by one redemption, before rounding."""
    config = config or get_scoring_config()
    if record.discount_kind == DiscountKind.FLAT:
        return _dec(record.discount_value)
    return _dec(record.discount_value) / HUNDRED * _basket(record, config)


def cap_utilization(record: PromotionRecord) -> Optional[Decimal]:
    """Share of the redemption cap consumed, 0-100. None for uncapped records."""
    if not record.usage_limit or record.usage_limit <= 0:
        return None
    ratio = Decimal(record.times_redeemed) / Decimal(record.usage_limit)
    return min(ratio, Decimal("1")) * HUNDRED


def redemption_component(record: PromotionRecord, config: Optional[ScoringConfig] = None) -> Decimal:
    """
    Redemption-rate input to the effectiveness score.

    Capped records use cap utilization. Uncapped records get a neutral
    value: 60 once redeemed, 20 before any redemption.
    """
    config = config or get_scoring_config()
    utilization = cap_utilization(record)
    if utilization is not None:
        return utilization
    if record.times_redeemed > 0:
        return _dec(config.uncapped_used_rate)
    return _dec(config.uncapped_unused_rate)


def _roi(revenue: Decimal, discount: Decimal) -> Decimal:
    if discount <= 0:
        return ZERO
    return (revenue - discount) / discount * HUNDRED


def _effectiveness(
    redemption: Decimal,
    roi: Decimal,
    active_coverage: Decimal,
    config: ScoringConfig,
) -> int:
    roi_component = min(roi / _dec(config.roi_divisor), _dec(config.roi_component_cap))
    score = (
        redemption * _dec(config.redemption_weight)
        + roi_component
        + active_coverage * _dec(config.active_coverage_points)
    )
    return _clamp_score(score)


def compute_metrics(
    record: PromotionRecord,
    active_coverage: float = 0.0,
    config: Optional[ScoringConfig] = None,
) -> PromotionMetrics:
    """
    Derive metrics for one promotion record.

    Args:
        record: PromotionRecord snapshot (never modified)
        active_coverage: portfolio share of live records (0-1); 0 when scoring alone
        config: Optional ScoringConfig (uses environment-backed defaults if not provided)

    Returns:
        PromotionMetrics with integer money fields and a 0-100 effectiveness score

    Raises:
        MalformedRecordError: If the record fails validate_record

    Example:
        20% off, no minimum order, 10 redemptions:
        per redemption 20, discount 200, revenue 1500, roi 650
    """
    config = config or get_scoring_config()
    validate_record(record)

    times = Decimal(record.times_redeemed)
    discount = per_redemption_discount(record, config) * times
    revenue = _basket(record, config) * _dec(config.order_uplift) * times
    roi = _roi(revenue, discount)
    cost = discount / times if times > 0 else ZERO

    redemption = redemption_component(record, config)
    utilization = cap_utilization(record)
    coverage = min(max(_dec(active_coverage), ZERO), Decimal("1"))

    return PromotionMetrics(
        record_id=record.id,
        discount_given=_round_half_up(discount),
        revenue_influenced=_round_half_up(revenue),
        roi=_round_half_up(roi),
        cost_per_redemption=_round_half_up(cost),
        effectiveness_score=_effectiveness(redemption, roi, coverage, config),
        redemption_component=float(redemption),
        cap_utilization=_round_half_up(utilization) if utilization is not None else None,
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_live(record: PromotionRecord, now: datetime) -> bool:
    """Active flag set and not yet expired. Naive timestamps are read as UTC."""
    if not record.is_active:
        return False
    if record.expires_at is None:
        return True
    return _as_utc(record.expires_at) > _as_utc(now)


def compute_portfolio_metrics(
    records: Iterable[PromotionRecord],
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
) -> PortfolioMetrics:
    """
    Aggregate metrics across a set of promotion records.

    Malformed records are excluded and reported in `excluded_ids`. The
    active-coverage component (live records / all scored records) is applied
    to the portfolio score and to every per-record score.
    """
    config = config or get_scoring_config()
    if now is None:
        now = datetime.now(timezone.utc)

    valid, excluded = partition_records(records)
    count = len(valid)
    if count == 0:
        return PortfolioMetrics(
            record_count=0,
            active_count=0,
            total_redemptions=0,
            total_discount_given=0,
            total_revenue_influenced=0,
            roi=0,
            cost_per_acquisition=0,
            effectiveness_score=0,
            excluded_ids=tuple(excluded),
        )

    active_count = sum(1 for r in valid if is_live(r, now))
    coverage = Decimal(active_count) / Decimal(count)

    total_redemptions = sum(r.times_redeemed for r in valid)
    total_discount = sum(
        (per_redemption_discount(r, config) * r.times_redeemed for r in valid), ZERO
    )
    total_revenue = sum(
        (_basket(r, config) * _dec(config.order_uplift) * r.times_redeemed for r in valid), ZERO
    )
    roi = _roi(total_revenue, total_discount)
    cpa = total_discount / total_redemptions if total_redemptions > 0 else ZERO
    mean_redemption = sum((redemption_component(r, config) for r in valid), ZERO) / count

    per_record = tuple(compute_metrics(r, float(coverage), config) for r in valid)

    return PortfolioMetrics(
        record_count=count,
        active_count=active_count,
        total_redemptions=total_redemptions,
        total_discount_given=_round_half_up(total_discount),
        total_revenue_influenced=_round_half_up(total_revenue),
        roi=_round_half_up(roi),
        cost_per_acquisition=_round_half_up(cpa),
        effectiveness_score=_effectiveness(mean_redemption, roi, coverage, config),
        records=per_record,
        excluded_ids=tuple(excluded),
    )
