"""
Display helpers for metric values.

No currency symbol or locale is applied; that is the presentation layer's job.
"""

from decimal import ROUND_HALF_UP, Decimal

from promo_engine.models import CampaignGoal


def _half_up(value: Decimal, places: str = "1") -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_percent(value: float) -> str:
    """
    Example:
        >>> format_percent(91.0)
        '91%'
        >>> format_percent(87.5)
        '87.5%'
    """
    rounded = _half_up(Decimal(str(value)), "0.1")
    if rounded == rounded.to_integral_value():
        return f"{int(rounded)}%"
    return f"{rounded}%"


def abbreviate_amount(value: float) -> str:
    """
    Short money string: whole units below 1,000, then thousands and millions.

    Example:
        >>> abbreviate_amount(142000)
        '142k'
        >>> abbreviate_amount(1250000)
        '1.3M'
    """
    amount = Decimal(str(value))
    sign = "-" if amount < 0 else ""
    amount = abs(amount)

    whole = _half_up(amount)
    if whole == 0:
        return "0"
    if whole < 1000:
        return f"{sign}{int(whole)}"

    thousands = _half_up(amount / 1000)
    if thousands < 1000:
        return f"{sign}{int(thousands)}k"

    millions = _half_up(amount / 1_000_000, "0.1")
    if millions == millions.to_integral_value():
        return f"{sign}{int(millions)}M"
    return f"{sign}{millions}M"


def format_metric_value(value: float, goal: CampaignGoal) -> str:
    """Percent string for roi / redemption_rate, abbreviated amount for revenue."""
    if CampaignGoal(goal) == CampaignGoal.REVENUE:
        return abbreviate_amount(value)
    return format_percent(value)


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"
