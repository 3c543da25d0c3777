"""
Scoring policy constants with environment variable overrides.

The defaults are business assumptions carried over from the storefront analytics:
a 100-unit reference basket, a 1.5x basket uplift and a 0.4/40/20 score split.
Every constant can be tuned without touching the scoring algorithm.
"""

import logging
import math
import os
from dataclasses import dataclass, fields
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def _env_float(
    name: str,
    default: float,
    valid: Optional[Callable[[float], bool]] = None,
) -> float:
    """Read a finite float from the environment; warn and keep the default otherwise."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        value = None
    if value is None or not math.isfinite(value) or (valid is not None and not valid(value)):
        logger.warning("Invalid %s value %r; falling back to default %s", name, raw, default)
        return default
    return value


def _positive(value: float) -> bool:
    return value > 0


def _non_negative(value: float) -> bool:
    return value >= 0


@dataclass(frozen=True)
class ScoringConfig:
    """
    Tunable constants for the Metrics Calculator.

    Fields:
    - reference_basket: basket size used when a record has no minimum order
    - order_uplift: assumed basket growth beyond the minimum order
    - redemption_weight: weight of the redemption component in the score
    - roi_divisor / roi_component_cap: ROI component is min(roi / divisor, cap)
    - active_coverage_points: points awarded at 100% active coverage
    - uncapped_used_rate / uncapped_unused_rate: redemption component for records without a cap

    Raises:
        ValueError: If a field is not finite, roi_divisor <= 0, or
            reference_basket / order_uplift is negative
    """
    reference_basket: float = 100.0
    order_uplift: float = 1.5
    redemption_weight: float = 0.4
    roi_divisor: float = 5.0
    roi_component_cap: float = 40.0
    active_coverage_points: float = 20.0
    uncapped_used_rate: float = 60.0
    uncapped_unused_rate: float = 20.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be a finite number, got {value!r}")
        if not _positive(self.roi_divisor):
            raise ValueError(f"roi_divisor must be > 0, got {self.roi_divisor!r}")
        for name in ("reference_basket", "order_uplift"):
            if not _non_negative(getattr(self, name)):
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)!r}")

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        """Build a config from PROMO_* variables; invalid values fall back per field."""
        defaults = cls()
        return cls(
            reference_basket=_env_float(
                "PROMO_REFERENCE_BASKET", defaults.reference_basket, _non_negative
            ),
            order_uplift=_env_float("PROMO_ORDER_UPLIFT", defaults.order_uplift, _non_negative),
            redemption_weight=_env_float("PROMO_REDEMPTION_WEIGHT", defaults.redemption_weight),
            roi_divisor=_env_float("PROMO_ROI_DIVISOR", defaults.roi_divisor, _positive),
            roi_component_cap=_env_float("PROMO_ROI_COMPONENT_CAP", defaults.roi_component_cap),
            active_coverage_points=_env_float(
                "PROMO_ACTIVE_COVERAGE_POINTS", defaults.active_coverage_points
            ),
            uncapped_used_rate=_env_float("PROMO_UNCAPPED_USED_RATE", defaults.uncapped_used_rate),
            uncapped_unused_rate=_env_float("PROMO_UNCAPPED_UNUSED_RATE", defaults.uncapped_unused_rate),
        )


_default_config: Optional[ScoringConfig] = None


def get_scoring_config() -> ScoringConfig:
    """Return the process-wide config, reading the environment on first use."""
    global _default_config
    if _default_config is None:
        _default_config = ScoringConfig.from_env()
    return _default_config


def reset_scoring_config() -> None:
    """Forget the cached config so the next call re-reads the environment."""
    global _default_config
    _default_config = None


def get_calendar_path() -> Optional[str]:
    path = os.getenv("PROMO_CALENDAR_PATH", "").strip()
    return path or None
