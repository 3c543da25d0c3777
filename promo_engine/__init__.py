from .campus_calendar import get_context, load_catalog
from .errors import CatalogError, MalformedRecordError
from .metrics import compute_metrics, compute_portfolio_metrics, validate_record
from .models import (
    CampaignGoal,
    DiscountKind,
    PromotionCategory,
    PromotionRecord,
    RankedRecommendation,
    RecommendationResult,
)
from .ranking import rank
from .rationale import explain
from .recommender import build_report, recommend

__version__ = "0.1.0"

__all__ = [
    "get_context",
    "load_catalog",
    "CatalogError",
    "MalformedRecordError",
    "compute_metrics",
    "compute_portfolio_metrics",
    "validate_record",
    "CampaignGoal",
    "DiscountKind",
    "PromotionCategory",
    "PromotionRecord",
    "RankedRecommendation",
    "RecommendationResult",
    "rank",
    "explain",
    "build_report",
    "recommend",
]
