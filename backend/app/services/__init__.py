from .errors import ServiceError
from .recommendation_service import RecommendationService

__all__ = [
    "ServiceError",
    "RecommendationService",
]
