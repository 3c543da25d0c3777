import logging

from promo_engine.campus_calendar import get_default_catalog
from promo_engine.errors import CatalogError
from promo_engine.settings import get_scoring_config

from app.services.errors import ServiceError
from app.services.recommendation_service import RecommendationService

logger = logging.getLogger(__name__)


def get_recommendation_service() -> RecommendationService:
    # Creates a RecommendationService bound to the process-wide catalog and scoring config.
    try:
        catalog = get_default_catalog()
    except CatalogError as exc:
        logger.error("Calendar catalog unavailable: %s", exc)
        raise ServiceError(
            status_code=503,
            code="CATALOG_UNAVAILABLE",
            message="Campus calendar catalog could not be loaded.",
            details={"reason": str(exc)},
        ) from exc
    return RecommendationService(catalog, get_scoring_config())
