from .recommendation import router as recommendation_router

__all__ = [
    "recommendation_router",
]
