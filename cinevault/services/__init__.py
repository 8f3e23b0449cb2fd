from . import (
    progress_service,
    rating_service,
    region_service,
    suggestion_service,
    taste_profile_service,
)

__all__ = [
    "progress_service",
    "rating_service",
    "region_service",
    "suggestion_service",
    "taste_profile_service",
]
