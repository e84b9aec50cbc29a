from moodplaces.models.favorite import Favorite
from moodplaces.models.rate_limit import RateLimit

__all__ = [
    "Favorite",
    "RateLimit",
]
