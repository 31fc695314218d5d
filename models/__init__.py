from .Profile import Profile
from .CreditTransaction import CreditTransaction
from .Trip import Trip
from .TripItem import TripItem

__all__ = [
    "Profile",
    "CreditTransaction",
    "Trip",
    "TripItem",
]
