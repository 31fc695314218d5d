from . import trips
from . import locations
from . import places
from . import attractions
from . import credits
from . import payments

__all__ = [
    "trips",
    "locations",
    "places",
    "attractions",
    "credits",
    "payments",
]
