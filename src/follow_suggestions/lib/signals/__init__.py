"""Signal generation framework for follow suggestions.

Each signal is an independent source of relevance evidence.  Built-in
generators are registered here, keyed by their signal type.
"""

from .activity import ActivitySignalGenerator
from .base import (
    SignalContext,
    SignalGenerator,
    get_generator,
    list_generators,
    register_generator,
)
from .location import LocationSignalGenerator
from .mutual import MutualSignalGenerator
from .popularity import PopularitySignalGenerator

# Register built-in generators
register_generator(LocationSignalGenerator())
register_generator(MutualSignalGenerator())
register_generator(ActivitySignalGenerator())
register_generator(PopularitySignalGenerator())

__all__ = [
    "SignalContext",
    "SignalGenerator",
    "get_generator",
    "list_generators",
    "register_generator",
    "ActivitySignalGenerator",
    "LocationSignalGenerator",
    "MutualSignalGenerator",
    "PopularitySignalGenerator",
]
