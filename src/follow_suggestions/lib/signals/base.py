"""Base abstraction for suggestion signals.

Each signal generator has a unique ``signal_type`` and an async ``generate``
method that returns scored candidates for one requesting user.  Generators
are registered in a global registry so the engine can look them up by type.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from ...models import Candidate, Location, Post, Profile, SignalType
from ..social_graph import SocialGraphReader
from ..store import ContentStore


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class SignalContext(BaseModel):
    """What the engine already knows about the requester."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="Requesting account")
    following: frozenset[str] = Field(default_factory=frozenset)
    profile: Profile | None = None
    posts: list[Post] = Field(default_factory=list, description="Requester's recent posts, newest first")
    location: Location | None = Field(None, description="Requester's current location, if shared")


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class SignalGenerator(ABC):
    """Abstract base class for signal generators.

    Subclasses must implement ``signal_type`` (property) and ``generate``.
    Implementations never return the requester as a candidate, but may
    return accounts the requester already follows; those are removed once,
    after all signals are merged.
    """

    @property
    @abstractmethod
    def signal_type(self) -> SignalType:
        ...

    @abstractmethod
    async def generate(
        self,
        store: ContentStore,
        social_graph: SocialGraphReader,
        context: SignalContext,
    ) -> list[Candidate]:
        """Produce scored candidates for ``context.user_id``.

        Partial data-source failures drop only the affected piece.
        """
        ...


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_generators: dict[SignalType, SignalGenerator] = {}


def register_generator(gen: SignalGenerator) -> None:
    """Register a generator instance by its signal type."""
    _generators[gen.signal_type] = gen


def get_generator(signal_type: SignalType) -> SignalGenerator | None:
    """Look up a registered generator.  Returns ``None`` if not found."""
    return _generators.get(signal_type)


def list_generators() -> list[SignalType]:
    """Return the signal types of all registered generators."""
    return list(_generators.keys())
