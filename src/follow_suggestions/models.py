from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from . import config


class SignalType(str, Enum):
    """Relevance signals a candidate can be discovered by."""

    LOCATION = "location"
    MUTUAL = "mutual"
    ACTIVITY = "activity"
    POPULAR = "popular"


class Location(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class Post(BaseModel):
    """A piece of content as read from the content store."""

    id: str = Field(..., description="Post identifier")
    author_id: str = Field(..., description="Account that authored the post")
    latitude: float | None = Field(None, description="Latitude the post was made at")
    longitude: float | None = Field(None, description="Longitude the post was made at")
    timestamp: datetime = Field(..., description="Creation time of the post")
    like_count: int | None = Field(None, description="Denormalised like counter, if stored")

    @property
    def location(self) -> Location | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Location(latitude=self.latitude, longitude=self.longitude)


class Profile(BaseModel):
    """Account profile. Unknown stored fields are kept as extras."""

    model_config = ConfigDict(extra="allow")

    id: str
    display_name: str | None = None
    username: str | None = None


class Candidate(BaseModel):
    """One recommended account for one requesting user."""

    candidate_id: str = Field(..., description="Identifier of the suggested account")
    score: float = Field(..., description="Fused relevance score")
    reasons: list[str] = Field(
        default_factory=list,
        description="Human-readable justification, one per contributing signal occurrence",
    )
    signal_types: list[SignalType] = Field(
        ...,
        min_length=1,
        description="Distinct signals that found this candidate; the first is the primary one",
    )
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def primary_signal(self) -> SignalType:
        return self.signal_types[0]


class SuggestionOptions(BaseModel):
    limit: int = Field(config.DEFAULT_LIMIT, ge=1, le=config.MAX_RANKED_FOR_DIVERSITY)
    include_location: bool = True
    include_mutual: bool = True
    include_activity: bool = True
    include_popular: bool = True
    location: Location | None = None

    def enabled_signals(self) -> list[SignalType]:
        flags = [
            (SignalType.LOCATION, self.include_location),
            (SignalType.MUTUAL, self.include_mutual),
            (SignalType.ACTIVITY, self.include_activity),
            (SignalType.POPULAR, self.include_popular),
        ]
        return [signal for signal, enabled in flags if enabled]


class SuggestionEvent(BaseModel):
    """A telemetry record of what a user did with a suggestion."""

    user_id: str
    candidate_id: str
    action: Literal["viewed", "followed", "dismissed"]
    signal_type: SignalType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
