"""Read access to the social graph and content the engine ranks over.

``ContentStore`` is the interface the engine is written against.
``ElasticsearchContentStore`` implements it on top of four indices:

* ``follows`` – one document per relationship (``follower_id``, ``following_id``)
* ``users``   – profiles, document id is the account id
* ``posts``   – ``author_id``, ``latitude``, ``longitude``, ``timestamp``, ``like_count``
* ``likes``   – one document per like (``post_id``, ``user_id``)
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import ValidationError

from ..models import Location, Post, Profile, SuggestionEvent
from .elasticsearch import iter_hits, unwrap_es_response
from .geo import bounding_box, distance_between

logger = logging.getLogger(__name__)

FOLLOWS_INDEX = "follows"
USERS_INDEX = "users"
POSTS_INDEX = "posts"
LIKES_INDEX = "likes"
EVENTS_INDEX = "suggestion_events"

# Upper bound on relationship / like documents read for a single account or post.
MAX_RELATIONSHIPS = 10_000


class ContentStore(ABC):
    """Read-only view over follows, profiles, posts and likes."""

    @abstractmethod
    async def fetch_following(self, user_id: str) -> set[str]:
        """Accounts *user_id* follows."""
        ...

    @abstractmethod
    async def fetch_followers(self, user_id: str) -> set[str]:
        """Accounts following *user_id*."""
        ...

    @abstractmethod
    async def fetch_user_profile(self, user_id: str) -> Profile | None:
        ...

    @abstractmethod
    async def fetch_recent_posts(self, user_id: str, limit: int) -> list[Post]:
        """Posts authored by *user_id*, newest first."""
        ...

    @abstractmethod
    async def fetch_posts_near_location(
        self, location: Location, radius_m: float, limit: int
    ) -> list[Post]:
        """Posts within *radius_m* meters of *location*."""
        ...

    @abstractmethod
    async def fetch_recent_global_posts(self, since: datetime, limit: int) -> list[Post]:
        """Posts from any author created at or after *since*, newest first."""
        ...

    @abstractmethod
    async def fetch_likers(self, post_id: str) -> list[str]:
        """Accounts that liked *post_id*."""
        ...


class EventSink(ABC):
    """Destination for suggestion telemetry."""

    @abstractmethod
    async def write(self, event: SuggestionEvent) -> None:
        ...


def _post_from_hit(doc_id: str | None, src: dict) -> Post | None:
    data = dict(src)
    data.setdefault("id", doc_id)
    try:
        return Post.model_validate(data)
    except ValidationError:
        logger.debug("Skipping malformed post document %s", doc_id)
        return None


def _posts_from_response(resp) -> list[Post]:
    data = unwrap_es_response(resp)
    posts = (_post_from_hit(doc_id, src) for doc_id, src in iter_hits(data))
    return [p for p in posts if p is not None]


class ElasticsearchContentStore(ContentStore):
    """``ContentStore`` backed by an ``AsyncElasticsearch`` client."""

    def __init__(self, es) -> None:
        self.es = es

    async def _related_ids(self, field: str, value: str, target: str) -> set[str]:
        resp = await self.es.search(
            index=FOLLOWS_INDEX,
            query={"bool": {"filter": [{"term": {field: value}}]}},
            size=MAX_RELATIONSHIPS,
            _source=[target],
        )
        data = unwrap_es_response(resp)
        return {src[target] for _, src in iter_hits(data) if src.get(target)}

    async def fetch_following(self, user_id: str) -> set[str]:
        return await self._related_ids("follower_id", user_id, "following_id")

    async def fetch_followers(self, user_id: str) -> set[str]:
        return await self._related_ids("following_id", user_id, "follower_id")

    async def fetch_user_profile(self, user_id: str) -> Profile | None:
        resp = await self.es.search(
            index=USERS_INDEX,
            query={"ids": {"values": [user_id]}},
            size=1,
        )
        data = unwrap_es_response(resp)
        for doc_id, src in iter_hits(data):
            return Profile.model_validate({**src, "id": doc_id or user_id})
        return None

    async def fetch_recent_posts(self, user_id: str, limit: int) -> list[Post]:
        resp = await self.es.search(
            index=POSTS_INDEX,
            query={"bool": {"filter": [{"term": {"author_id": user_id}}]}},
            size=limit,
            sort=[{"timestamp": "desc"}],
        )
        return _posts_from_response(resp)

    async def fetch_posts_near_location(
        self, location: Location, radius_m: float, limit: int
    ) -> list[Post]:
        # Bounding box in the query, exact distance checked below.
        min_lat, max_lat, min_lon, max_lon = bounding_box(location, radius_m)
        filters = [{"range": {"latitude": {"gte": min_lat, "lte": max_lat}}}]
        # A box crossing the antimeridian cannot be one longitude range.
        if -180 <= min_lon and max_lon <= 180:
            filters.append({"range": {"longitude": {"gte": min_lon, "lte": max_lon}}})
        resp = await self.es.search(
            index=POSTS_INDEX,
            query={"bool": {"filter": filters}},
            size=limit,
            sort=[{"latitude": "asc"}],
        )
        nearby: list[Post] = []
        for post in _posts_from_response(resp):
            post_location = post.location
            if post_location is None:
                continue
            if distance_between(location, post_location) <= radius_m:
                nearby.append(post)
        return nearby

    async def fetch_recent_global_posts(self, since: datetime, limit: int) -> list[Post]:
        resp = await self.es.search(
            index=POSTS_INDEX,
            query={
                "bool": {
                    "filter": [{"range": {"timestamp": {"gte": since.isoformat()}}}],
                }
            },
            size=limit,
            sort=[{"timestamp": "desc"}],
        )
        return _posts_from_response(resp)

    async def fetch_likers(self, post_id: str) -> list[str]:
        resp = await self.es.search(
            index=LIKES_INDEX,
            query={"bool": {"filter": [{"term": {"post_id": post_id}}]}},
            size=MAX_RELATIONSHIPS,
            _source=["user_id"],
        )
        data = unwrap_es_response(resp)
        return [src["user_id"] for _, src in iter_hits(data) if src.get("user_id")]


class ElasticsearchEventSink(EventSink):
    """Indexes suggestion events into ``suggestion_events``."""

    def __init__(self, es) -> None:
        self.es = es

    async def write(self, event: SuggestionEvent) -> None:
        await self.es.index(index=EVENTS_INDEX, document=event.model_dump(mode="json"))
