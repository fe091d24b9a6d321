"""Shared fixtures: an in-memory content store standing in for Elasticsearch."""

from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from .lib.elasticsearch import StoreError
from .lib.geo import distance_between
from .lib.social_graph import SocialGraphReader
from .lib.store import ContentStore
from .models import Location, Post, Profile


class FakeStore(ContentStore):
    """Configurable fake content store for unit tests.

    ``failures`` maps a method name to ``True`` (always raise) or to a set of
    first-argument values that raise, e.g. ``{"fetch_likers": {"p1"}}``.
    """

    def __init__(self):
        self.following: dict[str, set[str]] = {}
        self.profiles: dict[str, Profile] = {}
        self.posts: list[Post] = []
        self.likes: dict[str, list[str]] = {}
        self.failures: dict[str, object] = {}
        self.calls: Counter[str] = Counter()
        self._clock = datetime.now(timezone.utc) - timedelta(hours=1)

    # -- fixture builders ---------------------------------------------------

    def follow(self, follower: str, *followees: str) -> None:
        self.following.setdefault(follower, set()).update(followees)

    def add_profile(self, user_id: str, **fields) -> None:
        self.profiles[user_id] = Profile(id=user_id, **fields)

    def add_post(
        self,
        post_id: str,
        author_id: str,
        latitude: float | None = None,
        longitude: float | None = None,
        timestamp: datetime | None = None,
    ) -> Post:
        # Each post added is a second newer than the previous one.
        self._clock += timedelta(seconds=1)
        post = Post(
            id=post_id,
            author_id=author_id,
            latitude=latitude,
            longitude=longitude,
            timestamp=timestamp or self._clock,
        )
        self.posts.append(post)
        return post

    def like(self, post_id: str, *user_ids: str) -> None:
        self.likes.setdefault(post_id, []).extend(user_ids)

    # -- ContentStore ---------------------------------------------------------

    def _record(self, name: str, key=None) -> None:
        self.calls[name] += 1
        failing = self.failures.get(name)
        if failing is True or (isinstance(failing, (set, frozenset)) and key in failing):
            raise StoreError(f"{name} unavailable")

    async def fetch_following(self, user_id: str) -> set[str]:
        self._record("fetch_following", user_id)
        return set(self.following.get(user_id, set()))

    async def fetch_followers(self, user_id: str) -> set[str]:
        self._record("fetch_followers", user_id)
        return {f for f, followees in self.following.items() if user_id in followees}

    async def fetch_user_profile(self, user_id: str) -> Profile | None:
        self._record("fetch_user_profile", user_id)
        return self.profiles.get(user_id)

    async def fetch_recent_posts(self, user_id: str, limit: int) -> list[Post]:
        self._record("fetch_recent_posts", user_id)
        mine = [p for p in self.posts if p.author_id == user_id]
        mine.sort(key=lambda p: p.timestamp, reverse=True)
        return mine[:limit]

    async def fetch_posts_near_location(
        self, location: Location, radius_m: float, limit: int
    ) -> list[Post]:
        self._record("fetch_posts_near_location", (location.latitude, location.longitude))
        nearby = [
            p for p in self.posts
            if p.location is not None and distance_between(location, p.location) <= radius_m
        ]
        return nearby[:limit]

    async def fetch_recent_global_posts(self, since: datetime, limit: int) -> list[Post]:
        self._record("fetch_recent_global_posts")
        recent = [p for p in self.posts if p.timestamp >= since]
        recent.sort(key=lambda p: p.timestamp, reverse=True)
        return recent[:limit]

    async def fetch_likers(self, post_id: str) -> list[str]:
        self._record("fetch_likers", post_id)
        return list(self.likes.get(post_id, []))


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def social_graph(store):
    return SocialGraphReader(store)
