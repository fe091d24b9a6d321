"""Cached read access to "who follows whom"."""

import logging

from .. import config
from .cache import TTLCache
from .store import ContentStore

logger = logging.getLogger(__name__)


class SocialGraphReader:
    """Per-user following sets with a short-lived cache.

    Store failures degrade to an empty set, which callers cannot tell apart
    from "follows nobody".  Empty results caused by a failure are not cached.
    """

    def __init__(self, store: ContentStore, cache: TTLCache[frozenset[str]] | None = None) -> None:
        self.store = store
        if cache is None:
            cache = TTLCache(config.get_following_ttl_seconds(), name="following")
        self.cache = cache

    async def get_following(self, user_id: str) -> frozenset[str]:
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        try:
            following = frozenset(await self.store.fetch_following(user_id))
        except Exception:
            logger.warning("Could not load following for user %s", user_id, exc_info=True)
            return frozenset()

        self.cache.set(user_id, following)
        logger.debug("User %s follows %d accounts", user_id, len(following))
        return following

    def invalidate(self, user_id: str) -> None:
        self.cache.invalidate(user_id)

    def clear(self) -> None:
        self.cache.clear()
