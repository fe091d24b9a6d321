"""Location signal.

Suggests accounts that post around the places the requester is or has
posted from.  Runs only when the request carries the requester's location:

1. Collect search locations: the requester's current location, then every
   distinct location among their recent posts (first few only).
2. For each search location, fetch nearby posts and count posts per author.
3. Authors with enough posts near a location become candidates, scored on
   post count and on how close their posts are to the requester.  An author
   near several search locations yields one candidate per location; the
   aggregator fuses them.
"""

import logging
from collections import Counter

from ... import config
from ...models import Candidate, Location, Post, SignalType
from ..concurrency import gather_isolated
from ..geo import distance_between
from ..social_graph import SocialGraphReader
from ..store import ContentStore
from .base import SignalContext, SignalGenerator

logger = logging.getLogger(__name__)


def location_score(post_count: int, distance_m: float) -> float:
    post_score = min(post_count * 10, 50)
    distance_score = max(50 - distance_m / 200, 10)
    return post_score + distance_score


def search_locations(context: SignalContext) -> list[Location]:
    """Requester location first, then distinct post locations, capped."""
    locations: list[Location] = []
    if context.location is not None:
        locations.append(context.location)
    for post in context.posts:
        loc = post.location
        if loc is not None and loc not in locations:
            locations.append(loc)
    return locations[: config.LOCATION_MAX_SEARCH_LOCATIONS]


def _candidates_near(
    user_id: str,
    search_location: Location,
    reference: Location,
    posts: list[Post],
) -> list[Candidate]:
    counts: Counter[str] = Counter()
    closest: dict[str, float] = {}
    for post in posts:
        if post.author_id == user_id or post.location is None:
            continue
        counts[post.author_id] += 1
        dist = distance_between(reference, post.location)
        closest[post.author_id] = min(dist, closest.get(post.author_id, dist))

    candidates: list[Candidate] = []
    for author_id, post_count in counts.items():
        if post_count < config.LOCATION_MIN_POSTS:
            continue
        distance = closest[author_id]
        candidates.append(
            Candidate(
                candidate_id=author_id,
                score=location_score(post_count, distance),
                reasons=[f"{post_count} posts near you"],
                signal_types=[SignalType.LOCATION],
                metadata={
                    "posts_in_area": post_count,
                    "distance": round(distance),
                    "location": search_location.model_dump(),
                },
            )
        )
    return candidates


class LocationSignalGenerator(SignalGenerator):
    """Accounts that repeatedly post near the requester."""

    @property
    def signal_type(self) -> SignalType:
        return SignalType.LOCATION

    async def generate(
        self,
        store: ContentStore,
        social_graph: SocialGraphReader,
        context: SignalContext,
    ) -> list[Candidate]:
        if context.location is None:
            return []
        locations = search_locations(context)

        nearby = await gather_isolated(
            (
                store.fetch_posts_near_location(
                    loc, config.LOCATION_RADIUS_M, config.LOCATION_POSTS_PER_QUERY
                )
                for loc in locations
            ),
            default=[],
            label="nearby posts lookup",
        )

        candidates: list[Candidate] = []
        for loc, posts in zip(locations, nearby):
            candidates.extend(_candidates_near(context.user_id, loc, context.location, posts))

        logger.debug(
            "Location signal for %s: %d locations, %d candidates",
            context.user_id,
            len(locations),
            len(candidates),
        )
        return candidates
