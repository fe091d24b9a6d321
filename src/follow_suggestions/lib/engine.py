"""Suggestions engine – the one entry point for follow suggestions.

Pipeline for a single request:
    cache → context fetch → signals (concurrently) → merge → rank
    → diversity selection → cache

A missing suggestion list is never fatal to the caller, so every failure
below the engine degrades to fewer (or no) suggestions instead of raising.
"""

import asyncio
import logging

from pydantic import ValidationError

from .. import config
from ..models import Candidate, SignalType, SuggestionEvent, SuggestionOptions
from .cache import TTLCache
from .ranking import merge_candidates, rank_candidates, select_diverse
from .signals import SignalContext, SignalGenerator, get_generator
from .social_graph import SocialGraphReader
from .store import ContentStore, EventSink

logger = logging.getLogger(__name__)

# Merge order of signal outputs; fused scores depend on it.
SIGNAL_ORDER = (
    SignalType.LOCATION,
    SignalType.MUTUAL,
    SignalType.ACTIVITY,
    SignalType.POPULAR,
)


class SuggestionsEngine:
    """Computes, caches and invalidates follow suggestions.

    The engine owns its suggestion cache.  ``generators`` defaults to the
    registered built-in signals.
    """

    def __init__(
        self,
        store: ContentStore,
        social_graph: SocialGraphReader | None = None,
        cache: TTLCache[list[Candidate]] | None = None,
        generators: dict[SignalType, SignalGenerator] | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        self.store = store
        self.social_graph = social_graph if social_graph is not None else SocialGraphReader(store)
        if cache is None:
            cache = TTLCache(config.get_suggestions_ttl_seconds(), name="suggestions")
        self.cache = cache
        if generators is None:
            generators = {s: g for s in SIGNAL_ORDER if (g := get_generator(s)) is not None}
        self.generators = generators
        self.event_sink = event_sink
        self._pending_events: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    async def get_suggestions(
        self,
        user_id: str,
        options: SuggestionOptions | None = None,
        **overrides,
    ) -> list[Candidate]:
        """Return up to ``options.limit`` suggestions for *user_id*.

        Keyword ``overrides`` are applied on top of *options*, e.g.
        ``get_suggestions(uid, limit=5, include_popular=False)``.
        """
        options = options or SuggestionOptions()
        if overrides:
            options = SuggestionOptions.model_validate({**options.model_dump(), **overrides})

        cached = self.cache.get(user_id)
        if cached is not None:
            logger.info("Returning cached follow suggestions for %s", user_id)
            return cached[: options.limit]

        try:
            suggestions = await self._compute(user_id, options)
        except Exception:
            logger.exception("Error generating follow suggestions for %s", user_id)
            return []

        self.cache.set(user_id, suggestions)
        logger.info("Generated %d follow suggestions for %s", len(suggestions), user_id)
        return list(suggestions)

    async def _compute(self, user_id: str, options: SuggestionOptions) -> list[Candidate]:
        following, profile, posts = await asyncio.gather(
            self.social_graph.get_following(user_id),
            self.store.fetch_user_profile(user_id),
            self.store.fetch_recent_posts(user_id, config.CONTEXT_RECENT_POSTS),
        )
        context = SignalContext(
            user_id=user_id,
            following=following,
            profile=profile,
            posts=posts,
            location=options.location,
        )

        requested = options.enabled_signals()
        enabled = [s for s in SIGNAL_ORDER if s in requested and s in self.generators]
        outputs = await asyncio.gather(
            *(self._run_generator(self.generators[s], context) for s in enabled)
        )

        merged = merge_candidates(outputs, user_id, following)
        ranked = rank_candidates(merged.values())
        ranked = ranked[: min(options.limit * 2, config.MAX_RANKED_FOR_DIVERSITY)]
        return select_diverse(ranked, options.limit)

    async def _run_generator(
        self, generator: SignalGenerator, context: SignalContext
    ) -> list[Candidate]:
        try:
            candidates = await generator.generate(self.store, self.social_graph, context)
        except Exception:
            logger.exception(
                "Signal '%s' failed for user %s", generator.signal_type.value, context.user_id
            )
            return []
        logger.debug(
            "Signal '%s' produced %d candidates for %s",
            generator.signal_type.value,
            len(candidates),
            context.user_id,
        )
        return candidates

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def invalidate(self, user_id: str) -> None:
        """Forget cached suggestions and the following set of *user_id*."""
        self.cache.invalidate(user_id)
        self.social_graph.invalidate(user_id)
        logger.info("Follow suggestion caches cleared for %s", user_id)

    def invalidate_all(self) -> None:
        self.cache.clear()
        self.social_graph.clear()
        logger.info("All follow suggestion caches cleared")

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------

    def record_event(
        self,
        user_id: str,
        candidate_id: str,
        action: str,
        signal_type: SignalType | str,
    ) -> None:
        """Record what a user did with a suggestion.  Never raises."""
        try:
            event = SuggestionEvent(
                user_id=user_id,
                candidate_id=candidate_id,
                action=action,
                signal_type=signal_type,
            )
        except ValidationError as exc:
            logger.warning("Dropping invalid suggestion event: %s", exc)
            return

        logger.info(
            "Suggestion event",
            extra={"suggestion_event": event.model_dump(mode="json")},
        )
        if self.event_sink is None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; suggestion event not delivered")
            return
        task = loop.create_task(self._deliver(event))
        self._pending_events.add(task)
        task.add_done_callback(self._pending_events.discard)

    async def _deliver(self, event: SuggestionEvent) -> None:
        try:
            await self.event_sink.write(event)
        except Exception:
            logger.warning("Could not deliver suggestion event", exc_info=True)

    async def flush_events(self) -> None:
        """Wait for in-flight event deliveries (used on shutdown)."""
        if self._pending_events:
            await asyncio.gather(*list(self._pending_events))
