"""Runtime configuration and algorithm tunables.

Deployment settings are read from the environment (``.env`` is loaded by the
package on import).  Algorithm tunables are plain module-level constants.
"""

import os

# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------

# Location signal
LOCATION_RADIUS_M = 10_000
LOCATION_MAX_SEARCH_LOCATIONS = 5
LOCATION_POSTS_PER_QUERY = 100
LOCATION_MIN_POSTS = 2

# Mutual-connections signal
MUTUAL_BATCH_SIZE = 5
MUTUAL_MIN_CONNECTIONS = 2

# Activity signal
ACTIVITY_RECENT_POSTS = 20
ACTIVITY_MIN_INTERACTIONS = 3

# Popularity signal
POPULARITY_WINDOW_DAYS = 7
POPULARITY_GLOBAL_POSTS = 200
POPULARITY_TOP_AUTHORS = 10
POPULARITY_MIN_ENGAGEMENT = 5
POPULARITY_LIKERS_CONCURRENCY = 20

# Engine
CONTEXT_RECENT_POSTS = 50
DEFAULT_LIMIT = 10
MAX_RANKED_FOR_DIVERSITY = 50
MERGE_BOOST = 0.3

DEFAULT_SUGGESTIONS_TTL_SECONDS = 10 * 60
DEFAULT_FOLLOWING_TTL_SECONDS = 5 * 60


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return float(raw)


def get_api_key() -> str | None:
    return os.environ.get("API_KEY")


def get_elasticsearch_url() -> str:
    return os.environ.get("ELASTICSEARCH_URL", "http://localhost:9200")


def get_elasticsearch_api_key() -> str | None:
    return os.environ.get("ELASTICSEARCH_API_KEY") or None


def get_suggestions_ttl_seconds() -> float:
    return _float_env("SUGGESTIONS_CACHE_TTL_SECONDS", DEFAULT_SUGGESTIONS_TTL_SECONDS)


def get_following_ttl_seconds() -> float:
    return _float_env("FOLLOWING_CACHE_TTL_SECONDS", DEFAULT_FOLLOWING_TTL_SECONDS)


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()
