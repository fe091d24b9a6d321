"""Shared Elasticsearch utilities.

Client construction and response handling used by the content store and
the event sink.
"""

import logging

from elastic_transport import ObjectApiResponse
from elasticsearch import AsyncElasticsearch

from .. import config

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the backing store returns something we cannot read."""


def create_es_client() -> AsyncElasticsearch:
    """Build the application-scoped ``AsyncElasticsearch`` client from env."""
    api_key = config.get_elasticsearch_api_key()
    if api_key:
        return AsyncElasticsearch(config.get_elasticsearch_url(), api_key=api_key)
    return AsyncElasticsearch(config.get_elasticsearch_url())


def unwrap_es_response(resp) -> dict:
    """Unwrap an Elasticsearch response, handling both ObjectApiResponse and dict.

    Raises ``StoreError`` if the response type is unexpected.
    """
    if isinstance(resp, ObjectApiResponse):
        return resp.body
    elif isinstance(resp, dict):
        return resp
    else:
        logger.error("Unexpected Elasticsearch response type: %s", type(resp))
        raise StoreError(f"Unexpected Elasticsearch response type: {type(resp)}")


def iter_hits(data: dict):
    """Yield ``(id, _source)`` for every hit of a search response body."""
    for hit in data.get("hits", {}).get("hits", []):
        yield hit.get("_id"), (hit.get("_source") or {})
