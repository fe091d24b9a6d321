import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from . import config
from .lib.elasticsearch import create_es_client
from .lib.engine import SuggestionsEngine
from .lib.store import ElasticsearchContentStore, ElasticsearchEventSink
from .routers import health, suggestions
from .security import verify_api_key

logging.basicConfig(
    level=config.get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests may pre-populate app.state.engine with a fake-backed engine.
    es = None
    if getattr(app.state, "engine", None) is None:
        es = create_es_client()
        app.state.engine = SuggestionsEngine(
            ElasticsearchContentStore(es),
            event_sink=ElasticsearchEventSink(es),
        )
        logger.info("Suggestions engine ready (elasticsearch=%s)", config.get_elasticsearch_url())
    try:
        yield
    finally:
        await app.state.engine.flush_events()
        if es is not None:
            await es.close()
            app.state.engine = None


app = FastAPI(
    title="Follow Suggestions API",
    description="An API server for recommending accounts to follow",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(suggestions.router)


@app.get("/", dependencies=[Depends(verify_api_key)])
async def root():
    return {"message": "Follow Suggestions API"}
