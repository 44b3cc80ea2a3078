"""
FastAPI application.

Endpoints are plain `def` handlers, so FastAPI runs them in its worker
thread pool; the pipeline itself is synchronous.
"""

from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from atio_search.cache.ranked import CacheSweeper
from atio_search.config.settings import settings
from atio_search.db.repository import open_catalog
from atio_search.search.models import SearchPage
from atio_search.search.pipeline import InvalidQueryError, SearchPipeline
from atio_search.summary.summarizer import BulletSummarizer
from atio_search.logger import get_logger, setup_logging

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_pipeline() -> SearchPipeline:
    return SearchPipeline()


@lru_cache(maxsize=1)
def get_summarizer() -> BulletSummarizer:
    return BulletSummarizer()


def get_catalog():
    return open_catalog


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    pipeline = get_pipeline()
    sweeper = CacheSweeper(pipeline.cache)
    sweeper.start()
    with open_catalog() as repo:
        logger.info("atio_search_ready", innovations=repo.count())
    yield
    sweeper.stop()
    pipeline.close()


app = FastAPI(title="ATIO Search", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class SearchRequest(BaseModel):
    query: str | None = None
    offset: int = Field(0, ge=0)
    limit: int = Field(settings.default_page_limit, ge=1, le=settings.max_page_limit)


class BulletsRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text: str | None = None
    innovation_id: int | None = None


class BulletsResponse(BaseModel):
    bullets: list[str] | None = None


@app.exception_handler(InvalidQueryError)
async def invalid_query_handler(request: Request, exc: InvalidQueryError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    if "query" in fields:
        return JSONResponse(status_code=400, content={"error": "Query is required"})
    return JSONResponse(status_code=400, content={"error": "Invalid request", "fields": fields})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("request_failed", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.post("/api/search", response_model=SearchPage)
def search(
    request: SearchRequest,
    pipeline: SearchPipeline = Depends(get_pipeline),
) -> SearchPage:
    return pipeline.search(request.query, offset=request.offset, limit=request.limit)


@app.post("/api/summarize-bullets", response_model=BulletsResponse)
def summarize_bullets(
    request: BulletsRequest,
    summarizer: BulletSummarizer = Depends(get_summarizer),
) -> BulletsResponse:
    # Description text only; the client never sends title or other metadata here.
    bullets = summarizer.summarize(request.text or "", innovation_id=request.innovation_id)
    return BulletsResponse(bullets=bullets)


@app.get("/health", tags=["ops"], summary="Health check")
def health(catalog=Depends(get_catalog)):
    with catalog() as repo:
        return {"status": "healthy", "innovations": repo.count()}
