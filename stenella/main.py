from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from stenella.aggregator import FeedFetcher, aggregate_feeds
from stenella.config import Settings, load_settings
from stenella.logging_utils import log_event
from stenella.middleware import request_id_middleware
from stenella.registry import (
    DuplicateSourceError,
    InvalidSourceError,
    SourceNotFoundError,
    SourceRegistry,
    create_registry,
)
from stenella.rss_fetch import fetch_feed
from stenella.schemas import FeedItem, SourcePayload


TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()


def get_registry(request: Request) -> SourceRegistry:
    return request.app.state.registry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def require_url(payload: SourcePayload) -> None:
    # {"url": "   "} passes the schema but is as useless as a missing url
    if not payload.url.strip():
        raise HTTPException(status_code=400, detail="invalid JSON payload")


# --- UI ---

@router.get("/", response_class=HTMLResponse)
def index(request: Request, settings: Settings = Depends(get_settings)):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"refresh_ms": settings.refresh_ms},
    )


# --- Feeds API ---

@router.get("/api/feeds", response_model=list[FeedItem])
def api_feeds(
    request: Request,
    registry: SourceRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    """Merged items from every source, newest first. Re-fetched on every call."""
    request_id = _request_id(request)
    try:
        return aggregate_feeds(
            registry,
            fetch=request.app.state.fetch,
            timeout_s=settings.fetch_timeout_s,
            request_id=request_id,
        )
    except Exception as exc:
        log_event("aggregate_failed", level=logging.ERROR, request_id=request_id, error_type=type(exc).__name__)
        raise HTTPException(status_code=500, detail="failed to load feeds") from exc


# --- Sources API ---

@router.get("/api/sources")
def api_sources(registry: SourceRegistry = Depends(get_registry)) -> list[str]:
    return registry.list()


@router.post("/api/sources/add", status_code=201)
def api_add_source(
    payload: SourcePayload,
    request: Request,
    registry: SourceRegistry = Depends(get_registry),
):
    require_url(payload)
    try:
        url = registry.add(payload.url)
    except InvalidSourceError:
        raise HTTPException(status_code=400, detail="invalid URL") from None
    except DuplicateSourceError:
        raise HTTPException(status_code=409, detail="source already exists") from None

    log_event("source_added", request_id=_request_id(request), url=url)
    return Response(status_code=201)


@router.post("/api/sources/remove")
def api_remove_source(
    payload: SourcePayload,
    request: Request,
    registry: SourceRegistry = Depends(get_registry),
):
    require_url(payload)
    try:
        url = registry.remove(payload.url)
    except SourceNotFoundError:
        raise HTTPException(status_code=404, detail="source not found") from None

    log_event("source_removed", request_id=_request_id(request), url=url)
    return Response(status_code=200)


# --- Extra routes ---

@dataclass
class ExtraRoute:
    path: str
    endpoint: Callable
    methods: list[str] = field(default_factory=lambda: ["GET"])


def health(request: Request):
    log_event("health_check", request_id=_request_id(request))
    return {"status": "ok"}


# Add custom routes here; they are mounted when the app is built.
EXTRA_ROUTES: list[ExtraRoute] = [
    ExtraRoute("/health", health),
]


# --- Error handlers ---

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    rid = _request_id(request)
    log_event("http_error", request_id=rid, status=exc.status_code, message=str(exc.detail))
    resp = PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)
    if rid:
        resp.headers["X-Request-ID"] = rid
    return resp


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON, a non-object body or a non-string url: all a plain 400."""
    rid = _request_id(request)

    # Extract first error for the log; the client only gets the fixed message
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(x) for x in first.get("loc", []))  # e.g. "body.url"
        msg = first.get("msg", "Validation error")
        message = f"{loc}: {msg}"
    else:
        message = "Validation error"

    log_event("validation_error", request_id=rid, message=message)
    resp = PlainTextResponse("invalid JSON payload", status_code=400)
    if rid:
        resp.headers["X-Request-ID"] = rid
    return resp


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _request_id(request)
    # Don't leak details to the client, but do log them
    log_event("internal_error", level=logging.ERROR, request_id=rid, error_type=type(exc).__name__)
    resp = PlainTextResponse("Internal server error", status_code=500)
    if rid:
        resp.headers["X-Request-ID"] = rid
    return resp


def create_app(
    registry: SourceRegistry | None = None,
    *,
    settings: Settings | None = None,
    fetch: FeedFetcher | None = None,
    extra_routes: list[ExtraRoute] | None = None,
) -> FastAPI:
    """Build the application. The registry is created from settings unless given."""
    settings = settings or load_settings()

    app = FastAPI(title="Stenella", description="Combined RSS viewer")
    app.state.settings = settings
    app.state.registry = registry if registry is not None else create_registry(settings.default_sources)
    app.state.fetch = fetch or fetch_feed

    app.middleware("http")(request_id_middleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(router)
    for extra in EXTRA_ROUTES if extra_routes is None else extra_routes:
        app.add_api_route(extra.path, extra.endpoint, methods=extra.methods)

    return app
