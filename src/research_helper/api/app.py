"""FastAPI application assembly."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from research_helper.api.routers import citations, notes, projects, tasks
from research_helper.config import Settings, load_settings
from research_helper.errors import ResearchHelperError
from research_helper.infrastructure.arxiv import ArxivGateway
from research_helper.infrastructure.db import Database
from research_helper.services.citations import CitationStore
from research_helper.services.notes import NoteStore
from research_helper.services.projects import ProjectStore
from research_helper.services.tasks import TaskStore

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Build the API. ``transport`` replaces the network for the shared HTTP client (tests)."""
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = Database(settings.db_path)
        client = httpx.AsyncClient(follow_redirects=True, timeout=settings.http_timeout, transport=transport)
        arxiv = ArxivGateway(client, settings.arxiv_api_url)
        app.state.db = db
        app.state.arxiv = arxiv
        app.state.projects = ProjectStore(db, settings.projects_dir)
        app.state.notes = NoteStore(db)
        app.state.citations = CitationStore(db, client, arxiv)
        app.state.tasks = TaskStore(db)
        logger.info(f"Research Helper API ready (database: {settings.db_path})")
        try:
            yield
        finally:
            await client.aclose()
            db.close()
            logger.info("Research Helper API shut down")

    app = FastAPI(title="Research Helper API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/")
    async def root():
        return {"message": "Research Helper API is running"}

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "research-helper"}

    app.include_router(projects.router)
    app.include_router(notes.router)
    app.include_router(citations.router)
    app.include_router(tasks.router)
    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API as ``{"error": message}``."""

    @app.exception_handler(ResearchHelperError)
    async def domain_error_handler(request: Request, exc: ResearchHelperError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
        return JSONResponse(status_code=400, content={"error": "; ".join(problems) or "Invalid request"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {type(exc).__name__}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


app = create_app()
