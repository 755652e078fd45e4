"""FastAPI server for the docs site's content API."""
import logging
from typing import Optional
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

from .config import DocsConfig
from .errors import DocumentNotFoundError
from .indexing.github_client import GitHubClient
from .indexing.pipeline import IngestionPipeline
from .indexing.ref_resolver import RefResolver
from .indexing.registry import RegistryClient
from .indexing.routes import RouteTable, load_route_table
from .indexing.scheduler import RefreshScheduler
from .models import (
    HealthResponse,
    ReadResponse,
    RefreshResponse,
    SearchResponse,
)
from .read_service import ReadService
from .snapshot import load_snapshot
from .store import DocumentStore


class DocsServer:
    """Wires the store, ingestion pipeline, scheduler and read service together."""

    def __init__(
        self,
        config: DocsConfig,
        routes: Optional[RouteTable] = None,
        github: Optional[GitHubClient] = None,
        registry: Optional[RegistryClient] = None,
    ):
        """
        Initialize the server components.

        Raises:
            RouteConfigError: if the route table is invalid
        """
        self.config = config
        self.routes = routes if routes is not None else load_route_table(config.routes_file, default_repo=config.default_repo)
        self.store = DocumentStore()

        self.github = github or GitHubClient(config)
        self.registry = registry or RegistryClient(config)
        self.resolver = RefResolver(
            self.registry,
            self.github,
            default_ref=config.default_ref,
            repo_owner=config.repo_owner,
        )
        self.pipeline = IngestionPipeline(
            routes=self.routes,
            store=self.store,
            github=self.github,
            resolver=self.resolver,
            config=config,
            snapshot_path=config.snapshot_path,
        )
        self.scheduler = RefreshScheduler(
            self.pipeline.run_cycle,
            interval=config.refresh_interval,
            ingest_key=self.pipeline.ingest_key,
        )
        self.read_service = ReadService(self.store, self.routes, enqueue=self.scheduler.enqueue)

    def restore_snapshot(self) -> int:
        """Seed the store from the last persisted snapshot. Returns the document count."""
        loaded = load_snapshot(self.config.snapshot_path)
        if loaded is None:
            return 0
        corpus, index = loaded
        self.store.put_many(corpus)
        self.store.publish(corpus, index)
        return len(corpus)

    async def startup(self):
        """Restore the snapshot and start refreshing."""
        restored = self.restore_snapshot()
        logger.info(f"Restored {restored} documents from snapshot")
        self.scheduler.start()

    async def shutdown(self):
        """Stop refreshing and close upstream clients."""
        await self.scheduler.stop()
        await self.github.close()
        await self.registry.close()
        logger.info("Shutdown complete")


def create_app(config: Optional[DocsConfig] = None, server: Optional[DocsServer] = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        config: Docs configuration (uses environment if not provided)
        server: Pre-built server components

    Returns:
        FastAPI application
    """
    if config is None:
        config = server.config if server else DocsConfig.from_env()
    if server is None:
        server = DocsServer(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await server.startup()
        yield
        await server.shutdown()

    app = FastAPI(
        title="Docs Server",
        description="Documentation content and search API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.docs_server = server

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/v1/docs", response_model=ReadResponse)
    async def read_document(path: str = Query(..., description="Upstream document path")):
        """Read a document from the cache."""
        try:
            return server.read_service.read(path)
        except DocumentNotFoundError as e:
            raise HTTPException(404, str(e))

    @app.get("/v1/search", response_model=SearchResponse)
    async def search(
        q: str = Query(..., min_length=1, description="Search query"),
        limit: int = Query(10, ge=1, le=100),
    ):
        """Full-text search over the published corpus."""
        return server.read_service.search(q, limit=limit)

    @app.post("/v1/refresh", response_model=RefreshResponse)
    async def refresh():
        """Run the next refresh cycle now."""
        accepted = server.scheduler.trigger()
        return RefreshResponse(accepted=accepted, state=server.scheduler.state.value)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        report = server.scheduler.last_report
        if len(server.store) == 0:
            status = "starting"
        elif report is not None and report.errors:
            status = "degraded"
        else:
            status = "healthy"

        last_cycle = report.summary() if report is not None else None

        return HealthResponse(
            status=status,
            state=server.scheduler.state.value,
            documents=len(server.store),
            indexed=len(server.store.index),
            cycles_completed=server.scheduler.cycles_completed,
            last_cycle=last_cycle,
        )

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Docs Server",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "read": "/v1/docs?path={path}",
                "search": "/v1/search?q={query}",
                "refresh": "/v1/refresh",
                "health": "/health",
            },
        }

    return app
