"""Ingestion cycle: resolve refs, fetch, render, rewrite links, index, persist."""
import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from ..config import DocsConfig
from ..models import Document
from ..rendering import MarkdownRenderer, not_found_markdown
from ..search_index import build_index
from ..snapshot import save_snapshot
from ..store import DocumentStore
from .github_client import GitHubClient
from .link_rewriter import LinkRewriter
from .models import BrokenLink, CycleReport, FetchResult, TrackedRoute
from .ref_resolver import RefResolver
from .routes import RouteTable

logger = logging.getLogger(__name__)


class IngestOutcome(BaseModel):
    """What happened to one route during ingestion."""

    route: str
    fetch: FetchResult
    document: Optional[Document] = None
    broken_links: List[BrokenLink] = Field(default_factory=list)


class IngestionPipeline:
    """Runs ingestion cycles and writes their results into a DocumentStore."""

    def __init__(
        self,
        routes: RouteTable,
        store: DocumentStore,
        github: GitHubClient,
        resolver: RefResolver,
        renderer: Optional[Callable[[str], str]] = None,
        config: Optional[DocsConfig] = None,
        snapshot_path: Optional[Path] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            routes: Route table (resolved refs are annotated in place)
            store: Document store this pipeline owns the write side of
            github: Contents API client
            resolver: Ref resolver
            renderer: Markdown -> HTML transform
            config: Docs configuration
            snapshot_path: Where to persist; None disables persistence
        """
        self.config = config or DocsConfig()
        self.routes = routes
        self.store = store
        self.github = github
        self.resolver = resolver
        self.renderer = renderer or MarkdownRenderer()
        self.rewriter = LinkRewriter(routes)
        self.snapshot_path = snapshot_path

    async def run_cycle(self) -> CycleReport:
        """
        Run one full ingestion cycle.

        Individual repository or document failures are recorded on the
        report and never abort the cycle.
        """
        start_time = time.time()
        content_routes = self.routes.content_routes()
        report = CycleReport(total_routes=len(content_routes))

        logger.info(f"Starting refresh: {len(content_routes)} documents")

        report.refs = await self.resolver.resolve_all(self.routes.repos())
        for route in content_routes:
            # pass branch name to pull the published version's docs
            route.resolved_ref = report.refs.get(route.github_repo, self.config.default_ref)

        outcomes = await asyncio.gather(
            *(self.ingest(route) for route in content_routes),
            return_exceptions=True,
        )

        corpus: List[Document] = []
        for route, outcome in zip(content_routes, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Ingestion of {route.github_path} failed: {outcome!r}")
                report.failed += 1
                report.errors.append(f"{route.github_path}: {outcome!r}")
            elif outcome.document is None:
                report.failed += 1
                report.errors.append(f"Failed to fetch {route.github_path}: {outcome.fetch.error}")
            else:
                if outcome.document.missing:
                    report.stubbed += 1
                else:
                    report.fetched += 1
                report.broken_links.extend(outcome.broken_links)
                corpus.append(outcome.document)
                continue

            # keep serving (and indexing) the previous version
            stale = self.store.get(route.github_path)
            if stale is not None:
                corpus.append(stale)

        # CPU-bound build and disk write run in a worker thread
        index = await asyncio.to_thread(build_index, corpus)
        self.store.publish(corpus, index)
        report.documents_indexed = len(index)

        if self.snapshot_path is not None:
            try:
                await asyncio.to_thread(save_snapshot, self.snapshot_path, corpus, index)
                report.persisted = True
            except OSError as e:
                logger.error(f"Failed to persist snapshot to {self.snapshot_path}: {e}")
                report.errors.append(f"Persist failed: {e}")

        report.duration_seconds = time.time() - start_time
        logger.info(report.summary())
        return report

    async def ingest(self, route: TrackedRoute) -> IngestOutcome:
        """
        Fetch, render and rewrite one route's document and store it.

        A failed fetch leaves the stored document untouched. A missing
        upstream file produces a stub document.
        """
        ref = route.effective_ref()
        result = await self.github.fetch_contents(route.github_repo, route.github_path, ref)

        if not result.success:
            logger.error(f"Failed to fetch {route.github_repo}/{route.github_path}@{ref}: {result.error}")
            return IngestOutcome(route=route.name, fetch=result)

        if result.not_found:
            logger.warning(f"Doc not found for {route.github_path} in {route.github_repo}@{ref}")
            markdown_text = not_found_markdown(route.github_path)
        else:
            markdown_text = result.content

        html = self.renderer(markdown_text)
        rewrite = self.rewriter.rewrite(html, route.github_path)

        doc = Document(
            key=route.github_path,
            content=rewrite.content,
            title=route.title,
            description=route.page_description,
            permalink=route.path,
            repo=route.github_repo,
            ref=ref,
            missing=result.not_found,
        )
        self.store.put(doc.key, doc)
        logger.debug(f"Stored {doc.key} ({len(rewrite.replacements)} links rewritten)")

        return IngestOutcome(
            route=route.name,
            fetch=result,
            document=doc,
            broken_links=rewrite.broken_links,
        )

    async def ingest_key(self, key: str) -> Optional[Document]:
        """
        Ingest a single document outside a full cycle.

        The published index is rebuilt with the new document in place; the
        snapshot is left for the next cycle to write. A key that is already
        cached is returned as is without fetching.

        Returns:
            The stored document, or None if the key is untracked or the fetch failed
        """
        route = self.routes.route_for_key(key)
        if route is None:
            logger.warning(f"Ignoring ingestion request for untracked key {key}")
            return None

        if route.github_path in self.store:
            # already stored, e.g. by the cycle that ran while the key was queued
            logger.debug(f"Skipping ingestion of {route.github_path}; already cached")
            return self.store.get(route.github_path)

        outcome = await self.ingest(route)
        if outcome.document is None:
            return None

        corpus = [doc for doc in self.store.corpus if doc.key != outcome.document.key]
        corpus.append(outcome.document)
        self.store.publish(corpus, await asyncio.to_thread(build_index, corpus))
        return outcome.document
