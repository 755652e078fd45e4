"""Read and search operations exposed to the presentation shell."""
import logging
from typing import Callable, List, Optional

from .errors import DocumentNotFoundError
from .indexing.routes import RouteTable, normalize_path
from .models import ReadResponse, SearchHit, SearchResponse
from .store import DocumentStore

logger = logging.getLogger(__name__)

PENDING_CONTENT = "<p>This document is being fetched. Please reload in a moment.</p>"


class ReadService:
    """
    Serves documents from the store without touching the network.

    A tracked document that has not been ingested yet is handed to
    `enqueue` and answered with a placeholder.
    """

    def __init__(
        self,
        store: DocumentStore,
        routes: RouteTable,
        enqueue: Optional[Callable[[str], object]] = None,
    ):
        self.store = store
        self.routes = routes
        self._enqueue = enqueue

    def read(self, key: str) -> ReadResponse:
        """
        Read a document by key (its upstream path).

        Raises:
            DocumentNotFoundError: if no tracked route serves the key
        """
        key = normalize_path(key)
        doc = self.store.get(key)
        if doc is not None:
            return ReadResponse(key=doc.key, content=doc.content)

        if self.routes.route_for_key(key) is None:
            raise DocumentNotFoundError(key)

        if self._enqueue is not None:
            logger.info(f"{key} not cached; queued for ingestion")
            self._enqueue(key)
        return ReadResponse(key=key, content=PENDING_CONTENT, pending=True)

    def search(self, query: str, limit: int = 10) -> SearchResponse:
        """Rank published documents for a query."""
        corpus, index = self.store.published()
        by_key = {doc.key: doc for doc in corpus}

        results: List[SearchHit] = []
        for ref, score in index.search(query, limit=limit):
            doc = by_key.get(ref)
            if doc is None:
                continue
            results.append(SearchHit(
                key=doc.key,
                title=doc.title,
                description=doc.description,
                permalink=doc.permalink,
                score=score,
            ))

        return SearchResponse(query=query, results=results)
