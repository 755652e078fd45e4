"""In-memory document cache and published search view."""
from typing import Dict, List, Optional, Tuple

from .models import Document
from .search_index import SearchIndex


class DocumentStore:
    """
    Latest document per key plus the corpus/index pair readers search.

    Writers replace whole mappings rather than mutating the ones readers
    hold, so a reader never sees a partially written document or index.
    """

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._published: Tuple[List[Document], SearchIndex] = ([], SearchIndex())

    def get(self, key: str) -> Optional[Document]:
        return self._documents.get(key)

    def put(self, key: str, doc: Document) -> None:
        """Replace the document stored under `key`."""
        documents = dict(self._documents)
        documents[key] = doc
        self._documents = documents

    def put_many(self, docs: List[Document]) -> None:
        documents = dict(self._documents)
        for doc in docs:
            documents[doc.key] = doc
        self._documents = documents

    def keys(self) -> List[str]:
        return sorted(self._documents)

    def __contains__(self, key: str) -> bool:
        return key in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def publish(self, corpus: List[Document], index: SearchIndex) -> None:
        """Swap in a new corpus and the index built from it."""
        self._published = (list(corpus), index)

    @property
    def corpus(self) -> List[Document]:
        return self._published[0]

    @property
    def index(self) -> SearchIndex:
        return self._published[1]

    def published(self) -> Tuple[List[Document], SearchIndex]:
        """Corpus and index as one consistent pair."""
        return self._published
