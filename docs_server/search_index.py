"""Field-weighted BM25 full-text index over the document corpus."""
import math
import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup

from .models import Document

# Relevance boosts applied at query time
FIELD_BOOSTS: Dict[str, float] = {
    "title": 10.0,
    "description": 5.0,
    "body": 1.0,
    "permalink": 1.0,
}


def html_to_text(html: str) -> str:
    """Extract readable text from rendered HTML."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    return soup.get_text(separator=" ", strip=True)


class SearchIndex:
    """
    Inverted index with one posting list per field.

    Each field is scored with BM25 against its own length statistics; the
    per-field scores are multiplied by the field boost and summed. Boosts
    are applied at query time only, so a serialized index can be searched
    with different weights.
    """

    def __init__(
        self,
        fields: Optional[Dict[str, float]] = None,
        k1: float = 1.2,
        b: float = 0.75,
        min_token_length: int = 2,
    ):
        """
        Initialize an empty index.

        Args:
            fields: Field name -> boost
            k1: BM25 term frequency saturation parameter
            b: BM25 length normalization parameter
            min_token_length: Minimum token length to index
        """
        self.fields = dict(fields or FIELD_BOOSTS)
        self.k1 = k1
        self.b = b
        self.min_token_length = min_token_length

        # field -> term -> ref -> term frequency
        self.postings: Dict[str, Dict[str, Dict[str, int]]] = {f: {} for f in self.fields}
        # ref -> field -> token count
        self.lengths: Dict[str, Dict[str, int]] = {}

    def __len__(self) -> int:
        return len(self.lengths)

    def __contains__(self, ref: str) -> bool:
        return ref in self.lengths

    def refs(self) -> List[str]:
        return sorted(self.lengths)

    def tokenize(self, text: Optional[str]) -> List[str]:
        """Lowercase alphanumeric tokens of at least `min_token_length` chars."""
        if not text:
            return []
        tokens = re.findall(r"\b[a-z0-9_]+\b", text.lower())
        return [t for t in tokens if len(t) >= self.min_token_length]

    @staticmethod
    def field_values(doc: Document) -> Dict[str, str]:
        return {
            "title": doc.title,
            "description": doc.description or "",
            "body": html_to_text(doc.content),
            "permalink": doc.permalink,
        }

    def add_document(self, doc: Document) -> None:
        """
        Add one document.

        Raises:
            ValueError: if the document key is already indexed
        """
        if doc.key in self.lengths:
            raise ValueError(f"Document already indexed: {doc.key}")

        values = self.field_values(doc)
        lengths: Dict[str, int] = {}

        for field in self.fields:
            tokens = self.tokenize(values.get(field, ""))
            lengths[field] = len(tokens)
            for term, tf in Counter(tokens).items():
                self.postings[field].setdefault(term, {})[doc.key] = tf

        self.lengths[doc.key] = lengths

    def _avg_length(self, field: str) -> float:
        if not self.lengths:
            return 0.0
        return sum(lengths.get(field, 0) for lengths in self.lengths.values()) / len(self.lengths)

    def _idf(self, doc_freq: int) -> float:
        n = len(self.lengths)
        return math.log((n - doc_freq + 0.5) / (doc_freq + 0.5) + 1)

    def search(self, query: str, limit: int = 10) -> List[Tuple[str, float]]:
        """
        Rank documents for a query.

        Args:
            query: Free-text query
            limit: Maximum number of results

        Returns:
            List of (ref, score), best first
        """
        terms = set(self.tokenize(query))
        if not terms or not self.lengths:
            return []

        scores: Dict[str, float] = {}

        for field, boost in self.fields.items():
            avg_length = self._avg_length(field) or 1.0
            field_postings = self.postings.get(field, {})

            for term in terms:
                matches = field_postings.get(term)
                if not matches:
                    continue
                idf = self._idf(len(matches))

                for ref, tf in matches.items():
                    doc_length = self.lengths[ref].get(field, 0)
                    length_norm = 1 - self.b + self.b * (doc_length / avg_length)
                    tf_weight = (tf * (self.k1 + 1)) / (tf + self.k1 * length_norm)
                    scores[ref] = scores.get(ref, 0.0) + boost * idf * tf_weight

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form; key order is normalized when dumped with sort_keys."""
        return {
            "fields": dict(self.fields),
            "k1": self.k1,
            "b": self.b,
            "min_token_length": self.min_token_length,
            "lengths": self.lengths,
            "postings": self.postings,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchIndex":
        """
        Rebuild an index from `to_dict` output.

        Raises:
            ValueError: if required keys are missing
        """
        try:
            index = cls(
                fields=data["fields"],
                k1=data.get("k1", 1.2),
                b=data.get("b", 0.75),
                min_token_length=data.get("min_token_length", 2),
            )
            index.lengths = {ref: dict(lengths) for ref, lengths in data["lengths"].items()}
            for field in index.fields:
                index.postings[field] = {
                    term: dict(refs) for term, refs in data["postings"].get(field, {}).items()
                }
        except (KeyError, AttributeError, TypeError) as e:
            raise ValueError(f"Malformed search index: {e}") from e
        return index


def build_index(corpus: Iterable[Document], fields: Optional[Dict[str, float]] = None) -> SearchIndex:
    """Build a fresh index with one entry per document."""
    index = SearchIndex(fields=fields)
    for doc in corpus:
        index.add_document(doc)
    return index
