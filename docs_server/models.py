"""Pydantic models for the docs server."""
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field


class Document(BaseModel):
    """A fetched, rendered and link-rewritten document."""

    key: str = Field(
        ...,
        description="Document key (the route's upstream path)"
    )
    content: str = Field(
        ...,
        description="Rendered HTML with links rewritten to permalinks"
    )
    title: str = Field(
        default="",
        description="Page title"
    )
    description: Optional[str] = Field(
        default=None,
        description="Page description"
    )
    permalink: str = Field(
        ...,
        description="Site-relative path the document is served under"
    )
    repo: Optional[str] = Field(
        default=None,
        description="Upstream repository"
    )
    ref: Optional[str] = Field(
        default=None,
        description="Ref the content was fetched from"
    )
    missing: bool = Field(
        default=False,
        description="True when the upstream file was absent and this is a stub"
    )


class Snapshot(BaseModel):
    """On-disk corpus and serialized search index."""

    docs: List[Document] = Field(default_factory=list)
    index: Dict[str, Any] = Field(default_factory=dict)


class ReadResponse(BaseModel):
    """Response of the read contract."""

    key: str
    content: str
    pending: bool = Field(
        default=False,
        description="True when the document is queued for ingestion and content is a placeholder"
    )


class SearchHit(BaseModel):
    """Single search result."""

    key: str
    title: str
    description: Optional[str] = None
    permalink: str
    score: float


class SearchResponse(BaseModel):
    """Response from a search query."""

    query: str
    results: List[SearchHit]


class RefreshResponse(BaseModel):
    """Response from a refresh trigger."""

    accepted: bool
    state: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    state: str
    documents: int
    indexed: int
    cycles_completed: int
    last_cycle: Optional[str] = None
