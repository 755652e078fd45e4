"""Pydantic models for the indexing package."""
from typing import List, Dict, Optional
from pydantic import BaseModel, Field


class TrackedRoute(BaseModel):
    """A configured site route, optionally backed by an upstream markdown file."""

    name: str = Field(
        ...,
        description="Route identifier (stable across refresh cycles)"
    )
    path: str = Field(
        ...,
        description="Site-relative permalink"
    )
    github_repo: Optional[str] = Field(
        default=None,
        description="Upstream repository (owner/name); defaults to the configured repo"
    )
    github_path: Optional[str] = Field(
        default=None,
        description="Upstream markdown path; routes without one are never fetched"
    )
    github_ref: Optional[str] = Field(
        default=None,
        description="Explicit ref override"
    )
    resolved_ref: Optional[str] = Field(
        default=None,
        description="Ref resolved for the repository in the current cycle"
    )
    page_title: Optional[str] = Field(
        default=None,
        description="Page title"
    )
    page_title_prefix: Optional[str] = Field(
        default=None,
        description="Title prefix; wins over page_title for indexing"
    )
    page_description: Optional[str] = Field(
        default=None,
        description="Short description used in search results"
    )

    @property
    def title(self) -> str:
        return self.page_title_prefix or self.page_title or self.name

    @property
    def is_content(self) -> bool:
        """Whether this route is backed by an upstream document."""
        return bool(self.github_path)

    def effective_ref(self) -> Optional[str]:
        """Explicit override first, then the ref resolved this cycle."""
        return self.github_ref or self.resolved_ref


class FetchResult(BaseModel):
    """Result of fetching a single upstream document."""

    repo: str
    path: str
    ref: Optional[str] = None
    success: bool
    not_found: bool = False
    content: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None


class BrokenLink(BaseModel):
    """A `.md` link that matched no tracked route."""

    source: str
    target: str


class CycleReport(BaseModel):
    """Result of one ingestion cycle."""

    refs: Dict[str, str] = Field(default_factory=dict)
    total_routes: int = 0
    fetched: int = 0
    stubbed: int = 0
    failed: int = 0
    documents_indexed: int = 0
    broken_links: List[BrokenLink] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    persisted: bool = False
    duration_seconds: float = 0.0

    def summary(self) -> str:
        """Generate a summary string."""
        return (
            f"Refreshed {self.fetched}/{self.total_routes} docs "
            f"({self.stubbed} missing, {self.failed} failed), "
            f"{self.documents_indexed} indexed, "
            f"{len(self.broken_links)} broken links, "
            f"persisted={self.persisted} "
            f"in {self.duration_seconds:.1f}s"
        )
