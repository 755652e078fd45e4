"""Docs Server Package."""

__version__ = "1.0.0"

from .config import DocsConfig
from .models import (
    Document,
    ReadResponse,
    SearchResponse,
)

__all__ = [
    "DocsConfig",
    "Document",
    "ReadResponse",
    "SearchResponse",
]
