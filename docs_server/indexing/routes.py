"""Route table loading and validation."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..errors import RouteConfigError
from .models import TrackedRoute

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Upstream paths are compared without a leading slash."""
    return path.lstrip("/")


class RouteTable(BaseModel):
    """The site's routes, keyed by route name. Read-only after load, except resolved refs."""

    site: str = Field(
        default="docs",
        description="Site identifier"
    )
    description: Optional[str] = Field(
        default=None,
        description="Human-readable description"
    )
    routes: Dict[str, TrackedRoute] = Field(
        default_factory=dict,
        description="Routes keyed by name"
    )

    def get_route(self, name: str) -> Optional[TrackedRoute]:
        """Get a route by name."""
        return self.routes.get(name)

    def sorted_routes(self) -> List[TrackedRoute]:
        """All routes in name order."""
        return [self.routes[name] for name in sorted(self.routes)]

    def content_routes(self) -> List[TrackedRoute]:
        """Routes backed by an upstream document, in name order."""
        return [route for route in self.sorted_routes() if route.is_content]

    def repos(self) -> List[str]:
        """Distinct upstream repositories of content routes."""
        return sorted({route.github_repo for route in self.content_routes()})

    def route_for_key(self, key: str) -> Optional[TrackedRoute]:
        """Content route whose upstream path is the document key."""
        key = normalize_path(key)
        for route in self.content_routes():
            if route.github_path == key:
                return route
        return None

    def validate_table(self) -> None:
        """
        Check route invariants.

        Raises:
            RouteConfigError: duplicate permalinks or duplicate upstream documents
        """
        permalinks: Dict[str, str] = {}
        sources: Dict[str, str] = {}

        for route in self.sorted_routes():
            if route.path in permalinks:
                raise RouteConfigError(
                    f"Routes '{permalinks[route.path]}' and '{route.name}' share permalink {route.path}"
                )
            permalinks[route.path] = route.name

            if not route.is_content:
                continue
            # document keys are upstream paths, so they must be unique
            if route.github_path in sources:
                raise RouteConfigError(
                    f"Routes '{sources[route.github_path]}' and '{route.name}' share upstream path {route.github_path}"
                )
            sources[route.github_path] = route.name


def load_route_table(file_path: Path, default_repo: str = "yahoo/fluxible") -> RouteTable:
    """
    Load and validate a route table JSON file.

    Args:
        file_path: Path to the routes JSON file
        default_repo: Repository for routes that don't name one

    Returns:
        Validated RouteTable

    Raises:
        RouteConfigError: unreadable file or invalid routes
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RouteConfigError(f"Cannot read route table {file_path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("routes"), dict):
        raise RouteConfigError(f"Route table {file_path} has no 'routes' object")

    routes = {}
    for name, route_data in data["routes"].items():
        if not isinstance(route_data, dict):
            raise RouteConfigError(f"Route '{name}' must be an object")
        try:
            route = TrackedRoute(**{**route_data, "name": name})
        except ValidationError as e:
            raise RouteConfigError(f"Invalid route '{name}': {e}") from e

        if route.github_path:
            route.github_path = normalize_path(route.github_path)
            route.github_repo = route.github_repo or default_repo
        routes[name] = route

    table = RouteTable(
        site=data.get("site", "docs"),
        description=data.get("description"),
        routes=routes,
    )
    table.validate_table()

    logger.info(
        f"Loaded {len(table.routes)} routes ({len(table.content_routes())} content) from {file_path}"
    )
    return table
