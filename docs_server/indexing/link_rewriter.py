"""Rewrite links between tracked markdown documents into site permalinks."""
import logging
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

from pydantic import BaseModel, Field

from .models import BrokenLink, TrackedRoute
from .routes import RouteTable, normalize_path

logger = logging.getLogger(__name__)

# href attributes pointing at a markdown source file
LINK_PATTERN = re.compile(r'href="([^"]+\.md)"')


class RewriteResult(BaseModel):
    """Output of one rewrite pass."""

    content: str
    replacements: List[Tuple[str, str]] = Field(default_factory=list)
    broken_links: List[BrokenLink] = Field(default_factory=list)


class LinkRewriter:
    """
    Maps `.md` hrefs in rendered HTML to the permalinks of tracked routes.

    Relative links are looked up by normalized upstream path. Absolute URLs
    match a route whose upstream path they contain; routes whose repository
    also appears in the URL win, then the longest path, then route name.
    """

    def __init__(self, routes: RouteTable):
        self.routes = routes

    @property
    def _by_path(self) -> Dict[str, TrackedRoute]:
        # the route table may gain routes after load
        return {route.github_path: route for route in self.routes.content_routes()}

    def resolve(self, href: str, source_path: str) -> Tuple[str, Optional[TrackedRoute]]:
        """
        Resolve a link target against the route table.

        Returns:
            Tuple of (resolved upstream path or URL, matching route or None)
        """
        target = urljoin(normalize_path(source_path), href)

        if "://" in href:
            return target, self._match_url(href)

        return target, self._by_path.get(normalize_path(target))

    def _match_url(self, url: str) -> Optional[TrackedRoute]:
        # absolute links into other repositories, e.g. https://github.com/yahoo/fluxible/blob/master/docs/api/Actions.md
        candidates = [route for path, route in self._by_path.items() if path in url]
        in_repo = [route for route in candidates if f"/{route.github_repo}/" in url]
        pool = in_repo or candidates
        if not pool:
            return None
        # longest path match is the most specific
        return sorted(pool, key=lambda r: (-len(r.github_path), r.name))[0]

    def rewrite(self, html: str, source_path: str) -> RewriteResult:
        """
        Rewrite every resolvable `.md` link in `html`.

        Matches are collected first, then applied as literal replacements of
        the `href="..."` text. Unresolvable links are left untouched and
        reported as broken.

        Args:
            html: Rendered document
            source_path: Upstream path of the document being rewritten

        Returns:
            RewriteResult with the new content, replacements and broken links
        """
        replacements: List[Tuple[str, str]] = []
        broken: List[BrokenLink] = []

        for match in LINK_PATTERN.finditer(html):
            href = match.group(1)
            target, route = self.resolve(href, source_path)

            if route is None:
                logger.warning(f"{source_path} has a broken link to {target}")
                broken.append(BrokenLink(source=source_path, target=target))
                continue

            replacements.append((href, route.path))

        content = html
        for href, permalink in replacements:
            content = content.replace(f'href="{href}"', f'href="{permalink}"', 1)

        return RewriteResult(content=content, replacements=replacements, broken_links=broken)
