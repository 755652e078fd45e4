"""npm registry client."""
import logging
from typing import Optional
import httpx

from ..config import DocsConfig

logger = logging.getLogger(__name__)


class RegistryClient:
    """Looks up published package versions on the npm registry."""

    def __init__(
        self,
        config: Optional[DocsConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or DocsConfig()
        self._client = client
        self._owns_client = client is None

    async def close(self):
        """Close HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def latest_version(self, package: str) -> Optional[str]:
        """
        Get the `latest` dist-tag of a package.

        Args:
            package: npm package name

        Returns:
            Version string, or None if the document lacks `dist-tags.latest`

        Raises:
            httpx.HTTPError: on transport failure or an error status
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.request_timeout,
                headers={"User-Agent": self.config.user_agent},
            )
            self._owns_client = True

        url = f"{self.config.registry_url.rstrip('/')}/{package}"
        logger.debug(f"GET {url}")

        response = await self._client.get(url)
        response.raise_for_status()

        body = response.json()
        if not isinstance(body, dict):
            return None
        dist_tags = body.get("dist-tags")
        if not isinstance(dist_tags, dict):
            return None
        latest = dist_tags.get("latest")
        return latest if isinstance(latest, str) else None
