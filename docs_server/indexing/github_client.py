"""GitHub repos API access (contents and branches)."""
import asyncio
import base64
import binascii
import logging
from typing import Any, Dict, List, Optional
import httpx

from ..config import DocsConfig
from .models import FetchResult

logger = logging.getLogger(__name__)


class GitHubClient:
    """Client for GitHub's `repos` API with token or client-credential auth."""

    def __init__(
        self,
        config: Optional[DocsConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize GitHub client.

        Args:
            config: Docs configuration (credentials, timeouts, retries)
            client: Pre-built HTTP client, mainly for tests
        """
        self.config = config or DocsConfig()
        self._client = client
        self._owns_client = client is None
        self.calls = 0

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def connect(self):
        """Initialize HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.request_timeout,
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
            )
            self._owns_client = True

    async def close(self):
        """Close HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _auth(self) -> tuple:
        """Headers and query params carrying credentials."""
        headers: Dict[str, str] = {"Accept": "application/vnd.github+json"}
        params: Dict[str, str] = {}

        # use access token if available, otherwise use client id and secret
        if self.config.github_access_token:
            headers["Authorization"] = f"token {self.config.github_access_token}"
        elif self.config.github_client_id and self.config.github_client_secret:
            params["client_id"] = self.config.github_client_id
            params["client_secret"] = self.config.github_client_secret

        return headers, params

    async def repos_api(
        self,
        repo: str,
        endpoint: str,
        ref: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Call `GET /repos/{repo}/{endpoint}`.

        Args:
            repo: Repository (owner/name)
            endpoint: API endpoint below the repository, e.g. 'branches'
            ref: Commit, branch or tag name
            params: Extra query parameters

        Returns:
            The raw response (status not checked)
        """
        if self._client is None:
            await self.connect()

        headers, query = self._auth()
        if params:
            query.update(params)
        if ref:
            query["ref"] = ref

        url = f"{self.config.github_api_url.rstrip('/')}/repos/{repo}/{endpoint}"
        logger.debug(f"GET {url} ref={ref}")
        self.calls += 1
        return await self._client.get(url, headers=headers, params=query)

    async def fetch_contents(self, repo: str, path: str, ref: Optional[str] = None) -> FetchResult:
        """
        Fetch and decode a file through the contents API.

        A response without a `content` field (including 404) is reported as
        not found rather than failed.

        Args:
            repo: Repository (owner/name)
            path: File path inside the repository
            ref: Branch or tag to read from

        Returns:
            FetchResult with decoded content, a not-found marker, or an error
        """
        path = path.lstrip("/")

        for attempt in range(self.config.max_retries):
            try:
                response = await self.repos_api(repo, f"contents/{path}", ref=ref)

                if response.status_code == 404:
                    return FetchResult(repo=repo, path=path, ref=ref, success=True,
                                       not_found=True, status_code=404)

                response.raise_for_status()

                body = response.json()
                encoded = body.get("content") if isinstance(body, dict) else None
                if not encoded:
                    return FetchResult(repo=repo, path=path, ref=ref, success=True,
                                       not_found=True, status_code=response.status_code)

                return FetchResult(
                    repo=repo,
                    path=path,
                    ref=ref,
                    success=True,
                    content=self.decode_content(encoded),
                    status_code=response.status_code,
                )

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.warning(f"HTTP error fetching {repo}/{path}@{ref}: {status}")
                if status < 500 or attempt == self.config.max_retries - 1:
                    return FetchResult(
                        repo=repo,
                        path=path,
                        ref=ref,
                        success=False,
                        status_code=status,
                        error=f"HTTP {status}",
                    )
                await asyncio.sleep(self.config.request_delay * (attempt + 1))

            except (httpx.TransportError, ValueError) as e:
                # ValueError covers malformed JSON and undecodable base64 payloads
                logger.warning(f"Error fetching {repo}/{path}@{ref}: {e}")
                if isinstance(e, ValueError) or attempt == self.config.max_retries - 1:
                    return FetchResult(
                        repo=repo,
                        path=path,
                        ref=ref,
                        success=False,
                        error=str(e) or type(e).__name__,
                    )
                await asyncio.sleep(self.config.request_delay * (attempt + 1))

        return FetchResult(
            repo=repo,
            path=path,
            ref=ref,
            success=False,
            error="Max retries exceeded",
        )

    async def list_branches(self, repo: str) -> List[str]:
        """
        List branch names of a repository.

        Raises:
            httpx.HTTPError: on transport failure or an error status
        """
        response = await self.repos_api(repo, "branches", params={"per_page": 100})
        response.raise_for_status()
        return [branch["name"] for branch in response.json() if "name" in branch]

    @staticmethod
    def decode_content(encoded: str) -> str:
        """Decode the base64 `content` field (GitHub wraps it at 60 columns)."""
        try:
            return base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"Undecodable content: {e}") from e
