"""Configuration for the docs server."""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field
import os

# Packaged route table
DEFAULT_ROUTES_FILE = Path(__file__).parent / "indexing" / "routes.json"


class DocsConfig(BaseSettings):
    """Docs server configuration."""

    # GitHub API
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    github_access_token: Optional[str] = Field(
        default=None,
        description="Personal access token (preferred over client credentials)"
    )
    github_client_id: Optional[str] = Field(
        default=None,
        description="OAuth app client id"
    )
    github_client_secret: Optional[str] = Field(
        default=None,
        description="OAuth app client secret"
    )

    # Package registry
    registry_url: str = Field(
        default="https://registry.npmjs.org",
        description="npm registry base URL"
    )
    repo_owner: str = Field(
        default="yahoo",
        description="GitHub owner of the tracked packages' repositories"
    )
    default_repo: str = Field(
        default="yahoo/fluxible",
        description="Repository used by routes that don't name one"
    )
    default_ref: str = Field(
        default="master",
        description="Ref used when no branch matches the published version"
    )

    # Ingestion
    routes_file: Path = Field(
        default=DEFAULT_ROUTES_FILE,
        description="Route table JSON file"
    )
    snapshot_path: Path = Field(
        default=Path("data/search-index.json"),
        description="Persisted corpus + search index"
    )
    refresh_interval: float = Field(
        default=60 * 60,
        description="Seconds between refresh cycles"
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds"
    )
    request_delay: float = Field(
        default=0.5,
        description="Base delay between retries (linear backoff)"
    )
    max_retries: int = Field(
        default=3,
        description="Maximum attempts for retryable requests"
    )
    user_agent: str = Field(
        default="docs-server/1.0 (Python)",
        description="User agent for upstream requests"
    )

    # Server Configuration
    host: str = Field(
        default="127.0.0.1",
        description="Server host"
    )
    port: int = Field(
        default=3000,
        description="Server port"
    )
    verbose: bool = Field(
        default=False,
        description="Enable verbose logging"
    )

    @classmethod
    def from_env(cls) -> "DocsConfig":
        """Load config from environment variables."""
        return cls(
            # GitHub
            github_api_url=os.getenv("DOCS_GITHUB_API_URL", "https://api.github.com"),
            github_access_token=os.getenv("DOCS_GITHUB_ACCESS_TOKEN") or None,
            github_client_id=os.getenv("DOCS_GITHUB_CLIENT_ID") or None,
            github_client_secret=os.getenv("DOCS_GITHUB_CLIENT_SECRET") or None,

            # Registry
            registry_url=os.getenv("DOCS_REGISTRY_URL", "https://registry.npmjs.org"),
            repo_owner=os.getenv("DOCS_REPO_OWNER", "yahoo"),
            default_repo=os.getenv("DOCS_DEFAULT_REPO", "yahoo/fluxible"),
            default_ref=os.getenv("DOCS_DEFAULT_REF", "master"),

            # Ingestion
            routes_file=Path(os.getenv("DOCS_ROUTES_FILE", str(DEFAULT_ROUTES_FILE))),
            snapshot_path=Path(os.getenv("DOCS_SNAPSHOT_PATH", "data/search-index.json")),
            refresh_interval=float(os.getenv("DOCS_REFRESH_INTERVAL", str(60 * 60))),
            request_timeout=float(os.getenv("DOCS_REQUEST_TIMEOUT", "30.0")),
            request_delay=float(os.getenv("DOCS_REQUEST_DELAY", "0.5")),
            max_retries=int(os.getenv("DOCS_MAX_RETRIES", "3")),

            # Server
            host=os.getenv("DOCS_HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", os.getenv("DOCS_PORT", "3000"))),
            verbose=os.getenv("DOCS_VERBOSE", "").lower() == "true",
        )

    class Config:
        env_prefix = "DOCS_"
        case_sensitive = False
