"""Tests for branch resolution from published npm versions."""
import httpx
import pytest

from docs_server.indexing.github_client import GitHubClient
from docs_server.indexing.ref_resolver import RefResolver, branch_range, branch_satisfies
from docs_server.indexing.registry import RegistryClient


def make_resolver(config, http) -> RefResolver:
    return RefResolver(
        RegistryClient(config, client=http),
        GitHubClient(config, client=http),
        default_ref="master",
        repo_owner="yahoo",
    )


def test_branch_range_strips_exactly_one_prefix():
    assert branch_range("v2.x") == "2.x"
    assert branch_range("vv2.x") == "v2.x"
    assert branch_range("2.x") == "2.x"
    assert branch_range("master") == "master"


def test_branch_satisfies():
    assert branch_satisfies("2.3.0", "v2.x")
    assert branch_satisfies("2.3.0", "2.x")
    assert not branch_satisfies("2.3.0", "v1.x")
    assert not branch_satisfies("2.3.0", "master")


@pytest.mark.asyncio
async def test_resolves_branch_matching_published_version(config, upstream):
    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "v2.x"


@pytest.mark.asyncio
async def test_no_matching_branch_uses_default(config, upstream):
    upstream.versions["fluxible"] = "3.0.0"

    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "master"


@pytest.mark.asyncio
async def test_last_matching_branch_wins(config, upstream):
    upstream.branches["yahoo/fluxible"] = ["v2.x", "v2.3.x", "master"]
    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "v2.3.x"

    upstream.branches["yahoo/fluxible"] = ["v2.3.x", "v2.x", "master"]
    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "v2.x"


@pytest.mark.asyncio
async def test_registry_failure_falls_back(config, upstream, caplog):
    upstream.versions["fluxible"] = 503

    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "master"

    assert "npm request failed for fluxible" in caplog.text


@pytest.mark.asyncio
async def test_registry_transport_error_falls_back(config, upstream):
    upstream.versions["fluxible"] = httpx.ConnectError("connection refused")

    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "master"


@pytest.mark.asyncio
async def test_missing_dist_tags_falls_back_without_listing_branches(config, upstream):
    upstream.versions["fluxible"] = {"name": "fluxible"}

    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "master"

    assert not any(r.url.path.endswith("/branches") for r in upstream.requests)


@pytest.mark.asyncio
async def test_branch_listing_failure_falls_back(config, upstream, caplog):
    upstream.branches["yahoo/fluxible"] = 500

    async with upstream.client() as http:
        assert await make_resolver(config, http).resolve("fluxible") == "master"

    assert "GitHub branches failed for yahoo/fluxible" in caplog.text


@pytest.mark.asyncio
async def test_resolve_all_isolates_failures(config, upstream):
    upstream.versions["fluxible-addons-react"] = 500
    upstream.branches["yahoo/fluxible-addons-react"] = ["v0.x", "master"]

    async with upstream.client() as http:
        refs = await make_resolver(config, http).resolve_all(
            ["yahoo/fluxible", "yahoo/fluxible-addons-react", "yahoo/fluxible"]
        )

    assert refs == {"yahoo/fluxible": "v2.x", "yahoo/fluxible-addons-react": "master"}
