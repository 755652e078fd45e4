"""Shared fixtures: route table, config and a fake GitHub/npm upstream."""
import asyncio
import base64
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from docs_server.config import DocsConfig
from docs_server.indexing.models import TrackedRoute
from docs_server.indexing.routes import RouteTable


def encode(text: str) -> str:
    """Base64 the way the contents API does, wrapped at 60 columns."""
    raw = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return "\n".join(raw[i:i + 60] for i in range(0, len(raw), 60))


class FakeUpstream:
    """
    npm registry + GitHub API served from dicts.

    Values may be a payload, an int status code, or an exception to raise.
    """

    def __init__(self):
        self.versions: Dict[str, Any] = {}
        self.branches: Dict[str, Any] = {}
        self.files: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def _respond(self, value: Any, payload: Callable[[Any], Any]) -> httpx.Response:
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return httpx.Response(value, json={"message": "error"})
        return httpx.Response(200, json=payload(value))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "registry.npmjs.org":
            package = path.lstrip("/")
            if package not in self.versions:
                return httpx.Response(404, json={"error": "Not found"})
            return self._respond(
                self.versions[package],
                lambda v: v if isinstance(v, dict) else {"dist-tags": {"latest": v}},
            )

        parts = path.split("/")
        # /repos/{owner}/{name}/{endpoint...}
        repo = f"{parts[2]}/{parts[3]}"
        endpoint = parts[4]

        if endpoint == "branches":
            if repo not in self.branches:
                return httpx.Response(404, json={"message": "Not Found"})
            return self._respond(self.branches[repo], lambda names: [{"name": n} for n in names])

        if endpoint == "contents":
            file_path = "/".join(parts[5:])
            if (repo, file_path) not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            return self._respond(
                self.files[(repo, file_path)],
                lambda v: v if isinstance(v, dict) else {"content": encode(v), "encoding": "base64"},
            )

        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def contents_requests(self, repo: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if "/contents/" in r.url.path and (repo is None or f"/repos/{repo}/" in r.url.path)
        ]


async def wait_for_condition(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll until `predicate()` is true."""
    async def poll():
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout=timeout)


ACTIONS_MD = """# Actions

Actions dispatch payloads to [stores](Stores.md).

See the [quick start](../quick-start.md) and the [old guide](Missing.md).

```js
context.dispatch('NAVIGATE', payload);
```
"""

STORES_MD = """# Stores

Stores listen to dispatched actions. Read [Actions](./Actions.md) first.
"""

CONNECT_MD = """# connectToStores

Wraps a component. Stores are described in
[the Stores API](https://github.com/yahoo/fluxible/blob/master/docs/api/Stores.md).
"""


@pytest.fixture
def config(tmp_path) -> DocsConfig:
    return DocsConfig(
        max_retries=1,
        request_delay=0,
        snapshot_path=tmp_path / "search-index.json",
        github_access_token=None,
        github_client_id=None,
        github_client_secret=None,
    )


@pytest.fixture
def route_table() -> RouteTable:
    routes = [
        TrackedRoute(name="home", path="/", page_title="Fluxible"),
        TrackedRoute(
            name="quickStart",
            path="/quick-start.html",
            github_repo="yahoo/fluxible",
            github_path="docs/quick-start.md",
            page_title_prefix="Quick Start",
            page_description="Get started with Fluxible",
        ),
        TrackedRoute(
            name="apiActions",
            path="/api/actions.html",
            github_repo="yahoo/fluxible",
            github_path="docs/api/Actions.md",
            page_title_prefix="API: Actions",
            page_description="Actions are the entry point for data flow",
        ),
        TrackedRoute(
            name="apiStores",
            path="/api/stores.html",
            github_repo="yahoo/fluxible",
            github_path="docs/api/Stores.md",
            page_title_prefix="API: Stores",
            page_description="Stores hold application state",
        ),
        TrackedRoute(
            name="apiConnectToStores",
            path="/api/addons/connectToStores.html",
            github_repo="yahoo/fluxible-addons-react",
            github_path="docs/api/connectToStores.md",
            page_title_prefix="API: connectToStores",
            page_description="Higher-order component that listens to stores",
        ),
    ]
    table = RouteTable(site="fluxible", routes={route.name: route for route in routes})
    table.validate_table()
    return table


@pytest.fixture
def upstream() -> FakeUpstream:
    fake = FakeUpstream()
    fake.versions["fluxible"] = "2.3.0"
    fake.versions["fluxible-addons-react"] = "0.2.1"
    fake.branches["yahoo/fluxible"] = ["v1.x", "v2.x", "master"]
    fake.branches["yahoo/fluxible-addons-react"] = ["master"]
    fake.files[("yahoo/fluxible", "docs/api/Actions.md")] = ACTIONS_MD
    fake.files[("yahoo/fluxible", "docs/api/Stores.md")] = STORES_MD
    # contents API answered, but without a `content` field
    fake.files[("yahoo/fluxible", "docs/quick-start.md")] = {"message": "This repository is empty."}
    fake.files[("yahoo/fluxible-addons-react", "docs/api/connectToStores.md")] = CONNECT_MD
    return fake
