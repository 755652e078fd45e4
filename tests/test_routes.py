"""Tests for route table loading and validation."""
import json

import pytest

from docs_server.config import DEFAULT_ROUTES_FILE
from docs_server.errors import RouteConfigError
from docs_server.indexing.routes import load_route_table


def write_routes(tmp_path, routes, **extra):
    path = tmp_path / "routes.json"
    path.write_text(json.dumps({"site": "test", "routes": routes, **extra}))
    return path


def test_packaged_route_table_loads():
    table = load_route_table(DEFAULT_ROUTES_FILE)

    assert table.site == "fluxible"
    assert table.get_route("home").is_content is False
    assert table.get_route("apiStores").github_repo == "yahoo/fluxible"
    assert "yahoo/fluxible-addons-react" in table.repos()
    assert all(route.github_repo for route in table.content_routes())


def test_default_repo_and_leading_slash(tmp_path):
    path = write_routes(tmp_path, {
        "stores": {"path": "/api/stores.html", "github_path": "/docs/api/Stores.md"},
        "home": {"path": "/"},
    })

    table = load_route_table(path, default_repo="yahoo/routr")

    stores = table.get_route("stores")
    assert stores.name == "stores"
    assert stores.github_path == "docs/api/Stores.md"
    assert stores.github_repo == "yahoo/routr"
    assert table.get_route("home").github_repo is None
    assert table.route_for_key("/docs/api/Stores.md") is stores


def test_title_prefers_prefix(tmp_path):
    path = write_routes(tmp_path, {
        "a": {"path": "/a.html", "github_path": "a.md", "page_title": "Site | A", "page_title_prefix": "A"},
        "b": {"path": "/b.html", "github_path": "b.md", "page_title": "Site | B"},
        "c": {"path": "/c.html", "github_path": "c.md"},
    })

    table = load_route_table(path)

    assert [route.title for route in table.content_routes()] == ["A", "Site | B", "c"]


def test_duplicate_permalink_rejected(tmp_path):
    path = write_routes(tmp_path, {
        "a": {"path": "/same.html", "github_path": "a.md"},
        "b": {"path": "/same.html", "github_path": "b.md"},
    })

    with pytest.raises(RouteConfigError, match="share permalink /same.html"):
        load_route_table(path)


def test_duplicate_upstream_path_rejected(tmp_path):
    path = write_routes(tmp_path, {
        "a": {"path": "/a.html", "github_path": "docs/a.md"},
        "b": {"path": "/b.html", "github_path": "/docs/a.md"},
    })

    with pytest.raises(RouteConfigError, match="share upstream path docs/a.md"):
        load_route_table(path)


def test_route_without_path_rejected(tmp_path):
    path = write_routes(tmp_path, {"a": {"github_path": "a.md"}})

    with pytest.raises(RouteConfigError, match="Invalid route 'a'"):
        load_route_table(path)


@pytest.mark.parametrize("text", ["{not json", "[]", '{"routes": []}'])
def test_malformed_file_rejected(tmp_path, text):
    path = tmp_path / "routes.json"
    path.write_text(text)

    with pytest.raises(RouteConfigError):
        load_route_table(path)


def test_missing_file_rejected(tmp_path):
    with pytest.raises(RouteConfigError, match="Cannot read route table"):
        load_route_table(tmp_path / "absent.json")
