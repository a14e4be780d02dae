"""Shared fixtures: sample category tree, in-memory Redis, mocked Catalog API."""

import json

import httpx
import pytest

from pricewatch import deps
from pricewatch.config import get_settings
from pricewatch.core.category_tree import build_index, parse_category_tree
from pricewatch.core.sessions import SessionRegistry


SAMPLE_TREE = [
    {
        "path": "root",
        "name": "Root",
        "productCount": 10,
        "children": [
            {
                "path": "root/a",
                "name": "A",
                "productCount": 6,
                "children": [
                    {"path": "root/a/a1", "name": "A1", "productCount": 2, "children": []},
                    {"path": "root/a/a2", "name": "A2", "productCount": 4, "children": []},
                ],
            },
            {"path": "root/b", "name": "B", "productCount": 4, "children": []},
        ],
    },
    {"path": "other", "name": "Other", "productCount": 0, "children": []},
]


class FakeRedis:
    """In-memory stand-in for the redis.asyncio hash commands we use."""

    def __init__(self):
        self.hashes = {}
        self.ttls = {}

    async def hset(self, key, mapping=None):
        self.hashes.setdefault(key, {}).update(mapping or {})
        return len(mapping or {})

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def expire(self, key, seconds):
        self.ttls[key] = seconds
        return key in self.hashes

    async def delete(self, key):
        self.ttls.pop(key, None)
        return 1 if self.hashes.pop(key, None) is not None else 0

    async def exists(self, key):
        return 1 if key in self.hashes else 0

    async def ping(self):
        return True

    async def aclose(self):
        pass


class CatalogStub:
    """Routes for httpx.MockTransport; records product listing requests."""

    def __init__(self, tree=None):
        self.tree = SAMPLE_TREE if tree is None else tree
        self.tree_status = 200
        self.products_status = 200
        self.product_requests = []
        self.basket_posts = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/v1/categories/tree":
            if self.tree_status != 200:
                return httpx.Response(self.tree_status, text="unavailable")
            return httpx.Response(200, json=self.tree)
        if path == "/api/v1/products":
            self.product_requests.append(list(request.url.params.multi_items()))
            if self.products_status != 200:
                return httpx.Response(self.products_status, text="boom")
            categories = request.url.params.get_list("category")
            items = [{"id": i + 1, "name": f"Product in {c}", "category_path": c} for i, c in enumerate(categories)]
            return httpx.Response(200, json={"items": items, "total": len(items)})
        if path == "/api/v1/baskets" and request.method == "GET":
            return httpx.Response(200, json={"items": [{"id": 7, "name": "Weekly", "itemCount": 3}]})
        if path.startswith("/api/v1/baskets/") and request.method == "POST":
            basket_id = int(path.split("/")[4])
            if basket_id == 404:
                return httpx.Response(404, text="no such basket")
            self.basket_posts.append((basket_id, json.loads(request.content)))
            return httpx.Response(204)
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def sample_roots():
    return parse_category_tree(SAMPLE_TREE)


@pytest.fixture
def sample_index(sample_roots):
    return build_index(sample_roots)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def catalog():
    return CatalogStub()


@pytest.fixture
def wired(monkeypatch, fake_redis, catalog):
    """Point the app dependencies at the fakes."""
    monkeypatch.setattr(deps, "_redis_client", fake_redis)
    monkeypatch.setattr(deps, "_registry", SessionRegistry())
    monkeypatch.setattr(deps, "_catalog_transport", catalog.transport())
    monkeypatch.setattr(get_settings(), "catalog_max_retries", 0)
    return catalog


@pytest.fixture
def api(wired):
    from fastapi.testclient import TestClient
    from pricewatch.main import app

    with TestClient(app) as client:
        yield client
