from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from services.provider.app import main as provider_main
from services.search.app import main
from services.search.app.engine import PROVIDERS
from shared.db import get_store
from shared.errors import StoreFault
from shared.search_cache import GENERATION_KEY, SearchCache, cache_key, get_search_cache
from shared.store import InMemoryDocumentStore

from conftest import LAGOS, auth_headers, provider_doc


class _FakeRedis:
    def __init__(self, *, broken: bool = False):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.broken = broken

    def _check(self):
        if self.broken:
            raise RedisConnectionError("redis down")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl

    def incr(self, key):
        self._check()
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

    def ping(self):
        self._check()
        return True


class _CountingStore(InMemoryDocumentStore):
    def __init__(self):
        super().__init__()
        self.queries = 0

    def query(self, collection, predicates):
        self.queries += 1
        return super().query(collection, predicates)


@pytest.fixture
def client(store):
    main.app.dependency_overrides[get_store] = lambda: store
    main.app.dependency_overrides[get_search_cache] = lambda: None
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def _body(category="classic-cleaning", point=LAGOS):
    return {"serviceType": category, "location": {"latitude": point[0], "longitude": point[1]}}


def test_search_returns_camel_case_results(client, store):
    store.set(PROVIDERS, "p1", provider_doc("p1", *LAGOS))

    res = client.post("/search/providers", json=_body())

    assert res.status_code == 200
    data = res.json()
    assert len(data) == 1
    hit = data[0]
    assert hit["providerId"] == "p1"
    assert hit["distanceMeters"] == 0
    assert hit["serviceArea"]["coordinates"] == {"latitude": LAGOS[0], "longitude": LAGOS[1]}
    assert hit["totalJobs"] == 12
    assert set(hit["profile"]) >= {"firstName", "lastName", "phone"}


def test_search_with_no_matches_returns_empty_list(client):
    res = client.post("/search/providers", json=_body())
    assert res.status_code == 200
    assert res.json() == []


@pytest.mark.parametrize(
    "payload",
    [
        {"serviceType": "", "location": {"latitude": 6.5, "longitude": 3.3}},
        {"location": {"latitude": 6.5, "longitude": 3.3}},
        {"serviceType": "classic-cleaning"},
        {"serviceType": "classic-cleaning", "location": {"latitude": 6.5}},
        {"serviceType": "classic-cleaning", "location": {"latitude": -95, "longitude": 3.3}},
    ],
)
def test_invalid_search_is_400(client, payload):
    res = client.post("/search/providers", json=payload)
    assert res.status_code == 400


def test_store_fault_is_502():
    class _Broken(InMemoryDocumentStore):
        def query(self, collection, predicates):
            raise StoreFault("unavailable")

    main.app.dependency_overrides[get_store] = lambda: _Broken()
    main.app.dependency_overrides[get_search_cache] = lambda: None
    try:
        res = TestClient(main.app).post("/search/providers", json=_body())
    finally:
        main.app.dependency_overrides.clear()

    assert res.status_code == 502
    assert "range scan" in res.json()["detail"]


def test_repeat_search_is_served_from_cache():
    fake, store = _FakeRedis(), _CountingStore()
    store.set(PROVIDERS, "p1", provider_doc("p1", *LAGOS))
    main.app.dependency_overrides[get_store] = lambda: store
    main.app.dependency_overrides[get_search_cache] = lambda: SearchCache(fake, 60)
    try:
        c = TestClient(main.app)
        first = c.post("/search/providers", json=_body())
        scans = store.queries
        second = c.post("/search/providers", json=_body("classic-cleaning "))
    finally:
        main.app.dependency_overrides.clear()

    assert store.queries == scans
    assert first.json() == second.json()
    assert fake.ttls[cache_key(0, "classic-cleaning", *LAGOS)] == 60


def test_cache_key_ignores_surrounding_whitespace_in_category():
    assert cache_key(3, " classic-cleaning ", *LAGOS) == cache_key(3, "classic-cleaning", *LAGOS)
    assert cache_key(3, "classic-cleaning", *LAGOS) != cache_key(4, "classic-cleaning", *LAGOS)


def test_invalidate_moves_searches_to_fresh_keys():
    fake = _FakeRedis()
    cache = SearchCache(fake, 60)
    before = cache.key_for("classic-cleaning", *LAGOS)

    cache.invalidate()

    assert fake.data[GENERATION_KEY] == "1"
    assert cache.key_for("classic-cleaning", *LAGOS) != before


def test_deactivated_provider_drops_out_of_cached_search(store):
    fake = _FakeRedis()
    store.set(PROVIDERS, "p1", provider_doc("p1", *LAGOS))
    for app in (main.app, provider_main.app):
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_search_cache] = lambda: SearchCache(fake, 60)
    try:
        search = TestClient(main.app)
        providers = TestClient(provider_main.app)
        first = search.post("/search/providers", json=_body())
        res = providers.put(
            "/providers/p1/settings",
            json={"services": {"classic-cleaning": False, "deep-cleaning": False}, "extraOptions": {}},
            headers=auth_headers("p1"),
        )
        second = search.post("/search/providers", json=_body())
    finally:
        main.app.dependency_overrides.clear()
        provider_main.app.dependency_overrides.clear()

    assert [h["providerId"] for h in first.json()] == ["p1"]
    assert res.status_code == 200
    assert store.get(PROVIDERS, "p1")["isActive"] is False
    assert second.json() == []


def test_profile_update_invalidates_cached_search(store):
    fake = _FakeRedis()
    store.set(PROVIDERS, "p1", provider_doc("p1", *LAGOS))
    store.set("users", "p1", {"firstName": "Ada", "phone": ""})
    for app in (main.app, provider_main.app):
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_search_cache] = lambda: SearchCache(fake, 60)
    try:
        search = TestClient(main.app)
        search.post("/search/providers", json=_body())
        TestClient(provider_main.app).patch(
            "/users/p1", json={"firstName": "Adaeze"}, headers=auth_headers("p1")
        )
        hits = search.post("/search/providers", json=_body()).json()
    finally:
        main.app.dependency_overrides.clear()
        provider_main.app.dependency_overrides.clear()

    assert hits[0]["profile"]["firstName"] == "Adaeze"


def test_search_works_when_cache_is_down(store):
    store.set(PROVIDERS, "p1", provider_doc("p1", *LAGOS))
    main.app.dependency_overrides[get_store] = lambda: store
    main.app.dependency_overrides[get_search_cache] = lambda: SearchCache(_FakeRedis(broken=True), 60)
    try:
        c = TestClient(main.app)
        res = c.post("/search/providers", json=_body())
        health = c.get("/health")
    finally:
        main.app.dependency_overrides.clear()

    assert res.status_code == 200
    assert [h["providerId"] for h in res.json()] == ["p1"]
    assert health.json() == {"status": "degraded"}


def test_health_and_ready_without_cache(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/ready").json() == {"ready": True}
