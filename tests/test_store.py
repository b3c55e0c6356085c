import asyncio

import pytest

from shopmuse.domain.repositories.interaction_repo import InteractionRepo
from shopmuse.domain.repositories.kv_store import MemoryKeyValueStore
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.repositories.profile_repo import ProfileRepo
from shopmuse.domain.repositories.recent_search_repo import RecentSearchRepo


async def test_memory_store_keeps_json_copies(store):
    doc = {"a": [1, 2]}
    await store.set("k", doc)
    doc["a"].append(3)
    assert await store.get("k") == {"a": [1, 2]}
    assert store.raw("k") == '{"a":[1,2]}'
    await store.delete("k")
    assert await store.get("k") is None


async def test_corrupt_value_raises(store):
    store.put_raw("userProfile", "{not json")
    with pytest.raises(ValueError, match="userProfile"):
        await store.get("userProfile")
    with pytest.raises(ValueError):
        await ProfileRepo(store).get_profile()


async def test_namespaces_prefix_keys(store):
    s1 = store.namespace("session:s1")
    await s1.set("recentSearches", ["x"])
    assert store.raw("session:s1:recentSearches") == '["x"]'
    assert await store.namespace("session:s2").get("recentSearches") is None
    nested = s1.namespace("inner")
    await nested.set("k", 1)
    assert store.raw("session:s1:inner:k") == "1"
    assert await s1.ping()


async def test_recent_searches_dedupe_and_cap():
    repo = RecentSearchRepo(MemoryKeyValueStore())
    for q in ["a", "b", "c", "a", "d", "e", "f"]:
        await repo.push(q)
    assert await repo.list() == ["f", "e", "d", "a", "c"]


async def test_interaction_log_is_append_only_and_filterable(store):
    repo = InteractionRepo(store)
    first = await repo.add("s1", "p1", "view")
    await repo.add("s2", "p2", "like")
    await repo.add("s1", "p3", "click")
    assert [i.product_id for i in await repo.list("s1")] == ["p1", "p3"]
    assert len(await repo.list()) == 3
    assert (await repo.list("s1"))[0].interaction_id == first.interaction_id


def test_catalog_accessors(catalog):
    assert len(catalog) == 82
    assert len(catalog.categories()) == 11
    assert catalog.get_by_product_id("p1").name == "Wireless Headphones"
    assert catalog.get_by_product_id("missing") is None
    assert [p.product_id for p in catalog.get_many_by_product_ids(["p3", "p1"])] == ["p1", "p3"]
    assert all(p.category == "Electronics" for p in catalog.get_by_category("Electronics"))
    assert any(p.product_id == "p1" for p in catalog.search("NOISE-canceling"))
    assert all(100 <= p.price <= 1000 for p in catalog.get_by_price_range(100, 1000))


def test_catalog_from_custom_path(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(
        '[{"product_id": "x1", "name": "Mug", "price": 199, "category": "Home & Kitchen", "tags": ["cup"]}]',
        encoding="utf-8",
    )
    repo = ProductRepo.from_json(str(path))
    assert len(repo) == 1
    assert repo.get_by_product_id("x1").tags == ["cup"]


class YieldingStore(MemoryKeyValueStore):
    """Hands control back to the loop around every call, like a networked backend."""

    async def get(self, key):
        value = await super().get(key)
        await asyncio.sleep(0)
        return value

    async def append(self, key, value):
        await asyncio.sleep(0)
        await super().append(key, value)


async def test_concurrent_interaction_adds_are_all_kept():
    repo = InteractionRepo(YieldingStore())
    await asyncio.gather(*(repo.add(f"s{i}", "p1", "view") for i in range(10)))
    stored = await repo.list()
    assert len(stored) == 10
    assert {i.session_id for i in stored} == {f"s{i}" for i in range(10)}


async def test_append_through_namespace(store):
    ns = store.namespace("session:s1")
    await ns.append("log", {"n": 1})
    await ns.append("log", {"n": 2})
    assert await ns.get_list("log") == [{"n": 1}, {"n": 2}]
    assert await ns.get_list("missing") == []
    assert store.raw("session:s1:log") == '[{"n":1},{"n":2}]'
