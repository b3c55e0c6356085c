from shopmuse.domain.repositories.recent_search_repo import RecentSearchRepo

from conftest import FailingProvider


async def test_blank_query_short_circuits(container):
    session = await container.open_session("s1")
    assert await session.search.search("   ") is None
    assert await session.search.recent_searches() == []
    assert session.personalization.profile.behavior.search_patterns.common_keywords == []


async def test_search_records_recent_and_profile(container):
    session = await container.open_session("s1")
    results = await session.search.search(" Laptop ")
    assert [p.name for p in results.results] == ["Laptop", "Laptop Backpack"]
    assert results.search_intent == 'Looking for products matching "Laptop"'
    assert await session.search.recent_searches() == ["Laptop"]
    assert session.personalization.profile.behavior.search_patterns.common_keywords == ["laptop"]


async def test_recent_searches_are_per_session(container, store):
    s1 = await container.open_session("s1")
    await s1.search.search("shoes")
    s2 = await container.open_session("s2")
    assert await s2.search.recent_searches() == []
    assert await RecentSearchRepo(store.namespace("session:s1")).list() == ["shoes"]


async def test_provider_failure_falls_back_to_catalog_match(make_container):
    session = await make_container(FailingProvider()).open_session("s1")
    results = await session.search.search("noise-canceling")
    assert [p.product_id for p in results.results] == ["p1"]


async def test_default_suggestions(container):
    session = await container.open_session("s1")
    await session.search.search("a")
    await session.search.search("b")
    await session.search.search("c")
    suggestions = await session.search.suggestions()
    assert len(suggestions) == 6
    assert [s.text for s in suggestions[:3]] == ["c", "b", "a"]
    assert suggestions[3].text == "wireless bluetooth headphones"


async def test_contextual_suggestions(container):
    session = await container.open_session("s1")
    texts = [s.text for s in await session.search.suggestions("wireless phone")]
    assert texts[:4] == [
        "wireless bluetooth earbuds", "wireless charging pad",
        "smartphone under 20000", "phone case and screen protector",
    ]
    assert len(texts) <= 6

    laptop = await session.search.suggestions("laptop")
    assert [s.type for s in laptop[:2]] == ["ai", "ai"]
    assert "Laptop" in [s.text for s in laptop]
