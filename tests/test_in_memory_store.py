"""Unit tests for the in-memory store."""

from datetime import datetime, timedelta, timezone

import pytest

from app.adapters.store.in_memory import InMemoryStore, InMemoryStoreProvider
from app.core.errors import ConflictAppError, StoreAppError

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_follow_uniqueness() -> None:
    store = InMemoryStore()
    await store.insert_follow("u1", "u2")

    with pytest.raises(ConflictAppError):
        await store.insert_follow("u1", "u2")

    await store.insert_follow("u2", "u1")
    assert store.edges() == {("u1", "u2"), ("u2", "u1")}


@pytest.mark.asyncio
async def test_delete_follow_reports_rows_removed() -> None:
    store = InMemoryStore()
    await store.insert_follow("u1", "u2")

    assert await store.delete_follow("u1", "u2") == 1
    assert await store.delete_follow("u1", "u2") == 0


@pytest.mark.asyncio
async def test_review_uniqueness_per_pair() -> None:
    store = InMemoryStore(clock=lambda: NOW)
    row = await store.insert_review({"user_id": "u1", "cafe_id": "c1", "rating": 4})

    assert row["id"]
    assert row["created_at"] == NOW
    assert row["blurb"] is None

    with pytest.raises(ConflictAppError):
        await store.insert_review({"user_id": "u1", "cafe_id": "c1", "rating": 1})


@pytest.mark.asyncio
async def test_returned_rows_are_copies() -> None:
    store = InMemoryStore()
    row = await store.insert_review({"user_id": "u1", "cafe_id": "c1", "rating": 4})
    row["rating"] = 1

    found = await store.find_review("u1", "c1")
    assert found["rating"] == 4


@pytest.mark.asyncio
async def test_update_unknown_review_raises() -> None:
    with pytest.raises(StoreAppError):
        await InMemoryStore().update_review("missing", {"rating": 3})


@pytest.mark.asyncio
async def test_timestamps_sorted_filtered_and_capped() -> None:
    store = InMemoryStore()
    for i, age in enumerate([5, 90, 30, 10]):
        await store.insert_review(
            {"user_id": "u1", "cafe_id": f"c{i}", "rating": 3, "created_at": NOW - timedelta(minutes=age)}
        )

    stamps = await store.review_timestamps_since("u1", NOW - timedelta(hours=1), limit=2)

    assert stamps == [NOW - timedelta(minutes=30), NOW - timedelta(minutes=10)]


def test_provider_shares_one_store() -> None:
    provider = InMemoryStoreProvider()

    assert provider.for_credential("a") is provider.for_credential("b")


@pytest.mark.asyncio
async def test_reviewer_stats_count_photos_and_filter_by_college() -> None:
    store = InMemoryStore()
    store.add_user("u1", college="north")
    store.add_user("u2", college="south")
    await store.insert_review({"user_id": "u1", "cafe_id": "c1", "rating": 4, "photo_url": "https://img/a.jpg"})
    await store.insert_review({"user_id": "u1", "cafe_id": "c2", "rating": 2})
    await store.insert_review({"user_id": "u2", "cafe_id": "c1", "rating": 5})

    rows = await store.reviewer_stats(campus="north")

    assert rows == [
        {"user_id": "u1", "reviews_count": 2, "photos_count": 1, "user": {"id": "u1", "college": "north"}}
    ]
    assert await store.reviewer_stats(user_ids=[]) == []


@pytest.mark.asyncio
async def test_cafe_ratings_fall_back_to_bare_cafe() -> None:
    store = InMemoryStore()
    await store.insert_review({"user_id": "u1", "cafe_id": "c1", "rating": 4})

    assert await store.cafe_ratings() == [{"cafe_id": "c1", "rating": 4, "cafe": {"id": "c1"}}]
    assert await store.cafe_ratings(campus="north") == []


@pytest.mark.asyncio
async def test_followee_ids_and_profiles() -> None:
    store = InMemoryStore()
    await store.insert_follow("u1", "u3")
    await store.insert_follow("u1", "u2")
    await store.insert_follow("u2", "u1")
    store.add_user("u1", username="ana")

    assert await store.followee_ids("u1") == ["u2", "u3"]
    assert await store.find_user("u1") == {"id": "u1", "username": "ana"}
    assert await store.find_user("u2") is None
    assert await store.user_stats("u1") is None
