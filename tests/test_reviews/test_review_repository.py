# tests/test_reviews/test_review_repository.py

import math
from datetime import timedelta

import pytest
from sqlalchemy import select

from app.db import models
from app.repositories.review_repository import ReviewRepository
from app.utils.exceptions import RepositoryError
from tests.fixtures.db import FakeClock, make_review_fields

pytestmark = pytest.mark.anyio


async def _seed(repo: ReviewRepository, count: int, **overrides):
    created = []
    for i in range(count):
        created.append(await repo.create(make_review_fields(comment=f"Review number {i:03d} text", **overrides)))
    return created


async def test_create_assigns_id_and_equal_timestamps(review_repository):
    review = await review_repository.create(make_review_fields())

    assert review.id
    assert review.created_at == review.updated_at
    assert review.user_id == "user-1"
    assert review.images == []
    assert review.ratings == {"food": 5, "service": 4, "environment": 5}


async def test_create_ignores_caller_supplied_id_and_timestamps(review_repository):
    review = await review_repository.create(make_review_fields(id="chosen-by-client", created_at="yesterday"))

    assert review.id != "chosen-by-client"


async def test_create_generates_unique_ids(review_repository):
    reviews = await _seed(review_repository, 5)
    assert len({r.id for r in reviews}) == 5


async def test_get_by_id_returns_none_for_missing(review_repository):
    assert await review_repository.get_by_id("does-not-exist") is None


async def test_get_by_id_round_trip(review_repository):
    review = await review_repository.create(make_review_fields())
    fetched = await review_repository.get_by_id(review.id)
    assert fetched is not None
    assert fetched.restaurant_name == "Cantina da Praça"


async def test_pagination_math(review_repository):
    await _seed(review_repository, 25)

    result = await review_repository.get_paginated(page=3, limit=10)
    pagination = result["pagination"]

    assert len(result["reviews"]) == 5
    assert pagination == {
        "total": 25,
        "total_pages": math.ceil(25 / 10),
        "current_page": 3,
        "limit": 10,
        "has_next_page": False,
        "has_prev_page": True,
    }


async def test_empty_collection_has_zero_pages(review_repository):
    result = await review_repository.get_paginated(page=1, limit=10)
    assert result["reviews"] == []
    assert result["pagination"]["total_pages"] == 0
    assert result["pagination"]["has_next_page"] is False
    assert result["pagination"]["has_prev_page"] is False


async def test_pages_are_disjoint_and_newest_first(review_repository):
    created = await _seed(review_repository, 25)
    newest_first = [r.id for r in reversed(created)]

    page1 = await review_repository.get_paginated(page=1, limit=10)
    page2 = await review_repository.get_paginated(page=2, limit=10)
    ids1 = [r.id for r in page1["reviews"]]
    ids2 = [r.id for r in page2["reviews"]]

    assert not set(ids1) & set(ids2)
    assert ids1 + ids2 == newest_first[:20]
    assert page1["pagination"]["has_next_page"] is True
    assert page1["pagination"]["has_prev_page"] is False


async def test_equal_created_at_falls_back_to_insertion_order(db_session):
    repo = ReviewRepository(db_session, clock=FakeClock(step=timedelta(0)))
    created = await _seed(repo, 4)

    result = await repo.get_paginated(page=1, limit=10)
    assert [r.id for r in result["reviews"]] == [r.id for r in created]


async def test_user_filter_applies_before_window(review_repository):
    await _seed(review_repository, 6, user_id="alice")
    await _seed(review_repository, 15, user_id="bob")

    result = await review_repository.get_paginated(page=1, limit=10, user_id="alice")

    assert len(result["reviews"]) == 6
    assert all(r.user_id == "alice" for r in result["reviews"])
    assert result["pagination"]["total"] == 6
    assert result["pagination"]["total_pages"] == 1


async def test_get_paginated_rejects_non_positive_window(review_repository):
    with pytest.raises(ValueError):
        await review_repository.get_paginated(page=0, limit=10)


async def test_update_merges_only_supplied_fields(review_repository):
    review = await review_repository.create(make_review_fields(images=["https://res.cloudinary.com/x/upload/a.jpg"]))
    before_updated_at = review.updated_at

    updated = await review_repository.update(review.id, {"comment": "Changed my mind about it"})

    assert updated.comment == "Changed my mind about it"
    assert updated.ratings == {"food": 5, "service": 4, "environment": 5}
    assert updated.price == 3
    assert updated.images == ["https://res.cloudinary.com/x/upload/a.jpg"]
    assert updated.updated_at >= before_updated_at
    assert updated.updated_at > updated.created_at


async def test_update_never_touches_owner_or_images(review_repository):
    review = await review_repository.create(make_review_fields())

    updated = await review_repository.update(
        review.id,
        {"user_id": "intruder", "images": ["https://evil.example/x.jpg"], "city": "Rio de Janeiro"},
    )

    assert updated.user_id == "user-1"
    assert updated.images == []
    assert updated.city == "Rio de Janeiro"


async def test_update_missing_review_raises(review_repository):
    with pytest.raises(RepositoryError):
        await review_repository.update("missing", {"comment": "Nobody will see this"})


async def test_delete_removes_record(review_repository, db_session):
    review = await review_repository.create(make_review_fields())

    await review_repository.delete(review.id)

    assert await review_repository.get_by_id(review.id) is None
    rows = (await db_session.execute(select(models.Review))).scalars().all()
    assert rows == []


async def test_delete_missing_review_raises(review_repository):
    with pytest.raises(RepositoryError):
        await review_repository.delete("missing")
