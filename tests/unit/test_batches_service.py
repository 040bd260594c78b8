from decimal import Decimal

import pytest

from storefront.api.models import Batch
from storefront.batches.service import (
    batches_for_class_type,
    cart_item_from_batch,
    list_batches,
    next_available_batch,
)


def _batch(num, start, class_type="beginner", students=0, max_students=10, active=True, full=False):
    return Batch(
        batch_num=num,
        class_type=class_type,
        start_date=start,
        end_date="2025-12-31",
        students=students,
        max_students=max_students,
        active=active,
        full=full,
    )


def test_remaining_never_negative():
    assert _batch(1, "2025-01-01", students=12, max_students=10).remaining == 0
    assert _batch(1, "2025-01-01", students=3, max_students=10).remaining == 7


def test_batches_for_class_type_sorted_by_start():
    batches = [_batch(2, "2025-06-01"), _batch(1, "2025-03-01"), _batch(3, "2025-01-01", class_type="advanced")]
    assert [b.batch_num for b in batches_for_class_type(batches, "beginner")] == [1, 2]


def test_next_available_batch_skips_closed_and_full():
    batches = [
        _batch(1, "2025-01-01", active=False),
        _batch(2, "2025-02-01", full=True),
        _batch(3, "2025-03-01", students=10, max_students=10),
        _batch(4, "2025-04-01"),
    ]
    assert next_available_batch(batches, "beginner").batch_num == 4
    assert next_available_batch(batches, "beginner", after="2025-04-01") is None
    assert next_available_batch(batches, "advanced") is None


def test_cart_item_from_batch():
    item = cart_item_from_batch("Scholar", "120", _batch(12, "2025-03-01"), features=["Live classes"])
    assert item.id == "scholar-batch-12"
    assert item.price == Decimal("120")
    assert item.batch_number == 12
    assert item.start_date == "2025-03-01"
    assert item.features == ["Live classes"]


@pytest.mark.asyncio
async def test_list_batches_filters_by_class_type(api_client, backend):
    backend.on(
        "GET",
        "/batch/get",
        json=[
            {"batch_num": 2, "class_type": "beginner", "start_date": "2025-06-01", "end_date": "2025-08-31"},
            {"batch_num": 1, "class_type": "advanced", "start_date": "2025-03-01", "end_date": "2025-05-31"},
        ],
    )
    assert [b.batch_num for b in await list_batches(api_client)] == [1, 2]
    assert [b.batch_num for b in await list_batches(api_client, "beginner")] == [2]
