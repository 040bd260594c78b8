import json
from decimal import Decimal

import pytest

from storefront.cart.models import CartItem, make_item_id
from storefront.cart.storage import MemoryStorage
from storefront.cart.store import CART_STORAGE_KEY, SESSION_MARKER_KEY, CartStore


def _item(plan="scholar", batch=12, price="120"):
    return CartItem(
        id=make_item_id(plan, batch),
        name=plan.title(),
        price=Decimal(price),
        start_date="2025-03-01",
        end_date="2025-05-31",
        batch_number=batch,
    )


def test_make_item_id_composes_plan_and_batch():
    assert make_item_id("Scholar", 12) == "scholar-batch-12"
    assert make_item_id("scholar") == "scholar"


def test_add_is_idempotent_per_id(cart):
    cart.add(_item())
    cart.add(_item(price="999"))
    assert cart.count() == 1
    # Pas de mise à jour sur doublon
    assert cart.list()[0].price == Decimal("120")


def test_same_plan_on_two_batches_gives_two_lines(cart):
    cart.add(_item(batch=12))
    cart.add(_item(batch=13))
    assert [i.id for i in cart.list()] == ["scholar-batch-12", "scholar-batch-13"]


def test_total_is_sum_of_prices(cart):
    cart.add(_item(batch=1, price="120"))
    cart.add(_item(batch=2, price="79.50"))
    assert cart.total_price() == Decimal("199.50")
    cart.remove("scholar-batch-1")
    assert cart.total_price() == Decimal("79.50")


def test_empty_cart_total_is_zero(cart):
    assert cart.is_empty()
    assert cart.total_price() == Decimal("0")


def test_mutations_are_persisted(cart, storage):
    cart.add(_item())
    rows = json.loads(storage.get(CART_STORAGE_KEY))
    assert rows[0]["id"] == "scholar-batch-12"
    assert rows[0]["price"] == 120

    reloaded = CartStore(storage=storage, session={SESSION_MARKER_KEY: "1"})
    assert [i.id for i in reloaded.list()] == ["scholar-batch-12"]


def test_remove_unknown_id_does_not_write(storage):
    store = CartStore(storage=storage, session={SESSION_MARKER_KEY: "1"})
    store.remove("missing")
    assert storage.get(CART_STORAGE_KEY) is None


def test_clear_empties_and_persists(cart, storage):
    cart.add(_item())
    cart.clear()
    assert cart.is_empty()
    assert json.loads(storage.get(CART_STORAGE_KEY)) == []


def test_new_browsing_session_discards_persisted_cart():
    storage = MemoryStorage({CART_STORAGE_KEY: json.dumps([_item().model_dump(mode="json")])})
    session = {}
    store = CartStore(storage=storage, session=session)
    assert store.is_empty()
    assert session[SESSION_MARKER_KEY]
    assert storage.get(CART_STORAGE_KEY) is None


@pytest.mark.parametrize("raw", ["{not json", json.dumps({"id": "x"}), json.dumps([{"name": "no id"}])])
def test_corrupted_storage_resets_to_empty(raw):
    storage = MemoryStorage({CART_STORAGE_KEY: raw})
    store = CartStore(storage=storage, session={SESSION_MARKER_KEY: "1"})
    assert store.is_empty()
    assert storage.get(CART_STORAGE_KEY) is None


def test_price_serializes_as_native_number():
    assert _item(price="79.5").model_dump(mode="json")["price"] == 79.5
