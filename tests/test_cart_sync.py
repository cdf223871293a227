from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from storefront.core.cart_store import CartStore
from storefront.core.cart_sync import ServerCartSync
from storefront.core.exceptions import CartSyncException


@dataclass
class FakeCartApi:
    items: list[dict] = field(default_factory=list)
    calls: list[tuple] = field(default_factory=list)
    fail: bool = False
    next_id: int = 1

    async def get_server_cart(self, token):
        self.calls.append(("get", token))
        if self.fail:
            raise CartSyncException("Cart unavailable", status=503)
        return [dict(item) for item in self.items]

    async def add_server_cart_item(self, product_id, quantity, token):
        self.calls.append(("add", product_id, quantity))
        item = {"id": self.next_id, "productId": product_id, "quantity": quantity}
        self.next_id += 1
        self.items.append(item)
        return item

    async def update_server_cart_item(self, item_id, quantity, token):
        self.calls.append(("update", item_id, quantity))
        for item in self.items:
            if item["id"] == item_id:
                item["quantity"] = quantity
                return item
        raise CartSyncException("Cart item not found", status=404)

    async def remove_server_cart_item(self, item_id, token):
        self.calls.append(("remove", item_id))
        self.items = [item for item in self.items if item["id"] != item_id]


@pytest.fixture()
def cart(storage) -> CartStore:
    store = CartStore(storage)
    store.load()
    return store


def test_schedule_without_event_loop_does_not_raise(cart, make_product) -> None:
    api = FakeCartApi()
    sync = ServerCartSync(api, "jwt")
    sync.attach(cart)

    line = cart.add_item(make_product(1))

    assert line is not None
    assert api.calls == []


@pytest.mark.asyncio
async def test_push_collapses_duplicate_server_lines(cart, make_product) -> None:
    api = FakeCartApi(
        items=[
            {"id": 10, "productId": 1, "quantity": 1},
            {"id": 11, "productId": 1, "quantity": 5},
        ],
        next_id=20,
    )
    cart.add_item(make_product(1), quantity=2)
    sync = ServerCartSync(api, "jwt")
    sync.attach(cart)

    await sync.push()

    assert api.items == [{"id": 10, "productId": 1, "quantity": 2}]
    assert ("remove", 11) in api.calls


@pytest.mark.asyncio
async def test_burst_of_mutations_coalesces(cart, make_product) -> None:
    api = FakeCartApi()
    sync = ServerCartSync(api, "jwt")
    sync.attach(cart)

    cart.add_item(make_product(1))
    cart.add_item(make_product(2))
    cart.set_quantity(1, 3)
    await sync.flush()

    assert [call[0] for call in api.calls].count("get") == 1
    assert {item["productId"]: item["quantity"] for item in api.items} == {1: 3, 2: 1}


@pytest.mark.asyncio
async def test_failed_push_is_retried_on_next_change(cart, make_product) -> None:
    api = FakeCartApi(fail=True)
    sync = ServerCartSync(api, "jwt")
    sync.attach(cart)

    cart.add_item(make_product(1))
    await sync.flush()
    assert sync.last_error.status == 503

    api.fail = False
    cart.add_item(make_product(1))
    await sync.flush()

    assert sync.last_error is None
    assert api.items == [{"id": 1, "productId": 1, "quantity": 2}]


@pytest.mark.asyncio
async def test_detached_sync_ignores_changes(cart, make_product) -> None:
    api = FakeCartApi()
    sync = ServerCartSync(api, "jwt")
    sync.attach(cart)
    sync.detach()

    cart.add_item(make_product(1))
    await sync.flush()

    assert api.calls == []
