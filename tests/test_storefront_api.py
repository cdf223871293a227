from __future__ import annotations

from decimal import Decimal

import pytest

from storefront.core.exceptions import (
    CartSyncException,
    CatalogException,
    InvalidProductException,
    OrderSubmissionException,
    StorefrontApiException,
)
from storefront.domain.entities import OrderDraft, OrderDraftItem
from storefront.integrations.storefront_api import StorefrontApiClient


def _draft() -> OrderDraft:
    return OrderDraft(
        items=[OrderDraftItem(product_id=2, quantity=3, price=Decimal("10"))],
        subtotal=Decimal("30"),
        shipping=Decimal("4.99"),
        tax=Decimal("2.1"),
        total=Decimal("37.09"),
        shipping_address="12 Main St",
    )


@pytest.mark.asyncio
async def test_get_product_parses_catalog_record(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        product = await api.get_product(4)

    assert product is not None
    assert product.name == "Smart Watch"
    assert product.price == Decimal("150")
    assert product.discount_percent == 25
    assert product.in_stock is True


@pytest.mark.asyncio
async def test_get_product_returns_none_on_404(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        assert await api.get_product(999) is None


@pytest.mark.asyncio
async def test_get_product_raises_on_server_error(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        with pytest.raises(CatalogException) as exc_info:
            await api.get_product("boom")

    assert exc_info.value.status == 500


@pytest.mark.asyncio
async def test_unreachable_catalog_raises_catalog_exception() -> None:
    async with StorefrontApiClient("http://127.0.0.1:1", timeout=1) as api:
        with pytest.raises(CatalogException):
            await api.get_product(1)


@pytest.mark.asyncio
async def test_list_products_filters_by_category(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        everything = await api.list_products()
        wearables = await api.list_products(category="wearables")

    assert len(everything) == 4
    assert [product.id for product in wearables] == [4]


@pytest.mark.asyncio
async def test_build_price_lookup_skips_unknown_ids(catalog_url, catalog_server) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        prices = await api.build_price_lookup([1, 2, 2, 999])

    assert prices == {1: Decimal("59.99"), 2: Decimal("10")}
    # duplicate ids are fetched once
    assert sorted(catalog_server.app["requests"]) == ["1", "2", "999"]


@pytest.mark.asyncio
async def test_build_price_lookup_empty(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        assert await api.build_price_lookup([]) == {}


@pytest.mark.asyncio
async def test_create_order_posts_payload_with_token(catalog_url, catalog_server) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        order = await api.create_order(_draft(), token="secret")

    assert order["id"] == 1
    stored = catalog_server.app["orders"][0]
    assert stored["items"] == [{"productId": 2, "quantity": 3, "price": 10.0}]
    assert stored["shippingAddress"] == "12 Main St"
    assert stored["paymentMethod"] == "credit-card"
    assert stored["authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_create_order_rejected(catalog_url, catalog_server) -> None:
    catalog_server.app["config"]["order_status"] = 400

    async with StorefrontApiClient(catalog_url) as api:
        with pytest.raises(OrderSubmissionException) as exc_info:
            await api.create_order(_draft())

    assert exc_info.value.status == 400
    assert catalog_server.app["orders"] == []


@pytest.mark.asyncio
async def test_record_without_valid_price_is_rejected(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        with pytest.raises(InvalidProductException):
            await api.get_product(5)
        with pytest.raises(InvalidProductException):
            await api.get_product(6)


@pytest.mark.asyncio
async def test_price_lookup_leaves_out_unpriced_products(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        prices = await api.build_price_lookup([1, 5, 6])

    assert prices == {1: Decimal("59.99")}


@pytest.mark.asyncio
async def test_undecodable_product_body_raises_catalog_exception(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        with pytest.raises(CatalogException):
            await api.get_product("garbled")


@pytest.mark.parametrize("body", ["[1]", "42", "not json", '{"status": "ok"}'])
@pytest.mark.asyncio
async def test_malformed_order_response_raises(catalog_url, catalog_server, body) -> None:
    catalog_server.app["config"]["order_body"] = body

    async with StorefrontApiClient(catalog_url) as api:
        with pytest.raises(OrderSubmissionException):
            await api.create_order(_draft())


@pytest.mark.asyncio
async def test_order_history(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        created = await api.create_order(_draft(), token="secret")

        orders = await api.list_orders("secret")
        order = await api.get_order(created["id"], "secret")
        missing = await api.get_order(999, "secret")

    assert [item["id"] for item in orders] == [created["id"]]
    assert order["total"] == 37.09
    assert missing is None


@pytest.mark.asyncio
async def test_order_history_rejected_without_auth(catalog_url) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        with pytest.raises(StorefrontApiException) as exc_info:
            await api.list_orders("")

    assert exc_info.value.status == 401


@pytest.mark.asyncio
async def test_server_cart_endpoints(catalog_url, catalog_server) -> None:
    async with StorefrontApiClient(catalog_url) as api:
        first = await api.add_server_cart_item(1, 2, "secret")
        second = await api.add_server_cart_item(2, 1, "secret")
        await api.update_server_cart_item(first["id"], 5, "secret")
        await api.remove_server_cart_item(second["id"], "secret")
        items = await api.get_server_cart("secret")
        await api.clear_server_cart("secret")

    assert [(item["productId"], item["quantity"]) for item in items] == [(1, 5)]
    assert catalog_server.app["server_cart"] == []


@pytest.mark.asyncio
async def test_server_cart_errors_raise_cart_sync_exception(catalog_url, catalog_server) -> None:
    catalog_server.app["config"]["cart_status"] = 503

    async with StorefrontApiClient(catalog_url) as api:
        with pytest.raises(CartSyncException) as exc_info:
            await api.get_server_cart("secret")

    assert exc_info.value.status == 503
