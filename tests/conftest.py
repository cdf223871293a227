"""Shared pytest fixtures for store, checkout and API client tests."""
from __future__ import annotations

from decimal import Decimal

import pytest
from aiohttp import web

from storefront.core.config import Settings, StorageConfig
from storefront.core.order_math import PricingConfig
from storefront.domain.entities import Product
from storefront.integrations.storage import MemoryStorage

STOREFRONT_ENV_VARS = (
    "REDIS_URL",
    "STOREFRONT_API_URL",
    "STOREFRONT_API_TIMEOUT",
    "CART_STORAGE_KEY",
    "FAVORITES_STORAGE_KEY",
    "STORAGE_TTL_SECONDS",
    "FREE_SHIPPING_THRESHOLD",
    "FLAT_SHIPPING_FEE",
    "TAX_RATE",
    "LOG_LEVEL",
    "SENTRY_DSN",
    "ENVIRONMENT",
)

CATALOG = [
    {"id": 1, "name": "Wireless Headphones", "price": 59.99, "imageUrl": "/img/1.png", "stock": 12},
    {"id": 2, "name": "Phone Case", "price": 10, "imageUrl": "/img/2.png", "stock": 40},
    {"id": 3, "name": "USB-C Cable", "price": 5, "category": "accessories", "stock": 0},
    {
        "id": 4,
        "name": "Smart Watch",
        "price": 150,
        "compareAtPrice": 200,
        "category": "wearables",
        "stock": 3,
    },
    {"id": 5, "name": "Mystery Box"},
    {"id": 6, "name": "Gift Card", "price": "free"},
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    """Keep developer environment out of config-dependent tests."""
    for name in STOREFRONT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        api_url=None,
        api_timeout=5.0,
        storage=StorageConfig(redis_url=None),
        pricing=PricingConfig(),
    )


@pytest.fixture()
def make_product():
    def _make(product_id=1, name="Product", price="10", **extra) -> Product:
        return Product(id=product_id, name=name, price=Decimal(str(price)), **extra)

    return _make


def _authorized(request: web.Request) -> bool:
    return request.headers.get("Authorization", "").startswith("Bearer ")


def build_catalog_app(products: list[dict] | None = None) -> web.Application:
    """Fake storefront API: products, orders and the signed-in user's cart."""
    app = web.Application()
    app["products"] = {item["id"]: item for item in (products if products is not None else CATALOG)}
    app["orders"] = []
    app["server_cart"] = []
    app["config"] = {"order_status": 201, "order_body": None, "cart_status": 200, "next_cart_id": 100}
    app["requests"] = []

    async def list_products(request: web.Request) -> web.Response:
        items = list(request.app["products"].values())
        category = request.query.get("category")
        if category:
            items = [item for item in items if item.get("category") == category]
        return web.json_response(items)

    async def get_product(request: web.Request) -> web.Response:
        raw_id = request.match_info["product_id"]
        request.app["requests"].append(raw_id)
        if raw_id == "boom":
            return web.json_response({"error": "internal"}, status=500)
        if raw_id == "garbled":
            return web.Response(text="<html>oops", content_type="application/json")
        product_id = int(raw_id) if raw_id.isdigit() else raw_id
        product = request.app["products"].get(product_id)
        if product is None:
            return web.json_response({"error": "Product not found"}, status=404)
        return web.json_response(product)

    async def create_order(request: web.Request) -> web.Response:
        config = request.app["config"]
        if config["order_status"] not in (200, 201):
            return web.json_response({"error": "Order rejected"}, status=config["order_status"])
        body = await request.json()
        if config["order_body"] is not None:
            return web.Response(text=config["order_body"], status=201, content_type="application/json")
        order = {
            "id": len(request.app["orders"]) + 1,
            **body,
            "authorization": request.headers.get("Authorization"),
        }
        request.app["orders"].append(order)
        return web.json_response(order, status=201)

    async def list_orders(request: web.Request) -> web.Response:
        if not _authorized(request):
            return web.json_response({"message": "Unauthorized"}, status=401)
        return web.json_response(request.app["orders"])

    async def get_order(request: web.Request) -> web.Response:
        if not _authorized(request):
            return web.json_response({"message": "Unauthorized"}, status=401)
        order_id = int(request.match_info["order_id"])
        for order in request.app["orders"]:
            if order["id"] == order_id:
                return web.json_response(order)
        return web.json_response({"message": "Order not found"}, status=404)

    def _cart_guard(request: web.Request) -> web.Response | None:
        if not _authorized(request):
            return web.json_response({"message": "Unauthorized"}, status=401)
        status = request.app["config"]["cart_status"]
        if status != 200:
            return web.json_response({"message": "Cart unavailable"}, status=status)
        return None

    def _find_cart_item(request: web.Request) -> dict | None:
        item_id = int(request.match_info["item_id"])
        for item in request.app["server_cart"]:
            if item["id"] == item_id:
                return item
        return None

    async def get_cart(request: web.Request) -> web.Response:
        return _cart_guard(request) or web.json_response(request.app["server_cart"])

    async def add_cart_item(request: web.Request) -> web.Response:
        denied = _cart_guard(request)
        if denied:
            return denied
        body = await request.json()
        config = request.app["config"]
        item = {"id": config["next_cart_id"], "productId": body["productId"], "quantity": body["quantity"]}
        config["next_cart_id"] += 1
        request.app["server_cart"].append(item)
        return web.json_response(item, status=201)

    async def update_cart_item(request: web.Request) -> web.Response:
        denied = _cart_guard(request)
        if denied:
            return denied
        item = _find_cart_item(request)
        if item is None:
            return web.json_response({"message": "Cart item not found"}, status=404)
        item["quantity"] = (await request.json())["quantity"]
        return web.json_response(item)

    async def remove_cart_item(request: web.Request) -> web.Response:
        denied = _cart_guard(request)
        if denied:
            return denied
        item = _find_cart_item(request)
        if item is None:
            return web.json_response({"message": "Cart item not found"}, status=404)
        request.app["server_cart"].remove(item)
        return web.Response(status=204)

    async def clear_cart(request: web.Request) -> web.Response:
        denied = _cart_guard(request)
        if denied:
            return denied
        request.app["server_cart"].clear()
        return web.Response(status=204)

    app.router.add_get("/api/products", list_products)
    app.router.add_get("/api/products/{product_id}", get_product)
    app.router.add_post("/api/orders", create_order)
    app.router.add_get("/api/orders", list_orders)
    app.router.add_get("/api/orders/{order_id}", get_order)
    app.router.add_get("/api/cart", get_cart)
    app.router.add_post("/api/cart", add_cart_item)
    app.router.add_put("/api/cart/{item_id}", update_cart_item)
    app.router.add_delete("/api/cart/{item_id}", remove_cart_item)
    app.router.add_delete("/api/cart", clear_cart)
    return app


@pytest.fixture()
async def catalog_server():
    """Running fake storefront API; yields the aiohttp TestServer."""
    from aiohttp.test_utils import TestServer

    server = TestServer(build_catalog_app())
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture()
def catalog_url(catalog_server) -> str:
    return str(catalog_server.make_url("/"))
