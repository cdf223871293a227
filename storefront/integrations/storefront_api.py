"""HTTP client for the storefront REST API (catalog, orders, server cart).

The API server is an external collaborator: product records come back as
read-only ``Product`` snapshots and orders are submitted as JSON.
"""
from __future__ import annotations

import asyncio
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

import aiohttp
from pydantic import ValidationError

from logging_config import logger
from storefront.core.constants import DEFAULT_API_TIMEOUT_SECONDS
from storefront.core.exceptions import (
    CartSyncException,
    CatalogException,
    InvalidProductException,
    OrderSubmissionException,
    StorefrontApiException,
)
from storefront.domain.entities import OrderDraft, Product


class StorefrontApiClient:
    """Async client for ``/api/products``, ``/api/orders`` and ``/api/cart``.

    Example:
    ```
    api = StorefrontApiClient("http://localhost:5000")
    prices = await api.build_price_lookup(line.product_id for line in cart.lines)
    await api.close()
    ```
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_API_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> StorefrontApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/{path.lstrip('/')}"

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type[StorefrontApiException],
        *,
        token: str | None = None,
        json: Any = None,
        params: dict[str, str] | None = None,
        ok_statuses: tuple[int, ...] = (200,),
        allow_not_found: bool = False,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Returns None for 204 responses and, with ``allow_not_found``, for 404.
        Transport errors, unexpected statuses and undecodable bodies raise
        ``error_cls``.
        """
        session = await self._get_session()
        try:
            async with session.request(
                method, self._url(path), json=json, params=params, headers=self._headers(token)
            ) as response:
                if allow_not_found and response.status == 404:
                    return None
                if response.status not in ok_statuses:
                    detail = await response.text()
                    raise error_cls(
                        f"{method} /api/{path} returned HTTP {response.status}: {detail[:200]}",
                        status=response.status,
                    )
                if response.status == 204:
                    return None
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise error_cls(f"{method} /api/{path} failed: {exc}") from exc
        except ValueError as exc:
            raise error_cls(f"{method} /api/{path} returned invalid JSON: {exc}") from exc

    @staticmethod
    def _expect(data: Any, kind: type, error_cls: type[StorefrontApiException], what: str) -> Any:
        if not isinstance(data, kind):
            raise error_cls(f"Unexpected {what} payload: {type(data).__name__}")
        return data

    @staticmethod
    def _parse_product(data: Any) -> Product:
        if not isinstance(data, dict):
            raise CatalogException(f"Unexpected product payload: {type(data).__name__}")
        try:
            return Product.from_api(data)
        except ValidationError as exc:
            raise InvalidProductException(
                f"Invalid product record {data.get('id')!r}: {exc}"
            ) from exc

    # ----- catalog -----

    async def get_product(self, product_id: Any) -> Product | None:
        """Fetch one product; None when the catalog returns 404."""
        data = await self._request(
            "GET", f"products/{product_id}", CatalogException, allow_not_found=True
        )
        if data is None:
            return None
        return self._parse_product(data)

    async def list_products(self, category: str | None = None) -> list[Product]:
        params = {"category": category} if category else None
        data = await self._request("GET", "products", CatalogException, params=params)

        # Some deployments wrap the list: {"products": [...]}
        if isinstance(data, dict):
            data = data.get("products", [])
        products: list[Product] = []
        for item in self._expect(data, list, CatalogException, "product list"):
            try:
                products.append(self._parse_product(item))
            except InvalidProductException as exc:
                logger.warning("Skipping catalog record: %s", exc.message)
        return products

    async def _get_sellable_product(self, product_id: Any) -> Product | None:
        try:
            return await self.get_product(product_id)
        except InvalidProductException as exc:
            logger.warning("Treating product %s as unavailable: %s", product_id, exc.message)
            return None

    async def get_products(self, product_ids: Iterable[Any]) -> dict[Any, Product]:
        """Fetch several products concurrently.

        Unknown ids and records without a valid price are left out, so
        callers see them as missing rather than free.
        """
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return {}
        results = await asyncio.gather(*(self._get_sellable_product(pid) for pid in ids))
        products = {pid: product for pid, product in zip(ids, results) if product is not None}
        if len(products) != len(ids):
            logger.info("Catalog is missing %s of %s requested products", len(ids) - len(products), len(ids))
        return products

    async def build_price_lookup(self, product_ids: Iterable[Any]) -> dict[Any, Decimal]:
        """Live price table for the given products."""
        products = await self.get_products(product_ids)
        return {pid: product.price for pid, product in products.items()}

    # ----- orders -----

    async def create_order(self, draft: OrderDraft, token: str | None = None) -> dict[str, Any]:
        """Submit an order; returns the created order record."""
        data = await self._request(
            "POST",
            "orders",
            OrderSubmissionException,
            token=token,
            json=draft.to_payload(),
            ok_statuses=(200, 201),
        )
        order = self._expect(data, dict, OrderSubmissionException, "order")
        if order.get("id") is None:
            raise OrderSubmissionException("Order API response has no order id")

        logger.info("Order %s created (%s items)", order.get("id"), draft.items_count)
        return order

    async def list_orders(self, token: str) -> list[dict[str, Any]]:
        """Order history of the signed-in user."""
        data = await self._request("GET", "orders", StorefrontApiException, token=token)
        return self._expect(data, list, StorefrontApiException, "order list")

    async def get_order(self, order_id: Any, token: str) -> dict[str, Any] | None:
        """One order of the signed-in user; None when it does not exist."""
        data = await self._request(
            "GET", f"orders/{order_id}", StorefrontApiException, token=token, allow_not_found=True
        )
        if data is None:
            return None
        return self._expect(data, dict, StorefrontApiException, "order")

    # ----- server cart -----

    async def get_server_cart(self, token: str) -> list[dict[str, Any]]:
        data = await self._request("GET", "cart", CartSyncException, token=token)
        return self._expect(data, list, CartSyncException, "cart")

    async def add_server_cart_item(self, product_id: Any, quantity: int, token: str) -> dict[str, Any]:
        data = await self._request(
            "POST",
            "cart",
            CartSyncException,
            token=token,
            json={"productId": product_id, "quantity": quantity},
            ok_statuses=(200, 201),
        )
        return self._expect(data, dict, CartSyncException, "cart item")

    async def update_server_cart_item(self, item_id: Any, quantity: int, token: str) -> dict[str, Any]:
        data = await self._request(
            "PUT", f"cart/{item_id}", CartSyncException, token=token, json={"quantity": quantity}
        )
        return self._expect(data, dict, CartSyncException, "cart item")

    async def remove_server_cart_item(self, item_id: Any, token: str) -> None:
        await self._request(
            "DELETE", f"cart/{item_id}", CartSyncException, token=token, ok_statuses=(200, 204)
        )

    async def clear_server_cart(self, token: str) -> None:
        await self._request("DELETE", "cart", CartSyncException, token=token, ok_statuses=(200, 204))
