"""Background mirror of a signed-in user's cart to the server-side cart.

The local ``CartStore`` stays authoritative. Every cart event schedules a
push on the running event loop; mutations never wait for the network and
a failed push is logged and retried on the next event.
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from logging_config import logger
from storefront.core.cart_store import CartStore
from storefront.core.exceptions import StorefrontApiException
from storefront.core.persisted_store import StoreEvent
from storefront.integrations.storefront_api import StorefrontApiClient


class ServerCartSync:
    def __init__(self, api: StorefrontApiClient, token: str) -> None:
        self._api = api
        self._token = token
        self._cart: CartStore | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._task: asyncio.Task | None = None
        self._dirty = False
        self.last_error: Exception | None = None

    def attach(self, cart: CartStore) -> None:
        self._cart = cart
        self._unsubscribe = cart.subscribe(self.handle)

    def detach(self) -> None:
        """Stop listening; a push already in flight still completes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle(self, event: StoreEvent) -> None:
        self.schedule()

    def schedule(self) -> None:
        """Request a push; coalesces with a push that is already running."""
        self._dirty = True
        if self._task is not None and not self._task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, server cart push deferred")
            return
        self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        while self._dirty:
            self._dirty = False
            try:
                await self.push()
                self.last_error = None
            except StorefrontApiException as exc:
                self.last_error = exc
                logger.warning("Server cart sync failed: %s", exc.message)
            except Exception as exc:
                self.last_error = exc
                logger.error(f"Server cart sync error: {exc}")

    async def push(self) -> None:
        """Make the server cart match the local lines."""
        if self._cart is None:
            return
        wanted: dict[Any, int] = {line.product_id: line.quantity for line in self._cart.lines}
        server_items = await self._api.get_server_cart(self._token)

        seen: set[Any] = set()
        for item in server_items:
            product_id = item.get("productId", item.get("product_id"))
            quantity = wanted.get(product_id)
            if quantity is None or product_id in seen:
                await self._api.remove_server_cart_item(item.get("id"), self._token)
            elif item.get("quantity") != quantity:
                await self._api.update_server_cart_item(item.get("id"), quantity, self._token)
            seen.add(product_id)

        for product_id, quantity in wanted.items():
            if product_id not in seen:
                await self._api.add_server_cart_item(product_id, quantity, self._token)

    async def flush(self) -> None:
        """Wait for the scheduled push, if any, to finish."""
        if self._task is not None:
            await self._task
