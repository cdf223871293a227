"""Session lifetime: owns the cart and favorites stores for one user.

Replaces a page-wide cart singleton. A UI layer opens one session when a
user (or guest) arrives, passes it by reference to whatever needs the
stores, and closes it when the session ends.
"""
from __future__ import annotations

from typing import Any

from logging_config import logger
from storefront.core.cart_store import CartStore
from storefront.core.cart_sync import ServerCartSync
from storefront.core.checkout import CheckoutSummary, build_checkout_summary, build_order_draft
from storefront.core.config import Settings
from storefront.core.constants import DEFAULT_PAYMENT_METHOD
from storefront.core.exceptions import StorefrontException
from storefront.core.favorites_store import FavoritesStore
from storefront.core.notifications import ToastNotifier, ToastSink, error_toast
from storefront.integrations.storage import KeyValueStorage
from storefront.integrations.storefront_api import StorefrontApiClient


def scoped_key(base_key: str, user_id: int | None) -> str:
    """``cart`` for guests, ``cart:<user_id>`` for signed-in users."""
    if user_id is None:
        return base_key
    return f"{base_key}:{int(user_id)}"


class StorefrontSession:
    def __init__(
        self,
        storage: KeyValueStorage,
        settings: Settings,
        user_id: int | None = None,
        api: StorefrontApiClient | None = None,
        toast_sink: ToastSink | None = None,
        token: str | None = None,
    ) -> None:
        self.user_id = user_id
        self.settings = settings
        self._storage = storage
        self._api = api
        self._toast_sink = toast_sink
        self._token = token
        self._notifier: ToastNotifier | None = None
        self._cart_sync: ServerCartSync | None = None
        self._cart: CartStore | None = None
        self._favorites: FavoritesStore | None = None

    @property
    def is_open(self) -> bool:
        return self._cart is not None

    @property
    def cart(self) -> CartStore:
        if self._cart is None:
            raise StorefrontException("Session is not open")
        return self._cart

    @property
    def favorites(self) -> FavoritesStore:
        if self._favorites is None:
            raise StorefrontException("Session is not open")
        return self._favorites

    @property
    def cart_sync(self) -> ServerCartSync | None:
        """Server cart mirror; only signed-in sessions with an API client have one."""
        return self._cart_sync

    def open(self) -> StorefrontSession:
        """Create both stores and rehydrate them from storage."""
        if self.is_open:
            return self
        storage_config = self.settings.storage
        self._cart = CartStore(self._storage, scoped_key(storage_config.cart_key, self.user_id))
        self._favorites = FavoritesStore(
            self._storage, scoped_key(storage_config.favorites_key, self.user_id)
        )
        self._cart.load()
        self._favorites.load()

        if self._toast_sink is not None:
            self._notifier = ToastNotifier(self._toast_sink)
            self._notifier.attach(self._cart)
            self._notifier.attach(self._favorites)

        if self.user_id is not None and self._api is not None and self._token:
            self._cart_sync = ServerCartSync(self._api, self._token)
            self._cart_sync.attach(self._cart)
            self._cart_sync.schedule()

        logger.info(
            "Session opened for %s: %s cart units, %s favorites",
            self.user_id if self.user_id is not None else "guest",
            self._cart.get_count(),
            self._favorites.count,
        )
        return self

    def close(self) -> None:
        """Tear down subscribers; persisted state stays in storage."""
        if self._notifier is not None:
            self._notifier.detach_all()
            self._notifier = None
        if self._cart_sync is not None:
            self._cart_sync.detach()
            self._cart_sync = None
        if self._cart is not None:
            self._cart.close()
        if self._favorites is not None:
            self._favorites.close()
        self._cart = None
        self._favorites = None

    def __enter__(self) -> StorefrontSession:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _require_api(self) -> StorefrontApiClient:
        if self._api is None:
            raise StorefrontException("Storefront API client is not configured")
        return self._api

    async def checkout_summary(self) -> CheckoutSummary:
        """Price the cart at live catalog prices."""
        api = self._require_api()
        prices = await api.build_price_lookup(line.product_id for line in self.cart.lines)
        return build_checkout_summary(self.cart, prices, self.settings.pricing)

    async def place_order(
        self,
        shipping_address: str,
        payment_method: str = DEFAULT_PAYMENT_METHOD,
        token: str | None = None,
    ) -> dict[str, Any]:
        """Submit the cart as an order; ordered units leave the cart only on success."""
        try:
            summary = await self.checkout_summary()
            draft = build_order_draft(summary, shipping_address, payment_method)
            order = await self._require_api().create_order(draft, token=token or self._token)
        except StorefrontException as exc:
            if self._notifier is not None:
                self._notifier.notify(error_toast(exc.message))
            raise

        # Lines added or grown while the request was in flight stay in the cart
        self.cart.deduct({item.product_id: item.quantity for item in draft.items})
        return order

    async def list_orders(self) -> list[dict[str, Any]]:
        return await self._require_api().list_orders(self._require_token())

    async def get_order(self, order_id: Any) -> dict[str, Any] | None:
        return await self._require_api().get_order(order_id, self._require_token())

    def _require_token(self) -> str:
        if not self._token:
            raise StorefrontException("Order history requires a signed-in session")
        return self._token
