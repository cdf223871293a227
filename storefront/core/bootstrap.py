"""Wiring for a storefront session: settings, storage, API client, Sentry."""
from __future__ import annotations

from logging_config import setup_logging
from storefront.core.config import Settings, load_settings
from storefront.core.notifications import ToastSink
from storefront.core.sentry_integration import init_sentry
from storefront.core.session import StorefrontSession
from storefront.integrations.storage import KeyValueStorage, create_storage
from storefront.integrations.storefront_api import StorefrontApiClient


def build_storage(settings: Settings) -> KeyValueStorage:
    """Redis when REDIS_URL is set, process memory otherwise."""
    return create_storage(settings.storage.redis_url, settings.storage.ttl_seconds)


def build_api_client(settings: Settings) -> StorefrontApiClient | None:
    if not settings.api_url:
        return None
    return StorefrontApiClient(settings.api_url, timeout=settings.api_timeout)


def build_session(
    user_id: int | None = None,
    settings: Settings | None = None,
    storage: KeyValueStorage | None = None,
    toast_sink: ToastSink | None = None,
    token: str | None = None,
) -> StorefrontSession:
    """Create an unopened session from configuration."""
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, environment=settings.environment)
    return StorefrontSession(
        storage=storage or build_storage(settings),
        settings=settings,
        user_id=user_id,
        api=build_api_client(settings),
        toast_sink=toast_sink,
        token=token,
    )
