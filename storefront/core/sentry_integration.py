"""Sentry integration for error tracking."""
from __future__ import annotations

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from logging_config import logger


def init_sentry(
    dsn: str | None = None,
    environment: str = "production",
    enable_logging: bool = True,
    sample_rate: float = 1.0,
) -> bool:
    """Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN; falls back to SENTRY_DSN
        environment: Environment name (production, staging, development)
        enable_logging: Report ERROR log records as Sentry events
        sample_rate: Error sampling rate (1.0 = 100%)

    Returns:
        True if Sentry was initialized
    """
    sentry_dsn = dsn or os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    integrations = []
    if enable_logging:
        # Persistence and listener failures are logged at ERROR and become events
        integrations.append(LoggingIntegration(level=logging.INFO, event_level=logging.ERROR))

    try:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,
            integrations=integrations,
            sample_rate=sample_rate,
            send_default_pii=False,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False

    logger.info(f"Sentry initialized for {environment} environment")
    return True
