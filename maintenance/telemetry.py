"""
Optional Sentry error reporting.

Nothing is sent unless SENTRY_DSN is set and SENTRY_ENABLED is not false.
Passwords, tokens and secrets are scrubbed from events before they leave.
"""

import re
from typing import Any, Optional

import sentry_sdk
from loguru import logger

from maintenance.config import TelemetrySettings, settings

SENSITIVE_KEYS = ("password", "newPassword", "currentPassword", "token", "resetToken", "secret")

_QUERY_SECRET = re.compile(r"(token|password|secret)=[^&]*", re.IGNORECASE)

_initialized = False


def scrub_event(event: dict[str, Any], hint: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Redact sensitive values from an event (Sentry ``before_send`` hook)."""
    request = event.get("request") or {}

    query = request.get("query_string")
    if isinstance(query, str):
        request["query_string"] = _QUERY_SECRET.sub(lambda m: f"{m.group(1)}=[REDACTED]", query)

    data = request.get("data")
    if isinstance(data, dict):
        request["data"] = {
            key: "[REDACTED]" if key in SENSITIVE_KEYS and value else value
            for key, value in data.items()
        }

    extra = event.get("extra")
    if isinstance(extra, dict):
        for key in SENSITIVE_KEYS:
            if extra.get(key):
                extra[key] = "[REDACTED]"

    return event


def init_telemetry(config: TelemetrySettings | None = None) -> bool:
    """
    Initialize Sentry if configured.

    Returns:
        True if Sentry was initialized.
    """
    global _initialized

    config = config or settings.telemetry
    if not config.dsn:
        logger.debug("Sentry DSN not configured, error reporting disabled")
        return False
    if not config.enabled:
        logger.info("Sentry explicitly disabled via SENTRY_ENABLED=false")
        return False

    environment = config.environment or settings.maintenance.app_env
    sentry_sdk.init(
        dsn=config.dsn,
        environment=environment,
        traces_sample_rate=config.traces_sample_rate,
        before_send=scrub_event,
    )
    _initialized = True
    logger.info(f"Sentry initialized (env: {environment}, trace rate: {config.traces_sample_rate:.0%})")
    return True


def capture_exception(error: BaseException, **tags: str) -> None:
    """Report an exception if Sentry is active; otherwise it is only logged."""
    if not _initialized:
        logger.debug(f"Sentry inactive, not reporting: {error!r}")
        return

    with sentry_sdk.new_scope() as scope:
        for key, value in tags.items():
            scope.set_tag(key, value)
        sentry_sdk.capture_exception(error)
