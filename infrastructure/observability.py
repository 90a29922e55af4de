"""
Centralized Observability Infrastructure.
Provides structured logging setup and Sentry SDK initialization
governed entirely by environment variables.
"""

import os
import logging
import re
from typing import Any, Dict

import sentry_sdk

log = logging.getLogger(__name__)

# Patterns to scrub in Sentry events
SENSITIVE_PATTERNS = [
    re.compile(r"([a-zA-Z0-9_\-\.]{30,})"),  # bearer tokens / JWTs
    re.compile(r"(\+?[1-9]\d{7,14})"),  # MSISDN phone numbers
]
SENSITIVE_KEYS = {"password", "token", "authorization", "phone_number", "phone"}


def _mask_string(val: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        val = pattern.sub("[REDACTED]", val)
    return val


def _recursive_scrub(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: "[REDACTED]" if str(k).lower() in SENSITIVE_KEYS else _recursive_scrub(v)
            for k, v in obj.items()
        }
    elif isinstance(obj, list):
        return [_recursive_scrub(i) for i in obj]
    elif isinstance(obj, str):
        return _mask_string(obj)
    return obj


def _scrub_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sentry before_send hook. Scrubs tokens, passwords and phone numbers
    from stack frame locals and request data before they leave the process.
    """
    for exc in (event.get("exception") or {}).get("values") or []:
        for frame in (exc.get("stacktrace") or {}).get("frames") or []:
            if "vars" in frame:
                frame["vars"] = _recursive_scrub(frame["vars"])
    if "request" in event:
        event["request"] = _recursive_scrub(event["request"])
    return event


def setup_observability() -> None:
    """
    Initializes global system logging and Sentry (if DSN is present).
    Should be called once at application startup.
    """

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    # Complete format: 2026-02-27 15:00:00 | INFO    | module.name | The message
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    sentry_dsn = os.getenv("SENTRY_DSN")
    if sentry_dsn:
        sentry_env = os.getenv("SENTRY_ENV", "development")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=sentry_env,
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "1.0")),
            send_default_pii=False,
            before_send=_scrub_sensitive_data
        )
        log.info(f"Sentry SDK initialized (env: {sentry_env})")
    else:
        log.info("SENTRY_DSN not provided. Running without Sentry.")

    # Quiet down noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
