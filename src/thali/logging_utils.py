"""Logging setup with structured output and secret redaction."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, List, Sequence

from thali.config import Settings

REDACTED = "[redacted]"

_TOKEN_PATTERNS = (
    re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/=]+)", re.IGNORECASE),
    re.compile(r"(api_token=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(\"?api_key\"?\s*[:=]\s*\"?)([^\"&\s,}]+)", re.IGNORECASE),
)

# Extra attributes promoted into JSON log lines when present on a record.
_STRUCTURED_FIELDS = ("request_id", "operation", "code", "outcome")


def redact(message: str, secrets: Sequence[str]) -> str:
    """Mask auth tokens and any configured secret values in ``message``."""

    for pattern in _TOKEN_PATTERNS:
        message = pattern.sub(r"\1" + REDACTED, message)
    for secret in secrets:
        if secret:
            message = message.replace(secret, REDACTED)
    return message


class SensitiveDataFilter(logging.Filter):
    """Scrub secrets from the rendered message and from string extras."""

    _UNTOUCHED = frozenset({"msg", "levelname", "name"})

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self._secrets: List[str] = [s.strip() for s in secrets if s and s.strip()]

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - standard interface
        rendered = record.getMessage()
        scrubbed = redact(rendered, self._secrets)
        if scrubbed != rendered:
            record.msg, record.args = scrubbed, ()

        for attr, value in list(vars(record).items()):
            if attr not in self._UNTOUCHED and isinstance(value, str):
                setattr(record, attr, redact(value, self._secrets))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with request-scoped extras when available."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (field, getattr(record, field))
            for field in _STRUCTURED_FIELDS
            if getattr(record, field, None) is not None
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True)


_PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def secrets_from_settings(settings: Settings) -> list[str]:
    return [settings.api_token or "", settings.llm_api_key or ""]


def _formatter_for(fmt: str) -> logging.Formatter:
    if (fmt or "plain").lower() == "json":
        return JsonFormatter()
    return logging.Formatter(_PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")


def configure_logging(level_name: str, fmt: str, secrets: Iterable[str]) -> None:
    """Route all logging through one redacting stream handler on the root logger.

    ``fmt`` is ``plain`` or ``json``; unknown level names fall back to INFO.
    Uvicorn's own handlers are removed so its records share the same output.
    """

    level = getattr(logging, level_name.upper(), logging.INFO)
    scrubber = SensitiveDataFilter(secrets)

    handler = logging.StreamHandler()
    handler.setFormatter(_formatter_for(fmt))
    handler.addFilter(scrubber)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    logging.captureWarnings(True)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True
        server_logger.setLevel(level)
        server_logger.addFilter(scrubber)

    # httpx logs every request line at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
