"""Logging setup with contextual dimensions.

``logger`` is the root application logger. ``with_context`` returns a new
``ContextualLogger`` that carries extra dimensions (request_id, user_id, ...)
on every record; ``with_prefix`` prepends a fixed string to every message.

Usage:
    from vatcounsel.core.logging import logger

    log = logger.with_context(request_id=request_id, user_id=str(user_id))
    log.info("Usage snapshot served")
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping, Optional

from vatcounsel.core.config import settings

_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "asctime"}
)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        """Serialize the record with its contextual dimensions."""
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that merges fixed dimensions into every record."""

    def __init__(
        self,
        logger: logging.Logger,
        dimensions: Optional[dict[str, Any]] = None,
        prefix: str = "",
    ) -> None:
        """Wrap ``logger`` with the given dimensions and message prefix."""
        super().__init__(logger, dict(dimensions or {}))
        self.dimensions = dict(dimensions or {})
        self.prefix = prefix

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, Any]:
        """Attach dimensions as ``extra`` and apply the prefix."""
        extra = dict(self.dimensions)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return f"{self.prefix}{msg}", kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional dimensions."""
        merged = {**self.dimensions, **dimensions}
        return ContextualLogger(self.logger, merged, self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a new logger that prepends ``prefix`` to every message."""
        return ContextualLogger(self.logger, self.dimensions, self.prefix + prefix)


def _configure_root_logger() -> logging.Logger:
    base = logging.getLogger("vatcounsel")
    base.setLevel(settings.LOG_LEVEL.upper())
    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.LOG_JSON:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        base.addHandler(handler)
    base.propagate = False
    return base


logger = ContextualLogger(_configure_root_logger())
