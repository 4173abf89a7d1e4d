"""Structured JSON logging correlated with the active search span."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from docs_knowledge_search.observability.context import get_trace_context


_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line with trace ids and ``extra`` fields.

    Query text is user input, so long values are truncated and keys that look
    like credentials are redacted.
    """

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization"})
    MAX_MESSAGE_LEN = 2000
    MAX_EXTRA_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_trace_context()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "message": self._truncate(record.getMessage(), self.MAX_MESSAGE_LEN),
            "logger": record.name,
            "trace_id": ctx.get("trace_id", ""),
            "span_id": ctx.get("span_id", ""),
        }
        if "." in record.name:
            entry["component"] = record.name.rsplit(".", 1)[-1]
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_") or key in entry:
                continue
            entry[key] = self._redact(key, value)

        return orjson.dumps(entry, default=self._json_default).decode("utf-8")

    @staticmethod
    def _truncate(text: str, limit: int) -> str:
        return text if len(text) <= limit else text[:limit] + "..."

    def _redact(self, key: str, value: Any) -> Any:
        if key.lower() in self.REDACT_KEYS:
            return "[REDACTED]"
        if isinstance(value, str):
            return self._truncate(value, self.MAX_EXTRA_LEN)
        return value

    def _json_default(self, value: Any) -> Any:
        if isinstance(value, (set, frozenset)):
            try:
                return sorted(value)
            except TypeError:
                return list(value)
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, (bytes, bytearray)):
            return value.decode("utf-8", errors="replace")
        return repr(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Root log level name.
        json_output: Use ``JsonFormatter`` when True, a plain text line otherwise.
        logger_levels: Per-logger overrides, e.g. ``{"docs_knowledge_search.search": "debug"}``.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    root.addHandler(handler)

    # The vector oracle client logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    for logger_name, logger_level in (logger_levels or {}).items():
        logging.getLogger(logger_name).setLevel(getattr(logging, logger_level.upper(), logging.INFO))
