"""Logging setup for the token registry (formatter, filters, dictConfig)."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from logging.config import dictConfig
from typing import Any

from opentelemetry import baggage, trace

_PACKAGE_LOGGER = "sessionvault"
_COMPONENT_LOGGERS: tuple[str, ...] = (
    "sessionvault.store",
    "sessionvault.service",
    "sessionvault.cipher",
    "sessionvault.settings",
    "sessionvault.runtime",
)


def _should_emit_json_payload() -> bool:
    # Managed runtimes parse one JSON object per line into structured entries.
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _sanitize_for_json(value: Any, depth: int = 8, max_items: int = 100) -> Any:
    """Return a JSON-serializable copy of ``value``; unknown types become strings."""

    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        return _sanitize_for_json(asdict(value), depth - 1, max_items)
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for idx, (key, item) in enumerate(value.items()):
            if idx >= max_items:
                result["<truncated>"] = f"...{len(value) - idx} more"
                break
            result[str(key)] = _sanitize_for_json(item, depth - 1, max_items)
        return result
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        out = [_sanitize_for_json(item, depth - 1, max_items) for item in items[:max_items]]
        if len(items) > max_items:
            out.append(f"... {len(items) - max_items} more")
        return out
    return str(value)


def _structured_payload(record: logging.LogRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "message": record.getMessage(),
        "severity": record.levelname,
        "logger": record.name,
        "timestamp": (
            f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
            f".{int(record.msecs):03d}Z"
        ),
    }
    data = record.__dict__.get("data")
    if data:
        payload["data"] = _sanitize_for_json(data)
    otel = record.__dict__.get("otel")
    if otel:
        payload["otel"] = otel
    if record.exc_info:
        payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
    return payload


class ExtrasFormatter(logging.Formatter):
    """Append structured ``data`` payloads when present."""

    def format(self, record: logging.LogRecord) -> str:
        if _should_emit_json_payload():
            return json.dumps(_structured_payload(record), sort_keys=True, separators=(",", ":"))

        formatted = super().format(record)
        data = record.__dict__.get("data")
        if data:
            encoded = json.dumps(_sanitize_for_json(data), sort_keys=True, separators=(",", ":"))
            return f"{formatted} | data={encoded}"
        return formatted


class OtelContextLogFilter(logging.Filter):
    """Attach the active OpenTelemetry trace/span ids and baggage to records."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - thin wrapper
        otel: dict[str, Any] = {}
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            otel["trace_id"] = f"{span_context.trace_id:032x}"
            otel["span_id"] = f"{span_context.span_id:016x}"
        baggage_values = baggage.get_all()
        if baggage_values:
            otel["baggage"] = {key: str(value) for key, value in baggage_values.items()}
        if otel:
            record.__dict__["otel"] = otel
        return True


def build_log_config(
    *,
    level: str = "INFO",
    extra_loggers: Mapping[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""

    level = level.upper()
    loggers: dict[str, dict[str, Any]] = {
        _PACKAGE_LOGGER: {"level": level, "handlers": ["console"], "propagate": False},
    }
    for name in _COMPONENT_LOGGERS:
        loggers[name] = {"level": "NOTSET", "propagate": True}
    if extra_loggers:
        loggers.update(extra_loggers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "filters": {"otel_context": {"()": OtelContextLogFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stdout",
                "filters": ["otel_context"],
            }
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(
    *,
    level: str = "INFO",
    extra_loggers: Mapping[str, dict[str, Any]] | None = None,
) -> None:
    """Apply the registry logging config."""
    start = time.monotonic()
    dictConfig(build_log_config(level=level, extra_loggers=extra_loggers))
    logging.getLogger("sessionvault.runtime").debug(
        "configured logging",
        extra={"data": {"level": level, "elapsed_s": round(time.monotonic() - start, 3)}},
    )


__all__ = ["ExtrasFormatter", "OtelContextLogFilter", "build_log_config", "configure_logging"]
