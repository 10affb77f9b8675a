"""Logging setup for the alert engine.

Console alerts are written to their own sink logger so they stand apart from
the engine's diagnostic log lines.
"""
import logging
import os

CONSOLE_SINK = "nebula_alerts.console"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_SINK_FORMAT = "%(asctime)s ALERT %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip().upper()
    return getattr(logging, value, default) if value else default


def _stream_handler(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=_DATE_FORMAT))
    return handler


def setup_logging() -> None:
    """Configure root logging from LOG_LEVEL and the console alert sink."""
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(_stream_handler(_LOG_FORMAT))
    root.setLevel(_level("LOG_LEVEL", logging.INFO))

    sink = logging.getLogger(CONSOLE_SINK)
    if not sink.handlers:
        sink.addHandler(_stream_handler(_SINK_FORMAT))
    # Alerts are always shown, whatever LOG_LEVEL says
    sink.setLevel(_level("ALERT_CONSOLE_LEVEL", logging.INFO))
    sink.propagate = False

    # Webhook and bot transports log every request at INFO
    for name in ("httpx", "httpcore", "telegram"):
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["CONSOLE_SINK", "setup_logging"]
