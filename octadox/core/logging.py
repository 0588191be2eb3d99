from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger("octadox")
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    # Idempotent: create_app may run more than once per process (tests).
    if any(getattr(h, "_octadox", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    handler._octadox = True  # type: ignore[attr-defined]
    root.addHandler(handler)
