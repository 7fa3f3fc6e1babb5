"""
Structured Logging
==================

Every record is a single JSON object: component, level, UTC timestamp, the
active trace id (when one is set) and any keyword fields. A trace id set by
TraceContext follows a request from its routing decision to the backend
call, across awaits.

Credentials never reach the handlers: API keys, bearer tokens and
``x-api-key`` headers are masked in the message, in string fields and in
the serialized record.
"""

import json
import logging
import re
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_current_trace: ContextVar[str | None] = ContextVar("switchboard_trace", default=None)

_SECRET_PATTERNS = re.compile(
    r"(\bsk-ant-[A-Za-z0-9_-]+|\bsk-(?:proj-)?[A-Za-z0-9_-]+|\bAIza[0-9A-Za-z_-]{10,}|"
    r"Bearer\s+[A-Za-z0-9._~+/=-]+|x-api-key:\s*\S+)",
    re.IGNORECASE,
)
_MASK = "[REDACTED]"

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _redact_secrets(text: str) -> str:
    return _SECRET_PATTERNS.sub(_MASK, text)


def get_trace_id() -> str | None:
    return _current_trace.get()


class StructuredLogger:
    """JSON emitter bound to one component (``switchboard.<component>`` logger)."""

    def __init__(self, component: str, logger: logging.Logger | None = None) -> None:
        self.component = component
        self.logger = logger or logging.getLogger(f"switchboard.{component}")

    def _record(self, level: int, message: str, fields: dict[str, Any]) -> dict[str, Any]:
        record: dict[str, Any] = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "level": logging.getLevelName(level),
            "component": self.component,
            "message": _redact_secrets(message),
        }
        trace_id = _current_trace.get()
        if trace_id:
            record["trace_id"] = trace_id
        record.update(
            {name: _redact_secrets(value) if isinstance(value, str) else value for name, value in fields.items()}
        )
        return record

    def log(self, level: int, message: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        payload = json.dumps(self._record(level, message, fields), default=str)
        # repr() of non-string fields can still carry a key
        self.logger.log(level, _redact_secrets(payload))

    def debug(self, message: str, **fields: Any) -> None:
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.log(logging.ERROR, message, **fields)


class TraceContext:
    """
    Bind a trace id to the current context for the duration of a ``with``
    block. A short random id is generated when none is given.
    """

    def __init__(self, trace_id: str | None = None) -> None:
        self.trace_id = trace_id or uuid.uuid4().hex[:8]
        self._reset_token = None

    def __enter__(self) -> str:
        self._reset_token = _current_trace.set(self.trace_id)
        return self.trace_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _current_trace.reset(self._reset_token)


def get_logger(component: str) -> StructuredLogger:
    return StructuredLogger(component)


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """
    Attach one stderr handler to the ``switchboard`` logger hierarchy.

    ``json`` prints records as emitted; ``text`` prefixes timestamp, level
    and logger name.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s" if fmt == "json" else _TEXT_FORMAT))

    package_logger = logging.getLogger("switchboard")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())
