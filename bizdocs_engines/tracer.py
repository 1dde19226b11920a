"""
bizdocs_engines.tracer -- ``@traced_engine`` and BIZDOCS_ENGINE_TRACE records.

Engines stay free of I/O; the decorator only emits one INFO record per call
with the engine name and version, a fingerprint of selected inputs and the
wall-clock duration.  Two calls with equal inputs get equal fingerprints,
so traces can be grouped without logging document contents.

Usage:
    @traced_engine("renderer", "1.0", fingerprint_fields=("document",))
    def render(self, document, business, template):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum
from typing import Any

from bizdocs_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_MESSAGE = "BIZDOCS_ENGINE_TRACE"


def _canonical(value: Any) -> str:
    """Order-stable text form of ``value`` for hashing."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        inner = ",".join(
            f"{f.name}={_canonical(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({inner})"
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonical(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple, frozenset, set)):
        parts = [_canonical(v) for v in value]
        if isinstance(value, (set, frozenset)):
            parts.sort()
        return "[" + ",".join(parts) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """First 16 hex chars of SHA-256 over the named arguments; absent ones hash as null."""
    text = "|".join(f"{name}={_canonical(arguments.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Wrap an engine entry point so each call emits a trace record.

    ``fingerprint_fields`` name parameters of the wrapped function; they are
    matched whether passed positionally or by keyword.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.monotonic() - started) * 1000, 2)

            _logger.info(TRACE_MESSAGE, extra={
                "trace_type": TRACE_MESSAGE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": elapsed_ms,
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
