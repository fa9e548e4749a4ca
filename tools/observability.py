"""Observability helpers for instrumenting stylist operations."""

from __future__ import annotations

import inspect
import logging
import time
from functools import wraps
from typing import Any, Callable, ParamSpec, TypeVar

from stylist_app.logging_config import ensure_correlation_id, log_event, redact_for_log

LOGGER = logging.getLogger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _preview_kwargs(kwargs: dict, max_keys: int = 6) -> dict:
    preview: dict = {}
    for idx, (key, value) in enumerate(kwargs.items()):
        if idx >= max_keys:
            preview["truncated"] = True
            break
        preview[key] = value
    return redact_for_log(preview)


def instrument_tool(tool_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Wrap a sync or async callable with start, completion and failure logs."""

    def _started(kwargs: dict, correlation_id: str) -> None:
        log_event(
            LOGGER,
            logging.INFO,
            "tool_call_started",
            tool=tool_name,
            correlation_id=correlation_id,
            kwargs=_preview_kwargs(kwargs),
        )

    def _finished(event: str, level: int, start: float, correlation_id: str, **extra: Any) -> None:
        log_event(
            LOGGER,
            level,
            event,
            tool=tool_name,
            correlation_id=correlation_id,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            **extra,
        )

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                correlation_id = ensure_correlation_id()
                start = time.perf_counter()
                _started(kwargs, correlation_id)
                try:
                    result = await func(*args, **kwargs)
                except Exception:
                    _finished("tool_call_failed", logging.ERROR, start, correlation_id, exc_info=True)
                    raise
                _finished("tool_call_completed", logging.INFO, start, correlation_id)
                return result

            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()
            _started(kwargs, correlation_id)
            try:
                result = func(*args, **kwargs)
            except Exception:
                _finished("tool_call_failed", logging.ERROR, start, correlation_id, exc_info=True)
                raise
            _finished("tool_call_completed", logging.INFO, start, correlation_id)
            return result

        return wrapper

    return decorator


__all__ = ["instrument_tool"]
