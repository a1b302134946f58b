"""Telemetry primitives: Span, @traced, trace_span.

Near-zero overhead when disabled (single ContextVar.get per call).
When enabled via --verbose, command graphs record one span per node and
service results carry the span tree in ``ServiceResult.meta``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from rommap.services.result import ServiceResult

log = structlog.get_logger("rommap.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """Hierarchical timing span."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.annotations:
            result["annotations"] = self.annotations
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


@contextmanager
def trace_span(name: str) -> Generator[Span | None, None, None]:
    """Create a span under the current one, or a root span if there is none.

    Yields None when telemetry is disabled.
    """
    if not _enabled.get():
        yield None
        return

    parent = _current_span.get()
    span = Span(name=name, parent=parent)
    if parent is not None:
        parent.children.append(span)

    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)
        if parent is None:
            _log_span(span)


def _log_span(span: Span, *, ok: bool = True) -> None:
    log.debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        children=len(span.children),
    )


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:
    """Decorator: time a service method and inject span data into ServiceResult.meta."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        token = _current_span.set(span)
        try:
            result = func(*args, **kwargs)
        except Exception:
            span.end()
            _current_span.reset(token)
            _log_span(span, ok=False)
            raise

        span.end()
        _current_span.reset(token)
        _log_span(span)

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            result = result.model_copy(update={"meta": meta})  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Enable span recording (called by the CLI context when verbose)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """Get the current active span (for manual annotation)."""
    if not _enabled.get():
        return None
    return _current_span.get()
