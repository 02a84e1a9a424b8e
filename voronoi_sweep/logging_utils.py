"""Entry/exit DEBUG tracing for selector and search helpers."""

from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

from .geometry import Point

F = TypeVar("F", bound=Callable[..., Any])

_WRAPPED_MARKER = "_debug_logging_wrapped"

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxlist = 6
_repr.maxtuple = 6
_repr.maxdict = 6


def _summarize_array(value: np.ndarray) -> str:
    head = f"ndarray(shape={tuple(value.shape)})"
    if value.size == 0:
        return head
    finite = value[np.isfinite(value)] if value.dtype.kind == "f" else value
    if finite.size == 0:
        return f"{head} all non-finite"
    return f"{head} min={float(finite.min()):.4g} max={float(finite.max()):.4g}"


def compact_repr(value: Any, *, max_items: int = 4, max_length: int = 240) -> str:
    """Short, log-friendly rendering of ``value``."""

    if isinstance(value, np.ndarray):
        return _summarize_array(value)
    if isinstance(value, Point):
        return f"({value.x:.2f}, {value.y:.2f})"
    if isinstance(value, (list, tuple)) and not hasattr(value, "_fields"):
        shown = [compact_repr(item) for item in value[:max_items]]
        if len(value) > max_items:
            shown.append(f"... {len(value) - max_items} more")
        open_br, close_br = ("(", ")") if isinstance(value, tuple) else ("[", "]")
        return open_br + ", ".join(shown) + close_br
    if isinstance(value, float):
        return f"{value:.6g}"

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "..."
    return rendered


def _describe_call(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [compact_repr(arg) for arg in args]
    parts.extend(f"{key}={compact_repr(value)}" for key, value in kwargs.items())
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Decorator logging entry, exit and exceptions of a call at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, _WRAPPED_MARKER, False):
            return func
        label = name or getattr(func, "__qualname__", func.__name__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("-> %s(%s)", label, _describe_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.debug("!! %s raised", label, exc_info=True)
                raise
            if log_result:
                logger.debug("<- %s = %s", label, compact_repr(result))
            else:
                logger.debug("<- %s", label)
            return result

        setattr(wrapper, _WRAPPED_MARKER, True)
        return cast(F, wrapper)

    return decorator


def _wrap_class(cls: type, logger: logging.Logger, skip: Set[str]) -> None:
    for attr, value in list(cls.__dict__.items()):
        if attr.startswith("__"):
            continue
        label = f"{cls.__name__}.{attr}"
        if attr in skip or label in skip:
            continue
        if isinstance(value, (staticmethod, classmethod)):
            func = value.__func__
            if getattr(func, "__module__", None) == cls.__module__:
                setattr(cls, attr, type(value)(debug_log_call(logger, name=label)(func)))
        elif inspect.isfunction(value) and value.__module__ == cls.__module__:
            setattr(cls, attr, debug_log_call(logger, name=label)(value))


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
    wrap_methods: bool = True,
) -> None:
    """Wrap the functions (and class methods) defined in a module namespace.

    Call it at the bottom of a module with ``globals()``.  Only objects whose
    ``__module__`` is that module are wrapped, so imports are left alone.
    """

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(module_name if isinstance(module_name, str) else __name__)
    skipped: Set[str] = set(skip or ())

    for attr, value in list(namespace.items()):
        if attr in skipped or getattr(value, "__module__", None) != module_name:
            continue
        if inspect.isfunction(value):
            namespace[attr] = debug_log_call(logger, name=attr)(value)
        elif wrap_methods and inspect.isclass(value):
            _wrap_class(value, logger, skipped)


__all__ = ["apply_debug_logging", "compact_repr", "debug_log_call"]
