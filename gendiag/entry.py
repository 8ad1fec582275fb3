# gendiag/entry.py
"""
The entry-point controller.

:func:`entry_point` wraps exactly one generation pass::

    def expand(tree):
        return entry_point(_expand, tree, call_site=tree.span)

It activates a fresh :class:`~gendiag.context.PassContext`, runs the
generation function, classifies how it finished, and on every exit path
drains the dummy fragment and the collected diagnostics and deactivates
the context, so nothing leaks into the next pass on the same thread.

    ┌──────┐  entry_point   ┌────────┐  return / abort / raise  ┌──────┐
    │ Idle │ ─────────────▶ │ Active │ ───────────────────────▶ │ Idle │
    └──────┘                └────────┘      (drain, reset)      └──────┘

Outcome handling:

* normal return, no error emitted → the function's value, unchanged;
* normal return, errors emitted   → rendered diagnostics + dummy;
* abort                           → rendered diagnostics + dummy;
* any other exception             → re-raised as is.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar, Union, overload

from gendiag.config import get_backend
from gendiag.context import PassContext, _activate, _deactivate
from gendiag.errors import _PassAborted
from gendiag.fragment import Fragment
from gendiag.span import SourceSpan

__all__ = [
    "entry_point",
    "generation_pass",
    "NormalReturn",
    "DiagnosticAbort",
    "ForeignFault",
]

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


# ═══════════════════════════════════════════════════════════════════════════
# PASS OUTCOMES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NormalReturn:
    value: Any


@dataclass(frozen=True)
class DiagnosticAbort:
    pass


@dataclass(frozen=True)
class ForeignFault:
    error: BaseException


PassOutcome = Union[NormalReturn, DiagnosticAbort, ForeignFault]


def _run(fn: Callable[..., Any], args: tuple, kwargs: dict) -> PassOutcome:
    try:
        return NormalReturn(fn(*args, **kwargs))
    except _PassAborted:
        return DiagnosticAbort()
    except BaseException as exc:  # re-raised by entry_point after cleanup
        return ForeignFault(exc)


# ═══════════════════════════════════════════════════════════════════════════
# CONTROLLER
# ═══════════════════════════════════════════════════════════════════════════

def entry_point(
    fn: Callable[..., Any],
    *args: Any,
    call_site: Optional[SourceSpan] = None,
    **kwargs: Any,
) -> Any:
    """
    Run ``fn(*args, **kwargs)`` as one generation pass.

    *call_site* is the span of the invocation being expanded; it is what
    :meth:`SourceSpan.call_site` returns during the pass.

    Raises :class:`~gendiag.errors.PassStateError` if a pass is already
    active in the calling context.
    """
    ctx = PassContext(backend=get_backend(), call_site=call_site)
    token = _activate(ctx)
    logger.debug("pass started: %s (backend=%s)",
                 getattr(fn, "__qualname__", fn), ctx.backend.name)

    dirty = False
    dummy: Optional[Fragment] = None
    rendered = Fragment()
    try:
        outcome = _run(fn, args, kwargs)
    finally:
        try:
            dirty = ctx.backend.is_dirty(ctx)
            dummy = ctx.drain_dummy()
            rendered = ctx.backend.drain(ctx)
        finally:
            _deactivate(ctx, token)

    if isinstance(outcome, ForeignFault):
        logger.debug("pass failed with %s", type(outcome.error).__name__)
        raise outcome.error
    if isinstance(outcome, NormalReturn) and not dirty:
        logger.debug("pass finished cleanly")
        return outcome.value

    logger.debug("pass finished with errors (%s)",
                 "abort" if isinstance(outcome, DiagnosticAbort) else "emitted")
    if dummy is not None:
        return rendered + dummy
    return rendered


@overload
def generation_pass(fn: F) -> F: ...


@overload
def generation_pass(*, call_site: Optional[SourceSpan] = None) -> Callable[[F], F]: ...


def generation_pass(fn: Optional[F] = None, *, call_site: Optional[SourceSpan] = None) -> Any:
    """Decorator form of :func:`entry_point`."""
    def decorate(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return entry_point(func, *args, call_site=call_site, **kwargs)

        return wrapper  # type: ignore[return-value]

    if fn is not None:
        return decorate(fn)
    return decorate
