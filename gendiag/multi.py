# gendiag/multi.py
"""
Facility for stacking and emitting multiple errors.

:func:`abort` stops a generation pass right away. Often that is too
early: when validating a list of fields you want one error per bad
field, not just the first. :func:`emit` records a diagnostic and lets
the pass carry on; :func:`abort_if_dirty` then stops the pass before it
starts generating code from input already known to be broken.

Every function here requires an active pass and raises
:class:`~gendiag.errors.PassStateError` otherwise.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from gendiag.context import current_pass
from gendiag.diagnostic import Diagnostic, Level
from gendiag.errors import _PassAborted
from gendiag.span import SourceSpan

__all__ = [
    "emit",
    "abort",
    "abort_now",
    "abort_if_dirty",
    "is_dirty",
    "emit_error",
    "emit_warning",
    "emit_call_site_error",
    "emit_call_site_warning",
]

logger = logging.getLogger(__name__)


def emit(diagnostic: Diagnostic) -> None:
    """Record *diagnostic* without stopping the pass."""
    ctx = current_pass("emit")
    logger.debug("emit %s at %s: %s", diagnostic.level.value,
                 diagnostic.location, diagnostic.message)
    ctx.backend.emit(ctx, diagnostic)


def abort(diagnostic: Diagnostic) -> NoReturn:
    """Record *diagnostic* and stop the pass."""
    emit(diagnostic)
    abort_now()


def abort_now() -> NoReturn:
    """Stop the pass, rendering whatever was emitted so far."""
    current_pass("abort_now")
    logger.debug("aborting generation pass")
    raise _PassAborted()


def abort_if_dirty() -> None:
    """Stop the pass if any error was emitted; otherwise do nothing."""
    ctx = current_pass("abort_if_dirty")
    ctx.backend.abort_if_dirty(ctx)


def is_dirty() -> bool:
    ctx = current_pass("is_dirty")
    return ctx.backend.is_dirty(ctx)


def emit_error(span: SourceSpan, message: str) -> None:
    emit(Diagnostic.spanned(span, Level.ERROR, message))


def emit_warning(span: SourceSpan, message: str) -> None:
    emit(Diagnostic.spanned(span, Level.WARNING, message))


def emit_call_site_error(message: str) -> None:
    emit(Diagnostic.new(Level.ERROR, message))


def emit_call_site_warning(message: str) -> None:
    emit(Diagnostic.new(Level.WARNING, message))
