# gendiag/ext.py
"""
Shortcuts for turning ordinary failures into pass aborts.

``expect_or_abort`` is for optional values, ``abort_on`` for exceptions
raised by helper code (parsers, validators) that knows nothing about
gendiag.
"""

from __future__ import annotations

import contextlib
from dataclasses import replace
from typing import Iterator, Optional, Type, TypeVar

from gendiag.diagnostic import Diagnostic, Level
from gendiag.errors import PassStateError, _PassAborted
from gendiag.foreign import ForeignError, diagnostic_from_foreign
from gendiag.multi import abort
from gendiag.span import SourceSpan

__all__ = ["expect_or_abort", "abort_on"]

T = TypeVar("T")


def expect_or_abort(value: Optional[T], message: str, span: Optional[SourceSpan] = None) -> T:
    """Return *value*, or abort the pass with *message* if it is ``None``."""
    if value is None:
        abort(Diagnostic.spanned(span or SourceSpan.call_site(), Level.ERROR, message))
    return value


@contextlib.contextmanager
def abort_on(*exc_types: Type[BaseException], message: Optional[str] = None) -> Iterator[None]:
    """
    Abort the pass if the block raises one of *exc_types*.

    Foreign errors keep their own spans and children; anything else is
    reported at the call site with ``str(exc)``. With *message* the main
    message becomes ``"<message>: <original>"``. Misuse faults and anything
    outside ``Exception`` (pass aborts, ``KeyboardInterrupt``) always
    propagate, even when ``BaseException`` is listed.

        with abort_on(ValueError, message="bad field spec"):
            spec = parse_field_spec(text)
    """
    types = exc_types or (Exception,)
    try:
        yield
    except types as exc:
        if isinstance(exc, (PassStateError, _PassAborted)) or not isinstance(exc, Exception):
            raise
        if isinstance(exc, ForeignError):
            diag = diagnostic_from_foreign(exc)
        else:
            diag = Diagnostic.new(Level.ERROR, str(exc) or type(exc).__name__)
        if message:
            diag = replace(diag, message=f"{message}: {diag.message}")
        abort(diag)
