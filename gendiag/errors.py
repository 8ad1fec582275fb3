# gendiag/errors.py
"""
gendiag Error Types

Exceptions raised by the engine itself. None of these is a user-facing
diagnostic: diagnostics are values (see :mod:`gendiag.diagnostic`) that get
collected and rendered, while the classes below signal faults in the way
the engine is being driven.

Hierarchy:
──────────
┌─────────────────────────────────────────────────────────────────────────┐
│  GendiagError (base)                                                    │
│  ├── PassStateError      - operation used outside an active pass        │
│  ├── ForeignFormatError  - foreign rendering is not in fallback format  │
│  └── ConfigError         - invalid settings                             │
│                                                                         │
│  _PassAborted (BaseException, private) - the abort signal               │
└─────────────────────────────────────────────────────────────────────────┘

The abort signal derives from ``BaseException`` so that generation code
using ``except Exception`` cannot intercept it on its way up to the
entry point.
"""

from __future__ import annotations

from typing import List, Optional


class GendiagError(Exception):
    """Base exception for all faults raised by gendiag."""


class PassStateError(GendiagError):
    """
    Misuse fault: a pass-scoped operation was called in the wrong state.

    Raised when ``emit``/``abort``/``set_dummy`` and friends run outside
    :func:`gendiag.entry.entry_point`, when a pass is entered while another
    one is active in the same context, or when ``append_dummy`` is called
    before ``set_dummy``. The entry point never catches it.
    """

    def __init__(self, operation: str, reason: str = "") -> None:
        self.operation = operation
        self.reason = reason or (
            "no generation pass is active "
            "(is the generation function wrapped in gendiag.entry_point?)"
        )
        super().__init__(f"{operation}: {self.reason}")


class ForeignFormatError(GendiagError):
    """A foreign error did not render as ``compile_error("...")`` items."""

    def __init__(self, message: str, text: str = "", offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.text = text
        self.offset = offset

    def __str__(self) -> str:
        base = super().__str__()
        if self.offset is not None:
            return f"{base} (at offset {self.offset})"
        return base


class ConfigError(GendiagError):
    """Settings failed validation."""

    def __init__(self, problems: List[str]) -> None:
        self.problems = list(problems)
        super().__init__("invalid gendiag settings: " + "; ".join(self.problems))


class _PassAborted(BaseException):
    """
    Private abort signal.

    Only :func:`gendiag.multi.abort_now` raises it and only the entry
    point catches it. It carries no payload: the diagnostics that caused
    the abort are already in the pass context.
    """
