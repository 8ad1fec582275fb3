# gendiag/context.py
"""
Pass-scoped state.

Everything a generation pass mutates lives in one :class:`PassContext`.
The context for the running pass is held in a :class:`contextvars.ContextVar`:
every thread starts with its own empty context and asyncio tasks copy the
context they were created in, so concurrent passes never see each other's
diagnostics and helpers deep in the call stack reach the pass without it
being passed around explicitly.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from gendiag.errors import PassStateError

if TYPE_CHECKING:
    from gendiag.backends import Backend
    from gendiag.diagnostic import Diagnostic
    from gendiag.fragment import Fragment
    from gendiag.span import SourceSpan

__all__ = [
    "PassContext",
    "current_pass",
    "peek_pass",
]


@dataclass
class PassContext:
    """State of one generation pass."""

    backend: "Backend"
    call_site: Optional["SourceSpan"] = None
    diagnostics: List["Diagnostic"] = field(default_factory=list)
    dummy: Optional["Fragment"] = None
    channel_dirty: bool = False
    active: bool = True

    def check_active(self, operation: str) -> None:
        if not self.active:
            raise PassStateError(operation, "the generation pass has already finished")

    def drain_diagnostics(self) -> List["Diagnostic"]:
        drained, self.diagnostics = self.diagnostics, []
        return drained

    def drain_dummy(self) -> Optional["Fragment"]:
        drained, self.dummy = self.dummy, None
        return drained


_CURRENT_PASS: contextvars.ContextVar[Optional[PassContext]] = contextvars.ContextVar(
    "gendiag_current_pass", default=None
)


def peek_pass() -> Optional[PassContext]:
    """The active pass context, or ``None``."""
    ctx = _CURRENT_PASS.get()
    if ctx is not None and ctx.active:
        return ctx
    return None


def current_pass(operation: str = "current_pass") -> PassContext:
    """The active pass context; raises :class:`PassStateError` outside a pass."""
    ctx = peek_pass()
    if ctx is None:
        raise PassStateError(operation)
    return ctx


def _activate(ctx: PassContext) -> contextvars.Token:
    if peek_pass() is not None:
        raise PassStateError(
            "entry_point", "a generation pass is already active in this context"
        )
    return _CURRENT_PASS.set(ctx)


def _deactivate(ctx: PassContext, token: contextvars.Token) -> None:
    ctx.active = False
    _CURRENT_PASS.reset(token)
