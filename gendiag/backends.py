# gendiag/backends.py
"""
Rendering backends.

A backend decides how a diagnostic reaches the host tool. The entry point
only ever talks to the :class:`Backend` interface; which implementation it
gets is settled by configuration (:func:`gendiag.config.get_backend`), not
per call.

FallbackBackend
    Collects diagnostics in the pass context and, at pass end, renders
    every Error-level one as a ``compile_error("...")`` expression.
    Warnings are dropped.

RichBackend
    Hands each diagnostic straight to a :class:`DiagnosticChannel` that
    understands levels, spans and attachments. Nothing is rendered into
    the output.
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

from gendiag.diagnostic import Diagnostic, Level
from gendiag.fragment import Fragment

if TYPE_CHECKING:
    from gendiag.context import PassContext

__all__ = [
    "Backend",
    "FallbackBackend",
    "RichBackend",
    "DiagnosticChannel",
    "LoggingChannel",
    "BACKENDS",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticChannel(Protocol):
    """A host-tool channel that displays diagnostics natively."""

    def report(self, diagnostic: Diagnostic) -> None:
        ...


class LoggingChannel:
    """
    Channel reporting through the ``gendiag.channel`` logger.

    Errors are logged at ERROR, warnings at WARNING, each as GCC-style
    text with suggestions and children on their own lines.
    """

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logging.getLogger("gendiag.channel")

    def report(self, diagnostic: Diagnostic) -> None:
        level = logging.ERROR if diagnostic.is_error else logging.WARNING
        self._log.log(level, "%s", diagnostic.to_gcc_format())


# ═══════════════════════════════════════════════════════════════════════════
# BACKEND INTERFACE
# ═══════════════════════════════════════════════════════════════════════════

class Backend(abc.ABC):
    """How diagnostics of a pass are surfaced to the host tool."""

    name: str = "abstract"

    @abc.abstractmethod
    def emit(self, ctx: "PassContext", diagnostic: Diagnostic) -> None:
        """Record *diagnostic* for the pass owning *ctx*."""

    @abc.abstractmethod
    def is_dirty(self, ctx: "PassContext") -> bool:
        """True iff an Error-level diagnostic was emitted in this pass."""

    @abc.abstractmethod
    def drain(self, ctx: "PassContext") -> Fragment:
        """Take everything recorded so far and render it. Single use per pass."""

    def abort_if_dirty(self, ctx: "PassContext") -> None:
        if self.is_dirty(ctx):
            from gendiag.multi import abort_now

            abort_now()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FallbackBackend(Backend):
    """Synthesizes ``compile_error("...")`` expressions."""

    name = "fallback"

    def emit(self, ctx: "PassContext", diagnostic: Diagnostic) -> None:
        ctx.diagnostics.append(diagnostic)

    def is_dirty(self, ctx: "PassContext") -> bool:
        return any(diag.level is Level.ERROR for diag in ctx.diagnostics)

    def drain(self, ctx: "PassContext") -> Fragment:
        drained = ctx.drain_diagnostics()
        parts: List[Fragment] = []
        for diag in drained:
            if diag.level is Level.WARNING:
                logger.debug("fallback backend drops warning at %s: %s",
                             diag.location, diag.message)
                continue
            parts.append(diag.to_fragment())
        return Fragment.concat(parts)


class RichBackend(Backend):
    """Delegates to a native diagnostic channel."""

    name = "rich"

    def __init__(self, channel: Optional[DiagnosticChannel] = None) -> None:
        self.channel: DiagnosticChannel = channel if channel is not None else LoggingChannel()

    def emit(self, ctx: "PassContext", diagnostic: Diagnostic) -> None:
        if diagnostic.is_error:
            ctx.channel_dirty = True
        self.channel.report(diagnostic)

    def is_dirty(self, ctx: "PassContext") -> bool:
        return ctx.channel_dirty

    def drain(self, ctx: "PassContext") -> Fragment:
        ctx.drain_diagnostics()
        return Fragment()

    def __repr__(self) -> str:
        return f"RichBackend(channel={self.channel!r})"


BACKENDS = {
    FallbackBackend.name: FallbackBackend,
    RichBackend.name: RichBackend,
}
