# gendiag/diagnostic.py
"""
Diagnostic model and message composition.

A :class:`Diagnostic` is a level-tagged, span-tagged message with an
ordered list of help/note suggestions and an ordered list of child
errors. It is a frozen value: every builder method returns a new,
augmented diagnostic, so a half-built diagnostic can be shared and
extended without surprises.

Example Usage:
──────────────
    from gendiag import Diagnostic, Level

    Diagnostic.spanned(field.span, Level.ERROR, "unsupported field type") \\
        .span_note(decl.span, "type declared here") \\
        .help("use one of: int, str, bytes") \\
        .emit()

Fallback rendering:
───────────────────
Without a rich diagnostic channel every Error diagnostic becomes one
``compile_error("...")`` expression whose string literal is the composed
message (see :meth:`Diagnostic.compose_message`)::

    unsupported field type

      = note: type declared here
      = help: use one of: int, str, bytes

Each child renders as its own ``compile_error`` at its own span.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum, unique
from typing import TYPE_CHECKING, Any, Dict, List, NoReturn, Optional, Tuple

from gendiag.fragment import Fragment, Token
from gendiag.span import SourceSpan

if TYPE_CHECKING:
    from gendiag.foreign import ForeignError

__all__ = [
    "Level",
    "SuggestionKind",
    "Suggestion",
    "ChildDiagnostic",
    "Diagnostic",
    "compile_error_fragment",
    "COMPILE_ERROR_NAME",
]

COMPILE_ERROR_NAME = "compile_error"


@unique
class Level(Enum):
    """Diagnostic level. Warnings never fail a pass on their own."""

    ERROR = "error"
    WARNING = "warning"


@unique
class SuggestionKind(Enum):
    HELP = "help"
    NOTE = "note"

    @classmethod
    def from_name(cls, name: str) -> "SuggestionKind":
        """``"help"`` and ``"hint"`` are HELP, anything else is a NOTE."""
        if name in ("help", "hint"):
            return cls.HELP
        return cls.NOTE


@dataclass(frozen=True)
class Suggestion:
    """A help or note line attached to a diagnostic."""

    kind: SuggestionKind
    message: str
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        if self.span is not None:
            return f"{self.span}: {self.kind.value}: {self.message}"
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class ChildDiagnostic:
    """A secondary error owned by a diagnostic, rendered at its own span."""

    start: SourceSpan
    end: SourceSpan
    message: str

    @property
    def span(self) -> SourceSpan:
        return SourceSpan.merge(self.start, self.end)


def _ensure_lf(buf: List[str], text: str) -> None:
    buf.append(text)
    if not text.endswith("\n"):
        buf.append("\n")


def compile_error_fragment(start: SourceSpan, end: SourceSpan, message: str) -> Fragment:
    """
    Synthesize ``compile_error("<message>")`` followed by a newline.

    The name and the opening parenthesis carry *start*; the literal and
    the closing parenthesis carry *end*.
    """
    return Fragment((
        Token(COMPILE_ERROR_NAME, start),
        Token("(", start),
        Token(json.dumps(message, ensure_ascii=False), end),
        Token(")", end),
        Token("\n", end),
    ))


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic message."""

    level: Level
    start: SourceSpan
    end: SourceSpan
    message: str
    suggestions: Tuple[Suggestion, ...] = field(default=())
    children: Tuple[ChildDiagnostic, ...] = field(default=())

    # ───────────────────────────────────────────────────────────────────
    # Construction
    # ───────────────────────────────────────────────────────────────────

    @classmethod
    def spanned(cls, span: SourceSpan, level: Level, message: str) -> "Diagnostic":
        """Create a diagnostic pointing at *span*."""
        return cls.double_spanned(span, span, level, message)

    @classmethod
    def double_spanned(
        cls, start: SourceSpan, end: SourceSpan, level: Level, message: str
    ) -> "Diagnostic":
        """Create a diagnostic spanning from *start* to *end*."""
        return cls(level=level, start=start, end=end, message=str(message))

    @classmethod
    def new(cls, level: Level, message: str) -> "Diagnostic":
        """Create a diagnostic pointing at the pass call site."""
        return cls.spanned(SourceSpan.call_site(), level, message)

    @classmethod
    def from_foreign(cls, error: "ForeignError") -> "Diagnostic":
        """Recover a diagnostic from an error that renders in fallback format."""
        from gendiag.foreign import diagnostic_from_foreign

        return diagnostic_from_foreign(error)

    # ───────────────────────────────────────────────────────────────────
    # Builders
    # ───────────────────────────────────────────────────────────────────

    def _with_suggestion(self, suggestion: Suggestion) -> "Diagnostic":
        return replace(self, suggestions=self.suggestions + (suggestion,))

    def help(self, message: str) -> "Diagnostic":
        """Attach a "help" line to the main message."""
        return self._with_suggestion(Suggestion(SuggestionKind.HELP, message))

    def span_help(self, span: SourceSpan, message: str) -> "Diagnostic":
        """
        Attach a "help" line with its own span.

        The span is shown by the rich backend only; the fallback backend
        folds the text into the parent message.
        """
        return self._with_suggestion(Suggestion(SuggestionKind.HELP, message, span))

    def note(self, message: str) -> "Diagnostic":
        return self._with_suggestion(Suggestion(SuggestionKind.NOTE, message))

    def span_note(self, span: SourceSpan, message: str) -> "Diagnostic":
        return self._with_suggestion(Suggestion(SuggestionKind.NOTE, message, span))

    def suggestion(self, kind: str, message: str) -> "Diagnostic":
        return self._with_suggestion(Suggestion(SuggestionKind.from_name(kind), message))

    def span_suggestion(self, span: SourceSpan, kind: str, message: str) -> "Diagnostic":
        return self._with_suggestion(Suggestion(SuggestionKind.from_name(kind), message, span))

    def child_error(self, span: SourceSpan, message: str) -> "Diagnostic":
        """Attach a secondary error reported at its own location."""
        return self._with_child(ChildDiagnostic(span, span, message))

    def _with_child(self, child: ChildDiagnostic) -> "Diagnostic":
        return replace(self, children=self.children + (child,))

    # ───────────────────────────────────────────────────────────────────
    # Accessors
    # ───────────────────────────────────────────────────────────────────

    @property
    def location(self) -> SourceSpan:
        return SourceSpan.merge(self.start, self.end)

    @property
    def is_error(self) -> bool:
        return self.level is Level.ERROR

    # ───────────────────────────────────────────────────────────────────
    # Rendering
    # ───────────────────────────────────────────────────────────────────

    def compose_message(self) -> str:
        """The main message with every suggestion folded in."""
        if not self.suggestions:
            return self.message

        buf: List[str] = []
        _ensure_lf(buf, self.message)
        buf.append("\n")
        for suggestion in self.suggestions:
            buf.append(f"  = {suggestion.kind.value}: ")
            _ensure_lf(buf, suggestion.message)
        buf.append("\n")
        return "".join(buf)

    def to_fragment(self) -> Fragment:
        """Fallback rendering: one ``compile_error`` per error site, nothing for warnings."""
        if self.level is Level.WARNING:
            return Fragment()

        parts = [compile_error_fragment(self.start, self.end, self.compose_message())]
        for child in self.children:
            parts.append(compile_error_fragment(child.start, child.end, child.message))
        return Fragment.concat(parts)

    def to_gcc_format(self) -> str:
        """Format as GCC-style text, one line per message."""
        lines = [f"{self.location}: {self.level.value}: {self.message}"]
        for suggestion in self.suggestions:
            if suggestion.span is not None:
                lines.append(f"{suggestion.span}: {suggestion.kind.value}: {suggestion.message}")
            else:
                lines.append(f"  = {suggestion.kind.value}: {suggestion.message}")
        for child in self.children:
            lines.append(f"{child.span}: error: {child.message}")
        return "\n".join(lines)

    def to_json(self) -> Dict[str, Any]:
        def _loc(span: Optional[SourceSpan]) -> Optional[Dict[str, Any]]:
            if span is None:
                return None
            return {
                "file": span.file,
                "line": span.line,
                "column": span.column,
                "end_line": span.end_line,
                "end_column": span.end_column,
            }

        return {
            "level": self.level.value,
            "message": self.message,
            "location": _loc(self.location),
            "suggestions": [
                {"kind": s.kind.value, "message": s.message, "location": _loc(s.span)}
                for s in self.suggestions
            ],
            "children": [
                {"message": c.message, "location": _loc(c.span)}
                for c in self.children
            ],
        }

    # ───────────────────────────────────────────────────────────────────
    # Reporting
    # ───────────────────────────────────────────────────────────────────

    def emit(self) -> None:
        """Report the diagnostic and keep the pass running."""
        from gendiag.multi import emit

        emit(self)

    def abort(self) -> NoReturn:
        """
        Report the diagnostic and stop the pass.

        Warnings abort too: the warning itself is still not rendered by
        the fallback backend.
        """
        from gendiag.multi import abort

        abort(self)

    def __str__(self) -> str:
        return self.to_gcc_format()
