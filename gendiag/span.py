# gendiag/span.py
"""
Source location ranges.

A :class:`SourceSpan` points into the source text the host tool parsed.
The engine treats spans as opaque values: it carries them from the
caller's parse tree into rendered output and never changes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SourceSpan:
    """
    A span of source code with start and end positions.

    An end position left at zero collapses onto the start, so a span
    built from a single token position is a point.
    """

    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __post_init__(self) -> None:
        # Normalize: if end not specified, use start
        if self.end_line == 0:
            object.__setattr__(self, "end_line", self.line)
        if self.end_column == 0 and self.end_line == self.line:
            object.__setattr__(self, "end_column", self.column)

    @classmethod
    def from_token(cls, token: Any) -> "SourceSpan":
        """Create a SourceSpan from a token-like object."""
        if hasattr(token, "file"):
            file = token.file
        elif hasattr(token, "filename"):
            file = token.filename
        else:
            file = ""

        line = getattr(token, "line", 0) or getattr(token, "lineno", 0) or 0
        col = getattr(token, "column", 0) or getattr(token, "col_offset", 0) or 0

        end_line = getattr(token, "end_line", None) or getattr(token, "end_lineno", None) or line
        end_col = getattr(token, "end_column", None) or getattr(token, "end_col_offset", None) or col

        return cls(file=file, line=line, column=col,
                   end_line=end_line, end_column=end_col)

    @classmethod
    def merge(cls, *spans: "SourceSpan") -> "SourceSpan":
        """Merge multiple spans into one that covers all of them."""
        known = [s for s in spans if not s.is_unknown]
        if not known:
            return cls()

        file = next((s.file for s in known if s.file), "")
        first = min(known, key=lambda s: (s.line, s.column))
        last = max(known, key=lambda s: (s.end_line, s.end_column))

        return cls(
            file=file,
            line=first.line,
            column=first.column,
            end_line=last.end_line,
            end_column=last.end_column,
        )

    @classmethod
    def call_site(cls) -> "SourceSpan":
        """
        The span of the current pass invocation.

        Inside :func:`gendiag.entry_point` this is whatever the host tool
        passed as ``call_site``; anywhere else it is the unknown span.
        """
        from gendiag.context import peek_pass

        ctx = peek_pass()
        if ctx is None or ctx.call_site is None:
            return cls()
        return ctx.call_site

    @property
    def is_unknown(self) -> bool:
        return not self.file and self.line == 0

    def __str__(self) -> str:
        if self.is_unknown:
            return "<unknown location>"

        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))

        return ":".join(parts)

    def to_range_string(self) -> str:
        """Get a string representation showing the full range."""
        start = str(self)
        if self.end_line > self.line or (self.end_line == self.line and self.end_column > self.column):
            return f"{start}-{self.end_line}:{self.end_column}"
        return start
