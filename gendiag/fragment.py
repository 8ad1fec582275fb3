#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
gendiag/fragment.py
===================

Output fragments produced by a generation pass.

A :class:`Fragment` is an immutable sequence of :class:`Token` objects.
Each token is a piece of generated text together with the
:class:`~gendiag.span.SourceSpan` it should be attributed to, which is how
location information survives from the user's source into generated
output and, for rendered diagnostics, back again.

:class:`FragmentBuilder` is the line-oriented emitter used to assemble
larger fragments (dummy implementations, generated modules) with
indentation management and a current-span cursor.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from gendiag.span import SourceSpan

__all__ = [
    "Token",
    "Fragment",
    "FragmentBuilder",
]


@dataclass(frozen=True)
class Token:
    """A piece of generated text attributed to a source span."""

    text: str
    span: Optional[SourceSpan] = None


class Fragment:
    """An immutable, concatenable sequence of spanned tokens."""

    __slots__ = ("_tokens",)

    def __init__(self, tokens: Iterable[Token] = ()) -> None:
        self._tokens: Tuple[Token, ...] = tuple(tokens)

    @classmethod
    def from_source(cls, text: str, span: Optional[SourceSpan] = None) -> "Fragment":
        """A fragment made of a single token (empty text gives an empty fragment)."""
        if not text:
            return cls()
        return cls((Token(text, span),))

    @classmethod
    def concat(cls, parts: Iterable["Fragment"]) -> "Fragment":
        tokens: List[Token] = []
        for part in parts:
            tokens.extend(part.tokens)
        return cls(tokens)

    @property
    def tokens(self) -> Tuple[Token, ...]:
        return self._tokens

    def render(self) -> str:
        """The generated text."""
        return "".join(tok.text for tok in self._tokens)

    def render_with_offsets(self) -> Tuple[str, List[Tuple[int, int, Token]]]:
        """
        Render and return a table of ``(start, end, token)`` text offsets.

        The table lets a parser working on the rendered text map a match
        position back to the token, and therefore the span, it came from.
        """
        table: List[Tuple[int, int, Token]] = []
        pos = 0
        for tok in self._tokens:
            table.append((pos, pos + len(tok.text), tok))
            pos += len(tok.text)
        return self.render(), table

    def token_at(self, offset: int) -> Optional[Token]:
        """The token covering text offset *offset*, if any."""
        _, table = self.render_with_offsets()
        starts = [start for start, _, _ in table]
        idx = bisect.bisect_right(starts, offset) - 1
        if idx < 0:
            return None
        start, end, tok = table[idx]
        if start <= offset < end:
            return tok
        return None

    def source_map(self) -> Dict[int, SourceSpan]:
        """Map generated line numbers (1-based) to the span of the first token on that line."""
        mapping: Dict[int, SourceSpan] = {}
        line = 1
        for tok in self._tokens:
            if tok.span is not None and line not in mapping and tok.text.strip():
                mapping[line] = tok.span
            line += tok.text.count("\n")
        return mapping

    def __add__(self, other: "Fragment") -> "Fragment":
        if not isinstance(other, Fragment):
            return NotImplemented
        return Fragment(self._tokens + other._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __bool__(self) -> bool:
        return bool(self._tokens)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Fragment):
            return self._tokens == other._tokens
        return False

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Fragment({self.render()!r}, tokens={len(self._tokens)})"


# ═══════════════════════════════════════════════════════════════════════════
# FRAGMENT BUILDER
# ═══════════════════════════════════════════════════════════════════════════

class FragmentBuilder:
    """Line-oriented fragment emission with indentation management.

    Every emitted line becomes one token attributed to the span set by
    :meth:`set_source` (or ``None``).
    """

    def __init__(self, indent_str: str = "    ") -> None:
        self._tokens: List[Token] = []
        self._indent_str = indent_str
        self._indent_level = 0
        self._current_source: Optional[SourceSpan] = None

    def emit(self, code: str) -> "FragmentBuilder":
        """Emit a line of code at the current indentation."""
        if code.strip():
            line = self._indent_str * self._indent_level + code + "\n"
        else:
            line = "\n"
        self._tokens.append(Token(line, self._current_source))
        return self

    def emit_blank(self, count: int = 1) -> "FragmentBuilder":
        for _ in range(count):
            self._tokens.append(Token("\n", None))
        return self

    def emit_fragment(self, fragment: Union[Fragment, str]) -> "FragmentBuilder":
        """Splice an existing fragment (or raw text) verbatim."""
        if isinstance(fragment, str):
            fragment = Fragment.from_source(fragment, self._current_source)
        self._tokens.extend(fragment.tokens)
        return self

    def indent(self) -> None:
        self._indent_level += 1

    def dedent(self) -> None:
        self._indent_level = max(0, self._indent_level - 1)

    def block(self, header: str) -> "FragmentBuilder._BlockContext":
        """Context manager for indented blocks."""
        return self._BlockContext(self, header)

    class _BlockContext:

        def __init__(self, builder: "FragmentBuilder", header: str) -> None:
            self._builder = builder
            self._header = header

        def __enter__(self) -> "FragmentBuilder":
            self._builder.emit(self._header)
            self._builder.indent()
            return self._builder

        def __exit__(self, *args: Any) -> None:
            self._builder.dedent()

    def set_source(self, span: Optional[SourceSpan]) -> None:
        """Set the span attributed to subsequently emitted lines."""
        self._current_source = span

    def build(self) -> Fragment:
        return Fragment(self._tokens)
