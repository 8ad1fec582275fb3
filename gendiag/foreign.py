"""
foreign.py: recovering diagnostics from foreign errors
=======================================================

Parsers and other libraries used inside a generation pass often have their
own error types whose only portable representation is *already rendered*
fallback output: one or more ``compile_error("...")`` expressions with the
intended spans attached to their tokens. To report such an error through
gendiag without losing its location, the rendering is parsed back:

1. the fragment is rendered to text together with an offset table;
2. the text is parsed with the PEG grammar below;
3. for each ``compile_error`` invocation the message is decoded from the
   string literal, the start span is taken from the ``compile_error``
   token and the end span from the literal token.

The first invocation becomes the main diagnostic, every further one a
child error, so combined foreign errors keep all of their messages.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import bisect
import json
import logging
from typing import Any, List, Protocol, Tuple, runtime_checkable

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from gendiag.diagnostic import ChildDiagnostic, Diagnostic, Level
from gendiag.errors import ForeignFormatError
from gendiag.fragment import Fragment, Token
from gendiag.span import SourceSpan

__all__ = [
    "ForeignError",
    "COMPILE_ERROR_GRAMMAR",
    "extract_compile_errors",
    "diagnostic_from_fragment",
    "diagnostic_from_foreign",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class ForeignError(Protocol):
    """An error that can render itself as fallback ``compile_error`` output."""

    def to_compile_error(self) -> Fragment:
        ...


COMPILE_ERROR_GRAMMAR = Grammar(r'''
    rendered        = ws item*
    item            = compile_error ws

    compile_error   = name ws "(" ws string ws ")" terminator
    terminator      = (ws ";")?
    name            = "compile_error"
    string          = ~r'"(?:[^"\\]|\\.)*"'s

    ws              = ~r"\s*"
''')


class _CompileErrorVisitor(NodeVisitor):
    """Turns a parse of rendered text into ``(name_offset, literal_offset, message)``."""

    unwrapped_exceptions = (ForeignFormatError,)

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        return visited_children or node

    def visit_rendered(self, node: Node, visited_children: List[Any]) -> List[Tuple[int, int, str]]:
        _, items = visited_children
        if isinstance(items, Node):
            return []
        return list(items)

    def visit_item(self, node: Node, visited_children: List[Any]) -> Tuple[int, int, str]:
        invocation, _ = visited_children
        return invocation

    def visit_compile_error(self, node: Node, visited_children: List[Any]) -> Tuple[int, int, str]:
        name, _, _, _, literal, _, _, _ = visited_children
        try:
            message = json.loads(literal.text, strict=False)
        except ValueError as exc:
            raise ForeignFormatError(
                f"undecodable compile_error literal: {exc}", literal.full_text, literal.start
            ) from exc
        return name.start, literal.start, message


def _span_at(starts: List[int], table: List[Tuple[int, int, Token]], offset: int) -> SourceSpan:
    idx = bisect.bisect_right(starts, offset) - 1
    if idx < 0:
        return SourceSpan()
    start, end, tok = table[idx]
    if not start <= offset < end or tok.span is None:
        return SourceSpan()
    return tok.span


def extract_compile_errors(fragment: Fragment) -> List[ChildDiagnostic]:
    """
    Locate every ``compile_error("...")`` in *fragment*.

    Returns one ``(start, end, message)`` record per invocation in source
    order. Raises :class:`ForeignFormatError` if the text is anything other
    than a sequence of such invocations.
    """
    text, table = fragment.render_with_offsets()
    try:
        tree = COMPILE_ERROR_GRAMMAR.parse(text)
    except ParseError as exc:
        raise ForeignFormatError(
            "foreign error is not rendered as compile_error invocations", text, exc.pos
        ) from exc

    starts = [start for start, _, _ in table]
    found = []
    for name_offset, literal_offset, message in _CompileErrorVisitor().visit(tree):
        found.append(ChildDiagnostic(
            start=_span_at(starts, table, name_offset),
            end=_span_at(starts, table, literal_offset),
            message=message,
        ))
    return found


def diagnostic_from_fragment(fragment: Fragment) -> Diagnostic:
    """Build an Error diagnostic (plus children) from rendered fallback output."""
    found = extract_compile_errors(fragment)
    if not found:
        raise ForeignFormatError("foreign error rendered no compile_error invocation",
                                 fragment.render())

    first, rest = found[0], found[1:]
    diag = Diagnostic.double_spanned(first.start, first.end, Level.ERROR, first.message)
    for child in rest:
        diag = diag._with_child(child)
    logger.debug("recovered foreign error at %s with %d children", diag.location, len(rest))
    return diag


def diagnostic_from_foreign(error: ForeignError) -> Diagnostic:
    if not isinstance(error, ForeignError):
        raise TypeError(
            f"{type(error).__name__} does not provide to_compile_error()"
        )
    return diagnostic_from_fragment(error.to_compile_error())
