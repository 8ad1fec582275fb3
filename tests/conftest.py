# tests/conftest.py
"""
Shared fixtures for the gendiag test-suite.
"""

import json
from typing import List

import pytest

from gendiag import config
from gendiag.diagnostic import Diagnostic
from gendiag.fragment import Fragment, Token
from gendiag.span import SourceSpan


SPAN_A = SourceSpan(file="model.gd", line=3, column=5, end_column=12)
SPAN_B = SourceSpan(file="model.gd", line=7, column=1, end_column=9)
SPAN_C = SourceSpan(file="model.gd", line=10, column=4, end_line=11, end_column=2)


class RecordingChannel:
    """Diagnostic channel that just remembers what it was given."""

    def __init__(self):
        self.reported: List[Diagnostic] = []

    def report(self, diagnostic):
        self.reported.append(diagnostic)


class FakeParseError(Exception):
    """A third-party style error that only knows how to render itself."""

    def __init__(self, *errors):
        # errors: (start_span, end_span, message) triples
        super().__init__(errors[0][2] if errors else "")
        self.errors = errors

    def to_compile_error(self):
        tokens = []
        for start, end, message in self.errors:
            tokens.extend([
                Token("compile_error", start),
                Token("(", start),
                Token(json.dumps(message, ensure_ascii=False), end),
                Token(")", end),
                Token("\n", end),
            ])
        return Fragment(tokens)


@pytest.fixture(autouse=True)
def fallback_backend():
    """Every test starts on a freshly configured fallback backend."""
    config._reset()
    config.configure(config.Settings(backend="fallback"))
    yield
    config._reset()


@pytest.fixture
def recording_channel():
    channel = RecordingChannel()
    config.configure(config.Settings(backend="rich", channel=channel))
    return channel


def rendered_messages(output):
    """Messages of every compile_error in *output*, in order."""
    from gendiag.foreign import extract_compile_errors

    return [err.message for err in extract_compile_errors(output)]
