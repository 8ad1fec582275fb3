"""gendiag: diagnostics and abort handling for code generation passes.

A *generation pass* is one call of a function that turns parsed source
into generated source. gendiag lets such a function report any number of
span-tagged errors, stop early without a cascade of follow-up errors, and
hand everything back to the host tool through its own error channel.

Submodules
----------
diagnostic
    ``Diagnostic`` values (level, span, message, help/note suggestions,
    child errors) and the fallback message composition.

multi
    ``emit``, ``abort``, ``abort_if_dirty``: reporting from inside a pass.

dummy
    ``set_dummy`` / ``append_dummy``: stand-in output used when a pass
    fails.

entry
    ``entry_point`` / ``generation_pass``: the controller wrapping one pass.

backends
    ``FallbackBackend`` (synthesized ``compile_error("...")`` output) and
    ``RichBackend`` (native diagnostic channel).

foreign
    Recovering diagnostics from errors that already render as fallback
    output.

config
    Backend selection and logging setup.

Usage
-----
Programmatic::

    from gendiag import Diagnostic, Level, entry_point, emit, abort_if_dirty

    def _derive(tree):
        for field in tree.fields:
            if field.type not in SUPPORTED:
                emit(Diagnostic.spanned(field.span, Level.ERROR,
                                        "unsupported field type")
                     .help("use one of: int, str, bytes"))
        abort_if_dirty()
        return render(tree)

    output = entry_point(_derive, tree, call_site=tree.span)

"""

from __future__ import annotations

from gendiag.backends import (
    Backend,
    DiagnosticChannel,
    FallbackBackend,
    LoggingChannel,
    RichBackend,
)
from gendiag.config import Settings, configure, configure_logging, get_backend, get_settings
from gendiag.diagnostic import ChildDiagnostic, Diagnostic, Level, Suggestion, SuggestionKind
from gendiag.dummy import append_dummy, set_dummy
from gendiag.entry import entry_point, generation_pass
from gendiag.errors import ConfigError, ForeignFormatError, GendiagError, PassStateError
from gendiag.ext import abort_on, expect_or_abort
from gendiag.foreign import ForeignError, diagnostic_from_foreign, diagnostic_from_fragment
from gendiag.fragment import Fragment, FragmentBuilder, Token
from gendiag.multi import (
    abort,
    abort_if_dirty,
    abort_now,
    emit,
    emit_call_site_error,
    emit_call_site_warning,
    emit_error,
    emit_warning,
    is_dirty,
)
from gendiag.span import SourceSpan

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    # model
    "SourceSpan",
    "Token",
    "Fragment",
    "FragmentBuilder",
    "Level",
    "SuggestionKind",
    "Suggestion",
    "ChildDiagnostic",
    "Diagnostic",
    # pass operations
    "entry_point",
    "generation_pass",
    "emit",
    "emit_error",
    "emit_warning",
    "emit_call_site_error",
    "emit_call_site_warning",
    "abort",
    "abort_now",
    "abort_if_dirty",
    "is_dirty",
    "set_dummy",
    "append_dummy",
    "expect_or_abort",
    "abort_on",
    # foreign errors
    "ForeignError",
    "diagnostic_from_foreign",
    "diagnostic_from_fragment",
    # backends and configuration
    "Backend",
    "FallbackBackend",
    "RichBackend",
    "DiagnosticChannel",
    "LoggingChannel",
    "Settings",
    "configure",
    "configure_logging",
    "get_settings",
    "get_backend",
    # faults
    "GendiagError",
    "PassStateError",
    "ForeignFormatError",
    "ConfigError",
]
