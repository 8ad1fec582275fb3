# gendiag/dummy.py
"""
Facility to emit dummy output in case an error happens.

A ``compile_error`` does not stop the host tool: it keeps going and
reports whatever else it finds. If a pass that was supposed to generate,
say, a class that the rest of the program uses fails, the user sees the
real error followed by a pile of "name is not defined" errors about the
class that was never generated. Those secondary errors are noise.

The fix is a stand-in: set a dummy fragment early in the pass (a class
with the right name whose methods just raise ``NotImplementedError``)
and the entry point appends it to the rendered diagnostics whenever the
pass ends in error. On success the dummy is discarded.

    set_dummy(Fragment.from_source(f"class {name}:\\n    pass\\n", span))
"""

from __future__ import annotations

import logging
from typing import Optional

from gendiag.context import current_pass
from gendiag.errors import PassStateError
from gendiag.fragment import Fragment

__all__ = ["set_dummy", "append_dummy"]

logger = logging.getLogger(__name__)


def set_dummy(fragment: Fragment) -> Optional[Fragment]:
    """Replace the dummy fragment of the current pass, returning the old one."""
    ctx = current_pass("set_dummy")
    previous, ctx.dummy = ctx.dummy, fragment
    logger.debug("dummy set (%d tokens, replaced=%s)", len(fragment), previous is not None)
    return previous


def append_dummy(fragment: Fragment) -> None:
    """
    Extend the dummy fragment of the current pass.

    Raises :class:`PassStateError` if no dummy has been set yet.
    """
    ctx = current_pass("append_dummy")
    if ctx.dummy is None:
        raise PassStateError("append_dummy", "set_dummy must be called first")
    ctx.dummy = ctx.dummy + fragment
