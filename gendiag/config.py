# gendiag/config.py
"""
Configuration.

The rendering backend is chosen once, when the host tool configures
gendiag (or, if it never does, from the environment on first use). All
passes started afterwards use the same backend.

Environment
-----------
GENDIAG_BACKEND
    ``fallback`` (default) or ``rich``.
GENDIAG_LOG_LEVEL
    Level name for the ``gendiag`` logger. When unset the logger level
    is left alone.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from dataclasses import dataclass, replace
from typing import Any, List, Mapping, Optional

from gendiag.backends import BACKENDS, Backend, DiagnosticChannel, RichBackend
from gendiag.errors import ConfigError

__all__ = [
    "Settings",
    "configure",
    "get_settings",
    "get_backend",
    "configure_logging",
]

_log = logging.getLogger("gendiag")

ENV_BACKEND = "GENDIAG_BACKEND"
ENV_LOG_LEVEL = "GENDIAG_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """Tuning knobs for gendiag."""
    backend: str = "fallback"
    channel: Optional[DiagnosticChannel] = None
    log_level: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        level = env.get(ENV_LOG_LEVEL)
        return cls(
            backend=env.get(ENV_BACKEND, cls.backend).strip().lower(),
            log_level=level.strip().upper() if level else None,
        )

    def validate(self) -> List[str]:
        """Return a list of problems (empty if valid)."""
        problems: List[str] = []
        if self.backend not in BACKENDS:
            problems.append(
                f"unknown backend {self.backend!r} (expected one of: {', '.join(sorted(BACKENDS))})"
            )
        if self.channel is not None and self.backend != RichBackend.name:
            problems.append("a channel can only be used with the rich backend")
        if self.channel is not None and not isinstance(self.channel, DiagnosticChannel):
            problems.append("channel must provide report(diagnostic)")
        if self.log_level is not None and not isinstance(logging.getLevelName(self.log_level), int):
            problems.append(f"unknown log level {self.log_level!r}")
        return problems

    def build_backend(self) -> Backend:
        if self.backend == RichBackend.name:
            return RichBackend(self.channel)
        return BACKENDS[self.backend]()


_lock = threading.Lock()
_settings: Optional[Settings] = None
_backend: Optional[Backend] = None


def configure(settings: Optional[Settings] = None, **overrides: Any) -> Settings:
    """
    Install settings, replacing the cached backend.

    Meant to be called by the host tool before any pass runs. Passes
    already in flight keep the backend they started with.
    """
    global _settings, _backend
    base = settings if settings is not None else Settings.from_env()
    new = replace(base, **overrides) if overrides else base
    problems = new.validate()
    if problems:
        raise ConfigError(problems)
    with _lock:
        _settings = new
        _backend = new.build_backend()
    _apply_log_level(new)
    _log.debug("configured backend=%s", new.backend)
    return new


def get_settings() -> Settings:
    global _settings
    with _lock:
        if _settings is None:
            loaded = Settings.from_env()
            problems = loaded.validate()
            if problems:
                raise ConfigError(problems)
            _settings = loaded
            _apply_log_level(loaded)
        return _settings


def _apply_log_level(settings: Settings) -> None:
    if settings.log_level is not None:
        _log.setLevel(settings.log_level)


def get_backend() -> Backend:
    """The configured backend, built on first use."""
    global _backend
    settings = get_settings()
    with _lock:
        if _backend is None:
            _backend = settings.build_backend()
        return _backend


def _reset() -> None:
    global _settings, _backend
    with _lock:
        _settings = None
        _backend = None


def configure_logging(verbosity: int) -> None:
    """Set up the ``gendiag`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("gendiag")
    root.setLevel(level)
    root.addHandler(handler)
