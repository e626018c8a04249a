"""
Logging configuration — one setup call per CLI invocation.

Generator modules log through ``logging.getLogger(__name__)``; the
human-facing report (files written, conflicts, next steps) goes through
click and is independent of the log level.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  FORGE_LOG_LEVEL env var  >  WARNING

Optional file output via FORGE_LOG_FILE / FORGE_LOG_FILE_LEVEL env vars.
"""

from __future__ import annotations

import logging
import os
import sys

# ── Format strings ──────────────────────────────────────────────

# Level → (format, datefmt).  Anything above INFO prints the bare message.
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
}
_FMT_MINIMAL = "%(message)s"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_ENV_LEVEL = "FORGE_LOG_LEVEL"
_ENV_FILE = "FORGE_LOG_FILE"
_ENV_FILE_LEVEL = "FORGE_LOG_FILE_LEVEL"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(_ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional log file path (default: ``FORGE_LOG_FILE``).
        log_file_level: Level for the file handler
            (default: ``FORGE_LOG_FILE_LEVEL``, else ``level``).
    """
    console_level = parse_level(level)
    log_file = log_file or os.environ.get(_ENV_FILE)
    log_file_level = log_file_level or os.environ.get(_ENV_FILE_LEVEL)

    fmt, datefmt = _FMT_MINIMAL, None
    for threshold in sorted(_CONSOLE_FORMATS):
        if console_level <= threshold:
            fmt, datefmt = _CONSOLE_FORMATS[threshold]
            break

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(root_level)


def parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value (WARNING when unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
