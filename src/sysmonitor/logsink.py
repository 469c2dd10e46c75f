"""
Logging configuration for sysmonitor.

Console diagnostics go to stderr. The session log is an append-only,
timestamped file that receives lifecycle events and sampler summaries.
"""

import logging
import sys
from pathlib import Path

DEFAULT_LOG_FILE = Path("syslog.txt")

SESSION_LOGGER = "sysmonitor.session"
CONSOLE_HANDLER = "sysmonitor.console"


def setup_logging(
    level: int = logging.WARNING,
    log_file: Path | None = DEFAULT_LOG_FILE,
) -> logging.Logger:
    """
    Configure the sysmonitor loggers and return the session logger.

    Args:
        level: Console logging level (default: WARNING)
        log_file: Session log path, or None to keep no session log

    Returns:
        The session logger; when ``log_file`` is None it has no handlers and
        its messages are discarded.
    """
    root = logging.getLogger("sysmonitor")
    root.setLevel(level)
    _close_handlers(root)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name(CONSOLE_HANDLER)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(message)s"))
    root.addHandler(console_handler)
    root.propagate = False

    session = logging.getLogger(SESSION_LOGGER)
    session.setLevel(logging.INFO)
    _close_handlers(session)
    # Session lines belong in the file only, never on the console
    session.propagate = False

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(fmt="[%(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        session.addHandler(file_handler)
    else:
        session.addHandler(logging.NullHandler())

    return session


def replace_console_handler(handler: logging.Handler | None) -> logging.Handler | None:
    """
    Swap the console handler of the sysmonitor logger.

    The new handler inherits the level of the one it replaces. Passing None
    only removes the current one. Returns the removed handler, unclosed, so it
    can be put back later.
    """
    root = logging.getLogger("sysmonitor")
    previous = next((h for h in root.handlers if h.get_name() == CONSOLE_HANDLER), None)
    if previous is not None:
        root.removeHandler(previous)

    if handler is not None:
        handler.set_name(CONSOLE_HANDLER)
        if previous is not None:
            handler.setLevel(previous.level)
        root.addHandler(handler)
    return previous


def shutdown_logging() -> None:
    """Flush and close every handler installed by setup_logging."""
    for name in (SESSION_LOGGER, "sysmonitor"):
        logger = logging.getLogger(name)
        _close_handlers(logger)
        logger.propagate = True


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
