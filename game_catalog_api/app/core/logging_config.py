"""
Logging configuration for the catalog service.

``setup_logging`` attaches a console handler and, when ``LOG_FILE`` is
set, a UTF-8 file handler to the root logger.  Store lookups run in
worker threads, so the thread name is part of every record.  The
function is a no-op once the root logger has handlers, which keeps
test runs and repeated ``create_app`` calls from duplicating output.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> bool:
    """Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name, case insensitive.  Unknown names fall back
        to ``INFO``.
    logfile : Optional[str]
        Path of a file to append records to.  Relative paths are
        resolved against the current working directory.

    Returns
    -------
    bool
        ``True`` if handlers were installed, ``False`` if logging was
        already configured.
    """
    root = logging.getLogger()
    if root.handlers:
        return False

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return True
