"""
Logging configuration for the application.

Account changes are logged by the services under the
``pro_directory_api`` logger hierarchy; this module only decides where
those records go.  Set ``LOG_FILE`` to keep a copy of them on disk.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger unless something already did.

    ``level`` is a level name such as ``"DEBUG"``; an unknown name is
    reported and replaced by ``INFO``.  ``logfile`` adds a file handler,
    creating missing parent directories.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    resolved = logging.getLevelName(level.upper())
    known = isinstance(resolved, int)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        path = Path(logfile).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=resolved if known else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
    )
    if not known:
        logging.getLogger(__name__).warning("Unknown log level %r, using INFO", level)
