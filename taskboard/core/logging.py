import logging
import sys

from taskboard.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Install a single stream handler on the ``taskboard`` logger."""
    logger = logging.getLogger("taskboard")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    # Reloads (uvicorn --reload, repeated app factories) must not stack handlers
    if any(getattr(h, "_taskboard", False) for h in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._taskboard = True
    logger.addHandler(handler)
