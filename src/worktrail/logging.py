"""Process-wide logging setup for the CLI."""
from __future__ import annotations
import logging
import sys

logger = logging.getLogger("worktrail")

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def level_for(verbosity: int = 0, quiet: bool = False) -> int:
    """Map ``-v`` count / ``--quiet`` to a logging level. Warnings show by default."""
    if quiet:
        return logging.ERROR
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: int = 0, quiet: bool = False) -> None:
    """Attach a single stderr handler to the package logger."""
    logger.setLevel(level_for(verbosity, quiet))
    if not any(getattr(h, "_worktrail", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        handler._worktrail = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
