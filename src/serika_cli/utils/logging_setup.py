"""Process-wide logging configuration.

Modules log through ``logging.getLogger(__name__)``; this function
attaches a single handler to the ``serika_cli`` logger.  Records go to
stderr through Rich when it is installed, else through a plain
:class:`logging.StreamHandler`.
"""

from __future__ import annotations

import logging

_LOGGER_NAME = "serika_cli"
_PLAIN_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Configure the package logger (idempotent).

    Parameters
    ----------
    verbose:
        Emit DEBUG records instead of only WARNING and above.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handler: logging.Handler
    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=verbose,
            rich_tracebacks=verbose,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
