"""Logging helpers shared by the CLI and the pipeline stages."""

import logging
import sys


LOGGER_NAME: str = "jploot"


def configure_logging(*, verbose: int, quiet: int) -> logging.Logger:
    """Configure the jploot logger.

    :param verbose: Verbosity count (0+).
    :param quiet: Quietness count (0+).
    :returns: Configured logger.
    """

    level: int = logging.INFO
    if quiet >= 2:
        level = logging.ERROR
    elif quiet >= 1:
        level = logging.WARNING
    elif verbose >= 1:
        level = logging.DEBUG

    logger: logging.Logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    handler: logging.Handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def verbose_log(logger: logging.Logger, verbose: bool, message: str) -> None:
    """Log at info when running verbose, at debug otherwise.

    :param logger: Target logger.
    :param verbose: Verbose mode flag.
    :param message: Message without the ``jploot:`` prefix.
    """

    if verbose is True:
        logger.info(f"jploot: {message}")
    else:
        logger.debug(f"jploot: {message}")
