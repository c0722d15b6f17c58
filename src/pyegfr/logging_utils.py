"""Logging setup for scripts that run the formulas over datasets.

pyegfr reports data-quality problems (ages outside 1-25 years, unrecognised
sex values) as warnings and only emits debug/warning records through the
``pyegfr.*`` loggers; it never installs handlers on import.
``configure_logging`` attaches one handler to the ``pyegfr`` logger and, by
default, routes warnings into the log as well so batch jobs keep them next to
the rest of their output.
"""

from __future__ import annotations

import logging

PACKAGE_LOGGER = "pyegfr"
WARNINGS_LOGGER = "py.warnings"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "pyegfr-console"


def _find_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def configure_logging(
    level: str | int = "INFO",
    *,
    force: bool = False,
    capture_warnings: bool = True,
) -> logging.Logger:
    """Configure the ``pyegfr`` logger.

    Parameters
    ----------
    level:
        Level of the ``pyegfr`` logger.  Can be an int or case-insensitive
        string such as ``"INFO"``.
    force:
        When ``True`` the pyegfr console handler is (re)installed even if the
        root logger already has handlers.
    capture_warnings:
        Route :class:`~pyegfr.AgeRangeWarning`,
        :class:`~pyegfr.UnrecognizedCategoryWarning` and other warnings to the
        ``py.warnings`` logger via :func:`logging.captureWarnings`.

    Returns
    -------
    The configured ``pyegfr`` logger.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logging.captureWarnings(capture_warnings)

    warnings_logger = logging.getLogger(WARNINGS_LOGGER)
    handler = _find_handler(logger)
    if handler is not None:
        logger.removeHandler(handler)
        warnings_logger.removeHandler(handler)

    if logging.getLogger().handlers and not force:
        # records propagate to the caller's root handlers
        return logger

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    if capture_warnings:
        warnings_logger.addHandler(handler)
    return logger


__all__ = ["configure_logging"]
