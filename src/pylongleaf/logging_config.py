"""
Logging helpers for pylongleaf.

Library modules obtain loggers through ``get_logger(__name__)``; nothing is
printed unless the application configures handlers, e.g. with
``setup_logging`` as the command line interface does.
"""
import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .stand_input import StandState

PACKAGE_LOGGER = 'pylongleaf'

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a pylongleaf module."""
    return logging.getLogger(name)


def setup_logging(level: int = logging.INFO, use_rich: bool = True,
                  log_file: Optional[str] = None) -> logging.Logger:
    """Configure the package logger for interactive use.

    Args:
        level: Logging level for the package logger
        use_rich: Render console records with rich's RichHandler
        log_file: Optional file that also receives all records

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    if use_rich:
        from rich.logging import RichHandler
        console_handler = RichHandler(show_path=False, markup=False)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def log_growth_summary(logger: logging.Logger, state: 'StandState') -> None:
    """Log one line describing a projected stand state at DEBUG level."""
    logger.debug(
        "age %.2f: N=%.1f trees/ha, BA=%.2f m2/ha, QD=%.2f cm, HDOM=%.2f m, "
        "SDIR=%.1f%%, VOL_OB=%.1f m3/ha%s",
        state.age, state.n, state.ba, state.qd, state.hdom,
        state.sdir, state.vol_ob, " (thinned)" if state.thinned else "",
    )
