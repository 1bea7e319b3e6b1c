# logger_utils.py
# ------------------------------------------------------------
# Logger factory shared by the engine modules.
# ------------------------------------------------------------

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Return a logger with a single console handler attached."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        level_name = os.getenv("FXHEDGE_LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level_name, logging.INFO))

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(console_handler)
        logger.propagate = False

    return logger
