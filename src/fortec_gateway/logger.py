# Shared logger factory: one stream handler per named logger, level from settings.

import logging

from fortec_gateway.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(h)
        logger.propagate = False
    logger.setLevel(settings.LOG_LEVEL)
    return logger
