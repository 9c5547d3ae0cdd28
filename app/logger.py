"""Console logging for the products API; create_app() sets the level."""
import logging
import sys

logger = logging.getLogger("products_api")

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

logger.propagate = False


def set_level(level: str):
    logger.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """Child of the products_api logger, e.g. ``get_logger("store")``."""
    return logger.getChild(name)
