import logging
from logging.handlers import RotatingFileHandler

from habitual import config

__all__ = ["setup_logging"]

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(max_bytes: int = 1_000_000, backup_count: int = 3) -> logging.Logger:
    """Route the package's log records to a rotating file under the data dir."""
    config.HABITUAL_DIR.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("habitual")
    logger.setLevel(config.get_log_level())
    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        handler = RotatingFileHandler(
            config.LOG_PATH, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    return logger
