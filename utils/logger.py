import logging
import os
from logging.handlers import RotatingFileHandler

from config import get_settings


def setup_api_logger(log_path: str | None = None) -> logging.Logger:
    """Setup and return the application-wide API logger.

    Creates a rotating file handler at `log_path`, falling back to LOG_PATH
    and then to ./logs/api.log next to the sources.
    """
    if log_path is None:
        log_path = get_settings().log_path
    if log_path is None:
        base = os.path.abspath(os.path.dirname(__file__))
        log_path = os.path.join(base, '..', 'logs', 'api.log')
    os.makedirs(os.path.dirname(os.path.abspath(log_path)), exist_ok=True)

    logger = logging.getLogger('tripplanner.api')
    logger.setLevel(logging.INFO)

    # avoid adding multiple handlers if called multiple times
    if not logger.handlers:
        handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8')
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
