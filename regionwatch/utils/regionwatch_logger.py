import logging
import sys
from logging.handlers import RotatingFileHandler
from django.conf import settings

logger = logging.getLogger("regionwatch")

LOG_FORMAT = (
    "%(levelname)s - %(asctime)s - %(name)s - %(filename)s - %(caller_name)s"
    " - %(region_id)s: %(message)s"
)


def setup_logger():
    """setup the regionwatch logger"""
    logger.setLevel(logging.INFO)

    # log to stdout
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    log_dir = settings.BASE_DIR / "regionwatch/logs"
    log_dir.mkdir(exist_ok=True)
    handler = RotatingFileHandler(log_dir / "regionwatch.log", maxBytes=1048576, backupCount=5)
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
