# logger.py

import logging
import sys

from config import LOG_FILE, LOG_LEVEL

# Set up a root logger that writes to both console and a file.
LOG_FORMAT = (
    "%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] "
    "- %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.DEBUG),
    format=LOG_FORMAT,
    datefmt=DATE_FORMAT,
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(LOG_FILE, encoding="utf-8")
    ]
)

# “parkphoto” logger
logger = logging.getLogger("parkphoto")
