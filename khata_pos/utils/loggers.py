import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .. import config

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name="khata_pos", log_file: str = "khata_pos.log"):
    """
    Console output plus a rotating file under LOG_PATH. Safe to call more
    than once; handlers are only attached the first time.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(ch)
        try:
            path = Path(config.LOG_PATH) / log_file
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(str(path), maxBytes=1_000_000, backupCount=3, encoding="utf-8", delay=True)
        except OSError as e:
            logger.warning("File logging disabled: %s", e)
        else:
            fh.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(fh)
    return logger
