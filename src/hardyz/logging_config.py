import logging
import os
import sys

LEVEL_ENV = "HARDYZ_LOG_LEVEL"


def _level_from_env() -> int:
    name = os.environ.get(LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter(
            fmt="%(asctime)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S"
        )
        handler.setFormatter(fmt)
        log.addHandler(handler)
        log.setLevel(_level_from_env())
    return log
