# shopmuse/core/logging.py
import logging
import sys
from typing import Iterable, Union
import colorlog

# Third-party loggers that flood DEBUG output with transport details
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "redis", "asyncio")

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

def configure_logging(level: Union[int, str] = logging.INFO, quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s %(levelname)-8s [%(name)s]%(reset)s %(message)s",
            datefmt="%H:%M:%S",
            log_colors=LOG_COLORS,
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # uvicorn follows the app level; transport libraries stay at WARNING
    for name in ("uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in quiet:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))
