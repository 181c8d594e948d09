import logging
import colorlog
from pathlib import Path

from fantasy12.config import LOG_LEVEL


class RequestContextFilter(logging.Filter):
    """Add request context to log records."""
    def filter(self, record):
        # Ensure all records have certain attributes, even if empty
        for attr in ['request_id', 'user_id']:
            if not hasattr(record, attr):
                setattr(record, attr, None)
        return True


def setup_logger(name: str, log_file: str = None) -> logging.Logger:
    """Set up a colored logger instance with optional file output."""

    # Get or create logger
    logger = logging.getLogger(name)

    # Clear any existing handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel(LOG_LEVEL)
    logger.propagate = False

    console_handler = colorlog.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)

    color_formatter = colorlog.ColoredFormatter(
        "%(asctime)s - %(log_color)s%(levelname)-8s%(reset)s - %(name)s - %(message)s"
        " [req:%(request_id)s] [user:%(user_id)s]",
        datefmt="%Y-%m-%d %H:%M:%S",
        reset=True,
        log_colors={
            'DEBUG':    'cyan',
            'INFO':     'green',
            'WARNING':  'yellow',
            'ERROR':    'red',
            'CRITICAL': 'red,bg_white',
        }
    )

    console_handler.setFormatter(color_formatter)
    console_handler.addFilter(RequestContextFilter())
    logger.addHandler(console_handler)

    if log_file:
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)

        file_handler = logging.FileHandler(
            filename=log_dir / log_file,
            encoding="utf-8",
            mode="a"
        )
        file_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
            " [req:%(request_id)s] [user:%(user_id)s]",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.addFilter(RequestContextFilter())
        logger.addHandler(file_handler)

    return logger
