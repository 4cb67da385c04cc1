import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from hrms.core.config import settings

FILE_HANDLER_NAME = "hrms-file"


def configure_logging(level: Union[int, str, None] = None, log_path: Optional[Path] = None) -> None:
    """Attach console and rotating-file handlers to the root logger once.

    Safe to call again: the level is updated, handlers are not duplicated.
    """
    log_path = Path(log_path or settings.log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level or settings.log_level)
    if any(handler.get_name() == FILE_HANDLER_NAME for handler in root_logger.handlers):
        return

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    # a host (uvicorn --log-config, pytest) may already own the console
    if not any(type(handler) is logging.StreamHandler for handler in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.set_name(FILE_HANDLER_NAME)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
