import datetime
import logging
from pathlib import Path
from typing_extensions import override

from quill.config import settings


def configure_logging(log_dir: Path | None = None) -> Path:
    """Log to a timestamped file and to the console, returns the log file"""
    log_dir = log_dir or settings.LOGGING_DIR_PATH
    log_dir.mkdir(parents=True, exist_ok=True)
    now: str = datetime.datetime.now().strftime("%Y-%m-%d-%H-%M")
    file_name = log_dir / f"{now}.log"

    formatter = logging.Formatter(
        fmt="%(asctime)s - [%(name)s]- %(levelname)s - [%(module)s:%(levelno)s] - %(message)s"
    )

    file_handler = logging.FileHandler(file_name, encoding="UTF-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(CustomFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Page-level chatter from the DAOs is only useful when debugging storage
    for module in ["BookDAO", "ArchiveDAO", "Storage"]:
        logging.getLogger(module).setLevel(logging.INFO)

    return file_name


class CustomFormatter(logging.Formatter):
    """Colours console records by level"""

    grey: str = "\x1b[38;20m"
    yellow: str = "\x1b[33;20m"
    red: str = "\x1b[31;20m"
    bold_red: str = "\x1b[31;1m"
    reset: str = "\x1b[0m"
    custom_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    COLORS = {
        logging.DEBUG: grey,
        logging.INFO: grey,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def __init__(self):
        super().__init__()
        self._formatters: dict[int, logging.Formatter] = {
            level: logging.Formatter(color + self.custom_format + self.reset)
            for level, color in self.COLORS.items()
        }

    @override
    def format(self, record: logging.LogRecord) -> str:
        formatter = self._formatters.get(record.levelno, self._formatters[logging.ERROR])
        return formatter.format(record)
