"""
Contains the configuration options for the Quill notebook storage
"""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError
from pydantic_settings import BaseSettings

USERPROFILE: Path = Path(os.getenv("userprofile", os.getenv("HOME", "")))
BASE_FOLDER: Path = (USERPROFILE / ".quill").resolve()
SETTINGS_FILE_PATH: Path = BASE_FOLDER / "config.json"


class Settings(BaseSettings):
    """Settings class for the Quill notebook storage"""

    DATA_DIR_PATH: Path = BASE_FOLDER / "data"
    LOGGING_DIR_PATH: Path = BASE_FOLDER / "logging"

    # Storage layout
    QUILL_DATA_FILE_SUFFIX: str = ".quill_data"
    INDEX_FILE_NAME: str = "index"
    PAGE_FILE_PREFIX: str = "page_"
    NOTEBOOK_DIRECTORY_PREFIX: str = "notebook_"

    # Book
    DEFAULT_TITLE: str = "Default Quill notebook"
    IMPORTED_TITLE_TEMPLATE: str = "Imported Quill notebook v{version}"

    # Page
    DEFAULT_PAPER_TYPE: str = "ruled"
    DEFAULT_ASPECT_RATIO: float = 1 / 1.414

    UNDO_LIMIT: int = 100

    @classmethod
    def load_from_file(cls, path: Path) -> "Settings":
        """Loads settings from a JSON file."""
        if not path.exists():
            return cls()  # Return default

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls(**data)
        except (json.JSONDecodeError, ValidationError) as e:
            logging.getLogger("Config").error("Error loading settings: %s", e)
            return cls()  # Return defaults

    def save_to_file(self, path: Path):
        """Saves settings to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(path, "w", encoding="utf-8") as f:
                _ = f.write(self.model_dump_json(indent=2))
        except OSError as e:
            logging.getLogger("Config").error("Error saving settings: %s", e)

    def notebook_dir(self, base_dir: Path, book_id: str) -> Path:
        """The directory holding the index and page files of a book"""
        return base_dir / f"{self.NOTEBOOK_DIRECTORY_PREFIX}{book_id}"

    def index_file(self, notebook_dir: Path) -> Path:
        """The index file inside a notebook directory"""
        return notebook_dir / f"{self.INDEX_FILE_NAME}{self.QUILL_DATA_FILE_SUFFIX}"

    def page_file(self, notebook_dir: Path, page_id: str) -> Path:
        """The file holding a single page inside a notebook directory"""
        return (
            notebook_dir
            / f"{self.PAGE_FILE_PREFIX}{page_id}{self.QUILL_DATA_FILE_SUFFIX}"
        )


settings = Settings.load_from_file(Path(SETTINGS_FILE_PATH))
