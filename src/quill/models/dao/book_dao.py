"""Methods to save and load a Book as a directory of index and page files"""

import logging
from pathlib import Path

from quill.config import settings
from quill.exceptions import BookLoadError, BookSaveError
from quill.models.book import Book
from quill.models.dao.index_codec import BookIndex, IndexCodec
from quill.models.dao.storage import DECODE_ERRORS, check_allow_save, restore_book
from quill.models.page import Page
from quill.models.tags import TagManager
from quill.utils.data_stream import DataInputStream, DataOutputStream


class BookDAO:
    """
    Stores a book in its own directory: one index file plus one file per page.

    Saving only writes the pages that were modified. Files of removed pages
    are left in place, and page files missing from the index are ignored.
    """

    @staticmethod
    def notebook_dir(base_dir: Path, book_id: str) -> Path:
        return settings.notebook_dir(base_dir, book_id)

    @staticmethod
    def save(book: Book, base_dir: Path | None = None) -> Path:
        """Save the book below base_dir, returns the notebook directory"""
        notebook_dir = BookDAO.notebook_dir(base_dir or settings.DATA_DIR_PATH, book.book_id)
        BookDAO.save_to_directory(book, notebook_dir)
        return notebook_dir

    @staticmethod
    def load(
        book_id: str, base_dir: Path | None = None, page_limit: int | None = None
    ) -> Book:
        """Load the book with this id from below base_dir"""
        notebook_dir = BookDAO.notebook_dir(base_dir or settings.DATA_DIR_PATH, book_id)
        return BookDAO.load_from_directory(notebook_dir, page_limit)

    @staticmethod
    def save_to_directory(book: Book, notebook_dir: Path) -> None:
        check_allow_save(book)
        logger = logging.getLogger("BookDAO")
        try:
            notebook_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Error creating directory %s: %s", notebook_dir, e)
            raise BookSaveError(f"Error creating directory {notebook_dir}: {e}") from e

        book.update_modified()
        try:
            BookDAO._save_index(book, notebook_dir)
            saved = 0
            for page in book.pages:
                if not page.is_modified():
                    continue
                BookDAO._save_page(page, notebook_dir)
                page.mark_saved()
                saved += 1
        except (OSError, ValueError) as e:
            logger.error("Error saving book %s: %s", book.book_id, e)
            raise BookSaveError(f"Error saving book to {notebook_dir}: {e}") from e
        logger.debug(
            "Saved book %s: index and %d of %d pages", book.book_id, saved, book.pages_size()
        )

    @staticmethod
    def load_from_directory(notebook_dir: Path, page_limit: int | None = None) -> Book:
        """
        Load a book. With a page_limit only the first pages are read and the
        returned book refuses to be saved.
        """
        logger = logging.getLogger("BookDAO")
        if not notebook_dir.is_dir():
            logger.error("No such directory: %s", notebook_dir)
            raise BookLoadError(f"No such directory: {notebook_dir}")

        tag_manager = TagManager()
        try:
            index = BookDAO._load_index(notebook_dir, tag_manager)
            pages: list[Page] = []
            for page_id in index.page_ids:
                if page_limit is not None and len(pages) >= page_limit:
                    break
                pages.append(BookDAO._load_page(page_id, notebook_dir, tag_manager))
        except BookLoadError:
            raise
        except DECODE_ERRORS as e:
            logger.error("Error loading book from %s: %s", notebook_dir, e)
            raise BookLoadError(f"Error loading book from {notebook_dir}: {e}") from e

        logger.debug("Loaded %d pages from %s", len(pages), notebook_dir)
        return restore_book(index, pages, tag_manager, allow_save=page_limit is None)

    @staticmethod
    def _load_index(notebook_dir: Path, tag_manager: TagManager) -> BookIndex:
        with open(settings.index_file(notebook_dir), "rb") as f:
            return IndexCodec.decode(DataInputStream(f), tag_manager)

    @staticmethod
    def _save_index(book: Book, notebook_dir: Path) -> None:
        with open(settings.index_file(notebook_dir), "wb") as f:
            IndexCodec.encode(BookIndex.from_book(book), DataOutputStream(f))

    @staticmethod
    def _load_page(page_id: str, notebook_dir: Path, tag_manager: TagManager) -> Page:
        with open(settings.page_file(notebook_dir, page_id), "rb") as f:
            page = Page.from_stream(DataInputStream(f), tag_manager)
        if page.page_id != page_id:
            raise BookLoadError(
                f"Page file for {page_id} contains page {page.page_id}"
            )
        logging.getLogger("BookDAO").debug("Loaded book page %s", page_id)
        return page

    @staticmethod
    def _save_page(page: Page, notebook_dir: Path) -> None:
        logging.getLogger("BookDAO").debug("Saving book page %s", page.page_id)
        with open(settings.page_file(notebook_dir, page.page_id), "wb") as f:
            page.write_to_stream(DataOutputStream(f))
