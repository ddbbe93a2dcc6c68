"""Single file archive of a Book"""

import logging
from pathlib import Path

from quill.exceptions import BookLoadError, BookSaveError
from quill.models.book import Book
from quill.models.dao.storage import DECODE_ERRORS, check_allow_save, restore_book
from quill.models.dao.index_codec import BookIndex, IndexCodec
from quill.models.page import Page
from quill.models.tags import TagManager
from quill.utils.data_stream import DataInputStream, DataOutputStream
from quill.utils.move import atomic_write


class ArchiveDAO:
    """
    Handles reading/writing the archive format.

    Archive format:
    - Index record (same as the index file of the directory store)
    - One page record per page, in book order

    Archives are complete snapshots: every page is written on each save.
    """

    @staticmethod
    def save(book: Book, filepath: Path) -> None:
        """Write every page of the book to filepath, replacing it atomically"""
        check_allow_save(book)
        logger = logging.getLogger("ArchiveDAO")
        logger.debug("Saving book %s to archive: %s", book.book_id, filepath)

        book.update_modified()
        pages = book.pages
        try:
            with atomic_write(filepath, suffix=".tmp") as f:
                out = DataOutputStream(f)
                IndexCodec.encode(BookIndex.from_book(book), out)
                for page in pages:
                    logger.debug("Saving book page %s", page.page_id)
                    page.write_to_stream(out)
        except (OSError, ValueError) as e:
            logger.error("Error saving archive %s: %s", filepath, e)
            raise BookSaveError(f"Error saving archive {filepath}: {e}") from e

        logger.debug("Archive saved: %d pages", len(pages))

    @staticmethod
    def load(filepath: Path, page_limit: int | None = None) -> Book:
        """
        Load an archive. With a page_limit the remaining pages are not read,
        the current page is reset to the first one and the returned book
        refuses to be saved.
        """
        logger = logging.getLogger("ArchiveDAO")
        logger.debug("Loading book from archive: %s", filepath)

        tag_manager = TagManager()
        try:
            with open(filepath, "rb") as f:
                data_in = DataInputStream(f)
                index = IndexCodec.decode(data_in, tag_manager)
                pages: list[Page] = []
                for _ in range(index.page_count):
                    if page_limit is not None and len(pages) >= page_limit:
                        break
                    page = Page.from_stream(data_in, tag_manager)
                    logger.debug("Loaded book page %s", page.page_id)
                    pages.append(page)
        except BookLoadError:
            raise
        except DECODE_ERRORS as e:
            logger.error("Error loading archive %s: %s", filepath, e)
            raise BookLoadError(f"Error loading archive {filepath}: {e}") from e

        if index.page_ids and [p.page_id for p in pages] != index.page_ids[: len(pages)]:
            raise BookLoadError(f"Archive {filepath} pages do not match its index")

        if page_limit is not None:
            index.current_page = 0
        logger.debug("Archive loaded: %d of %d pages", len(pages), index.page_count)
        return restore_book(index, pages, tag_manager, allow_save=page_limit is None)
