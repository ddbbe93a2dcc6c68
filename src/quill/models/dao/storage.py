"""Pieces shared by the directory store and the archive store"""

import logging
import struct

import msgpack

from quill.exceptions import BookIntegrityError, BookLoadError
from quill.models.book import Book
from quill.models.dao.index_codec import BookIndex
from quill.models.page import Page
from quill.models.tags import TagManager

# What a corrupt or unreadable file can raise while decoding
DECODE_ERRORS = (
    OSError,
    EOFError,
    ValueError,
    TypeError,
    struct.error,
    msgpack.UnpackException,
)


def restore_book(
    index: BookIndex, pages: list[Page], tag_manager: TagManager, allow_save: bool
) -> Book:
    """Build the in-memory book from decoded data"""
    page_ids = [page.page_id for page in pages]
    if len(set(page_ids)) != len(page_ids):
        raise BookLoadError("Book contains the same page more than once")
    return Book(
        index.title,
        tag_manager=tag_manager,
        book_id=index.book_id,
        pages=pages,
        current_page=index.current_page,
        page_filter=index.page_filter,
        created_at=index.created_at,
        modified_at=index.modified_at,
        allow_save=allow_save,
    )


def check_allow_save(book: Book) -> None:
    if not book.allow_save:
        logging.getLogger("Storage").error("Refusing to save preview of %s", book.book_id)
        raise BookIntegrityError("Saving a truncated preview is not allowed")
