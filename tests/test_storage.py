"""Tests for the helpers shared by both stores"""

import pytest

from quill.exceptions import BookIntegrityError, BookLoadError
from quill.models.book import Book
from quill.models.dao.index_codec import BookIndex
from quill.models.dao.storage import check_allow_save, restore_book
from quill.models.page import Page
from quill.models.tags import TagManager


def _index(manager: TagManager, pages: list[Page]) -> BookIndex:
    return BookIndex(
        page_count=len(pages),
        current_page=1,
        title="Restored",
        created_at=1000.5,
        modified_at=2000.25,
        book_id="0b7c4f3e-8d55-4f0a-9a43-5d2f1c6e9b10",
        page_filter=manager.new_tag_set(),
        page_ids=[page.page_id for page in pages],
    )


def test_restore_book_keeps_index_fields():
    manager = TagManager()
    pages = [Page(manager), Page(manager)]

    book = restore_book(_index(manager, pages), pages, manager, allow_save=True)

    assert book.title == "Restored"
    assert book.book_id == "0b7c4f3e-8d55-4f0a-9a43-5d2f1c6e9b10"
    assert book.pages == pages
    assert book.current_page_index == 1
    assert book.created_at == 1000.5
    assert book.allow_save


def test_restore_book_rejects_repeated_pages():
    manager = TagManager()
    page = Page(manager)
    twin = Page(manager, page_id=page.page_id)

    with pytest.raises(BookLoadError):
        _ = restore_book(_index(manager, [page, twin]), [page, twin], manager, allow_save=True)


def test_check_allow_save():
    check_allow_save(Book("Writable"))
    with pytest.raises(BookIntegrityError):
        check_allow_save(Book("Preview", allow_save=False))
