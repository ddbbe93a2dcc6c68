"""
Represents the Book model: the ordered pages of a notebook, the tag filter
and the view of the pages that match it
"""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from typing_extensions import override

from quill.config import settings
from quill.exceptions import BookIntegrityError
from quill.models.listener import BookModifiedListener
from quill.models.page import Page
from quill.models.tags import TagManager, TagSet


def now() -> float:
    """Current time in seconds, truncated to the millisecond stored on disk"""
    return time.time_ns() // 1_000_000 / 1000


class MutationSink(ABC):
    """Where the book sends its page insertions and removals"""

    @abstractmethod
    def request_add(self, page: Page, position: int) -> None: ...

    @abstractmethod
    def request_remove(self, page: Page, position: int) -> None: ...


class DirectSink(MutationSink):
    """Applies the mutation to the book right away"""

    def __init__(self, book: "Book"):
        self.book: Book = book

    @override
    def request_add(self, page: Page, position: int) -> None:
        self.book.add_page(page, position)

    @override
    def request_remove(self, page: Page, position: int) -> None:
        self.book.remove_page(page, position)


class ListenerSink(MutationSink):
    """Hands the mutation to a listener, which applies it when it wants"""

    def __init__(self, listener: BookModifiedListener):
        self.listener: BookModifiedListener = listener

    @override
    def request_add(self, page: Page, position: int) -> None:
        self.listener.on_page_insert(page, position)

    @override
    def request_remove(self, page: Page, position: int) -> None:
        self.listener.on_page_delete(page, position)


class Book:
    """
    A collection of pages together with the tag manager, the active filter
    and some metadata like the title.

    The book is never empty. The filtered pages are recomputed after every
    change of the pages or of the filter. The current page is an index into
    all pages and need not match the filter.
    """

    def __init__(
        self,
        title: str | None = None,
        *,
        tag_manager: TagManager | None = None,
        book_id: str | None = None,
        pages: list[Page] | None = None,
        current_page: int = 0,
        page_filter: TagSet | None = None,
        created_at: float | None = None,
        modified_at: float | None = None,
        allow_save: bool = True,
    ):
        self.logger: logging.Logger = logging.getLogger("Book")
        self.tag_manager: TagManager = tag_manager or TagManager()
        self.book_id: str = book_id or str(uuid.uuid4())
        self.title: str = title if title is not None else settings.DEFAULT_TITLE
        self.created_at: float = created_at if created_at is not None else now()
        self.modified_at: float = modified_at if modified_at is not None else now()
        self._allow_save: bool = allow_save

        self._pages: list[Page] = []
        for page in pages or []:
            if page in self._pages:
                raise BookIntegrityError(f"Page {page.page_id} is twice in the book")
            self._pages.append(page)
        self._filtered_pages: list[Page] = []
        self._filter: TagSet = (
            page_filter if page_filter is not None else self.tag_manager.new_tag_set()
        )
        self._current: int = current_page
        self._sink: MutationSink = DirectSink(self)
        # Requests handed to the sink that the book has not seen applied yet
        self._pending: list[tuple[str, Page, int]] = []

        self._loading_finished_hook()

    @property
    def allow_save(self) -> bool:
        """False for truncated previews, which must never overwrite the stored book"""
        return self._allow_save

    @property
    def pages(self) -> list[Page]:
        return list(self._pages)

    @property
    def filtered_pages(self) -> list[Page]:
        return list(self._filtered_pages)

    @property
    def filter(self) -> TagSet:
        return self._filter

    @property
    def current_page_index(self) -> int:
        return self._current

    def set_on_book_modified_listener(
        self, listener: BookModifiedListener | None
    ) -> None:
        """Route page insertions and removals through listener (None: apply directly)"""
        self._sink = DirectSink(self) if listener is None else ListenerSink(listener)
        self._pending.clear()

    def update_modified(self) -> None:
        """Update the modified timestamp"""
        self.modified_at = now()

    # Consistency

    def _make_current_page_consistent(self) -> None:
        """Pick a current page if it is out of bounds, never leave the book empty"""
        if self._current < 0:
            self._current = 0
        if self._current >= len(self._pages):
            self._current = len(self._pages) - 1
        if not self._pages:
            page = Page(self.tag_manager)
            page.tags.add(self._filter)
            self._pages.append(page)
            self._current = 0

    def _loading_finished_hook(self) -> None:
        """Always called once the pages are in place, before anyone uses the book"""
        self._make_current_page_consistent()
        self.filter_changed()

    def _update_filtered_pages(self) -> None:
        self._filtered_pages = [
            page for page in self._pages if self.page_matches_filter(page)
        ]

    def _touch_all_subsequent_pages(self, from_position: int) -> None:
        """Mark pages whose position changed so that they are saved again"""
        for page in self._pages[from_position:]:
            page.touch()

    def _new_page(self, template: Page | None) -> Page:
        """A blank page that matches the filter"""
        if template is not None:
            page = Page.from_template(template)
        else:
            page = Page(self.tag_manager)
        page.tags.add(self._filter)
        return page

    def _ensure_non_empty(self, template: Page | None) -> None:
        """Add a page matching the filter at the end; the current page stays"""
        curr = self.current_page()
        new_page = self._new_page(template)
        self._request_add_page(new_page, len(self._projected_pages()))
        if curr in self._pages:
            self.set_current_page(curr)
        if not self.page_matches_filter(new_page):
            raise BookIntegrityError("New page is missing the filter tags")

    def _remove_empty_pages(self, keep: Page) -> None:
        """Remove empty pages except keep, the current one and the last one in view"""
        curr = self.current_page()
        projected = self._projected_pages()
        visible = [page for page in projected if self.page_matches_filter(page)]
        empty: list[Page] = []
        for page in projected:
            if page in (curr, keep):
                continue
            if len(visible) <= 1 and page in visible:
                continue
            if page.is_empty():
                empty.append(page)
                if page in visible:
                    visible.remove(page)
        for page in empty:
            self._request_remove_page(page)
        if curr not in self._pages:
            raise BookIntegrityError("Current page removed")
        self._current = self._pages.index(curr)

    # Filter

    def set_filter(self, new_filter: TagSet) -> None:
        self._filter = new_filter
        self.filter_changed()

    def filter_changed(self) -> None:
        """
        Call this whenever the filter changed. Ensures that at least one page
        matches the filter but does not change the current page.
        """
        curr = self.current_page()
        self._update_filtered_pages()
        if not self._filtered_pages:
            self.logger.debug("No page matches %s, adding one", self._filter)
            self._ensure_non_empty(curr)
        if self.current_page() != curr:
            raise BookIntegrityError("Current page must not change")

    def page_matches_filter(self, page: Page) -> bool:
        return page.tags.contains_all(self._filter)

    # Primitive mutations, called directly or by the listener

    def add_page(self, page: Page, position: int) -> None:
        """Insert page at position and make it the current page"""
        self._settle_request("insert", page)
        if page in self._pages:
            raise BookIntegrityError(f"Page {page.page_id} already in book")
        if not 0 <= position <= len(self._pages):
            raise BookIntegrityError(f"Cannot insert at position {position}")
        self._touch_all_subsequent_pages(position)
        self._pages.insert(position, page)
        self._update_filtered_pages()
        self._current = position

    def remove_page(self, page: Page, position: int) -> None:
        """Remove page, which must be at position; picks a new current page"""
        self._settle_request("remove", page)
        if not 0 <= position < len(self._pages) or self._pages[position] != page:
            raise BookIntegrityError(f"Page {page.page_id} not at position {position}")
        pos = -1
        if page in self._filtered_pages:
            filtered_pos = self._filtered_pages.index(page)
            if filtered_pos + 1 < len(self._filtered_pages):
                # Index of the next match once page is gone
                pos = self._pages.index(self._filtered_pages[filtered_pos + 1]) - 1
            elif filtered_pos - 1 >= 0:
                pos = self._pages.index(self._filtered_pages[filtered_pos - 1])
        if pos == -1:
            if position + 1 < len(self._pages):
                pos = position
            elif position - 1 >= 0:
                pos = position - 1
            else:
                raise BookIntegrityError("Cannot create empty book")
        del self._pages[position]
        self._update_filtered_pages()
        self._touch_all_subsequent_pages(position)
        self._current = pos
        self.logger.debug("Removed page %d, current = %d", position, self._current)

    def _projected_pages(self) -> list[Page]:
        """The pages as they will be once every pending request is applied"""
        pages = list(self._pages)
        for kind, page, position in self._pending:
            if kind == "insert":
                pages.insert(position, page)
            else:
                del pages[position]
        return pages

    def _settle_request(self, kind: str, page: Page) -> None:
        for request in self._pending:
            if request[0] == kind and request[1] == page:
                self._pending.remove(request)
                return

    def _request_add_page(self, page: Page, position: int) -> None:
        self._pending.append(("insert", page, position))
        self._sink.request_add(page, position)

    def _request_remove_page(self, page: Page) -> None:
        position = self._projected_pages().index(page)
        self._pending.append(("remove", page, position))
        self._sink.request_remove(page, position)

    def _position_after_current(self) -> int:
        projected = self._projected_pages()
        curr = self.current_page()
        if curr in projected:
            return projected.index(curr) + 1
        # The current page is about to be removed
        return min(self._current, len(projected))

    # Accessors

    def get_page(self, n: int) -> Page:
        return self._pages[n]

    def get_page_number(self, page: Page) -> int:
        """Position of page in the book, -1 if it is not in the book"""
        return self._pages.index(page) if page in self._pages else -1

    def get_filtered_page(self, n: int) -> Page:
        return self._filtered_pages[n]

    def pages_size(self) -> int:
        return len(self._pages)

    def filtered_pages_size(self) -> int:
        return len(self._filtered_pages)

    def current_page(self) -> Page:
        if not 0 <= self._current < len(self._pages):
            raise BookIntegrityError(
                f"Current page {self._current} out of range ({len(self._pages)} pages)"
            )
        return self._pages[self._current]

    def set_current_page(self, page: Page) -> None:
        if page not in self._pages:
            raise BookIntegrityError(f"Page {page.page_id} not in book")
        self._current = self._pages.index(page)

    # Editing

    def insert_page(self, template: Page | None = None, position: int | None = None) -> Page:
        """
        Insert a page and make it the current page. Without arguments the new
        page goes after the current one and copies its paper. Empty pages
        elsewhere in the book are removed.
        """
        if template is None and position is None:
            template = self.current_page()
        if position is None:
            position = self._position_after_current()
        new_page = self._new_page(template)
        self._request_add_page(new_page, position)
        self._remove_empty_pages(new_page)
        if not self.page_matches_filter(new_page):
            raise BookIntegrityError("New page is missing the filter tags")
        if new_page in self._pages and new_page != self.current_page():
            raise BookIntegrityError("Inserted page is not the current page")
        return new_page

    def insert_page_at_end(self) -> Page:
        return self.insert_page(self.current_page(), len(self._projected_pages()))

    def duplicate_page(self) -> Page:
        """Insert a copy of the current page, strokes included, right after it"""
        new_page = Page.duplicate(self.current_page())
        new_page.tags.add(self._filter)
        self._request_add_page(new_page, self._position_after_current())
        if new_page in self._pages and new_page != self.current_page():
            raise BookIntegrityError("Duplicated page is not the current page")
        return new_page

    def delete_page(self) -> None:
        """
        Delete the current page. The book always keeps at least one page, and
        one page in view: deleting the last of either replaces it with a fresh
        copy.
        """
        self.logger.debug("delete_page() %d/%d", self._current, len(self._pages))
        page = self.current_page()
        projected = self._projected_pages()
        last_in_view = [p for p in projected if self.page_matches_filter(p)] == [page]
        if len(projected) == 1 or last_in_view:
            self._request_add_page(self._new_page(page), self._position_after_current())
        self._request_remove_page(page)

    # Navigation

    def next_page(self) -> Page:
        """Next page matching the filter; stays put if there is none"""
        curr = self.current_page()
        following: Page | None = None
        if curr in self._filtered_pages:
            pos = self._filtered_pages.index(curr)
            if pos + 1 < len(self._filtered_pages):
                following = self._filtered_pages[pos + 1]
        else:
            for page in self._pages[self._current + 1 :]:
                if self.page_matches_filter(page):
                    following = page
                    break
        if following is None:
            return curr
        self._current = self._pages.index(following)
        return following

    def previous_page(self) -> Page:
        """Previous page matching the filter; stays put if there is none"""
        curr = self.current_page()
        preceding: Page | None = None
        if curr in self._filtered_pages:
            pos = self._filtered_pages.index(curr)
            if pos > 0:
                preceding = self._filtered_pages[pos - 1]
        else:
            for page in reversed(self._pages[: self._current]):
                if self.page_matches_filter(page):
                    preceding = page
                    break
        if preceding is None:
            return curr
        self._current = self._pages.index(preceding)
        return preceding

    def next_page_unfiltered(self) -> Page:
        if self._current + 1 < len(self._pages):
            self._current += 1
        return self._pages[self._current]

    def previous_page_unfiltered(self) -> Page:
        if self._current > 0:
            self._current -= 1
        return self._pages[self._current]

    def last_page(self) -> Page:
        if not self._filtered_pages:
            return self.current_page()
        last = self._filtered_pages[-1]
        self._current = self._pages.index(last)
        return last

    def last_page_unfiltered(self) -> Page:
        self._current = len(self._pages) - 1
        return self._pages[self._current]

    def is_first_page(self) -> bool:
        if not self._filtered_pages:
            return False
        return self.current_page() == self._filtered_pages[0]

    def is_last_page(self) -> bool:
        if not self._filtered_pages:
            return False
        return self.current_page() == self._filtered_pages[-1]

    def is_first_page_unfiltered(self) -> bool:
        return self._current == 0

    def is_last_page_unfiltered(self) -> bool:
        return self._current + 1 == len(self._pages)

    @override
    def __str__(self) -> str:
        return (
            f"Book(ID={self.book_id}; Title={self.title}; Pages={len(self._pages)}; "
            f"Filter={self._filter}; Current={self._current})"
        )
