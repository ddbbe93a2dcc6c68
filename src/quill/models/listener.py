"""Interface for collaborators that intercept structural changes of a Book"""

from abc import ABC, abstractmethod

from quill.models.page import Page


class BookModifiedListener(ABC):
    """
    Receives page insertion and removal requests instead of the book.

    An implementation must eventually call Book.add_page / Book.remove_page
    with the same arguments, now or later.
    """

    @abstractmethod
    def on_page_insert(self, page: Page, position: int) -> None:
        """The book wants page inserted at position"""

    @abstractmethod
    def on_page_delete(self, page: Page, position: int) -> None:
        """The book wants the page at position removed"""
