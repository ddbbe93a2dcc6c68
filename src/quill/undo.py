"""Undo and redo of page insertions and deletions"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing_extensions import override

from quill.config import settings
from quill.models.book import Book
from quill.models.listener import BookModifiedListener
from quill.models.page import Page


class CommandType(Enum):
    INSERT = "insert"
    DELETE = "delete"


@dataclass
class PageCommand:
    """A recorded structural change of the book"""

    command_type: CommandType
    page: Page
    position: int

    def apply(self, book: Book) -> None:
        if self.command_type is CommandType.INSERT:
            book.add_page(self.page, self.position)
        else:
            book.remove_page(self.page, self.position)

    def revert(self, book: Book) -> None:
        if self.command_type is CommandType.INSERT:
            book.remove_page(self.page, self.position)
        else:
            book.add_page(self.page, self.position)


class UndoManager(BookModifiedListener):
    """
    Records every page insertion and removal requested by the book, applies
    it, and lets the caller step back and forth through the history.
    """

    def __init__(self, book: Book, limit: int | None = None):
        self.book: Book = book
        self.limit: int = limit if limit is not None else settings.UNDO_LIMIT
        self._undo_stack: list[PageCommand] = []
        self._redo_stack: list[PageCommand] = []
        self.logger: logging.Logger = logging.getLogger("UndoManager")
        book.set_on_book_modified_listener(self)

    def detach(self) -> None:
        """Let the book apply its changes directly again"""
        self.book.set_on_book_modified_listener(None)

    @override
    def on_page_insert(self, page: Page, position: int) -> None:
        self._execute(PageCommand(CommandType.INSERT, page, position))

    @override
    def on_page_delete(self, page: Page, position: int) -> None:
        self._execute(PageCommand(CommandType.DELETE, page, position))

    def _execute(self, command: PageCommand) -> None:
        command.apply(self.book)
        self._undo_stack.append(command)
        if len(self._undo_stack) > self.limit:
            del self._undo_stack[0]
        self._redo_stack.clear()
        self.logger.debug(
            "Recorded %s of page %s at %d",
            command.command_type.value,
            command.page.page_id,
            command.position,
        )

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def undo(self) -> bool:
        """Revert the last change, returns False if there was nothing to undo"""
        if not self._undo_stack:
            return False
        command = self._undo_stack.pop()
        command.revert(self.book)
        self._redo_stack.append(command)
        return True

    def redo(self) -> bool:
        """Apply the last undone change again"""
        if not self._redo_stack:
            return False
        command = self._redo_stack.pop()
        command.apply(self.book)
        self._undo_stack.append(command)
        return True

    def clear(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()
