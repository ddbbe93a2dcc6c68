"""Errors raised by the notebook storage"""


class BookError(Exception):
    """Base class for load and save failures"""


class BookLoadError(BookError):
    """The book could not be read back from storage.

    The book being restored is in an undefined state and must be discarded.
    """


class BookSaveError(BookError):
    """The book could not be written.

    Directory saves are not atomic: some page files may already be updated.
    """


class BookIntegrityError(AssertionError):
    """A caller broke one of the invariants of the book (programming error)"""
