"""The models used to represent a notebook at a high level"""

__all__ = [
    "Book",
    "BookDAO",
    "ArchiveDAO",
    "BookModifiedListener",
    "Page",
    "PaperType",
    "Point",
    "Stroke",
    "Tag",
    "TagManager",
    "TagSet",
]

from .stroke import Point, Stroke
from .tags import Tag, TagManager, TagSet
from .page import Page, PaperType
from .listener import BookModifiedListener
from .book import Book
from .dao.book_dao import BookDAO
from .dao.archive_dao import ArchiveDAO
