"""Binary index record of a book: metadata, page order and filter"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from quill.config import settings
from quill.exceptions import BookLoadError
from quill.models.book import Book, now
from quill.models.tags import TagManager, TagSet
from quill.utils.data_stream import DataInputStream, DataOutputStream


@dataclass
class BookIndex:
    """
    Everything stored about a book besides the pages themselves.

    Records of old versions are normalized on decoding: fields they lack are
    filled with defaults, and page_ids is empty before version 4.
    """

    page_count: int
    current_page: int
    title: str
    created_at: float
    modified_at: float
    book_id: str
    page_filter: TagSet
    page_ids: list[str] = field(default_factory=list)
    version: int = 4

    @classmethod
    def from_book(cls, book: Book) -> "BookIndex":
        pages = book.pages
        return cls(
            page_count=len(pages),
            current_page=book.current_page_index,
            title=book.title,
            created_at=book.created_at,
            modified_at=book.modified_at,
            book_id=book.book_id,
            page_filter=book.filter,
            page_ids=[page.page_id for page in pages],
        )


def _to_millis(timestamp: float) -> int:
    return int(round(timestamp * 1000))


def _from_millis(millis: int) -> float:
    return millis / 1000


def _read_uuid(data_in: DataInputStream) -> str:
    value = data_in.read_utf()
    return str(uuid.UUID(value))


def _read_page_count(data_in: DataInputStream) -> int:
    count = data_in.read_int()
    if count < 0:
        raise BookLoadError(f"Invalid page count: {count}")
    return count


def _imported(version: int, page_count: int, current_page: int, page_filter: TagSet) -> BookIndex:
    """Defaults for records written before books had a title, times and id"""
    timestamp = now()
    return BookIndex(
        page_count=page_count,
        current_page=current_page,
        title=settings.IMPORTED_TITLE_TEMPLATE.format(version=version),
        created_at=timestamp,
        modified_at=timestamp,
        book_id=str(uuid.uuid4()),
        page_filter=page_filter,
        version=version,
    )


def _decode_v4(data_in: DataInputStream, tag_manager: TagManager) -> BookIndex:
    page_count = _read_page_count(data_in)
    page_ids = [_read_uuid(data_in) for _ in range(page_count)]
    current_page = data_in.read_int()
    title = data_in.read_utf()
    created_at = _from_millis(data_in.read_long())
    modified_at = _from_millis(data_in.read_long())
    book_id = _read_uuid(data_in)
    return BookIndex(
        page_count=page_count,
        current_page=current_page,
        title=title,
        created_at=created_at,
        modified_at=modified_at,
        book_id=book_id,
        page_filter=tag_manager.load_tag_set(data_in),
        page_ids=page_ids,
        version=4,
    )


def _decode_v3(data_in: DataInputStream, tag_manager: TagManager) -> BookIndex:
    page_count = _read_page_count(data_in)
    current_page = data_in.read_int()
    title = data_in.read_utf()
    created_at = _from_millis(data_in.read_long())
    modified_at = _from_millis(data_in.read_long())
    book_id = _read_uuid(data_in)
    return BookIndex(
        page_count=page_count,
        current_page=current_page,
        title=title,
        created_at=created_at,
        modified_at=modified_at,
        book_id=book_id,
        page_filter=tag_manager.load_tag_set(data_in),
        version=3,
    )


def _decode_v2(data_in: DataInputStream, tag_manager: TagManager) -> BookIndex:
    page_count = _read_page_count(data_in)
    current_page = data_in.read_int()
    return _imported(2, page_count, current_page, tag_manager.load_tag_set(data_in))


def _decode_v1(data_in: DataInputStream, tag_manager: TagManager) -> BookIndex:
    page_count = _read_page_count(data_in)
    current_page = data_in.read_int()
    return _imported(1, page_count, current_page, tag_manager.new_tag_set())


class IndexCodec:
    """Writes the current index version and reads all historical ones"""

    VERSION: int = 4

    DECODERS: dict[int, Callable[[DataInputStream, TagManager], BookIndex]] = {
        4: _decode_v4,
        3: _decode_v3,
        2: _decode_v2,
        1: _decode_v1,
    }

    @staticmethod
    def encode(index: BookIndex, out: DataOutputStream) -> None:
        logging.getLogger("IndexCodec").debug(
            "Saving book index with %d pages", index.page_count
        )
        out.write_int(IndexCodec.VERSION)
        out.write_int(len(index.page_ids))
        for page_id in index.page_ids:
            out.write_utf(page_id)
        out.write_int(index.current_page)
        out.write_utf(index.title)
        out.write_long(_to_millis(index.created_at))
        out.write_long(_to_millis(index.modified_at))
        out.write_utf(index.book_id)
        index.page_filter.write_to_stream(out)

    @staticmethod
    def decode(data_in: DataInputStream, tag_manager: TagManager) -> BookIndex:
        """Read an index record of any known version"""
        version = data_in.read_int()
        decoder = IndexCodec.DECODERS.get(version)
        if decoder is None:
            logging.getLogger("IndexCodec").error("Unknown index version %d", version)
            raise BookLoadError(f"Unknown version in book index: {version}")
        logging.getLogger("IndexCodec").debug("Loading book index version %d", version)
        return decoder(data_in, tag_manager)
