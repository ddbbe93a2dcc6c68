"""
Represents a Page inside a Book
"""

import logging
import uuid
from enum import Enum
from typing import Any, cast

import msgpack
from typing_extensions import override

from quill.config import settings
from quill.exceptions import BookLoadError
from quill.models.stroke import Stroke
from quill.models.tags import TagManager, TagSet
from quill.utils.data_stream import DataInputStream, DataOutputStream


class PaperType(Enum):
    """Background printed on the page"""

    PLAIN = "plain"
    RULED = "ruled"
    QUAD = "quad"
    HEX = "hex"


class Page:
    """
    Represents a Page inside a Book.

    Pages are compared by identity only; a copy made from a template is a
    different page even if it has the same content.
    """

    VERSION: int = 1

    def __init__(
        self,
        tag_manager: TagManager,
        page_id: str | None = None,
        tags: TagSet | None = None,
        paper_type: PaperType | None = None,
        aspect_ratio: float | None = None,
        strokes: list[Stroke] | None = None,
    ):
        self.tag_manager: TagManager = tag_manager
        self.page_id: str = page_id or str(uuid.uuid4())
        self.tags: TagSet = tags if tags is not None else tag_manager.new_tag_set()
        self.paper_type: PaperType = paper_type or PaperType(settings.DEFAULT_PAPER_TYPE)
        self.aspect_ratio: float = (
            aspect_ratio if aspect_ratio is not None else settings.DEFAULT_ASPECT_RATIO
        )
        self.strokes: list[Stroke] = strokes if strokes is not None else []
        # New pages have never been written
        self.modified: bool = True

    @classmethod
    def from_template(cls, template: "Page") -> "Page":
        """A blank page with the tags and paper of the template"""
        return cls(
            template.tag_manager,
            tags=template.tags.copy(),
            paper_type=template.paper_type,
            aspect_ratio=template.aspect_ratio,
        )

    @classmethod
    def duplicate(cls, original: "Page") -> "Page":
        """A new page with the same tags, paper and strokes"""
        page = cls.from_template(original)
        page.strokes.extend(
            Stroke.from_dict(stroke.to_dict()) for stroke in original.strokes
        )
        return page

    def is_empty(self) -> bool:
        return not self.strokes

    def is_modified(self) -> bool:
        return self.modified

    def touch(self) -> None:
        """Mark the page so that it is written on the next save"""
        self.modified = True

    def mark_saved(self) -> None:
        self.modified = False

    def add_stroke(self, stroke: Stroke) -> None:
        self.strokes.append(stroke)
        self.touch()

    def clear(self) -> None:
        self.strokes.clear()
        self.touch()

    def write_to_stream(self, out: DataOutputStream) -> None:
        """Encode the page; the modified flag is left to the caller"""
        out.write_int(self.VERSION)
        out.write_utf(self.page_id)
        out.write_utf(self.paper_type.value)
        out.write_double(self.aspect_ratio)
        self.tags.write_to_stream(out)
        payload = cast(
            bytes,
            msgpack.packb([stroke.to_dict() for stroke in self.strokes], use_bin_type=True),
        )
        out.write_bytes(payload)

    @classmethod
    def from_stream(cls, data_in: DataInputStream, tag_manager: TagManager) -> "Page":
        """Decode a page written by write_to_stream"""
        version = data_in.read_int()
        if version != cls.VERSION:
            logging.getLogger("Page").error("Unknown page version %d", version)
            raise BookLoadError(f"Unknown page version: {version}")
        page_id = data_in.read_utf()
        paper_type = PaperType(data_in.read_utf())
        aspect_ratio = data_in.read_double()
        tags = tag_manager.load_tag_set(data_in)
        strokes_data = cast(
            list[dict[str, Any]], msgpack.unpackb(data_in.read_bytes(), raw=False)
        )
        try:
            strokes = [Stroke.from_dict(stroke) for stroke in strokes_data]
        except (IndexError, KeyError, AttributeError, TypeError, ValueError) as e:
            logging.getLogger("Page").error("Malformed strokes in page %s: %s", page_id, e)
            raise BookLoadError(f"Malformed strokes in page {page_id}: {e}") from e
        page = cls(
            tag_manager,
            page_id=page_id,
            tags=tags,
            paper_type=paper_type,
            aspect_ratio=aspect_ratio,
            strokes=strokes,
        )
        page.mark_saved()
        return page

    @override
    def __str__(self) -> str:
        return f"Page(ID={self.page_id}; Strokes={len(self.strokes)}; Tags={self.tags})"

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Page):
            return False
        return self.page_id == other.page_id

    @override
    def __hash__(self) -> int:
        return hash(self.page_id)
