"""Tags attached to pages, and the tag sets used as page filters"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing_extensions import override

from quill.exceptions import BookLoadError
from quill.utils.data_stream import DataInputStream, DataOutputStream


@dataclass(frozen=True)
class Tag:
    """A named tag, equal to any other tag with the same name"""

    name: str

    @override
    def __str__(self) -> str:
        return self.name


class TagSet:
    """Ordered set of tags without duplicates"""

    VERSION: int = 1

    def __init__(self, manager: "TagManager", tags: Iterable[Tag] | None = None):
        self.manager: TagManager = manager
        self._tags: list[Tag] = []
        for tag in tags or []:
            self.add(tag)

    def add(self, item: "Tag | TagSet") -> None:
        """Add a tag, or every tag of another set"""
        if isinstance(item, TagSet):
            for tag in item:
                self.add(tag)
            return
        if item not in self._tags:
            self._tags.append(item)

    def remove(self, tag: Tag) -> None:
        if tag in self._tags:
            self._tags.remove(tag)

    def contains(self, tag: Tag) -> bool:
        return tag in self._tags

    def contains_all(self, other: "TagSet") -> bool:
        """True if every tag of other is also in this set"""
        return all(tag in self._tags for tag in other)

    def copy(self) -> "TagSet":
        return TagSet(self.manager, self._tags)

    def names(self) -> list[str]:
        return [tag.name for tag in self._tags]

    def write_to_stream(self, out: DataOutputStream) -> None:
        out.write_int(self.VERSION)
        out.write_int(len(self._tags))
        for tag in self._tags:
            out.write_utf(tag.name)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[Tag]:
        return iter(list(self._tags))

    def __len__(self) -> int:
        return len(self._tags)

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagSet):
            return False
        return set(self._tags) == set(other._tags)

    @override
    def __hash__(self) -> int:
        return hash(frozenset(self._tags))

    @override
    def __str__(self) -> str:
        return f"TagSet({', '.join(self.names())})"


class TagManager:
    """Registry of every tag known to a book"""

    def __init__(self):
        self._tags: dict[str, Tag] = {}

    def get_tag(self, name: str) -> Tag:
        """Return the tag with this name, creating it if needed"""
        tag = self._tags.get(name)
        if tag is None:
            tag = Tag(name)
            self._tags[name] = tag
        return tag

    def new_tag_set(self, names: Iterable[str] | None = None) -> TagSet:
        return TagSet(self, [self.get_tag(name) for name in names or []])

    def load_tag_set(self, data_in: DataInputStream) -> TagSet:
        """Decode a tag set written by TagSet.write_to_stream"""
        version = data_in.read_int()
        if version != TagSet.VERSION:
            logging.getLogger("TagManager").error("Unknown tag set version %d", version)
            raise BookLoadError(f"Unknown tag set version: {version}")
        count = data_in.read_int()
        if count < 0:
            raise BookLoadError(f"Invalid tag count: {count}")
        return self.new_tag_set([data_in.read_utf() for _ in range(count)])

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags.values())
