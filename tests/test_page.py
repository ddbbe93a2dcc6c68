"""Tests for the Page model and its binary record"""

import io
import uuid

import msgpack
import pytest

from quill.exceptions import BookLoadError
from quill.models.page import Page, PaperType
from quill.models.stroke import Point, Stroke
from quill.models.tags import TagManager
from quill.utils.data_stream import DataInputStream, DataOutputStream


def _stroke() -> Stroke:
    return Stroke(
        points=[Point(1.5, 2.5, 0.5), Point(3.0, 4.0)], color="blue", thickness=2.0
    )


def test_new_page_is_empty_and_modified():
    page = Page(TagManager())
    assert page.is_empty()
    assert page.is_modified()


def test_pages_compare_by_id():
    manager = TagManager()
    page = Page(manager)
    assert page == Page(manager, page_id=page.page_id)
    assert page != Page(manager)


def test_from_template_copies_paper_and_tags_but_not_strokes():
    manager = TagManager()
    template = Page(
        manager,
        tags=manager.new_tag_set(["x"]),
        paper_type=PaperType.QUAD,
        aspect_ratio=0.5,
        strokes=[_stroke()],
    )
    page = Page.from_template(template)

    assert page.page_id != template.page_id
    assert page.paper_type is PaperType.QUAD
    assert page.aspect_ratio == 0.5
    assert page.tags.names() == ["x"]
    assert page.is_empty()

    page.tags.add(manager.get_tag("y"))
    assert template.tags.names() == ["x"]


def test_duplicate_copies_strokes():
    manager = TagManager()
    original = Page(manager, strokes=[_stroke()])
    copy = Page.duplicate(original)

    assert copy.page_id != original.page_id
    assert [s.to_dict() for s in copy.strokes] == [s.to_dict() for s in original.strokes]
    copy.strokes[0].points.append(Point(9, 9))
    assert len(original.strokes[0].points) == 2


def test_add_stroke_touches_page():
    page = Page(TagManager())
    page.mark_saved()
    page.add_stroke(_stroke())
    assert page.is_modified()
    assert not page.is_empty()


def test_stream_roundtrip():
    manager = TagManager()
    page = Page(
        manager,
        tags=manager.new_tag_set(["a", "b"]),
        paper_type=PaperType.HEX,
        aspect_ratio=0.75,
        strokes=[_stroke()],
    )
    buffer = io.BytesIO()
    page.write_to_stream(DataOutputStream(buffer))
    assert page.is_modified()

    loaded = Page.from_stream(DataInputStream(io.BytesIO(buffer.getvalue())), TagManager())

    assert loaded == page
    assert not loaded.is_modified()
    assert loaded.paper_type is PaperType.HEX
    assert loaded.aspect_ratio == 0.75
    assert loaded.tags.names() == ["a", "b"]
    assert loaded.strokes[0] == page.strokes[0]


def test_records_are_self_delimiting():
    manager = TagManager()
    first = Page(manager, strokes=[_stroke()])
    second = Page(manager)
    buffer = io.BytesIO()
    out = DataOutputStream(buffer)
    first.write_to_stream(out)
    second.write_to_stream(out)

    data_in = DataInputStream(io.BytesIO(buffer.getvalue()))
    assert Page.from_stream(data_in, manager) == first
    assert Page.from_stream(data_in, manager) == second


def test_unknown_page_version_fails():
    buffer = io.BytesIO()
    DataOutputStream(buffer).write_int(99)
    with pytest.raises(BookLoadError):
        _ = Page.from_stream(DataInputStream(io.BytesIO(buffer.getvalue())), TagManager())


def test_truncated_page_raises_eof():
    buffer = io.BytesIO()
    Page(TagManager(), strokes=[_stroke()]).write_to_stream(DataOutputStream(buffer))
    with pytest.raises(EOFError):
        _ = Page.from_stream(
            DataInputStream(io.BytesIO(buffer.getvalue()[:-3])), TagManager()
        )


def _record_with_strokes(payload: object) -> bytes:
    buffer = io.BytesIO()
    out = DataOutputStream(buffer)
    out.write_int(Page.VERSION)
    out.write_utf(str(uuid.uuid4()))
    out.write_utf(PaperType.RULED.value)
    out.write_double(1.0)
    TagManager().new_tag_set().write_to_stream(out)
    out.write_bytes(msgpack.packb(payload, use_bin_type=True))
    return buffer.getvalue()


@pytest.mark.parametrize(
    "payload",
    [
        [{"points": [[]]}],
        [{"points": [[1.0]]}],
        [{"points": [["left", 2.0, 1.0]]}],
        [1, 2],
        {"points": []},
        7,
    ],
)
def test_malformed_strokes_fail_to_load(payload: object):
    with pytest.raises(BookLoadError):
        _ = Page.from_stream(
            DataInputStream(io.BytesIO(_record_with_strokes(payload))), TagManager()
        )


def test_stroke_dict_uses_floats():
    stroke = Stroke(points=[Point(1, 2)], thickness=3)
    data = stroke.to_dict()
    assert data["points"] == [[1.0, 2.0, 1.0]]
    assert all(isinstance(value, float) for value in data["points"][0])
    assert isinstance(data["thickness"], float)


def test_reencoding_loaded_page_gives_same_bytes():
    page = Page(TagManager(), strokes=[Stroke(points=[Point(4, 8), Point(5, 9, 0.5)])])
    first = io.BytesIO()
    page.write_to_stream(DataOutputStream(first))

    loaded = Page.from_stream(DataInputStream(io.BytesIO(first.getvalue())), TagManager())
    second = io.BytesIO()
    loaded.write_to_stream(DataOutputStream(second))

    assert second.getvalue() == first.getvalue()
