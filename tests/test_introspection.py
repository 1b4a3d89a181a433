import struct

import pytest

from rosflat.introspection import BlobPolicy, Parser, Variant
from rosflat.ros_type import BuiltinType, ROSType
from rosflat.tree import create_string_from_tree_leaf

SEP = "=" * 80 + "\n"

DEFINITION = (
    "Header header\n"
    "int32 LIMIT = 7\n"
    "float64[] data\n"
    "string label\n"
    + SEP
    + "MSG: std_msgs/Header\n"
    "uint32 seq\n"
    "time stamp\n"
    "string frame_id\n"
)


def _string(text):
    raw = text.encode()
    return struct.pack("<I", len(raw)) + raw


def _header(seq, sec, nsec, frame):
    return struct.pack("<III", seq, sec, nsec) + _string(frame)


def _sample(data, label="lbl"):
    return (
        _header(3, 5, 500000000, "map")
        + struct.pack("<i", len(data))
        + b"".join(struct.pack("<d", d) for d in data)
        + _string(label)
    )


@pytest.fixture
def parser():
    p = Parser()
    p.register_message_definition("sample", ROSType("pkg/Sample"), DEFINITION)
    return p


def _names(entries):
    return [str(leaf) for leaf, _ in entries]


def test_flat_values_names_and_order(parser):
    flat = parser.deserialize_into_flat_container("sample", _sample([1.5, -2.0]), 100)
    assert _names(flat.value) == [
        "sample/header/seq",
        "sample/header/stamp",
        "sample/data.0",
        "sample/data.1",
    ]
    assert [v.value for _, v in flat.value] == [3, 5.5, 1.5, -2.0]
    assert flat.value[1][1].type_id is BuiltinType.TIME
    assert flat.complete is True


def test_strings_are_collected(parser):
    flat = parser.deserialize_into_flat_container("sample", _sample([], "hello"), 100)
    assert [(str(leaf), text) for leaf, text in flat.name] == [
        ("sample/header/frame_id", "map"),
        ("sample/label", "hello"),
    ]


def test_skip_root_name(parser):
    flat = parser.deserialize_into_flat_container("sample", _sample([4.0]), 100)
    leaf = flat.value[2][0]
    assert create_string_from_tree_leaf(leaf, True) == "data.0"


def test_missing_package_is_resolved(parser):
    info = parser.get_message_info("sample")
    header_field = info.type_list[0].fields[0]
    assert header_field.type == ROSType("std_msgs/Header")
    assert parser.get_message_by_type(ROSType("std_msgs/Header"), info) is info.type_list[1]
    assert parser.get_message_by_type(ROSType("std_msgs/Other"), info) is None


def test_constants_not_in_tree(parser):
    info = parser.get_message_info("sample")
    names = [child.value for child in info.string_tree.root.children]
    assert names == ["header", "data", "label"]


def test_large_numeric_array_is_discarded(parser):
    flat = parser.deserialize_into_flat_container("sample", _sample([1.0, 2.0, 3.0]), 2)
    assert flat.complete is False
    assert _names(flat.value) == ["sample/header/seq", "sample/header/stamp"]
    assert _names(flat.name) == ["sample/header/frame_id", "sample/label"]


def test_large_array_kept_partially_when_not_discarding(parser):
    parser.discard_large_array = False
    flat = parser.deserialize_into_flat_container("sample", _sample([1.0, 2.0, 3.0]), 2)
    assert flat.complete is False
    assert _names(flat.value)[2:] == ["sample/data.0", "sample/data.1"]


def test_byte_array_becomes_blob():
    p = Parser()
    p.register_message_definition("img", ROSType("pkg/Image"), "uint8[] pixels\nuint8 tail\n")
    payload = bytes(range(10))
    buffer = struct.pack("<i", len(payload)) + payload + b"\x09"
    flat = p.deserialize_into_flat_container("img", buffer, 4)
    assert len(flat.blob) == 1
    leaf, blob = flat.blob[0]
    assert bytes(blob) == payload
    assert str(leaf) == "img/pixels.0"
    assert [v.value for _, v in flat.value] == [9]
    assert flat.complete is True


def test_blob_as_reference_is_view():
    p = Parser()
    p.blob_policy = BlobPolicy.STORE_BLOB_AS_REFERENCE
    p.register_message_definition("img", ROSType("pkg/Image"), "uint8[] pixels\n")
    payload = b"abcdef"
    flat = p.deserialize_into_flat_container("img", struct.pack("<i", 6) + payload, 2)
    blob = flat.blob[0][1]
    assert isinstance(blob, memoryview)
    assert blob.tobytes() == payload


def test_fixed_array_of_messages():
    p = Parser()
    definition = "Point[2] pts\n" + SEP + "MSG: geo/Point\nfloat32 x\n"
    p.register_message_definition("path", ROSType("geo/Path"), definition)
    buffer = struct.pack("<ff", 1.0, 2.0)
    flat = p.deserialize_into_flat_container("path", buffer, 100)
    assert [(str(leaf), v.value) for leaf, v in flat.value] == [
        ("path/pts.0/x", 1.0),
        ("path/pts.1/x", 2.0),
    ]


def test_one_extra_byte_is_tolerated(parser):
    flat = parser.deserialize_into_flat_container("sample", _sample([1.0]) + b"\x00", 100)
    assert len(flat.value) == 3


def test_trailing_bytes_raise(parser):
    with pytest.raises(ValueError):
        parser.deserialize_into_flat_container("sample", _sample([1.0]) + b"\x00\x00", 100)


def test_truncated_buffer_raises(parser):
    with pytest.raises(ValueError):
        parser.deserialize_into_flat_container("sample", _sample([1.0])[:-2], 100)


def test_unregistered_identifier_raises(parser):
    with pytest.raises(KeyError):
        parser.deserialize_into_flat_container("unknown", b"", 100)


def test_unknown_nested_type_raises():
    p = Parser()
    with pytest.raises(ValueError):
        p.register_message_definition("x", ROSType("pkg/X"), "pkg/Missing m\n")


def test_second_registration_ignored(parser):
    parser.register_message_definition("sample", ROSType("pkg/Other"), "int8 a\n")
    info = parser.get_message_info("sample")
    assert info.type_list[0].type == ROSType("pkg/Sample")


def test_visitor_sees_header_bytes(parser):
    seen = []
    parser.apply_visitor_to_buffer(
        "sample",
        ROSType("std_msgs/Header"),
        _sample([1.0]),
        lambda t, view: seen.append((t, bytes(view))),
    )
    assert seen == [(ROSType("std_msgs/Header"), _header(3, 5, 500000000, "map"))]


def test_visitor_skips_absent_type(parser):
    seen = []
    parser.apply_visitor_to_buffer(
        "sample", ROSType("geo/Point"), _sample([]), lambda t, v: seen.append(t)
    )
    assert seen == []


def test_variant_to_float():
    assert Variant(BuiltinType.BOOL, True).to_float() == 1.0
    with pytest.raises(TypeError):
        Variant(BuiltinType.STRING, "abc").to_float()