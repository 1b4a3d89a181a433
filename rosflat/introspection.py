"""Parsing of serialized messages into flat lists of named values."""

from __future__ import annotations

import enum
import re
import struct
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from .ros_message import ROSMessage
from .ros_type import BuiltinType, ROSType, builtin_size
from .tree import StringTree, StringTreeLeaf, TreeNode

_MSG_SEPARATION_RE = re.compile(r"^\s*=+\n+", re.MULTILINE)

_SCALARS: Dict[BuiltinType, struct.Struct] = {
    BuiltinType.BOOL: struct.Struct("<?"),
    BuiltinType.BYTE: struct.Struct("<B"),
    BuiltinType.CHAR: struct.Struct("<b"),
    BuiltinType.UINT8: struct.Struct("<B"),
    BuiltinType.UINT16: struct.Struct("<H"),
    BuiltinType.UINT32: struct.Struct("<I"),
    BuiltinType.UINT64: struct.Struct("<Q"),
    BuiltinType.INT8: struct.Struct("<b"),
    BuiltinType.INT16: struct.Struct("<h"),
    BuiltinType.INT32: struct.Struct("<i"),
    BuiltinType.INT64: struct.Struct("<q"),
    BuiltinType.FLOAT32: struct.Struct("<f"),
    BuiltinType.FLOAT64: struct.Struct("<d"),
}
_TIME = struct.Struct("<II")
_DURATION = struct.Struct("<ii")
_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")


class BlobPolicy(enum.Enum):
    """Whether blobs are copied out of the buffer or kept as views into it."""

    STORE_BLOB_AS_COPY = "copy"
    STORE_BLOB_AS_REFERENCE = "reference"


@dataclass(frozen=True)
class Variant:
    """A decoded builtin value together with its wire type."""

    type_id: BuiltinType
    value: Union[bool, int, float, str]

    def to_float(self) -> float:
        """Return the value as a float; time and duration are in seconds."""
        if isinstance(self.value, str):
            raise TypeError("a string value cannot be converted to a number")
        return float(self.value)


@dataclass
class FlatMessage:
    """All the values of one message, each with the leaf that names it."""

    tree: Optional[StringTree] = None
    value: List[Tuple[StringTreeLeaf, Variant]] = field(default_factory=list)
    name: List[Tuple[StringTreeLeaf, str]] = field(default_factory=list)
    blob: List[Tuple[StringTreeLeaf, Union[bytes, memoryview]]] = field(
        default_factory=list
    )
    complete: bool = True


@dataclass
class ROSMessageInfo:
    """The messages of one registered definition and the trees built from them."""

    type_list: List[ROSMessage] = field(default_factory=list)
    string_tree: StringTree = field(default_factory=StringTree)
    message_tree: Optional[TreeNode[ROSMessage]] = None


class _Cursor:
    """Reads little-endian values from a buffer, checking its bounds."""

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        self.data = memoryview(data).cast("B") if not isinstance(data, memoryview) else data
        self.offset = 0

    def take(self, size: int) -> memoryview:
        if size < 0 or self.offset + size > len(self.data):
            raise ValueError("Buffer overrun while reading the message")
        view = self.data[self.offset:self.offset + size]
        self.offset += size
        return view

    def unpack(self, fmt: struct.Struct) -> tuple:
        return fmt.unpack(self.take(fmt.size))

    def read_string(self) -> str:
        (size,) = self.unpack(_UINT32)
        return bytes(self.take(size)).decode("utf-8", errors="replace")

    def read_variant(self, type_id: BuiltinType) -> Variant:
        if type_id is BuiltinType.STRING:
            return Variant(type_id, self.read_string())
        if type_id is BuiltinType.TIME:
            sec, nsec = self.unpack(_TIME)
            return Variant(type_id, sec + nsec * 1e-9)
        if type_id is BuiltinType.DURATION:
            sec, nsec = self.unpack(_DURATION)
            return Variant(type_id, sec + nsec * 1e-9)
        fmt = _SCALARS.get(type_id)
        if fmt is None:
            raise ValueError(f"cannot read a value of type {type_id.value}")
        (value,) = self.unpack(fmt)
        return Variant(type_id, value)


class Parser:
    """Registry of message definitions that turns buffers into flat messages."""

    def __init__(self) -> None:
        self.discard_large_array = True
        self.blob_policy = BlobPolicy.STORE_BLOB_AS_COPY
        self._registered_messages: Dict[str, ROSMessageInfo] = {}
        self._rule_cache_dirty = True

    def register_message_definition(
        self, msg_identifier: str, main_type: ROSType, definition: str
    ) -> None:
        """Parse ``definition`` and store it under ``msg_identifier``; repeats are ignored."""
        if msg_identifier in self._registered_messages:
            return
        self._rule_cache_dirty = True

        info = ROSMessageInfo()
        for i, part in enumerate(_MSG_SEPARATION_RE.split(definition)):
            msg = ROSMessage(part)
            if i == 0:
                msg.mutate_type(main_type)
            info.type_list.append(msg)

        all_types = [msg.type for msg in info.type_list]
        for msg in info.type_list:
            msg.update_missing_pkg_names(all_types)

        self._create_trees(info, msg_identifier)
        self._registered_messages[msg_identifier] = info

    def _create_trees(self, info: ROSMessageInfo, type_name: str) -> None:
        def build(msg: ROSMessage, string_node: TreeNode[str], msg_node: TreeNode[ROSMessage]) -> None:
            for fld in msg.fields:
                if fld.is_constant():
                    continue
                new_string_node = string_node.add_child(fld.name)
                if fld.is_array():
                    new_string_node = new_string_node.add_child("#")
                if not fld.type.is_builtin():
                    next_msg = self.get_message_by_type(fld.type, info)
                    if next_msg is None:
                        raise ValueError(
                            f"This type was not registered: {fld.type.base_name}"
                        )
                    new_msg_node = msg_node.add_child(next_msg)
                    build(next_msg, new_string_node, new_msg_node)

        info.string_tree = StringTree(type_name)
        info.message_tree = TreeNode(info.type_list[0], None)
        build(info.type_list[0], info.string_tree.root, info.message_tree)

    def get_message_info(self, msg_identifier: str) -> Optional[ROSMessageInfo]:
        """Return the registered info for ``msg_identifier``, or None."""
        return self._registered_messages.get(msg_identifier)

    def get_message_by_type(self, type: ROSType, info: ROSMessageInfo) -> Optional[ROSMessage]:
        """Return the message of ``info`` whose type is ``type``, or None."""
        for msg in info.type_list:
            if msg.type == type:
                return msg
        return None

    def _require_info(self, msg_identifier: str) -> ROSMessageInfo:
        info = self.get_message_info(msg_identifier)
        if info is None:
            raise KeyError(
                f"{msg_identifier!r} not registered. Use register_message_definition"
            )
        return info

    def apply_visitor_to_buffer(
        self,
        msg_identifier: str,
        monitored_type: ROSType,
        buffer: Union[bytes, bytearray, memoryview],
        callback: Callable[[ROSType, memoryview], None],
    ) -> None:
        """Call ``callback`` with the bytes of every sub-message of ``monitored_type``."""
        info = self._require_info(msg_identifier)
        if self.get_message_by_type(monitored_type, info) is None:
            return
        cursor = _Cursor(buffer)

        def visit(msg_node: TreeNode[ROSMessage]) -> None:
            msg = msg_node.value
            start = cursor.offset
            index_m = 0
            for fld in msg.fields:
                if fld.is_constant():
                    continue
                array_size = fld.array_size
                if array_size == -1:
                    (array_size,) = cursor.unpack(_INT32)
                if fld.type.is_builtin():
                    for _ in range(array_size):
                        cursor.read_variant(fld.type.type_id)
                else:
                    for _ in range(array_size):
                        visit(msg_node.child(index_m))
                    index_m += 1
            if msg.type == monitored_type:
                callback(monitored_type, cursor.data[start:cursor.offset])

        visit(info.message_tree)

    def deserialize_into_flat_container(
        self,
        msg_identifier: str,
        buffer: Union[bytes, bytearray, memoryview],
        max_array_size: int,
    ) -> FlatMessage:
        """Decode ``buffer`` into a FlatMessage.

        ``complete`` on the result is False when an array longer than
        ``max_array_size`` was not stored in full.
        """
        info = self._require_info(msg_identifier)
        cursor = _Cursor(buffer)
        flat = FlatMessage(tree=info.string_tree)
        copy_blobs = self.blob_policy is BlobPolicy.STORE_BLOB_AS_COPY

        def walk(msg_node: TreeNode[ROSMessage], leaf: StringTreeLeaf, store: bool) -> None:
            index_s = 0
            index_m = 0
            for fld in msg_node.value.fields:
                if fld.is_constant():
                    continue
                do_store = store
                type_id = fld.type.type_id
                new_leaf = StringTreeLeaf(leaf.node.child(index_s), list(leaf.index_array))

                array_size = fld.array_size
                if array_size == -1:
                    (array_size,) = cursor.unpack(_INT32)
                if fld.is_array():
                    new_leaf.index_array.append(0)
                    new_leaf.node = new_leaf.node.child(0)

                is_blob = False
                if array_size > max_array_size and type_id is not BuiltinType.OTHER:
                    if builtin_size(type_id) == 1:
                        is_blob = True
                    else:
                        if self.discard_large_array:
                            do_store = False
                        flat.complete = False

                if is_blob:
                    raw = cursor.take(array_size)
                    if do_store:
                        flat.blob.append((new_leaf.copy(), bytes(raw) if copy_blobs else raw))
                else:
                    store_array = do_store
                    for i in range(array_size):
                        if store_array and i >= max_array_size:
                            store_array = False
                        if fld.is_array() and store_array:
                            new_leaf.index_array[-1] = i
                        if type_id is BuiltinType.STRING:
                            text = cursor.read_string()
                            if store_array:
                                flat.name.append((new_leaf.copy(), text))
                        elif fld.type.is_builtin():
                            var = cursor.read_variant(type_id)
                            if store_array:
                                flat.value.append((new_leaf.copy(), var))
                        else:
                            walk(msg_node.child(index_m), new_leaf, store_array)

                if type_id is BuiltinType.OTHER:
                    index_m += 1
                index_s += 1

        walk(info.message_tree, StringTreeLeaf(info.string_tree.root, []), True)

        # messages produced by some serial bridges carry one extra byte
        if len(cursor.data) - cursor.offset > 1:
            raise ValueError(
                "There was an error parsing the buffer. "
                f"Size {cursor.offset} != {len(cursor.data)}, while parsing [{msg_identifier}]"
            )
        return flat