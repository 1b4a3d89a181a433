"""Names of message types and the builtin types of the wire format."""

from __future__ import annotations

import enum
from typing import Optional


class BuiltinType(enum.Enum):
    """Primitive field types; OTHER stands for a nested message."""

    BOOL = "bool"
    BYTE = "byte"
    CHAR = "char"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TIME = "time"
    DURATION = "duration"
    STRING = "string"
    OTHER = "other"


_BY_NAME = {t.value: t for t in BuiltinType if t is not BuiltinType.OTHER}

_SIZES = {
    BuiltinType.BOOL: 1,
    BuiltinType.BYTE: 1,
    BuiltinType.CHAR: 1,
    BuiltinType.UINT8: 1,
    BuiltinType.UINT16: 2,
    BuiltinType.UINT32: 4,
    BuiltinType.UINT64: 8,
    BuiltinType.INT8: 1,
    BuiltinType.INT16: 2,
    BuiltinType.INT32: 4,
    BuiltinType.INT64: 8,
    BuiltinType.FLOAT32: 4,
    BuiltinType.FLOAT64: 8,
    BuiltinType.TIME: 8,
    BuiltinType.DURATION: 8,
}


def to_builtin_type(name: str) -> BuiltinType:
    """Map a type name such as ``float64`` to its BuiltinType, or OTHER."""
    return _BY_NAME.get(name, BuiltinType.OTHER)


def builtin_size(type_id: BuiltinType) -> Optional[int]:
    """Serialized size in bytes, or None for strings and nested messages."""
    return _SIZES.get(type_id)


class ROSType:
    """A message type name split into package and message parts."""

    __slots__ = ("base_name", "pkg_name", "msg_name", "type_id")

    def __init__(self, name: str) -> None:
        self.base_name = name
        pkg, sep, msg = name.partition("/")
        if sep:
            self.pkg_name = pkg
            self.msg_name = msg
        else:
            self.pkg_name = ""
            self.msg_name = name
        self.type_id = to_builtin_type(self.msg_name)

    def set_pkg_name(self, pkg: str) -> None:
        """Give a package to a type that was named without one."""
        if self.pkg_name:
            raise ValueError(f"type {self.base_name!r} already has a package")
        self.pkg_name = pkg
        self.base_name = f"{pkg}/{self.base_name}"

    def is_builtin(self) -> bool:
        """True for primitive types, False for nested messages."""
        return self.type_id is not BuiltinType.OTHER

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ROSType):
            return NotImplemented
        return self.base_name == other.base_name

    def __hash__(self) -> int:
        return hash(self.base_name)

    def __str__(self) -> str:
        return self.base_name

    def __repr__(self) -> str:
        return f"ROSType({self.base_name!r})"