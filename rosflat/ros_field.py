"""A single line of a message definition: a field or a constant."""

from __future__ import annotations

import re

from .ros_type import ROSType

_TYPE_RE = re.compile(
    r"[a-zA-Z][a-zA-Z0-9_]*(/[a-zA-Z][a-zA-Z0-9_]*)?(\[[0-9]*\])?"
)
_FIELD_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*")
_ARRAY_RE = re.compile(r"(.+)(\[([0-9]*)\])")
_NON_SPACE_RE = re.compile(r"\S")
_COMMENT_RE = re.compile(r"\s*#")


class ROSField:
    """Type, name, array size and constant value of one definition line.

    ``array_size`` is 1 for scalars, -1 for arrays of variable length and
    the fixed length otherwise.  ``value`` is empty unless the line declares
    a constant.
    """

    __slots__ = ("name", "type", "array_size", "value")

    def __init__(self, definition: str) -> None:
        self.array_size = 1

        match = _TYPE_RE.search(definition)
        if match is None:
            raise ValueError(f"Bad type when parsing field: {definition}")
        type_name = match.group(0)
        pos = match.end()

        match = _FIELD_RE.search(definition, pos)
        if match is None:
            raise ValueError(f"Bad field when parsing field: {definition}")
        self.name = match.group(0)
        pos = match.end()

        array_match = _ARRAY_RE.search(type_name)
        if array_match is not None:
            size = array_match.group(3)
            type_name = array_match.group(1)
            self.array_size = int(size) if size else -1

        value = ""
        match = _NON_SPACE_RE.search(definition, pos)
        if match is not None:
            char = match.group(0)
            if char == "=":
                start = match.end()
                if type_name == "string":
                    value = definition[start:]
                else:
                    comment = _COMMENT_RE.search(definition, start)
                    end = comment.start() if comment is not None else len(definition)
                    value = definition[start:end]
                value = value.strip()
            elif char != "#":
                raise ValueError(
                    f"Unexpected character after type and field: {definition}"
                )

        self.type = ROSType(type_name)
        self.value = value

    def is_array(self) -> bool:
        """True when the field holds a fixed or variable length array."""
        return self.array_size != 1

    def is_constant(self) -> bool:
        """True when the line declares a constant rather than a field."""
        return bool(self.value)

    def __repr__(self) -> str:
        return (
            f"ROSField(type={self.type.base_name!r}, name={self.name!r}, "
            f"array_size={self.array_size}, value={self.value!r})"
        )