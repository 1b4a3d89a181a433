"""A message definition: its type and its list of fields."""

from __future__ import annotations

import re
from typing import Iterable, List

from .ros_field import ROSField
from .ros_type import ROSType

_SKIP_LINE_RE = re.compile(r"(^\s*$|^\s*#)")
_MSG_PREFIX = "MSG: "


class ROSMessage:
    """Fields of one message, parsed from its text definition."""

    __slots__ = ("type", "fields")

    def __init__(self, definition: str) -> None:
        self.type = ROSType("")
        self.fields: List[ROSField] = []
        for line in definition.split("\n"):
            if _SKIP_LINE_RE.search(line):
                continue
            line = line.lstrip()
            if line.startswith(_MSG_PREFIX):
                self.type = ROSType(line[len(_MSG_PREFIX):])
            else:
                self.fields.append(ROSField(line))

    def mutate_type(self, new_type: ROSType) -> None:
        """Replace the type of this message."""
        self.type = new_type

    def update_missing_pkg_names(self, all_types: Iterable[ROSType]) -> None:
        """Give each field named without a package the package of a known type."""
        known = list(all_types)
        for field in self.fields:
            if field.type.pkg_name:
                continue
            for known_type in known:
                if field.type.msg_name == known_type.msg_name:
                    if known_type.pkg_name:
                        field.type.set_pkg_name(known_type.pkg_name)
                    break

    def __repr__(self) -> str:
        return f"ROSMessage({self.type.base_name!r}, fields={len(self.fields)})"