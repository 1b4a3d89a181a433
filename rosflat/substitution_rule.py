"""Rules that rename array elements after the value of a sibling string."""

from __future__ import annotations

from typing import List, Tuple


def str_split(text: str, delimiters: str) -> List[str]:
    """Split ``text`` at every character found in ``delimiters``, keeping empty parts."""
    parts: List[str] = []
    current: List[str] = []
    for char in text:
        if char in delimiters:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


_DELIMITERS = "./"


class SubstitutionRule:
    """A pattern to rename, the alias holding the new name, and the result shape."""

    __slots__ = (
        "full_pattern",
        "full_alias",
        "full_substitution",
        "pattern",
        "alias",
        "substitution",
    )

    def __init__(self, pattern: str, alias: str, substitution: str) -> None:
        self.full_pattern = pattern
        self.full_alias = alias
        self.full_substitution = substitution
        self.pattern: Tuple[str, ...] = tuple(str_split(pattern, _DELIMITERS))
        self.alias: Tuple[str, ...] = tuple(str_split(alias, _DELIMITERS))
        self.substitution: Tuple[str, ...] = tuple(str_split(substitution, _DELIMITERS))

    def _key(self) -> Tuple[str, str, str]:
        return (self.full_pattern, self.full_alias, self.full_substitution)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SubstitutionRule):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"SubstitutionRule({self.full_pattern!r}, {self.full_alias!r}, "
            f"{self.full_substitution!r})"
        )