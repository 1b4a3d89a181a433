"""Named time series and the map that holds them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Tuple

Point = Tuple[float, Any]


class PlotSeries:
    """An ordered list of (timestamp, value) points under one name."""

    __slots__ = ("name", "_points")

    def __init__(self, name: str) -> None:
        self.name = name
        self._points: List[Point] = []

    def push_back(self, point: Tuple[float, Any]) -> None:
        """Append a (timestamp, value) pair."""
        x, y = point
        self._points.append((x, y))

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __repr__(self) -> str:
        return f"PlotSeries({self.name!r}, points={len(self._points)})"


class PlotDataMap:
    """Numeric and string series, each looked up by name."""

    def __init__(self) -> None:
        self.numeric: Dict[str, PlotSeries] = {}
        self.strings: Dict[str, PlotSeries] = {}

    def get_or_create_numeric(self, name: str) -> PlotSeries:
        """Return the numeric series called ``name``, creating it if needed."""
        series = self.numeric.get(name)
        if series is None:
            series = self.numeric[name] = PlotSeries(name)
        return series

    def get_or_create_string_series(self, name: str) -> PlotSeries:
        """Return the string series called ``name``, creating it if needed."""
        series = self.strings.get(name)
        if series is None:
            series = self.strings[name] = PlotSeries(name)
        return series


@dataclass
class ParserConfig:
    """Options shared by the message parsers."""

    use_header_stamp: bool = False
    max_array_size: int = 100
    discard_large_arrays: bool = True
    remove_suffix_from_strings: bool = False
    boolean_strings_to_number: bool = False