"""Base classes of the message parsers and the generic introspection parser."""

from __future__ import annotations

import abc
import math
import re
import struct
from typing import Any, List, Optional, Union

from .plotdata import ParserConfig, PlotDataMap, PlotSeries
from .renaming import RenamingParser
from .ros_type import BuiltinType, ROSType

_LEADING_NUMBER_RE = re.compile(r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

_FORMATS = {
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


def parse_double(
    text: str, remove_suffix: bool = False, bool_to_number: bool = False
) -> Optional[float]:
    """Read a number from ``text``, or return None when it holds none.

    With ``bool_to_number`` the words true and false count as 1 and 0; with
    ``remove_suffix`` trailing text after a leading number is ignored.
    """
    if "_" not in text:
        try:
            return float(text)
        except ValueError:
            pass
    if bool_to_number:
        word = text.strip().lower()
        if word == "true":
            return 1.0
        if word == "false":
            return 0.0
    if remove_suffix:
        match = _LEADING_NUMBER_RE.match(text)
        if match is not None:
            return float(match.group(0))
    return None


class WireReader:
    """Reads little-endian builtin values from a serialized message."""

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        self._data = bytes(data)
        self._offset = 0

    @property
    def offset(self) -> int:
        """Number of bytes read so far."""
        return self._offset

    @property
    def remaining(self) -> int:
        """Number of bytes not read yet."""
        return len(self._data) - self._offset

    def _take(self, size: int) -> bytes:
        if size < 0 or self._offset + size > len(self._data):
            raise ValueError("Buffer overrun while reading the message")
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def read(self, type_id: BuiltinType) -> Any:
        """Read one value; time and duration come back as seconds."""
        if type_id is BuiltinType.STRING:
            return self.read_string()
        if type_id is BuiltinType.TIME:
            sec, nsec = _TIME.unpack(self._take(_TIME.size))
            return sec + nsec * 1e-9
        if type_id is BuiltinType.DURATION:
            sec, nsec = _DURATION.unpack(self._take(_DURATION.size))
            return sec + nsec * 1e-9
        fmt = _FORMATS.get(type_id)
        if fmt is None:
            raise ValueError(f"cannot read a value of type {type_id.value}")
        (value,) = fmt.unpack(self._take(fmt.size))
        return value

    def read_string(self) -> str:
        """Read a length-prefixed string."""
        size = self.read(BuiltinType.UINT32)
        return self._take(size).decode("utf-8", errors="replace")

    def read_array(self, type_id: BuiltinType, count: Optional[int] = None) -> List[Any]:
        """Read ``count`` values, or a length-prefixed array when ``count`` is None."""
        if count is None:
            count = self.read(BuiltinType.UINT32)
        return [self.read(type_id) for _ in range(count)]


class MessageParser(abc.ABC):
    """Turns the messages of one topic into points of named series."""

    def __init__(self, topic_name: str, plot_data: PlotDataMap) -> None:
        self.topic_name = topic_name
        self.plot_data = plot_data
        self.config = ParserConfig()

    def get_series(self, key: str) -> PlotSeries:
        """Return the numeric series ``key``, creating it if needed."""
        return self.plot_data.get_or_create_numeric(key)

    def get_string_series(self, key: str) -> PlotSeries:
        """Return the string series ``key``, creating it if needed."""
        return self.plot_data.get_or_create_string_series(key)

    @abc.abstractmethod
    def parse_message(self, data: bytes, timestamp: float) -> Optional[float]:
        """Store the values of ``data``; return the timestamp used, or None if skipped."""


class BuiltinMessageParser(MessageParser):
    """A parser for a message type whose layout is known in advance."""

    @abc.abstractmethod
    def decode(self, reader: WireReader) -> Any:
        """Read one message from ``reader``."""

    def parse_message(self, data: bytes, timestamp: float) -> Optional[float]:
        return self.parse_message_impl(self.decode(WireReader(data)), timestamp)

    @abc.abstractmethod
    def parse_message_impl(self, msg: Any, timestamp: float) -> float:
        """Store the values of a decoded message; return the timestamp used."""


class IntrospectionParser(MessageParser):
    """A parser for any message type, driven by its text definition."""

    def __init__(
        self, topic_name: str, topic_type: str, definition: str, plot_data: PlotDataMap
    ) -> None:
        super().__init__(topic_name, plot_data)
        self._parser = RenamingParser()
        self._parser.register_message_definition(
            topic_name, ROSType(topic_type), definition
        )

    def parse_message(self, data: bytes, timestamp: float) -> Optional[float]:
        self._parser.discard_large_array = self.config.discard_large_arrays
        flat = self._parser.deserialize_into_flat_container(
            self.topic_name, data, self.config.max_array_size
        )

        if self.config.use_header_stamp:
            for leaf, var in flat.value:
                if var.type_id is not BuiltinType.TIME:
                    continue
                node = leaf.node
                parent = node.parent
                if parent is not None and parent.value == "header" and node.value == "stamp":
                    header_stamp = var.to_float()
                    if header_stamp > 0:
                        timestamp = header_stamp
                    break

        for key, var in self._parser.apply_name_transform(self.topic_name, flat):
            if var.type_id is BuiltinType.STRING:
                text = var.value
                parsed = parse_double(
                    text,
                    self.config.remove_suffix_from_strings,
                    self.config.boolean_strings_to_number,
                )
                if parsed is None and key not in self.plot_data.numeric:
                    self.get_string_series(key).push_back((timestamp, text))
                continue
            if var.type_id in (BuiltinType.UINT64, BuiltinType.INT64):
                value = float(var.value)
            else:
                value = var.to_float()

            series = self.get_series(key)
            if math.isfinite(value):
                series.push_back((timestamp, value))
        return timestamp