"""Parsers for named statistics and dictionary-based data points."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .geometry_parsers import Header
from .parser_base import BuiltinMessageParser, MessageParser, WireReader
from .plotdata import PlotDataMap, PlotSeries
from .ros_type import BuiltinType

PalNamesStore = Dict[str, Dict[int, List[str]]]
DictionaryStore = Dict[int, List[str]]

# Shared between the names and values parsers of different topics.
_PAL_STATISTICS_NAMES: PalNamesStore = {}
_PLOTJUGGLER_DICTIONARIES: DictionaryStore = {}


@dataclass
class PalStatisticsNames:
    header: Header = field(default_factory=Header)
    names: List[str] = field(default_factory=list)
    names_version: int = 0

    @classmethod
    def read(cls, reader: WireReader) -> "PalStatisticsNames":
        return cls(
            Header.read(reader),
            reader.read_array(BuiltinType.STRING),
            reader.read(BuiltinType.UINT32),
        )


@dataclass
class PalStatisticsValues:
    header: Header = field(default_factory=Header)
    values: List[float] = field(default_factory=list)
    names_version: int = 0

    @classmethod
    def read(cls, reader: WireReader) -> "PalStatisticsValues":
        return cls(
            Header.read(reader),
            reader.read_array(BuiltinType.FLOAT64),
            reader.read(BuiltinType.UINT32),
        )


@dataclass
class Dictionary:
    dictionary_uuid: int = 0
    names: List[str] = field(default_factory=list)

    @classmethod
    def read(cls, reader: WireReader) -> "Dictionary":
        return cls(reader.read(BuiltinType.UINT32), reader.read_array(BuiltinType.STRING))


@dataclass
class DataPoint:
    name_index: int = 0
    stamp: float = 0.0
    value: float = 0.0

    @classmethod
    def read(cls, reader: WireReader) -> "DataPoint":
        return cls(
            reader.read(BuiltinType.UINT16),
            reader.read(BuiltinType.FLOAT64),
            reader.read(BuiltinType.FLOAT64),
        )


@dataclass
class DataPoints:
    dictionary_uuid: int = 0
    samples: List[DataPoint] = field(default_factory=list)

    @classmethod
    def read(cls, reader: WireReader) -> "DataPoints":
        uuid = reader.read(BuiltinType.UINT32)
        count = reader.read(BuiltinType.UINT32)
        return cls(uuid, [DataPoint.read(reader) for _ in range(count)])


class PalStatisticsNamesParser(MessageParser):
    """Records the names of each version for the matching ``values`` topic."""

    def __init__(
        self,
        topic_name: str,
        plot_data: PlotDataMap,
        names_store: Optional[PalNamesStore] = None,
    ) -> None:
        super().__init__(topic_name, plot_data)
        self.names_store = _PAL_STATISTICS_NAMES if names_store is None else names_store

    def parse_message(self, data: bytes, timestamp: float) -> Optional[float]:
        msg = PalStatisticsNames.read(WireReader(data))
        pos = self.topic_name.find("names")
        if pos < 0:
            raise ValueError(f"topic {self.topic_name!r} does not contain 'names'")
        values_topic = self.topic_name[:pos] + "values" + self.topic_name[pos + 5:]
        versions = self.names_store.setdefault(values_topic, {})
        versions.setdefault(msg.names_version, list(msg.names))
        return timestamp


class PalStatisticsValuesParser(MessageParser):
    """Stores each value under the name recorded for its version."""

    def __init__(
        self,
        topic_name: str,
        plot_data: PlotDataMap,
        names_store: Optional[PalNamesStore] = None,
    ) -> None:
        super().__init__(topic_name, plot_data)
        self.names_store = _PAL_STATISTICS_NAMES if names_store is None else names_store
        self._series: Dict[int, List[PlotSeries]] = {}

    def parse_message(self, data: bytes, timestamp: float) -> Optional[float]:
        """Return the timestamp used, or None when the names are unknown or do not fit."""
        msg = PalStatisticsValues.read(WireReader(data))
        series = self._series.setdefault(msg.names_version, [])

        header_stamp = msg.header.stamp
        if self.config.use_header_stamp and header_stamp > 0:
            timestamp = header_stamp

        names = self.names_store.setdefault(self.topic_name, {}).get(msg.names_version)
        if names is None or len(names) != len(msg.values):
            return None

        for index, (name, value) in enumerate(zip(names, msg.values)):
            if index >= len(series):
                series.append(self.get_series(f"{self.topic_name}/{name}"))
            series[index].push_back((timestamp, value))
        return timestamp


class PlotJugglerDictionaryParser(BuiltinMessageParser):
    """Records the names of a dictionary under its uuid."""

    def __init__(
        self,
        topic_name: str,
        plot_data: PlotDataMap,
        dictionaries: Optional[DictionaryStore] = None,
    ) -> None:
        super().__init__(topic_name, plot_data)
        self.dictionaries = _PLOTJUGGLER_DICTIONARIES if dictionaries is None else dictionaries

    def decode(self, reader: WireReader) -> Dictionary:
        return Dictionary.read(reader)

    def parse_message_impl(self, msg: Dictionary, timestamp: float) -> float:
        self.dictionaries[msg.dictionary_uuid] = list(msg.names)
        return timestamp


class PlotJugglerDataPointsParser(BuiltinMessageParser):
    """Stores each sample at its own stamp, named from its dictionary or by index."""

    def __init__(
        self,
        topic_name: str,
        plot_data: PlotDataMap,
        dictionaries: Optional[DictionaryStore] = None,
    ) -> None:
        super().__init__(topic_name, plot_data)
        self.dictionaries = _PLOTJUGGLER_DICTIONARIES if dictionaries is None else dictionaries
        self._prefix = topic_name + "/"

    def decode(self, reader: WireReader) -> DataPoints:
        return DataPoints.read(reader)

    def parse_message_impl(self, msg: DataPoints, timestamp: float) -> float:
        names = self.dictionaries.get(msg.dictionary_uuid)
        for sample in msg.samples:
            if names is None:
                key = self._prefix + str(sample.name_index)
            else:
                key = self._prefix + names[sample.name_index]
            self.get_series(key).push_back((sample.stamp, sample.value))
        return timestamp