import struct

import pytest

from rosflat.statistics_parsers import (
    DataPoint,
    DataPoints,
    Dictionary,
    PalStatisticsNamesParser,
    PalStatisticsValuesParser,
    PlotJugglerDataPointsParser,
    PlotJugglerDictionaryParser,
)
from rosflat.plotdata import PlotDataMap


def _u32(v):
    return struct.pack("<I", v)


def _string(s):
    raw = s.encode()
    return _u32(len(raw)) + raw


def _header(sec=0, nsec=0):
    return struct.pack("<III", 0, sec, nsec) + _string("")


def _names_msg(names, version, sec=0):
    return _header(sec) + _u32(len(names)) + b"".join(_string(n) for n in names) + _u32(version)


def _values_msg(values, version, sec=0):
    return (
        _header(sec)
        + _u32(len(values))
        + struct.pack(f"<{len(values)}d", *values)
        + _u32(version)
    )


def _datapoints_msg(uuid, samples):
    body = b"".join(struct.pack("<Hdd", i, s, v) for i, s, v in samples)
    return _u32(uuid) + _u32(len(samples)) + body


def _dictionary_msg(uuid, names):
    return _u32(uuid) + _u32(len(names)) + b"".join(_string(n) for n in names)


def test_pal_names_then_values():
    data, store = PlotDataMap(), {}
    names_parser = PalStatisticsNamesParser("/stats/names", data, store)
    values_parser = PalStatisticsValuesParser("/stats/values", data, store)
    assert names_parser.parse_message(_names_msg(["a", "b"], 3), 1.0) == 1.0
    assert store["/stats/values"][3] == ["a", "b"]
    assert values_parser.parse_message(_values_msg([1.5, 2.5], 3), 2.0) == 2.0
    assert data.numeric["/stats/values/a"][0] == (2.0, 1.5)
    assert data.numeric["/stats/values/b"][0] == (2.0, 2.5)


def test_pal_values_without_names_are_skipped():
    data, store = PlotDataMap(), {}
    parser = PalStatisticsValuesParser("/stats/values", data, store)
    assert parser.parse_message(_values_msg([1.0], 9), 0.0) is None
    assert data.numeric == {}


def test_pal_values_with_wrong_count_are_skipped():
    data, store = PlotDataMap(), {}
    PalStatisticsNamesParser("/s/names", data, store).parse_message(_names_msg(["a"], 1), 0.0)
    parser = PalStatisticsValuesParser("/s/values", data, store)
    assert parser.parse_message(_values_msg([1.0, 2.0], 1), 0.0) is None
    assert "/s/values/a" not in data.numeric


def test_pal_names_are_not_overwritten():
    data, store = PlotDataMap(), {}
    parser = PalStatisticsNamesParser("/s/names", data, store)
    parser.parse_message(_names_msg(["first"], 1), 0.0)
    parser.parse_message(_names_msg(["second"], 1), 0.0)
    assert store["/s/values"][1] == ["first"]


def test_pal_names_topic_without_names_raises():
    parser = PalStatisticsNamesParser("/stats/labels", PlotDataMap(), {})
    with pytest.raises(ValueError):
        parser.parse_message(_names_msg(["a"], 1), 0.0)


def test_pal_values_use_header_stamp():
    data, store = PlotDataMap(), {}
    PalStatisticsNamesParser("/s/names", data, store).parse_message(_names_msg(["x"], 2), 0.0)
    parser = PalStatisticsValuesParser("/s/values", data, store)
    parser.config.use_header_stamp = True
    assert parser.parse_message(_values_msg([4.0], 2, sec=12), 1.0) == 12
    assert data.numeric["/s/values/x"][0] == (12, 4.0)


def test_datapoints_with_dictionary():
    data, dicts = PlotDataMap(), {}
    PlotJugglerDictionaryParser("/d", data, dicts).parse_message(
        _dictionary_msg(7, ["speed", "rpm"]), 0.0
    )
    assert dicts[7] == ["speed", "rpm"]
    parser = PlotJugglerDataPointsParser("/pts", data, dicts)
    parser.parse_message(_datapoints_msg(7, [(1, 3.0, 42.0), (0, 4.0, 1.0)]), 0.0)
    assert data.numeric["/pts/rpm"][0] == (3.0, 42.0)
    assert data.numeric["/pts/speed"][0] == (4.0, 1.0)


def test_datapoints_without_dictionary_use_index():
    data = PlotDataMap()
    parser = PlotJugglerDataPointsParser("/pts", data, {})
    parser.parse_message(_datapoints_msg(5, [(2, 1.0, 8.0)]), 0.0)
    assert data.numeric["/pts/2"][0] == (1.0, 8.0)


def test_dictionary_is_replaced():
    dicts = {}
    parser = PlotJugglerDictionaryParser("/d", PlotDataMap(), dicts)
    parser.parse_message_impl(Dictionary(1, ["a"]), 0.0)
    parser.parse_message_impl(Dictionary(1, ["b"]), 0.0)
    assert dicts[1] == ["b"]


def test_datapoints_direct_message():
    data = PlotDataMap()
    dicts = {4: ["temp"]}
    parser = PlotJugglerDataPointsParser("/p", data, dicts)
    result = parser.parse_message_impl(DataPoints(4, [DataPoint(0, 2.0, 3.0)]), 9.0)
    assert result == 9.0
    assert list(data.numeric["/p/temp"]) == [(2.0, 3.0)]


def test_datapoints_index_out_of_dictionary_raises():
    parser = PlotJugglerDataPointsParser("/p", PlotDataMap(), {4: ["temp"]})
    with pytest.raises(IndexError):
        parser.parse_message_impl(DataPoints(4, [DataPoint(3, 0.0, 0.0)]), 0.0)