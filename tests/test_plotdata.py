import pytest

from rosflat.plotdata import ParserConfig, PlotDataMap, PlotSeries


def test_push_back_keeps_order():
    series = PlotSeries("a")
    series.push_back((1.0, 10.0))
    series.push_back((2.0, 20.0))
    assert len(series) == 2
    assert series[0] == (1.0, 10.0)
    assert series[-1] == (2.0, 20.0)
    assert list(series) == [(1.0, 10.0), (2.0, 20.0)]


def test_push_back_needs_a_pair():
    series = PlotSeries("a")
    with pytest.raises(ValueError):
        series.push_back((1.0, 2.0, 3.0))


def test_numeric_series_is_reused():
    data = PlotDataMap()
    first = data.get_or_create_numeric("topic/x")
    first.push_back((0.0, 1.0))
    second = data.get_or_create_numeric("topic/x")
    assert second is first
    assert len(second) == 1
    assert list(data.numeric) == ["topic/x"]


def test_string_and_numeric_maps_are_separate():
    data = PlotDataMap()
    text = data.get_or_create_string_series("topic/name")
    text.push_back((0.0, "abc"))
    assert "topic/name" not in data.numeric
    assert data.strings["topic/name"][0] == (0.0, "abc")
    assert data.get_or_create_string_series("topic/name").name == "topic/name"


def test_config_can_be_overridden():
    config = ParserConfig(use_header_stamp=True, max_array_size=5)
    assert config.use_header_stamp is True
    assert config.max_array_size == 5
    assert ParserConfig().use_header_stamp is False