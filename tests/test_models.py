import pytest
from cmypy.domain.models import Channel, FilterDelta, FilterSetting, clamp_filtration
from cmypy.kernel.system.config import DEFAULT_FILTER_SETTING


def test_clamp_filtration_range():
    assert clamp_filtration(-5.0) == 0.0
    assert clamp_filtration(250.0) == 200.0
    assert clamp_filtration(42.5) == 42.5


def test_with_channel_clamps():
    s = FilterSetting(0.0, 50.0, 50.0)
    assert s.with_channel(Channel.M, 250.0).m == 200.0
    assert s.with_channel(Channel.Y, -1.0).y == 0.0
    # Original untouched (frozen)
    assert s.m == 50.0


def test_nudge():
    s = FilterSetting(0.0, 50.0, 50.0)
    assert s.nudge(Channel.M, 1.0).m == 51.0
    assert s.nudge(Channel.C, -1.0).c == 0.0


def test_clamped_constructor():
    s = FilterSetting.clamped(-10.0, 100.0, 999.0)
    assert s.as_tuple() == (0.0, 100.0, 200.0)


def test_from_dict_round_trip_values():
    s = FilterSetting.from_dict({"c": 5, "m": 60.5})
    assert s == FilterSetting(5.0, 60.5, 0.0)
    assert FilterSetting.from_dict(s.to_dict()) == s


def test_get_by_channel():
    s = FilterSetting(1.0, 2.0, 3.0)
    assert [s.get(ch) for ch in Channel] == [1.0, 2.0, 3.0]


def test_delta_helpers():
    assert FilterDelta.zero().is_zero
    d = FilterDelta(1.0, -2.0, 0.5)
    assert not d.is_zero
    assert d.scaled(2.0) == FilterDelta(2.0, -4.0, 1.0)
    assert d.get(Channel.M) == -2.0


def test_setting_is_immutable():
    s = FilterSetting()
    with pytest.raises(Exception):
        s.c = 10.0  # type: ignore


def test_default_pack():
    assert DEFAULT_FILTER_SETTING.as_tuple() == (0.0, 50.0, 50.0)
