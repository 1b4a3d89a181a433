import pytest

from rosflat.ros_type import BuiltinType, ROSType, builtin_size, to_builtin_type


def test_type_with_package_is_split():
    t = ROSType("geometry_msgs/Pose")
    assert t.pkg_name == "geometry_msgs"
    assert t.msg_name == "Pose"
    assert t.base_name == "geometry_msgs/Pose"
    assert not t.is_builtin()
    assert t.type_id is BuiltinType.OTHER


def test_builtin_type_without_package():
    t = ROSType("float64")
    assert t.pkg_name == ""
    assert t.msg_name == "float64"
    assert t.is_builtin()
    assert t.type_id is BuiltinType.FLOAT64


@pytest.mark.parametrize("builtin", [b for b in BuiltinType if b is not BuiltinType.OTHER])
def test_to_builtin_type_round_trip(builtin):
    assert to_builtin_type(builtin.value) is builtin
    assert ROSType(builtin.value).is_builtin()


def test_unknown_name_is_other():
    assert to_builtin_type("Header") is BuiltinType.OTHER


def test_builtin_sizes():
    assert builtin_size(BuiltinType.UINT8) == 1
    assert builtin_size(BuiltinType.FLOAT64) == 8
    assert builtin_size(BuiltinType.TIME) == 8
    assert builtin_size(BuiltinType.STRING) is None
    assert builtin_size(BuiltinType.OTHER) is None


def test_set_pkg_name_makes_types_equal():
    t = ROSType("Pose")
    t.set_pkg_name("geometry_msgs")
    full = ROSType("geometry_msgs/Pose")
    assert t == full
    assert hash(t) == hash(full)
    assert t.pkg_name == "geometry_msgs"
    assert t.msg_name == "Pose"
    assert str(t) == "geometry_msgs/Pose"


def test_set_pkg_name_twice_raises():
    t = ROSType("std_msgs/Header")
    with pytest.raises(ValueError):
        t.set_pkg_name("other")


def test_different_types_are_not_equal():
    assert ROSType("a/Pose") != ROSType("b/Pose")
    assert len({ROSType("a/Pose"), ROSType("a/Pose"), ROSType("b/Pose")}) == 2