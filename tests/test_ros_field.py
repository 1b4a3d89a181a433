import pytest

from rosflat.ros_field import ROSField
from rosflat.ros_type import BuiltinType


def test_scalar_field():
    field = ROSField("float64 position")
    assert field.name == "position"
    assert field.type.base_name == "float64"
    assert field.type.type_id is BuiltinType.FLOAT64
    assert field.array_size == 1
    assert not field.is_array()
    assert not field.is_constant()


def test_fixed_array_field():
    field = ROSField("float64[36] covariance")
    assert field.name == "covariance"
    assert field.type.base_name == "float64"
    assert field.array_size == 36
    assert field.is_array()


def test_variable_array_field():
    field = ROSField("string[] names")
    assert field.name == "names"
    assert field.type.type_id is BuiltinType.STRING
    assert field.array_size == -1
    assert field.is_array()


def test_field_with_package_type():
    field = ROSField("geometry_msgs/Point position")
    assert field.type.pkg_name == "geometry_msgs"
    assert field.type.msg_name == "Point"
    assert not field.type.is_builtin()


def test_numeric_constant_strips_comment():
    field = ROSField("int32 MAX = 123   # the maximum")
    assert field.name == "MAX"
    assert field.value == "123"
    assert field.is_constant()


def test_string_constant_keeps_hash():
    field = ROSField("string GREETING = hello # world")
    assert field.value == "hello # world"
    assert field.is_constant()


def test_trailing_comment_is_ignored():
    field = ROSField("uint8 level # severity")
    assert field.name == "level"
    assert field.value == ""
    assert not field.is_constant()


def test_bad_type_raises():
    with pytest.raises(ValueError):
        ROSField("123 456")


def test_missing_field_name_raises():
    with pytest.raises(ValueError):
        ROSField("float64")


def test_unexpected_character_raises():
    with pytest.raises(ValueError):
        ROSField("float64 x y")