"""
Tests for the IntOrString polymorphic scalar
"""

# Third Party
import pytest

# Local
from kubemanifest.exceptions import TypeMismatch
from kubemanifest.int_or_string import IntOrString


def test_from_int_is_int_tagged():
    """Make sure an int source is held with the int tag"""
    val = IntOrString.from_value(8080)
    assert val.is_int
    assert not val.is_str
    assert val.to_wire() == 8080
    assert val.canonical_str == "8080"


def test_from_str_is_str_tagged():
    """Make sure a string source stays a string even when it looks numeric"""
    val = IntOrString.from_value("8080")
    assert val.is_str
    assert val.to_wire() == "8080"


def test_equality_on_canonical_form():
    """Make sure "8080" and 8080 compare and hash equal"""
    assert IntOrString.from_value("8080") == IntOrString.from_value(8080)
    assert hash(IntOrString.from_value("8080")) == hash(IntOrString.from_value(8080))
    assert len({IntOrString(1), IntOrString("1")}) == 1


@pytest.mark.parametrize("text", ["100Mi", "1e3", "0.5", "50%"])
def test_quantity_strings_stay_strings(text):
    """Make sure quantity-like strings keep their string form and never equal
    an integer
    """
    val = IntOrString.from_value(text)
    assert val.is_str
    assert val.to_wire() == text
    assert val != IntOrString.from_value(100)
    assert val != IntOrString.from_value(1000)


def test_as_int():
    """Make sure as_int parses integral text and rejects quantities"""
    assert IntOrString("42").as_int() == 42
    assert IntOrString(7).as_int() == 7
    assert IntOrString("-3").as_int() == -3
    with pytest.raises(ValueError):
        IntOrString("100Mi").as_int()


@pytest.mark.parametrize("text", ["1_000", " 42 ", "42\n", "", "+", "1e3", "٤٢"])
def test_as_int_rejects_non_canonical_text(text):
    """Make sure only plain signed decimal digits are read as integers"""
    with pytest.raises(ValueError):
        IntOrString(text).as_int()


@pytest.mark.parametrize("bad", [True, False, 1.5, None, {"a": 1}, [1]])
def test_from_value_rejects_other_shapes(bad):
    """Make sure booleans, floats, collections and None are type mismatches"""
    with pytest.raises(TypeMismatch) as exc_info:
        IntOrString.from_value(bad, path="spec.port")
    assert exc_info.value.path == "spec.port"
    assert exc_info.value.expected == "int_or_string"


def test_from_value_passes_through_instances():
    """Make sure an existing IntOrString is returned unchanged"""
    val = IntOrString(3)
    assert IntOrString.from_value(val) is val


def test_not_equal_to_raw_values():
    """Make sure comparison with raw python values is not supported"""
    assert IntOrString(1) != 1
    assert repr(IntOrString("a")) == "IntOrString('a')"
