import pytest

from plc.PlcErrors import PlcBindingError, PlcTypeError
from plc.PlcTypes import (
    COMPARABLE_TYPES,
    Character,
    Type,
    get_type,
    is_assignable,
    require_assignable,
)

# ---------- type names ----------


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Nil", Type.NIL),
        ("Any", Type.ANY),
        ("Comparable", Type.COMPARABLE),
        ("Boolean", Type.BOOLEAN),
        ("Integer", Type.INTEGER),
        ("Decimal", Type.DECIMAL),
        ("Character", Type.CHARACTER),
        ("String", Type.STRING),
    ],
)
def test_get_type_resolves_builtin_names(name, expected):
    assert get_type(name) is expected
    assert str(expected) == name


@pytest.mark.parametrize("name", ["Unknown", "integer", "", "Int"])
def test_get_type_unknown_name_raises(name):
    with pytest.raises(PlcBindingError, match="Unknown type"):
        get_type(name)


# ---------- assignability ----------


@pytest.mark.parametrize("type_t", list(Type))
def test_every_type_is_assignable_to_itself(type_t):
    assert is_assignable(type_t, type_t)


@pytest.mark.parametrize("type_t", list(Type))
def test_everything_is_assignable_to_any(type_t):
    assert is_assignable(Type.ANY, type_t)


@pytest.mark.parametrize("type_t", sorted(COMPARABLE_TYPES, key=str))
def test_comparable_accepts_scalar_types(type_t):
    assert is_assignable(Type.COMPARABLE, type_t)


@pytest.mark.parametrize("type_t", [Type.NIL, Type.ANY])
def test_comparable_rejects_nil_and_any(type_t):
    assert not is_assignable(Type.COMPARABLE, type_t)


@pytest.mark.parametrize(
    "target, type_t",
    [
        (Type.INTEGER, Type.DECIMAL),
        (Type.DECIMAL, Type.INTEGER),
        (Type.STRING, Type.CHARACTER),
        (Type.INTEGER, Type.ANY),
        (Type.BOOLEAN, Type.COMPARABLE),
        (Type.NIL, Type.INTEGER),
        (Type.STRING, Type.NIL),
    ],
)
def test_unrelated_types_are_not_assignable(target, type_t):
    assert not is_assignable(target, type_t)


def test_require_assignable_reports_both_types():
    with pytest.raises(PlcTypeError, match="Expected type 'Integer', received 'String'"):
        require_assignable(Type.INTEGER, Type.STRING)


def test_require_assignable_passes_silently():
    assert require_assignable(Type.COMPARABLE, Type.DECIMAL) is None


# ---------- runtime characters ----------


def test_character_is_distinct_from_string_but_equal_text():
    ch = Character("a")
    assert isinstance(ch, str)
    assert ch == "a"
    assert type(ch) is not str
    assert repr(ch) == "Character('a')"
