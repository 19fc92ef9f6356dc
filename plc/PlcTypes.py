"""
PLC Types - The fixed built-in type lattice and its assignability relation.
"""

from enum import Enum

from plc.PlcErrors import PlcBindingError, PlcTypeError


class Type(Enum):
    """Built-in types, valued by their source-level names."""

    NIL = "Nil"
    ANY = "Any"
    COMPARABLE = "Comparable"
    BOOLEAN = "Boolean"
    INTEGER = "Integer"
    DECIMAL = "Decimal"
    CHARACTER = "Character"
    STRING = "String"

    def __str__(self) -> str:
        return self.value


COMPARABLE_TYPES = {
    Type.BOOLEAN,
    Type.INTEGER,
    Type.DECIMAL,
    Type.CHARACTER,
    Type.STRING,
}

NUMERIC_TYPES = {Type.INTEGER, Type.DECIMAL}

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


class Character(str):
    """A single-character value, kept distinct from a one-character string."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Character({str.__repr__(self)})"


def get_type(name: str) -> Type:
    """Resolve a source-level type name such as 'Integer'."""
    try:
        return Type(name)
    except ValueError:
        raise PlcBindingError(f"Unknown type '{name}'") from None


def is_assignable(target: Type, type_t: Type) -> bool:
    """
    Check if a value of type_t can be used where target is expected.
    """
    if target == Type.ANY:
        return True
    if target == type_t:
        return True
    if target == Type.COMPARABLE:
        return type_t in COMPARABLE_TYPES
    return False


def require_assignable(target: Type, type_t: Type) -> None:
    """Raise PlcTypeError unless type_t is assignable to target."""
    if not is_assignable(target, type_t):
        raise PlcTypeError(f"Expected type '{target}', received '{type_t}'")
