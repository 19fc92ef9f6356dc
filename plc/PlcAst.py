"""
PLC AST - Program tree nodes consumed by the analyzer and the interpreter.

Nodes are built once (normally by PlcParser) and never restructured. The
analyzer fills in the decoration slots: `type` on every expression, `variable`
on globals, declarations and accesses, and `function` on functions and calls.
Decorations and source positions are excluded from node equality.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from tatsu.util import asjson

from plc.PlcScope import Function as FunctionBinding
from plc.PlcScope import Variable
from plc.PlcTypes import Type


def _position():
    return field(default=None, compare=False, repr=False)


def _decoration():
    return field(default=None, compare=False, repr=False)


class Node:
    """Common behavior for every AST node."""

    def __json__(self, seen=None):
        result = {"__class__": type(self).__name__}
        for f in fields(self):
            if f.compare:
                result[f.name] = asjson(getattr(self, f.name))
        return result


class Statement(Node):
    pass


class Expression(Node):
    pass


# --- Expressions ---


@dataclass
class Literal(Expression):
    literal: Any
    type: Optional[Type] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Group(Expression):
    expression: Expression
    type: Optional[Type] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Binary(Expression):
    operator: str
    left: Expression
    right: Expression
    type: Optional[Type] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Access(Expression):
    name: str
    offset: Optional[Expression] = None
    type: Optional[Type] = _decoration()
    variable: Optional[Variable] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Call(Expression):
    name: str
    arguments: list[Expression] = field(default_factory=list)
    type: Optional[Type] = _decoration()
    function: Optional[FunctionBinding] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class ListLiteral(Expression):
    elements: list[Expression]
    type: Optional[Type] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


# --- Statements ---


@dataclass
class ExpressionStatement(Statement):
    expression: Expression
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Declaration(Statement):
    name: str
    type_name: Optional[str] = None
    value: Optional[Expression] = None
    variable: Optional[Variable] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Assignment(Statement):
    receiver: Expression
    value: Expression
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class If(Statement):
    condition: Expression
    then_statements: list[Statement] = field(default_factory=list)
    else_statements: list[Statement] = field(default_factory=list)
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Case(Statement):
    """A CASE block, or the DEFAULT block when value is None."""

    value: Optional[Expression] = None
    statements: list[Statement] = field(default_factory=list)
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Switch(Statement):
    condition: Expression
    cases: list[Case] = field(default_factory=list)
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class While(Statement):
    condition: Expression
    statements: list[Statement] = field(default_factory=list)
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Return(Statement):
    value: Expression
    line: Optional[int] = _position()
    col: Optional[int] = _position()


# --- Top level ---


@dataclass
class Global(Node):
    name: str
    type_name: Optional[str]
    mutable: bool
    value: Optional[Expression] = None
    variable: Optional[Variable] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Function(Node):
    name: str
    parameters: list[str] = field(default_factory=list)
    parameter_type_names: list[str] = field(default_factory=list)
    return_type_name: Optional[str] = None
    statements: list[Statement] = field(default_factory=list)
    function: Optional[FunctionBinding] = _decoration()
    line: Optional[int] = _position()
    col: Optional[int] = _position()


@dataclass
class Source(Node):
    globals: list[Global] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)


EXPRESSION_NODES = (Literal, Group, Binary, Access, Call, ListLiteral)
STATEMENT_NODES = (
    ExpressionStatement,
    Declaration,
    Assignment,
    If,
    Switch,
    Case,
    While,
    Return,
)
ALL_NODES = (Source, Global, Function) + STATEMENT_NODES + EXPRESSION_NODES
