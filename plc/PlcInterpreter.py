"""
PLC Interpreter - Tree-walking evaluation of a PLC program.

The interpreter does not rely on analyzer decorations and can run any tree,
so every operation also checks the runtime kinds of its values.

Precision contract: Integer arithmetic wraps to signed 32 bits. Decimal
arithmetic is carried out in double precision and the result re-expressed as
a Decimal; decimal division is rounded to one fractional digit, half-even.
"""

import math
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any, Optional, TextIO

from plc import PlcAst as Ast
from plc.PlcErrors import (
    PlcError,
    PlcMutabilityError,
    PlcRangeError,
    PlcTypeError,
)
from plc.PlcScope import Scope
from plc.PlcTypes import Character, Type

DECIMAL_SCALE = Decimal("0.1")


# --- Statement completions ---


class Completion:
    """Result of executing a statement."""

    pass


class Continue(Completion):
    """Execution carries on with the next statement."""

    def __repr__(self) -> str:
        return "CONTINUE"


CONTINUE = Continue()


@dataclass(frozen=True)
class Returned(Completion):
    """A RETURN ran; the enclosing call completes with value."""

    value: Any


# --- Runtime values ---


def runtime_type(value: Any) -> Optional[Type]:
    """The PLC type of a runtime value, or None for lists."""
    if value is None:
        return Type.NIL
    if isinstance(value, bool):
        return Type.BOOLEAN
    if isinstance(value, int):
        return Type.INTEGER
    if isinstance(value, Decimal):
        return Type.DECIMAL
    if isinstance(value, Character):
        return Type.CHARACTER
    if isinstance(value, str):
        return Type.STRING
    if isinstance(value, list):
        return None
    raise PlcTypeError(f"Not a PLC value: {value!r}")


def to_text(value: Any) -> str:
    """Textual form of a value, as written by print and string concatenation."""
    if value is None:
        return "NIL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, list):
        return "[" + ", ".join(to_text(v) for v in value) + "]"
    return str(value)


def values_equal(left: Any, right: Any) -> bool:
    """Value equality: same runtime type and same content."""
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, list) or isinstance(right, list):
        return False
    return runtime_type(left) == runtime_type(right) and left == right


def to_int32(value: int) -> int:
    """Wrap an integer to the signed 32-bit range."""
    return (value + 2**31) % 2**32 - 2**31


def to_decimal(value: float) -> Decimal:
    """Re-express a double result as a Decimal."""
    if not math.isfinite(value):
        raise PlcRangeError(f"Decimal result out of range: {value}")
    result = Decimal(repr(value))
    # No negative zero: -0.0 reads back as 0.0
    return result.copy_abs() if result.is_zero() else result


def require_boolean(value: Any) -> bool:
    if not isinstance(value, bool):
        raise PlcTypeError(
            f"Expected type '{Type.BOOLEAN}', received '{runtime_type(value)}'"
        )
    return value


def require_integer(value: Any) -> int:
    if runtime_type(value) != Type.INTEGER:
        raise PlcTypeError(
            f"Expected type '{Type.INTEGER}', received '{runtime_type(value)}'"
        )
    return value


def require_list(value: Any, name: str) -> list:
    if not isinstance(value, list):
        raise PlcTypeError(f"Variable '{name}' is not a list")
    return value


def require_index(values: list, index: int) -> int:
    if not 0 <= index < len(values):
        raise PlcRangeError(
            f"Index {index} out of bounds for list of length {len(values)}"
        )
    return index


class PlcInterpreter:
    """
    Executes a PLC tree.

    Expressions evaluate to runtime values; statements evaluate to a
    Completion, either CONTINUE or Returned(value).
    """

    VISITORS = {
        Ast.Source: "visit_source",
        Ast.Global: "visit_global",
        Ast.Function: "visit_function",
        Ast.ExpressionStatement: "visit_expression_statement",
        Ast.Declaration: "visit_declaration",
        Ast.Assignment: "visit_assignment",
        Ast.If: "visit_if",
        Ast.Switch: "visit_switch",
        Ast.Case: "visit_case",
        Ast.While: "visit_while",
        Ast.Return: "visit_return",
        Ast.Literal: "visit_literal",
        Ast.Group: "visit_group",
        Ast.Binary: "visit_binary",
        Ast.Access: "visit_access",
        Ast.Call: "visit_call",
        Ast.ListLiteral: "visit_list_literal",
    }

    def __init__(self, parent: Optional[Scope] = None, stdout: Optional[TextIO] = None):
        self.stdout = stdout
        self.scope = Scope(parent)
        self.scope.define_function("print", [Type.ANY], Type.NIL, self._print)

    def _print(self, arguments: list) -> None:
        print(to_text(arguments[0]), file=self.stdout or sys.stdout)
        return None

    def run(self, source: Ast.Source) -> Any:
        """Run a whole program and return the value of main()."""
        return self.visit(source)

    def visit(self, node) -> Any:
        try:
            method = self.VISITORS[type(node)]
        except KeyError:
            raise PlcTypeError(f"Unsupported node '{type(node).__name__}'", node) from None
        try:
            return getattr(self, method)(node)
        except PlcError as e:
            e.attach(node)
            raise

    @contextmanager
    def child_scope(self, parent: Optional[Scope] = None):
        """Run a block in a fresh scope, restoring the active scope on every exit path."""
        previous = self.scope
        self.scope = (parent or previous).child()
        try:
            yield self.scope
        finally:
            self.scope = previous

    def execute_block(self, statements: list) -> Completion:
        """Run statements in order, stopping at the first RETURN."""
        for statement in statements:
            completion = self.visit(statement)
            if isinstance(completion, Returned):
                return completion
        return CONTINUE

    # --- Top level ---

    def visit_source(self, node: Ast.Source) -> Any:
        for global_ in node.globals:
            self.visit(global_)
        for function in node.functions:
            self.visit(function)
        return self.scope.lookup_function("main", 0).invoke([])

    def visit_global(self, node: Ast.Global) -> None:
        value = self.visit(node.value) if node.value is not None else None
        self.scope.define_variable(node.name, Type.ANY, node.mutable, value)

    def visit_function(self, node: Ast.Function) -> None:
        defining_scope = self.scope

        def invoke(arguments: list) -> Any:
            with self.child_scope(defining_scope) as scope:
                for name, argument in zip(node.parameters, arguments):
                    scope.define_variable(name, Type.ANY, True, argument)
                completion = self.execute_block(node.statements)
            if isinstance(completion, Returned):
                return completion.value
            return None

        self.scope.define_function(
            node.name, [Type.ANY] * len(node.parameters), Type.ANY, invoke
        )

    # --- Statements ---

    def visit_expression_statement(self, node: Ast.ExpressionStatement) -> Completion:
        self.visit(node.expression)
        return CONTINUE

    def visit_declaration(self, node: Ast.Declaration) -> Completion:
        value = self.visit(node.value) if node.value is not None else None
        self.scope.define_variable(node.name, Type.ANY, True, value)
        return CONTINUE

    def visit_assignment(self, node: Ast.Assignment) -> Completion:
        receiver = node.receiver
        if not isinstance(receiver, Ast.Access):
            raise PlcTypeError("Assignment receiver must be a variable access")
        variable = self.scope.lookup_variable(receiver.name)
        if not variable.mutable:
            raise PlcMutabilityError(
                f"Cannot assign to immutable variable '{receiver.name}'"
            )
        if receiver.offset is not None:
            values = require_list(variable.value, receiver.name)
            index = require_integer(self.visit(receiver.offset))
            value = self.visit(node.value)
            values[require_index(values, index)] = value
        else:
            variable.value = self.visit(node.value)
        return CONTINUE

    def visit_if(self, node: Ast.If) -> Completion:
        if require_boolean(self.visit(node.condition)):
            statements = node.then_statements
        else:
            statements = node.else_statements
        with self.child_scope():
            return self.execute_block(statements)

    def visit_switch(self, node: Ast.Switch) -> Completion:
        condition = self.visit(node.condition)
        default = None
        for case in node.cases:
            if case.value is None:
                default = case
            elif values_equal(condition, self.visit(case.value)):
                return self.visit(case)
        if default is not None:
            return self.visit(default)
        return CONTINUE

    def visit_case(self, node: Ast.Case) -> Completion:
        with self.child_scope():
            return self.execute_block(node.statements)

    def visit_while(self, node: Ast.While) -> Completion:
        while require_boolean(self.visit(node.condition)):
            with self.child_scope():
                completion = self.execute_block(node.statements)
            if isinstance(completion, Returned):
                return completion
        return CONTINUE

    def visit_return(self, node: Ast.Return) -> Completion:
        return Returned(self.visit(node.value))

    # --- Expressions ---

    def visit_literal(self, node: Ast.Literal) -> Any:
        return node.literal

    def visit_group(self, node: Ast.Group) -> Any:
        return self.visit(node.expression)

    def visit_binary(self, node: Ast.Binary) -> Any:
        op = node.operator
        left = self.visit(node.left)

        if op == "&&":
            if not require_boolean(left):
                return False
            return require_boolean(self.visit(node.right))
        if op == "||":
            if require_boolean(left):
                return True
            return require_boolean(self.visit(node.right))

        right = self.visit(node.right)
        if op == "==":
            return values_equal(left, right)
        if op == "!=":
            return not values_equal(left, right)
        if op in ("<", ">"):
            return self._compare(op, left, right)
        if op == "+" and Type.STRING in (runtime_type(left), runtime_type(right)):
            return to_text(left) + to_text(right)
        if op in ("+", "-", "*", "/"):
            return self._arithmetic(op, left, right)
        if op == "^":
            return self._power(left, right)
        raise PlcTypeError(f"Unknown operator '{op}'")

    def _compare(self, op: str, left: Any, right: Any) -> bool:
        left_type, right_type = runtime_type(left), runtime_type(right)
        if left_type != right_type or left_type in (None, Type.NIL):
            raise PlcTypeError(
                f"Cannot compare '{left_type}' with '{right_type}' using '{op}'"
            )
        return left < right if op == "<" else left > right

    def _arithmetic(self, op: str, left: Any, right: Any) -> Any:
        left_type, right_type = runtime_type(left), runtime_type(right)
        if left_type != right_type or left_type not in (Type.INTEGER, Type.DECIMAL):
            raise PlcTypeError(f"Cannot use '{op}' on '{left_type}' and '{right_type}'")

        if left_type == Type.INTEGER:
            if op == "+":
                return to_int32(left + right)
            if op == "-":
                return to_int32(left - right)
            if op == "*":
                return to_int32(left * right)
            if right == 0:
                raise PlcRangeError("Division by zero")
            quotient = abs(left) // abs(right)
            return to_int32(quotient if (left < 0) == (right < 0) else -quotient)

        a, b = float(left), float(right)
        if op == "+":
            return to_decimal(a + b)
        if op == "-":
            return to_decimal(a - b)
        if op == "*":
            return to_decimal(a * b)
        if b == 0.0:
            raise PlcRangeError("Division by zero")
        try:
            return to_decimal(a / b).quantize(DECIMAL_SCALE, rounding=ROUND_HALF_EVEN)
        except InvalidOperation:
            raise PlcRangeError(f"Decimal result out of range: {a / b}") from None

    def _power(self, left: Any, right: Any) -> Any:
        exponent = require_integer(right)
        left_type = runtime_type(left)
        if left_type == Type.INTEGER:
            if exponent < 0:
                raise PlcRangeError(f"Negative exponent {exponent} for an Integer base")
            return to_int32(pow(left, exponent, 2**32))
        if left_type == Type.DECIMAL:
            try:
                return to_decimal(math.pow(float(left), exponent))
            except OverflowError:
                raise PlcRangeError("Decimal result out of range") from None
            except ValueError:
                raise PlcRangeError("Division by zero") from None
        raise PlcTypeError(f"Cannot raise '{left_type}' to a power")

    def visit_access(self, node: Ast.Access) -> Any:
        variable = self.scope.lookup_variable(node.name)
        if node.offset is None:
            return variable.value
        values = require_list(variable.value, node.name)
        index = require_integer(self.visit(node.offset))
        return values[require_index(values, index)]

    def visit_call(self, node: Ast.Call) -> Any:
        function = self.scope.lookup_function(node.name, len(node.arguments))
        arguments = [self.visit(argument) for argument in node.arguments]
        return function.invoke(arguments)

    def visit_list_literal(self, node: Ast.ListLiteral) -> list:
        return [self.visit(element) for element in node.elements]
