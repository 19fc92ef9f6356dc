"""
PLC Analyzer - Static semantic analysis of a PLC program tree.

A single pass over the tree that:
- defines globals and functions in a program scope
- resolves every Access and Call to its Variable or Function binding
- assigns a Type to every expression
- checks assignability, operand types, conditions and switch structure

Analysis stops at the first violation by raising a PlcError subclass that
carries the offending node.
"""

import math
from contextlib import contextmanager
from decimal import Decimal
from typing import Optional

from plc import PlcAst as Ast
from plc.PlcErrors import (
    PlcError,
    PlcMutabilityError,
    PlcRangeError,
    PlcTypeError,
)
from plc.PlcScope import Scope
from plc.PlcTypes import (
    INT_MAX,
    INT_MIN,
    NUMERIC_TYPES,
    Character,
    Type,
    get_type,
    require_assignable,
)

COMPARISON_OPERATORS = {"<", ">", "==", "!="}
LOGICAL_OPERATORS = {"&&", "||"}


class PlcAnalyzer:
    """
    Walks a PLC tree, decorating it in place.
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

    def __init__(self, parent: Optional[Scope] = None):
        self.scope = Scope(parent)
        self.scope.define_function("print", [Type.ANY], Type.NIL, lambda args: None)
        # Function declaration whose body is being analyzed, if any
        self.function: Optional[Ast.Function] = None

    def analyze(self, source: Ast.Source) -> Ast.Source:
        """Analyze a whole program and return the decorated tree."""
        self.visit(source)
        return source

    def visit(self, node) -> None:
        try:
            method = self.VISITORS[type(node)]
        except KeyError:
            raise PlcTypeError(f"Unsupported node '{type(node).__name__}'", node) from None
        try:
            getattr(self, method)(node)
        except PlcError as e:
            e.attach(node)
            raise

    @contextmanager
    def child_scope(self):
        """Run a block in a fresh scope, restoring the parent on every exit path."""
        parent = self.scope
        self.scope = parent.child()
        try:
            yield self.scope
        finally:
            self.scope = parent

    # --- Top level ---

    def visit_source(self, node: Ast.Source) -> None:
        for global_ in node.globals:
            self.visit(global_)
        for function in node.functions:
            self.visit(function)
        main = self.scope.lookup_function("main", 0)
        if main.return_type != Type.INTEGER:
            raise PlcTypeError(
                f"Function 'main' must return '{Type.INTEGER}', not '{main.return_type}'"
            )

    def visit_global(self, node: Ast.Global) -> None:
        if node.value is not None:
            self.visit(node.value)
        if node.type_name is not None:
            type_t = get_type(node.type_name)
        elif node.value is not None:
            type_t = node.value.type
        else:
            raise PlcTypeError(f"Global '{node.name}' needs a type or an initial value")
        node.variable = self.scope.define_variable(node.name, type_t, node.mutable)
        if node.value is not None:
            require_assignable(type_t, node.value.type)

    def visit_function(self, node: Ast.Function) -> None:
        if len(node.parameters) != len(node.parameter_type_names):
            raise PlcTypeError(f"Every parameter of '{node.name}' needs a type")
        param_types = [get_type(name) for name in node.parameter_type_names]
        return_type = (
            get_type(node.return_type_name)
            if node.return_type_name is not None
            else Type.NIL
        )
        node.function = self.scope.define_function(node.name, param_types, return_type)

        previous_function = self.function
        self.function = node
        try:
            with self.child_scope() as scope:
                for name, type_t in zip(node.parameters, param_types):
                    scope.define_variable(name, type_t, True)
                for statement in node.statements:
                    self.visit(statement)
        finally:
            self.function = previous_function

    # --- Statements ---

    def visit_expression_statement(self, node: Ast.ExpressionStatement) -> None:
        if not isinstance(node.expression, Ast.Call):
            raise PlcTypeError("Expression statements must be function calls")
        self.visit(node.expression)

    def visit_declaration(self, node: Ast.Declaration) -> None:
        if node.type_name is None and node.value is None:
            raise PlcTypeError(f"Declaration of '{node.name}' needs a type or a value")
        if node.value is not None:
            self.visit(node.value)
        if node.type_name is not None:
            type_t = get_type(node.type_name)
        else:
            type_t = node.value.type
        node.variable = self.scope.define_variable(node.name, type_t, True)
        if node.value is not None:
            require_assignable(type_t, node.value.type)

    def visit_assignment(self, node: Ast.Assignment) -> None:
        if not isinstance(node.receiver, Ast.Access):
            raise PlcTypeError("Assignment receiver must be a variable access")
        self.visit(node.receiver)
        if not node.receiver.variable.mutable:
            raise PlcMutabilityError(
                f"Cannot assign to immutable variable '{node.receiver.name}'"
            )
        self.visit(node.value)
        require_assignable(node.receiver.type, node.value.type)

    def visit_if(self, node: Ast.If) -> None:
        self.visit(node.condition)
        require_assignable(Type.BOOLEAN, node.condition.type)
        if not node.then_statements:
            raise PlcTypeError("IF requires at least one statement in its DO block")
        with self.child_scope():
            for statement in node.then_statements:
                self.visit(statement)
        with self.child_scope():
            for statement in node.else_statements:
                self.visit(statement)

    def visit_switch(self, node: Ast.Switch) -> None:
        self.visit(node.condition)
        if not node.cases or node.cases[-1].value is not None:
            raise PlcTypeError("SWITCH must end with a DEFAULT case without a value")
        for case in node.cases[:-1]:
            if case.value is None:
                raise PlcTypeError("Only the last case of a SWITCH may be DEFAULT")
            self.visit(case.value)
            require_assignable(node.condition.type, case.value.type)
        for case in node.cases:
            self.visit(case)

    def visit_case(self, node: Ast.Case) -> None:
        # The case value is checked by the enclosing switch.
        with self.child_scope():
            for statement in node.statements:
                self.visit(statement)

    def visit_while(self, node: Ast.While) -> None:
        self.visit(node.condition)
        require_assignable(Type.BOOLEAN, node.condition.type)
        with self.child_scope():
            for statement in node.statements:
                self.visit(statement)

    def visit_return(self, node: Ast.Return) -> None:
        if self.function is None:
            raise PlcTypeError("RETURN outside of a function")
        self.visit(node.value)
        require_assignable(self.function.function.return_type, node.value.type)

    # --- Expressions ---

    def visit_literal(self, node: Ast.Literal) -> None:
        literal = node.literal
        if literal is None:
            node.type = Type.NIL
        elif isinstance(literal, bool):
            node.type = Type.BOOLEAN
        elif isinstance(literal, Character):
            node.type = Type.CHARACTER
        elif isinstance(literal, str):
            node.type = Type.STRING
        elif isinstance(literal, int):
            if not INT_MIN <= literal <= INT_MAX:
                raise PlcRangeError(f"Integer out of range: {literal}")
            node.type = Type.INTEGER
        elif isinstance(literal, (Decimal, float)):
            if not math.isfinite(float(literal)):
                raise PlcRangeError(f"Decimal out of range: {literal}")
            node.type = Type.DECIMAL
        else:
            raise PlcTypeError(f"Invalid literal {literal!r}")

    def visit_group(self, node: Ast.Group) -> None:
        if not isinstance(node.expression, Ast.Binary):
            raise PlcTypeError("Grouped expression must be a binary expression")
        self.visit(node.expression)
        node.type = node.expression.type

    def visit_binary(self, node: Ast.Binary) -> None:
        self.visit(node.left)
        self.visit(node.right)
        left, right, op = node.left.type, node.right.type, node.operator

        if op in LOGICAL_OPERATORS:
            require_assignable(Type.BOOLEAN, left)
            require_assignable(Type.BOOLEAN, right)
            node.type = Type.BOOLEAN
        elif op in COMPARISON_OPERATORS:
            if left != right:
                raise PlcTypeError(f"Cannot compare '{left}' with '{right}' using '{op}'")
            require_assignable(Type.COMPARABLE, left)
            node.type = Type.BOOLEAN
        elif op == "+" and Type.STRING in (left, right):
            node.type = Type.STRING
        elif op in ("+", "-", "*", "/"):
            if left != right or left not in NUMERIC_TYPES:
                raise PlcTypeError(f"Cannot use '{op}' on '{left}' and '{right}'")
            node.type = left
        elif op == "^":
            require_assignable(Type.INTEGER, right)
            if left not in NUMERIC_TYPES:
                raise PlcTypeError(f"Cannot raise '{left}' to a power")
            node.type = left
        else:
            raise PlcTypeError(f"Unknown operator '{op}'")

    def visit_access(self, node: Ast.Access) -> None:
        node.variable = self.scope.lookup_variable(node.name)
        if node.offset is not None:
            self.visit(node.offset)
            require_assignable(Type.INTEGER, node.offset.type)
        node.type = node.variable.type_t

    def visit_call(self, node: Ast.Call) -> None:
        node.function = self.scope.lookup_function(node.name, len(node.arguments))
        for argument, param_type in zip(node.arguments, node.function.param_types):
            self.visit(argument)
            require_assignable(param_type, argument.type)
        node.type = node.function.return_type

    def visit_list_literal(self, node: Ast.ListLiteral) -> None:
        if not node.elements:
            raise PlcTypeError("List literals must have at least one element")
        for element in node.elements:
            self.visit(element)
        node.type = node.elements[0].type
        for element in node.elements:
            require_assignable(node.type, element.type)
