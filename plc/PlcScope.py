"""
PLC Scope - Chained scopes binding names to variables and (name, arity) to functions.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from plc.PlcErrors import PlcBindingError
from plc.PlcTypes import Type


@dataclass
class Variable:
    """A variable binding: compile-time type plus a runtime value slot."""

    name: str
    type_t: Type = Type.ANY
    mutable: bool = True
    value: Any = None


@dataclass
class Function:
    """A function binding, distinguished by name and number of parameters."""

    name: str
    param_types: list[Type] = field(default_factory=list)
    return_type: Type = Type.NIL
    function: Optional[Callable[[list], Any]] = field(default=None, repr=False)

    @property
    def num_of_params(self) -> int:
        return len(self.param_types)

    def invoke(self, arguments: list) -> Any:
        if self.function is None:
            raise PlcBindingError(f"Function '{self.name}' has no body to invoke")
        if len(arguments) != self.num_of_params:
            raise PlcBindingError(
                f"Function '{self.name}' expects {self.num_of_params} argument(s), "
                f"received {len(arguments)}"
            )
        return self.function(arguments)


class Scope:
    """
    A lexical scope, optionally chained to a parent.

    Definitions always go into this scope; lookups search this scope first and
    then walk outward through the parents. A child scope is discarded simply by
    dropping the reference to it.
    """

    def __init__(self, parent: Optional["Scope"] = None):
        self.parent = parent
        self.variables: dict[str, Variable] = {}
        self.functions: dict[tuple[str, int], Function] = {}

    def child(self) -> "Scope":
        """Create a new scope nested in this one."""
        return Scope(self)

    def define_variable(
        self, name: str, type_t: Type, mutable: bool, value: Any = None
    ) -> Variable:
        """
        Add a variable to this scope.
        Raises PlcBindingError if the name already exists in this scope.
        """
        if name in self.variables:
            raise PlcBindingError(
                f"Variable name already exists in this scope: '{name}'"
            )
        variable = Variable(name, type_t, mutable, value)
        self.variables[name] = variable
        return variable

    def lookup_variable(self, name: str) -> Variable:
        """
        Look up a variable, searching from this scope out to the outermost.
        Raises PlcBindingError if it is not found in any accessible scope.
        """
        scope = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        raise PlcBindingError(f"Use of undeclared identifier '{name}'")

    def define_function(
        self,
        name: str,
        param_types: list[Type],
        return_type: Type,
        function: Optional[Callable[[list], Any]] = None,
    ) -> Function:
        """
        Add a function to this scope, keyed by (name, arity).
        Raises PlcBindingError if that pair already exists in this scope.
        """
        key = (name, len(param_types))
        if key in self.functions:
            raise PlcBindingError(
                f"Function already exists in this scope: '{name}/{len(param_types)}'"
            )
        func = Function(name, list(param_types), return_type, function)
        self.functions[key] = func
        return func

    def lookup_function(self, name: str, arity: int) -> Function:
        """
        Look up a function by name and arity, searching outward.
        Raises PlcBindingError if no accessible scope defines it.
        """
        scope = self
        while scope is not None:
            if (name, arity) in scope.functions:
                return scope.functions[(name, arity)]
            scope = scope.parent
        raise PlcBindingError(
            f"Use of undeclared function '{name}' with {arity} argument(s)"
        )
