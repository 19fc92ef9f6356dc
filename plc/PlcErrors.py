"""
PLC Errors - Error taxonomy shared by the analyzer and the interpreter.
"""

from typing import Any, Optional


class PlcError(Exception):
    """Base class for every semantic or runtime failure."""

    def __init__(
        self,
        message: str,
        node: Any = None,
        line: Optional[int] = None,
        col: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.node = None
        self.line = line
        self.col = col
        if node is not None:
            self.attach(node)

    def attach(self, node: Any) -> "PlcError":
        """Attach the offending node if none is known yet."""
        if self.node is None:
            self.node = node
            if self.line is None:
                self.line = getattr(node, "line", None)
                self.col = getattr(node, "col", None)
        return self

    def __str__(self) -> str:
        location = ""
        if self.line is not None and self.col is not None:
            location = f"(line {self.line}, col {self.col}) "
        elif self.line is not None:
            location = f"(line {self.line}) "
        return f"{location}{self.message}"


class PlcBindingError(PlcError):
    """Undefined or duplicate variable, function or type name."""

    pass


class PlcTypeError(PlcError):
    """Assignability violation or a value of the wrong kind."""

    pass


class PlcMutabilityError(PlcError):
    """Assignment to an immutable variable."""

    pass


class PlcRangeError(PlcError):
    """Literal, index or arithmetic result outside its allowed range."""

    pass
