"""
PLC Parser - Builds PlcAst trees from source text.

The grammar lives in Plc.ebnf and is compiled with TatSu when this module is
imported. PlcSemantics is the TatSu semantic actions class: each method is
named after a grammar rule and turns that rule's parse result into AST nodes.
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import tatsu

from plc import PlcAst as Ast
from plc.PlcTypes import Character

GRAMMAR_FILE = Path(
    os.environ.get("PLC_GRAMMAR", Path(__file__).parent / "Plc.ebnf")
)

ESCAPES = {
    "b": "\b",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "'": "'",
    '"': '"',
    "\\": "\\",
}


def get_node_location(node: Any) -> tuple[Optional[int], Optional[int]]:
    """Extract 1-based line and column from a TatSu AST node if available."""
    info = getattr(node, "parseinfo", None)
    if not info:
        return (None, None)
    line = getattr(info, "line", None)
    col = None
    tokenizer = getattr(info, "tokenizer", None) or getattr(info, "buffer", None)
    if tokenizer is not None and hasattr(tokenizer, "line_info"):
        line_info = tokenizer.line_info(info.pos)
        line, col = line_info.line, line_info.col
    return (
        line + 1 if line is not None else None,
        col + 1 if col is not None else None,
    )


def unescape(text: str) -> str:
    """Replace backslash escapes in a character or string literal body."""
    result = []
    chars = iter(text)
    for ch in chars:
        if ch == "\\":
            ch = ESCAPES[next(chars)]
        result.append(ch)
    return "".join(result)


class PlcSemantics:
    """
    TatSu semantic actions for the PLC grammar.
    """

    def _located(self, node, ast):
        node.line, node.col = get_node_location(ast)
        return node

    def _fold_binary(self, ast):
        # Left-associative: a - b - c is (a - b) - c.
        result = ast.get("first")
        for tail in ast.get("rest") or []:
            binary = Ast.Binary(tail.get("operator"), result, tail.get("right"))
            result = self._located(binary, ast)
        return result

    # --- Top level ---

    def source(self, ast):
        return Ast.Source(
            globals=list(ast.get("globals") or []),
            functions=list(ast.get("functions") or []),
        )

    def list_global(self, ast):
        elements = Ast.ListLiteral(list(ast.get("elements")))
        node = Ast.Global(
            ast.get("name"), ast.get("type_name"), True, self._located(elements, ast)
        )
        return self._located(node, ast)

    def mutable_global(self, ast):
        node = Ast.Global(ast.get("name"), ast.get("type_name"), True, ast.get("value"))
        return self._located(node, ast)

    def immutable_global(self, ast):
        node = Ast.Global(ast.get("name"), ast.get("type_name"), False, ast.get("value"))
        return self._located(node, ast)

    def function(self, ast):
        parameters = list(ast.get("parameters") or [])
        node = Ast.Function(
            name=ast.get("name"),
            parameters=[p.get("name") for p in parameters],
            parameter_type_names=[p.get("type_name") for p in parameters],
            return_type_name=ast.get("return_type_name"),
            statements=list(ast.get("statements") or []),
        )
        return self._located(node, ast)

    # --- Statements ---

    def declaration_statement(self, ast):
        node = Ast.Declaration(ast.get("name"), ast.get("type_name"), ast.get("value"))
        return self._located(node, ast)

    def switch_statement(self, ast):
        cases = list(ast.get("cases") or [])
        cases.append(ast.get("default"))
        node = Ast.Switch(ast.get("condition"), cases)
        return self._located(node, ast)

    def case_block(self, ast):
        node = Ast.Case(ast.get("value"), list(ast.get("statements") or []))
        return self._located(node, ast)

    def default_block(self, ast):
        node = Ast.Case(None, list(ast.get("statements") or []))
        return self._located(node, ast)

    def if_statement(self, ast):
        node = Ast.If(
            ast.get("condition"),
            list(ast.get("then_statements") or []),
            list(ast.get("else_statements") or []),
        )
        return self._located(node, ast)

    def while_statement(self, ast):
        node = Ast.While(ast.get("condition"), list(ast.get("statements") or []))
        return self._located(node, ast)

    def return_statement(self, ast):
        return self._located(Ast.Return(ast.get("value")), ast)

    def assignment_statement(self, ast):
        node = Ast.Assignment(ast.get("receiver"), ast.get("value"))
        return self._located(node, ast)

    def expression_statement(self, ast):
        return self._located(Ast.ExpressionStatement(ast.get("expression")), ast)

    # --- Expressions ---

    def logical_expression(self, ast):
        return self._fold_binary(ast)

    def comparison_expression(self, ast):
        return self._fold_binary(ast)

    def additive_expression(self, ast):
        return self._fold_binary(ast)

    def multiplicative_expression(self, ast):
        return self._fold_binary(ast)

    def nil_literal(self, ast):
        return self._located(Ast.Literal(None), ast)

    def boolean_literal(self, ast):
        return self._located(Ast.Literal(ast.get("literal") == "TRUE"), ast)

    def decimal_literal(self, ast):
        return self._located(Ast.Literal(Decimal(ast.get("literal"))), ast)

    def integer_literal(self, ast):
        return self._located(Ast.Literal(int(ast.get("literal"))), ast)

    def character_literal(self, ast):
        text = unescape(ast.get("literal")[1:-1])
        return self._located(Ast.Literal(Character(text)), ast)

    def string_literal(self, ast):
        text = unescape(ast.get("literal")[1:-1])
        return self._located(Ast.Literal(text), ast)

    def group_expression(self, ast):
        return self._located(Ast.Group(ast.get("expression")), ast)

    def call_expression(self, ast):
        node = Ast.Call(ast.get("name"), list(ast.get("arguments") or []))
        return self._located(node, ast)

    def access_expression(self, ast):
        node = Ast.Access(ast.get("name"), ast.get("offset"))
        return self._located(node, ast)


class PlcParser:
    """Compiles the PLC grammar once and parses source text into a Source tree."""

    def __init__(self, grammar_file: Optional[Path] = None):
        grammar_file = Path(grammar_file or GRAMMAR_FILE)
        with open(grammar_file, "r") as f:
            self.grammar = f.read()
        self.model = tatsu.compile(self.grammar, name="Plc")

    def parse(self, text: str) -> Ast.Source:
        """
        Parse a whole program.
        Raises tatsu.exceptions.FailedParse on a syntax error.
        """
        return self.model.parse(text, semantics=PlcSemantics(), parseinfo=True)


parser = PlcParser()
