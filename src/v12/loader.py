"""
Load V12 programs from serialized AST documents.

An external parser hands programs to the core as YAML or JSON documents.
A document is a mapping with a ``program`` list (or just the list); each
node is a mapping whose ``node`` key names its kind:

    program:
      - node: VarDecl
        kind: const
        name: math
        init:
          node: Binary
          op: "+"
          left: {node: Literal, int: "10879879879879879879879879898798701087"}
          right: {node: Literal, int: "5879879879898798798798798798798987987"}
      - node: Expression
        expression:
          node: Call
          object: console
          method: log
          args: [{node: Identifier, name: math}]

Statement kinds: VarDecl, Assign, Update, Output, Expression, Block, For,
While, If. Expression kinds: Literal, Identifier, Binary, Unary, Call.
Nodes may carry ``line`` and ``column`` for error reporting.

Integer literals should be quoted strings so YAML keeps every digit as
written; unquoted integers are converted back to decimal text.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml

from .ast import (
    Program, Statement, VarDecl, AssignmentStatement, UpdateStatement,
    OutputStatement, ExpressionStatement, Block, ForStatement,
    WhileStatement, IfStatement,
    Expression, Literal, Identifier, BinaryOp, UnaryOp, MethodCall,
)
from .errors import error_invalid_document
from .tokens import (
    TokenType, SourceSpan, NO_SPAN, OPERATOR_SYMBOLS,
    ARITHMETIC_OPERATORS, COMPARISON_OPERATORS, LOGICAL_OPERATORS,
    COMPOUND_ASSIGNMENTS,
)
from .runtime.sink import Severity

__all__ = [
    "ProgramLoader",
    "load_program",
    "loads_program",
    "program_from_data",
]

BINARY_OPERATORS = ARITHMETIC_OPERATORS | COMPARISON_OPERATORS | LOGICAL_OPERATORS
UNARY_OPERATORS = frozenset({TokenType.MINUS, TokenType.NOT})
ASSIGN_OPERATORS = frozenset({TokenType.ASSIGN}) | frozenset(COMPOUND_ASSIGNMENTS)
UPDATE_OPERATORS = frozenset({TokenType.INCREMENT, TokenType.DECREMENT})


class ProgramLoader:
    """
    Builds AST nodes from plain data (dicts and lists).

    Every structural problem raises LoaderError with the node's position
    when the document provides one.
    """

    def __init__(self, filename: Optional[str] = None):
        self.filename = filename
        self._statements: Dict[str, Callable[[dict, SourceSpan], Statement]] = {
            "VarDecl": self._var_decl,
            "Assign": self._assign,
            "Update": self._update,
            "Output": self._output,
            "Expression": self._expression_statement,
            "Block": self._block,
            "For": self._for,
            "While": self._while,
            "If": self._if,
        }
        self._expressions: Dict[str, Callable[[dict, SourceSpan], Expression]] = {
            "Literal": self._literal,
            "Identifier": self._identifier,
            "Binary": self._binary,
            "Unary": self._unary,
            "Call": self._call,
        }

    def load(self, data: Any, name: str = "<program>") -> Program:
        """Build a Program from a decoded document."""
        if isinstance(data, dict):
            if "program" not in data:
                raise error_invalid_document("document has no 'program' list")
            statements = data["program"]
            name = data.get("name", name)
        else:
            statements = data
        if statements is None:
            statements = []
        if not isinstance(statements, list):
            raise error_invalid_document("'program' must be a list of statements")
        return Program(span=NO_SPAN, statements=self.statements(statements), name=name)

    # -- Helpers -------------------------------------------------------

    def _span(self, data: dict) -> SourceSpan:
        line = data.get("line")
        if line is None:
            return NO_SPAN
        column = data.get("column", 1)
        for key, value in (("line", line), ("column", column)):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise error_invalid_document(
                    f"'{key}' must be a non-negative integer, found {value!r}"
                )
        return SourceSpan.at(line, column, self.filename)

    def _node(self, data: Any, table: Dict[str, Callable], what: str):
        if not isinstance(data, dict):
            raise error_invalid_document(f"expected a {what} node mapping, found {type(data).__name__}")
        kind = data.get("node")
        builder = table.get(kind) if isinstance(kind, str) else None
        if builder is None:
            raise error_invalid_document(f"unknown {what} node '{kind}'", self._span(data))
        return builder(data, self._span(data))

    def _field(self, data: dict, key: str, span: SourceSpan) -> Any:
        if key not in data:
            raise error_invalid_document(f"{data.get('node')} node is missing '{key}'", span)
        return data[key]

    def _name(self, data: dict, key: str, span: SourceSpan) -> str:
        value = self._field(data, key, span)
        if not isinstance(value, str) or not value:
            raise error_invalid_document(f"'{key}' must be a non-empty name", span)
        return value

    def _operator(self, data: dict, allowed: frozenset, span: SourceSpan) -> TokenType:
        symbol = self._field(data, "op", span)
        op = OPERATOR_SYMBOLS.get(symbol) if isinstance(symbol, str) else None
        if op is None or op not in allowed:
            raise error_invalid_document(f"invalid operator {symbol!r} for {data.get('node')}", span)
        return op

    def statements(self, items: List[Any]) -> List[Statement]:
        if not isinstance(items, list):
            raise error_invalid_document("expected a list of statements")
        return [self.statement(item) for item in items]

    def statement(self, data: Any) -> Statement:
        return self._node(data, self._statements, "statement")

    def expression(self, data: Any) -> Expression:
        return self._node(data, self._expressions, "expression")

    def _optional_statement(self, data: dict, key: str) -> Optional[Statement]:
        value = data.get(key)
        return None if value is None else self.statement(value)

    def _body(self, data: dict, key: str, span: SourceSpan) -> Block:
        return Block(span=span, statements=self.statements(self._field(data, key, span) or []))

    # -- Statements ----------------------------------------------------

    def _var_decl(self, data: dict, span: SourceSpan) -> VarDecl:
        kind = data.get("kind", "let")
        if kind not in ("let", "const"):
            raise error_invalid_document(f"declaration kind must be 'let' or 'const', found {kind!r}", span)
        init = data.get("init")
        return VarDecl(
            span=span,
            name=self._name(data, "name", span),
            mutable=(kind == "let"),
            initializer=None if init is None else self.expression(init),
        )

    def _assign(self, data: dict, span: SourceSpan) -> AssignmentStatement:
        op = self._operator(data, ASSIGN_OPERATORS, span) if "op" in data else TokenType.ASSIGN
        return AssignmentStatement(
            span=span,
            target=Identifier(span=span, name=self._name(data, "target", span)),
            value=self.expression(self._field(data, "value", span)),
            operator=op,
        )

    def _update(self, data: dict, span: SourceSpan) -> UpdateStatement:
        return UpdateStatement(
            span=span,
            target=Identifier(span=span, name=self._name(data, "target", span)),
            operator=self._operator(data, UPDATE_OPERATORS, span),
        )

    def _output(self, data: dict, span: SourceSpan) -> OutputStatement:
        severity = data.get("severity", "info")
        try:
            Severity.parse(str(severity))
        except ValueError:
            raise error_invalid_document(f"unknown output severity {severity!r}", span) from None
        return OutputStatement(
            span=span,
            severity=str(severity).lower(),
            argument=self.expression(self._field(data, "value", span)),
        )

    def _expression_statement(self, data: dict, span: SourceSpan) -> ExpressionStatement:
        return ExpressionStatement(
            span=span,
            expression=self.expression(self._field(data, "expression", span)),
        )

    def _block(self, data: dict, span: SourceSpan) -> Block:
        return self._body(data, "body", span)

    def _for(self, data: dict, span: SourceSpan) -> ForStatement:
        test = data.get("test")
        return ForStatement(
            span=span,
            init=self._optional_statement(data, "init"),
            condition=None if test is None else self.expression(test),
            update=self._optional_statement(data, "update"),
            body=self._body(data, "body", span),
        )

    def _while(self, data: dict, span: SourceSpan) -> WhileStatement:
        return WhileStatement(
            span=span,
            condition=self.expression(self._field(data, "test", span)),
            body=self._body(data, "body", span),
        )

    def _if(self, data: dict, span: SourceSpan) -> IfStatement:
        else_data = data.get("else")
        if else_data is None:
            else_branch = None
        elif isinstance(else_data, list):
            else_branch = Block(span=span, statements=self.statements(else_data))
        else:
            else_branch = self.statement(else_data)
        return IfStatement(
            span=span,
            condition=self.expression(self._field(data, "test", span)),
            then_branch=self._body(data, "then", span),
            else_branch=else_branch,
        )

    # -- Expressions ---------------------------------------------------

    def _literal(self, data: dict, span: SourceSpan) -> Literal:
        if "int" in data:
            raw = data["int"]
            if isinstance(raw, bool) or raw is None:
                raise error_invalid_document(f"integer literal must be digits, found {raw!r}", span)
            # Digit validation happens at evaluation time (MalformedLiteralError)
            return Literal(span=span, value=str(raw), literal_type=TokenType.INT_LITERAL)
        if "string" in data:
            raw = data["string"]
            if not isinstance(raw, str):
                raise error_invalid_document(f"string literal must be text, found {raw!r}", span)
            return Literal(span=span, value=raw, literal_type=TokenType.STRING_LITERAL)
        if "bool" in data:
            raw = data["bool"]
            if not isinstance(raw, bool):
                raise error_invalid_document(f"boolean literal must be true or false, found {raw!r}", span)
            return Literal(span=span, value=raw, literal_type=TokenType.BOOL_LITERAL)
        raise error_invalid_document("Literal node needs one of 'int', 'string' or 'bool'", span)

    def _identifier(self, data: dict, span: SourceSpan) -> Identifier:
        return Identifier(span=span, name=self._name(data, "name", span))

    def _binary(self, data: dict, span: SourceSpan) -> BinaryOp:
        return BinaryOp(
            span=span,
            left=self.expression(self._field(data, "left", span)),
            operator=self._operator(data, BINARY_OPERATORS, span),
            right=self.expression(self._field(data, "right", span)),
        )

    def _unary(self, data: dict, span: SourceSpan) -> UnaryOp:
        return UnaryOp(
            span=span,
            operator=self._operator(data, UNARY_OPERATORS, span),
            operand=self.expression(self._field(data, "operand", span)),
        )

    def _call(self, data: dict, span: SourceSpan) -> MethodCall:
        args = data.get("args") or []
        if not isinstance(args, list):
            raise error_invalid_document("'args' must be a list", span)
        return MethodCall(
            span=span,
            object=Identifier(span=span, name=self._name(data, "object", span)),
            method=self._name(data, "method", span),
            arguments=[self.expression(arg) for arg in args],
        )


def program_from_data(data: Any, name: str = "<program>", filename: str = None) -> Program:
    """Build a Program from already-decoded YAML/JSON data."""
    return ProgramLoader(filename).load(data, name)


def loads_program(text: str, fmt: str = "yaml", name: str = "<program>") -> Program:
    """Parse a program document from a string ('yaml' or 'json')."""
    try:
        data = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as e:
        raise error_invalid_document(f"cannot decode {fmt} document: {e}") from e
    return program_from_data(data, name)


def load_program(path: Union[Path, str]) -> Program:
    """
    Load a program document from disk.

    ``.json`` files are decoded with json; anything else as YAML.

    Raises:
        FileNotFoundError: if the file does not exist
        LoaderError: if the document is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"program not found: {path}")
    with path.open("r", encoding="utf-8") as fp:
        try:
            data = json.load(fp) if path.suffix == ".json" else yaml.safe_load(fp)
        except (ValueError, yaml.YAMLError) as e:
            raise error_invalid_document(f"cannot decode {path.name}: {e}") from e
    return ProgramLoader(str(path)).load(data, name=path.stem)
