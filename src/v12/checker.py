"""
Static checker for V12 programs.

Walks the AST with the same scope discipline as the interpreter and
reports, without running anything:
- Malformed integer literals (E401)
- Redeclarations within one scope (E402)
- References to undeclared identifiers (E403)
- Assignments to const bindings (E404)
- Calls to anything but a console method, and calls used as values (E405)
- Loops with no condition (W401)

Unlike the interpreter, the checker keeps going after an error so that
one pass reports every problem, up to the collector's limit.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass

from .ast import (
    Program, Statement, VarDecl, AssignmentStatement, UpdateStatement,
    OutputStatement, ExpressionStatement, Block, ForStatement,
    WhileStatement, IfStatement,
    Expression, Literal, Identifier, BinaryOp, UnaryOp, MethodCall,
)
from .bigint import parse_integer
from .errors import (
    Diagnostic, DiagnosticCollector, ErrorSeverity, MalformedLiteralError,
)
from .tokens import SourceSpan, TokenType
from .runtime.builtins import get_builtin_registry


@dataclass
class CheckResult:
    """Result of checking a program."""
    diagnostics: List[Diagnostic]
    has_errors: bool
    has_warnings: bool

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == ErrorSeverity.ERROR]


class Checker:
    """
    Static scope and mutability checker.

    Each frame maps a declared name to whether it is mutable.
    """

    def __init__(self, max_errors: int = 20):
        self.diagnostics = DiagnosticCollector(max_errors=max_errors)
        self._frames: List[Dict[str, bool]] = [{}]
        self._builtins = get_builtin_registry()

    def check(self, program: Program) -> CheckResult:
        """Check a complete program."""
        self._check_statements(program.statements)
        return CheckResult(
            diagnostics=self.diagnostics.diagnostics,
            has_errors=self.diagnostics.has_errors,
            has_warnings=self.diagnostics.has_warnings,
        )

    # =========================================================================
    # Scopes
    # =========================================================================

    def _push(self) -> None:
        self._frames.append({})

    def _pop(self) -> None:
        self._frames.pop()

    def _resolve(self, name: str) -> Optional[bool]:
        """Return the mutability of the innermost binding, or None if undeclared."""
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        return None

    # =========================================================================
    # Statements
    # =========================================================================

    def _check_statements(self, statements: List[Statement]) -> None:
        for stmt in statements:
            if self.diagnostics.should_stop:
                return
            self._check_statement(stmt)

    def _check_statement(self, stmt: Statement) -> None:
        if isinstance(stmt, VarDecl):
            if stmt.initializer is not None:
                self._check_expression(stmt.initializer)
            if stmt.name in self._frames[-1]:
                self._error(f"identifier '{stmt.name}' has already been declared", stmt.span, "E402")
            else:
                self._frames[-1][stmt.name] = stmt.mutable
        elif isinstance(stmt, AssignmentStatement):
            self._check_expression(stmt.value)
            self._check_target(stmt.target, stmt.span)
        elif isinstance(stmt, UpdateStatement):
            self._check_target(stmt.target, stmt.span)
        elif isinstance(stmt, OutputStatement):
            self._check_expression(stmt.argument)
        elif isinstance(stmt, ExpressionStatement):
            if isinstance(stmt.expression, MethodCall):
                self._check_call(stmt.expression)
            else:
                self._check_expression(stmt.expression)
        elif isinstance(stmt, ForStatement):
            self._check_for(stmt)
        elif isinstance(stmt, WhileStatement):
            self._check_expression(stmt.condition)
            self._check_block(stmt.body)
        elif isinstance(stmt, IfStatement):
            self._check_expression(stmt.condition)
            self._check_block(stmt.then_branch)
            if isinstance(stmt.else_branch, Block):
                self._check_block(stmt.else_branch)
            elif stmt.else_branch is not None:
                self._check_statement(stmt.else_branch)
        elif isinstance(stmt, Block):
            self._check_block(stmt)

    def _check_for(self, stmt: ForStatement) -> None:
        self._push()
        if stmt.init is not None:
            self._check_statement(stmt.init)
        if stmt.condition is not None:
            self._check_expression(stmt.condition)
        else:
            self._warning("loop has no condition and will not stop on its own", stmt.span, "W401")
        self._check_block(stmt.body)
        if stmt.update is not None:
            self._check_statement(stmt.update)
        self._pop()

    def _check_block(self, block: Block) -> None:
        self._push()
        self._check_statements(block.statements)
        self._pop()

    def _check_target(self, target: Identifier, span: SourceSpan) -> None:
        mutable = self._resolve(target.name)
        if mutable is None:
            self._error(f"'{target.name}' is not defined", span, "E403")
        elif not mutable:
            self._error(f"assignment to constant variable '{target.name}'", span, "E404")

    # =========================================================================
    # Expressions
    # =========================================================================

    def _check_expression(self, expr: Expression) -> None:
        if isinstance(expr, Literal):
            if expr.literal_type == TokenType.INT_LITERAL:
                try:
                    parse_integer(expr.value)
                except MalformedLiteralError:
                    self._error(f"malformed integer literal '{expr.value}'", expr.span, "E401")
        elif isinstance(expr, Identifier):
            if self._resolve(expr.name) is None:
                self._error(f"'{expr.name}' is not defined", expr.span, "E403")
        elif isinstance(expr, BinaryOp):
            self._check_expression(expr.left)
            self._check_expression(expr.right)
        elif isinstance(expr, UnaryOp):
            self._check_expression(expr.operand)
        elif isinstance(expr, MethodCall):
            # Calls only appear as statements; they produce no value
            self._error(f"{_callee(expr)}() does not produce a value", expr.span, "E405")
            self._check_call(expr)

    def _check_call(self, call: MethodCall) -> None:
        receiver = call.object
        if not (isinstance(receiver, Identifier)
                and self._resolve(receiver.name) is None
                and self._builtins.get_method(receiver.name, call.method) is not None):
            self._error(f"unknown function '{_callee(call)}'", call.span, "E405")
        for arg in call.arguments:
            self._check_expression(arg)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def _error(self, message: str, span: SourceSpan, code: str) -> None:
        if self.diagnostics.should_stop:
            return
        self.diagnostics.add(Diagnostic(
            code=code,
            message=message,
            severity=ErrorSeverity.ERROR,
            span=span,
        ))

    def _warning(self, message: str, span: SourceSpan, code: str) -> None:
        self.diagnostics.add(Diagnostic(
            code=code,
            message=message,
            severity=ErrorSeverity.WARNING,
            span=span,
        ))


def _callee(call: MethodCall) -> str:
    receiver = call.object.name if isinstance(call.object, Identifier) else "<expr>"
    return f"{receiver}.{call.method}"


def check(program: Program, max_errors: int = 20) -> CheckResult:
    """Check a program and return its diagnostics."""
    return Checker(max_errors=max_errors).check(program)
