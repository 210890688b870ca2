"""
Tree-walking interpreter for V12 programs.

Executes statements strictly in program order against an ExecutionContext.
All integer arithmetic is delegated to the BigInt engine; output goes to
the sink held by the context.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .values import Value, ValueKind, int_val, text_val, bool_val, render, TRUE, FALSE
from .context import ExecutionContext, create_context
from .sink import OutputSink, OutputRecord, MemorySink, Severity
from .builtins import get_builtin_registry

from ..ast import (
    Program, Statement, VarDecl, AssignmentStatement, UpdateStatement,
    OutputStatement, ExpressionStatement, Block, ForStatement,
    WhileStatement, IfStatement,
    Expression, Literal, Identifier, BinaryOp, UnaryOp, MethodCall,
)
from ..bigint import (
    Ordering, ONE, parse_integer, add, subtract, multiply, divide,
    remainder, compare,
)
from ..errors import (
    V12Error, EvaluationError, MalformedLiteralError, Diagnostic,
    error_malformed_literal, error_type_mismatch, error_division_by_zero,
)
from ..tokens import (
    SourceSpan, TokenType, ARITHMETIC_OPERATORS, COMPOUND_ASSIGNMENTS,
    operator_symbol,
)


TraceHook = Callable[[Statement, ExecutionContext], None]


@dataclass
class ExecutionResult:
    """Result of executing a program."""
    success: bool
    records: List[OutputRecord] = field(default_factory=list)
    error: Optional[V12Error] = None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is not None:
            return self.error.diagnostic.message
        return None

    @property
    def diagnostic(self) -> Optional[Diagnostic]:
        if self.error is not None:
            return self.error.diagnostic
        return None

    @property
    def texts(self) -> List[str]:
        """Emitted text payloads in order."""
        return [r.text for r in self.records]


class Interpreter:
    """
    Tree-walking interpreter for V12 programs.

    Evaluates AST nodes by dispatching to type-specific methods. The first
    error aborts the run; records emitted before it stay emitted.
    """

    def __init__(self, sink: OutputSink = None, trace: TraceHook = None):
        """
        Initialize the interpreter.

        Args:
            sink: Receives output records (defaults to an in-memory sink)
            trace: Optional hook called before every statement executes
        """
        self.sink = sink if sink is not None else MemorySink()
        self.trace = trace
        self.builtins = get_builtin_registry()

    def run(self, program: Program, ctx: ExecutionContext = None) -> ExecutionContext:
        """
        Execute a program to completion.

        Returns:
            The context after execution (its global scope holds the
            program's top-level bindings)

        Raises:
            EvaluationError: the first evaluation failure
        """
        if ctx is None:
            ctx = create_context(self.sink, program.name)
        self._execute_statements(program.statements, ctx)
        return ctx

    def execute(self, program: Program) -> ExecutionResult:
        """
        Execute a program, reporting failure in the result instead of raising.

        The result holds the records emitted by this run only; they are also
        forwarded to the interpreter's sink.
        """
        recorder = _RecordingSink(self.sink)
        ctx = create_context(recorder, program.name)
        try:
            self.run(program, ctx)
        except EvaluationError as e:
            return ExecutionResult(success=False, records=recorder.records, error=e)
        return ExecutionResult(success=True, records=recorder.records)

    # =========================================================================
    # Statements
    # =========================================================================

    def _execute_statements(self, statements: List[Statement], ctx: ExecutionContext) -> None:
        for stmt in statements:
            self._execute_statement(stmt, ctx)

    def _execute_statement(self, stmt: Statement, ctx: ExecutionContext) -> None:
        """Execute a statement."""
        if self.trace is not None:
            self.trace(stmt, ctx)

        if isinstance(stmt, VarDecl):
            self._execute_var_decl(stmt, ctx)
        elif isinstance(stmt, AssignmentStatement):
            self._execute_assignment(stmt, ctx)
        elif isinstance(stmt, UpdateStatement):
            self._execute_update(stmt, ctx)
        elif isinstance(stmt, OutputStatement):
            self._execute_output(stmt, ctx)
        elif isinstance(stmt, ExpressionStatement):
            self._execute_expression_statement(stmt, ctx)
        elif isinstance(stmt, ForStatement):
            self._execute_for(stmt, ctx)
        elif isinstance(stmt, WhileStatement):
            self._execute_while(stmt, ctx)
        elif isinstance(stmt, IfStatement):
            self._execute_if(stmt, ctx)
        elif isinstance(stmt, Block):
            self._execute_block(stmt, ctx, "block")
        else:
            raise RuntimeError(f"Unknown statement type: {type(stmt).__name__}")

    def _execute_var_decl(self, stmt: VarDecl, ctx: ExecutionContext) -> None:
        """Execute a let/const declaration."""
        if stmt.initializer is None:
            keyword = "let" if stmt.mutable else "const"
            raise error_type_mismatch(
                f"missing initializer in {keyword} declaration of '{stmt.name}'",
                stmt.span, subject=stmt.name,
            )
        value = self._evaluate(stmt.initializer, ctx)
        ctx.declare(stmt.name, value, stmt.mutable, stmt.span)

    def _execute_assignment(self, stmt: AssignmentStatement, ctx: ExecutionContext) -> None:
        """Execute a plain or compound assignment."""
        name = stmt.target.name
        if stmt.operator == TokenType.ASSIGN:
            value = self._evaluate(stmt.value, ctx)
        elif stmt.operator in COMPOUND_ASSIGNMENTS:
            current = ctx.current_for_update(name, stmt.target.span)
            rhs = self._evaluate(stmt.value, ctx)
            value = self._arithmetic(COMPOUND_ASSIGNMENTS[stmt.operator], current, rhs, stmt.span)
        else:
            raise RuntimeError(f"Unknown assignment operator: {stmt.operator}")
        ctx.assign(name, value, stmt.span)

    def _execute_update(self, stmt: UpdateStatement, ctx: ExecutionContext) -> None:
        """Execute i++ / i--."""
        name = stmt.target.name
        current = ctx.current_for_update(name, stmt.target.span)
        if current.type is not ValueKind.INTEGER:
            raise error_type_mismatch(
                f"operator '{operator_symbol(stmt.operator)}' requires an integer, "
                f"'{name}' is {current.type}",
                stmt.span, subject=name,
            )
        if stmt.operator == TokenType.INCREMENT:
            result = add(current.data, ONE)
        elif stmt.operator == TokenType.DECREMENT:
            result = subtract(current.data, ONE)
        else:
            raise RuntimeError(f"Unknown update operator: {stmt.operator}")
        ctx.assign(name, int_val(result), stmt.span)

    def _execute_output(self, stmt: OutputStatement, ctx: ExecutionContext) -> None:
        """Execute an output statement."""
        if isinstance(stmt.severity, Severity):
            severity = stmt.severity
        else:
            try:
                severity = Severity.parse(stmt.severity)
            except ValueError as e:
                raise RuntimeError(str(e)) from e
        value = self._evaluate(stmt.argument, ctx)
        ctx.emit(severity, render(value))

    def _execute_expression_statement(self, stmt: ExpressionStatement,
                                      ctx: ExecutionContext) -> None:
        """Evaluate an expression for its effect; the result is discarded."""
        if isinstance(stmt.expression, MethodCall):
            self._call_method(stmt.expression, ctx)
        else:
            self._evaluate(stmt.expression, ctx)

    def _execute_for(self, stmt: ForStatement, ctx: ExecutionContext) -> None:
        """
        Execute a counted loop.

        The loop variable lives in the loop's own scope; each pass through
        the body gets a fresh scope so body declarations never leak.
        """
        with ctx.new_scope("for-loop"):
            if stmt.init is not None:
                self._execute_statement(stmt.init, ctx)
            while True:
                if stmt.condition is not None:
                    if not self._eval_condition(stmt.condition, ctx, "for"):
                        break
                with ctx.new_scope("for-body"):
                    self._execute_statements(stmt.body.statements, ctx)
                if stmt.update is not None:
                    self._execute_statement(stmt.update, ctx)

    def _execute_while(self, stmt: WhileStatement, ctx: ExecutionContext) -> None:
        """Execute a while loop."""
        while self._eval_condition(stmt.condition, ctx, "while"):
            with ctx.new_scope("while-body"):
                self._execute_statements(stmt.body.statements, ctx)

    def _execute_if(self, stmt: IfStatement, ctx: ExecutionContext) -> None:
        """Execute an if/else statement."""
        if self._eval_condition(stmt.condition, ctx, "if"):
            self._execute_block(stmt.then_branch, ctx, "if-then")
        elif isinstance(stmt.else_branch, Block):
            self._execute_block(stmt.else_branch, ctx, "else")
        elif stmt.else_branch is not None:
            self._execute_statement(stmt.else_branch, ctx)

    def _execute_block(self, block: Block, ctx: ExecutionContext, name: str) -> None:
        """Execute a block of statements in a new scope."""
        with ctx.new_scope(name):
            self._execute_statements(block.statements, ctx)

    def _eval_condition(self, expr: Expression, ctx: ExecutionContext, keyword: str) -> bool:
        """Evaluate a loop/branch condition, which must be a boolean."""
        value = self._evaluate(expr, ctx)
        if value.type is not ValueKind.BOOLEAN:
            raise error_type_mismatch(
                f"{keyword} condition must be a boolean, found {value.type}",
                expr.span,
            )
        return value.data

    # =========================================================================
    # Expressions
    # =========================================================================

    def _evaluate(self, expr: Expression, ctx: ExecutionContext) -> Value:
        """Evaluate an expression to produce a Value."""
        if isinstance(expr, Literal):
            return self._eval_literal(expr)
        elif isinstance(expr, Identifier):
            return ctx.lookup(expr.name, expr.span)
        elif isinstance(expr, BinaryOp):
            return self._eval_binary_op(expr, ctx)
        elif isinstance(expr, UnaryOp):
            return self._eval_unary_op(expr, ctx)
        elif isinstance(expr, MethodCall):
            raise error_type_mismatch(
                f"{_callee_name(expr)}() does not produce a value",
                expr.span, subject=_callee_name(expr),
            )
        else:
            raise RuntimeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_literal(self, lit: Literal) -> Value:
        """Evaluate a literal value."""
        if lit.literal_type == TokenType.INT_LITERAL:
            try:
                return int_val(parse_integer(lit.value))
            except MalformedLiteralError as e:
                text = lit.value if isinstance(lit.value, str) else repr(lit.value)
                raise error_malformed_literal(text, lit.span) from e
        elif lit.literal_type == TokenType.STRING_LITERAL:
            return text_val(lit.value)
        elif lit.literal_type == TokenType.BOOL_LITERAL:
            if isinstance(lit.value, bool):
                return bool_val(lit.value)
            return bool_val(str(lit.value).lower() == "true")
        else:
            raise RuntimeError(f"Unknown literal type: {lit.literal_type}")

    def _eval_binary_op(self, op: BinaryOp, ctx: ExecutionContext) -> Value:
        """Evaluate a binary operation."""
        # Short-circuit for logical operators
        if op.operator in (TokenType.AND, TokenType.OR):
            left = self._require_bool(self._evaluate(op.left, ctx), op)
            if op.operator == TokenType.AND and not left:
                return FALSE
            if op.operator == TokenType.OR and left:
                return TRUE
            return bool_val(self._require_bool(self._evaluate(op.right, ctx), op))

        left = self._evaluate(op.left, ctx)
        right = self._evaluate(op.right, ctx)

        if op.operator in ARITHMETIC_OPERATORS:
            return self._arithmetic(op.operator, left, right, op.span)

        if op.operator in (TokenType.EQ, TokenType.NE):
            if left.type is not right.type:
                raise error_type_mismatch(
                    f"cannot compare {left.type} with {right.type} "
                    f"using '{operator_symbol(op.operator)}'",
                    op.span,
                )
            equal = left.data == right.data
            return bool_val(equal if op.operator == TokenType.EQ else not equal)

        if op.operator in (TokenType.LT, TokenType.LE, TokenType.GT, TokenType.GE):
            self._require_integers(op.operator, left, right, op.span)
            order = compare(left.data, right.data)
            if op.operator == TokenType.LT:
                return bool_val(order is Ordering.LESS)
            elif op.operator == TokenType.LE:
                return bool_val(order is not Ordering.GREATER)
            elif op.operator == TokenType.GT:
                return bool_val(order is Ordering.GREATER)
            return bool_val(order is not Ordering.LESS)

        raise RuntimeError(f"Unknown binary operator: {op.operator}")

    def _arithmetic(self, operator: TokenType, left: Value, right: Value,
                    span: SourceSpan) -> Value:
        """Apply an arithmetic operator to two integers."""
        self._require_integers(operator, left, right, span)
        a, b = left.data, right.data
        if operator == TokenType.PLUS:
            return int_val(add(a, b))
        elif operator == TokenType.MINUS:
            return int_val(subtract(a, b))
        elif operator == TokenType.STAR:
            return int_val(multiply(a, b))
        elif operator in (TokenType.SLASH, TokenType.PERCENT):
            if b.is_zero:
                raise error_division_by_zero(span)
            if operator == TokenType.SLASH:
                return int_val(divide(a, b))
            return int_val(remainder(a, b))
        raise RuntimeError(f"Unknown arithmetic operator: {operator}")

    def _eval_unary_op(self, op: UnaryOp, ctx: ExecutionContext) -> Value:
        """Evaluate a unary operation."""
        operand = self._evaluate(op.operand, ctx)

        if op.operator == TokenType.MINUS:
            if operand.type is not ValueKind.INTEGER:
                raise error_type_mismatch(
                    f"unary '-' requires an integer, found {operand.type}", op.span,
                )
            return int_val(-operand.data)
        elif op.operator == TokenType.NOT:
            return bool_val(not self._require_bool(operand, op))
        else:
            raise RuntimeError(f"Unknown unary operator: {op.operator}")

    def _require_integers(self, operator: TokenType, left: Value, right: Value,
                          span: SourceSpan) -> None:
        if left.type is not ValueKind.INTEGER or right.type is not ValueKind.INTEGER:
            raise error_type_mismatch(
                f"operator '{operator_symbol(operator)}' requires integer operands, "
                f"found {left.type} and {right.type}",
                span,
            )

    def _require_bool(self, value: Value, op: Expression) -> bool:
        if value.type is not ValueKind.BOOLEAN:
            raise error_type_mismatch(
                f"operator '{operator_symbol(op.operator)}' requires boolean operands, "
                f"found {value.type}",
                op.span,
            )
        return value.data

    # =========================================================================
    # Built-in calls
    # =========================================================================

    def _call_method(self, call: MethodCall, ctx: ExecutionContext) -> None:
        """Call a built-in object method such as console.log."""
        if not isinstance(call.object, Identifier):
            raise RuntimeError(f"Unsupported call receiver: {type(call.object).__name__}")

        object_name = call.object.name
        if not ctx.is_defined(object_name) and self.builtins.has_object(object_name):
            method = self.builtins.get_method(object_name, call.method)
        else:
            # Program variables have no methods; unknown names are undefined
            ctx.lookup(object_name, call.object.span)
            method = None
        if method is None:
            raise error_type_mismatch(
                f"{_callee_name(call)} is not a function", call.span,
                subject=_callee_name(call),
            )
        args = [self._evaluate(arg, ctx) for arg in call.arguments]
        method.implementation(ctx, args)


class _RecordingSink:
    """Forwards records to another sink, keeping a copy."""

    def __init__(self, target: OutputSink):
        self.target = target
        self.records: List[OutputRecord] = []

    def emit(self, severity: Severity, text: str) -> None:
        self.records.append(OutputRecord(severity, text))
        self.target.emit(severity, text)


def _callee_name(call: MethodCall) -> str:
    receiver = call.object.name if isinstance(call.object, Identifier) else "<expr>"
    return f"{receiver}.{call.method}"


# Convenience function for simple execution
def execute(program: Program, sink: OutputSink = None, trace: TraceHook = None) -> ExecutionResult:
    """
    Execute a program and collect its output.

    This is a convenience wrapper around Interpreter.execute().
    """
    interpreter = Interpreter(sink=sink, trace=trace)
    return interpreter.execute(program)
