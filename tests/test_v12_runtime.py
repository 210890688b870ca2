"""
Tests for the V12 runtime: values, sinks, scopes, builtins and the interpreter.
"""

import dataclasses
import io

import pytest

from v12.ast import (
    AssignmentStatement, IfStatement, UnaryOp, UpdateStatement, WhileStatement,
    MethodCall, ExpressionStatement, VarDecl,
    int_lit, str_lit, bool_lit, ident, binop, let, const, assign, increment,
    output, console_call, block, for_loop, program,
)
from v12.bigint import parse_integer
from v12.errors import (
    EvaluationError, MalformedLiteralError, RedeclarationError,
    UndefinedVariableError, ImmutableAssignmentError, DivisionByZeroError,
    TypeError as V12TypeError,
)
from v12.runtime import (
    Value, ValueKind, int_val, text_val, bool_val, render,
    Severity, OutputRecord, MemorySink, ConsoleSink,
    ExecutionContext, create_context,
    Interpreter, execute,
)
from v12.runtime.builtins import get_builtin_registry
from v12.runtime.sink import BOLD, RED, RESET, YELLOW
from v12.tokens import NO_SPAN, SourceSpan, TokenType


def run(*statements):
    """Execute statements as a program with an in-memory sink."""
    return execute(program(*statements))


def counted_loop(var, start, stop, *body):
    """for (let var = start; var < stop; var++) { body }"""
    return for_loop(
        let(var, int_lit(start)),
        binop(ident(var), TokenType.LT, int_lit(stop)),
        increment(var),
        block(*body),
    )


def log(expr):
    return console_call("log", expr)


def compound(name, operator, value):
    return AssignmentStatement(span=NO_SPAN, target=ident(name), value=value, operator=operator)


# --- Values ---

class TestValues:
    """Test runtime value construction and rendering."""

    def test_int_val_sources_agree(self):
        """Test that BigInt, text and int inputs give the same value."""
        assert int_val("42") == int_val(42)
        assert int_val(parse_integer("42")) == int_val(42)
        assert int_val(7).type is ValueKind.INTEGER

    def test_render_integer(self):
        assert render(int_val("-000120")) == "-120"
        assert render(int_val("0")) == "0"

    def test_render_text_verbatim(self):
        assert render(text_val("Hello, V12!")) == "Hello, V12!"
        assert render(text_val("")) == ""

    def test_render_boolean(self):
        assert render(bool_val(True)) == "true"
        assert render(bool_val(False)) == "false"

    def test_values_are_immutable(self):
        value = int_val(1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            value.data = parse_integer("2")

    def test_kind_names(self):
        assert str(ValueKind.INTEGER) == "integer"
        assert str(ValueKind.TEXT) == "text"
        assert str(ValueKind.BOOLEAN) == "boolean"

    def test_render_unknown_kind(self):
        with pytest.raises(ValueError):
            render(Value("x", "nonsense"))


# --- Sinks ---

class TestSinks:
    """Test output sinks."""

    def test_memory_sink_order(self):
        sink = MemorySink()
        sink.emit(Severity.INFO, "a")
        sink.emit(Severity.ERROR, "b")
        sink.emit(Severity.WARN, "c")
        assert sink.records == [
            OutputRecord(Severity.INFO, "a"),
            OutputRecord(Severity.ERROR, "b"),
            OutputRecord(Severity.WARN, "c"),
        ]
        assert sink.texts == ["a", "b", "c"]
        assert [r.text for r in sink.by_severity(Severity.WARN)] == ["c"]

    def test_memory_sink_clear(self):
        sink = MemorySink()
        sink.emit(Severity.INFO, "a")
        sink.clear()
        assert sink.records == []

    def test_record_str(self):
        assert str(OutputRecord(Severity.WARN, "careful")) == "[warn] careful"

    def test_severity_parse(self):
        assert Severity.parse("info") is Severity.INFO
        assert Severity.parse("WARN") is Severity.WARN
        with pytest.raises(ValueError):
            Severity.parse("debug")

    def test_console_sink_routing(self):
        """Test info to stdout, warn/error to stderr, uncolored."""
        out, err = io.StringIO(), io.StringIO()
        sink = ConsoleSink(color=False, stdout=out, stderr=err)
        sink.emit(Severity.INFO, "hello")
        sink.emit(Severity.WARN, "careful")
        sink.emit(Severity.ERROR, "broken")
        assert out.getvalue() == "hello\n"
        assert err.getvalue() == "careful\nbroken\n"

    def test_console_sink_colors(self):
        """Test yellow warnings and bold red errors."""
        out, err = io.StringIO(), io.StringIO()
        sink = ConsoleSink(color=True, stdout=out, stderr=err)
        sink.emit(Severity.INFO, "hello")
        sink.emit(Severity.WARN, "careful")
        sink.emit(Severity.ERROR, "broken")
        assert out.getvalue() == "hello\n"
        assert err.getvalue() == (
            f"{YELLOW}careful{RESET}\n"
            f"{BOLD}{RED}broken{RESET}\n"
        )


# --- Scopes and bindings ---

class TestExecutionContext:
    """Test the binding table and scope chain."""

    def test_declare_and_lookup(self):
        ctx = create_context()
        ctx.declare("x", int_val(1), mutable=True)
        assert ctx.lookup("x") == int_val(1)

    def test_redeclare_same_frame(self):
        ctx = create_context()
        ctx.declare("x", int_val(1), mutable=True)
        with pytest.raises(RedeclarationError) as exc_info:
            ctx.declare("x", int_val(2), mutable=False)
        assert exc_info.value.subject == "x"
        assert exc_info.value.code == "E402"
        assert ctx.lookup("x") == int_val(1)

    def test_shadowing_in_nested_frame(self):
        ctx = create_context()
        ctx.declare("x", int_val(1), mutable=True)
        with ctx.new_scope("inner"):
            ctx.declare("x", text_val("inner"), mutable=False)
            assert ctx.lookup("x") == text_val("inner")
        assert ctx.lookup("x") == int_val(1)

    def test_frame_bindings_discarded_on_exit(self):
        ctx = create_context()
        with ctx.new_scope():
            ctx.declare("tmp", int_val(1), mutable=True)
        assert not ctx.is_defined("tmp")
        with pytest.raises(UndefinedVariableError):
            ctx.lookup("tmp")

    def test_assign_updates_owning_frame(self):
        """Test that an inner-frame assignment reaches the outer binding."""
        ctx = create_context()
        ctx.declare("total", int_val(0), mutable=True)
        with ctx.new_scope():
            ctx.assign("total", int_val(5))
        assert ctx.lookup("total") == int_val(5)

    def test_assign_const(self):
        ctx = create_context()
        ctx.declare("y", int_val(1), mutable=False)
        with pytest.raises(ImmutableAssignmentError) as exc_info:
            ctx.assign("y", int_val(2))
        assert exc_info.value.code == "E404"
        assert ctx.lookup("y") == int_val(1)

    def test_assign_undefined(self):
        ctx = create_context()
        with pytest.raises(UndefinedVariableError) as exc_info:
            ctx.assign("ghost", int_val(2))
        assert exc_info.value.subject == "ghost"
        assert exc_info.value.code == "E403"

    def test_scope_depth(self):
        ctx = create_context()
        assert ctx.current_scope.depth == 0
        with ctx.new_scope("a"):
            with ctx.new_scope("b") as scope:
                assert scope.depth == 2
                assert scope.parent.name == "a"
        assert ctx.current_scope.name == "global"

    def test_scope_restored_after_error(self):
        ctx = create_context()
        with pytest.raises(UndefinedVariableError):
            with ctx.new_scope():
                ctx.lookup("missing")
        assert ctx.current_scope.depth == 0

    def test_emit_goes_to_sink(self):
        sink = MemorySink()
        ctx = ExecutionContext(sink=sink)
        ctx.emit(Severity.WARN, "w")
        assert sink.records == [OutputRecord(Severity.WARN, "w")]


# --- Builtins ---

class TestBuiltins:
    """Test the console built-in."""

    def test_console_methods_registered(self):
        registry = get_builtin_registry()
        for name in ("log", "info", "warn", "error"):
            assert registry.get_method("console", name) is not None
        assert registry.get_method("console", "debug") is None
        assert registry.has_object("console")
        assert not registry.has_object("Math")

    def test_multiple_arguments_space_joined(self):
        result = run(console_call("log", str_lit("sum:"), int_lit(3), bool_lit(True)))
        assert result.texts == ["sum: 3 true"]

    def test_severities(self):
        result = run(
            console_call("log", str_lit("a")),
            console_call("info", str_lit("b")),
            console_call("warn", str_lit("c")),
            console_call("error", str_lit("d")),
        )
        assert [r.severity for r in result.records] == [
            Severity.INFO, Severity.INFO, Severity.WARN, Severity.ERROR,
        ]


# --- Interpreter: loops and scoping ---

class TestLoops:
    """Test counted loops and their scopes."""

    @pytest.mark.parametrize("count", [0, 1, 3, 10])
    def test_counted_loop_emits_each_index(self, count):
        result = run(counted_loop("i", 0, count, log(ident("i"))))
        assert result.success
        assert result.texts == [str(n) for n in range(count)]

    def test_loop_with_offset_start(self):
        result = run(counted_loop("j", 2, 6, log(str_lit("Hey"))))
        assert result.texts == ["Hey"] * 4

    def test_loop_variable_not_visible_after_loop(self):
        result = run(
            counted_loop("i", 0, 2, log(ident("i"))),
            log(ident("i")),
        )
        assert not result.success
        assert isinstance(result.error, UndefinedVariableError)
        assert result.texts == ["0", "1"]

    def test_body_declarations_fresh_each_iteration(self):
        """Test that a let in the body is not a redeclaration on the next pass."""
        result = run(
            counted_loop("i", 0, 3,
                         let("doubled", binop(ident("i"), TokenType.STAR, int_lit(2))),
                         log(ident("doubled"))),
        )
        assert result.success
        assert result.texts == ["0", "2", "4"]

    def test_body_declarations_do_not_leak(self):
        result = run(
            counted_loop("i", 0, 1, let("inner", int_lit(1))),
            log(ident("inner")),
        )
        assert isinstance(result.error, UndefinedVariableError)

    def test_body_may_shadow_loop_variable(self):
        result = run(counted_loop("i", 0, 2, const("i", str_lit("shadow")), log(ident("i"))))
        assert result.success
        assert result.texts == ["shadow", "shadow"]

    def test_accumulate_into_outer_binding(self):
        result = run(
            let("total", int_lit(0)),
            counted_loop("i", 0, 5, compound("total", TokenType.PLUS_ASSIGN, ident("i"))),
            log(ident("total")),
        )
        assert result.texts == ["10"]

    def test_consecutive_loops_reuse_name(self):
        result = run(
            counted_loop("i", 0, 1, log(ident("i"))),
            counted_loop("i", 5, 6, log(ident("i"))),
        )
        assert result.texts == ["0", "5"]

    def test_while_loop(self):
        result = run(
            let("n", int_lit(3)),
            WhileStatement(
                span=NO_SPAN,
                condition=binop(ident("n"), TokenType.GT, int_lit(0)),
                body=block(log(ident("n")), compound("n", TokenType.MINUS_ASSIGN, int_lit(1))),
            ),
        )
        assert result.texts == ["3", "2", "1"]

    def test_non_boolean_condition(self):
        result = run(for_loop(let("i", int_lit(0)), ident("i"), increment("i"), block()))
        assert isinstance(result.error, V12TypeError)
        assert result.error.code == "E405"
        assert "boolean" in result.error_message


class TestScoping:
    """Test declarations, shadowing and mutability."""

    def test_block_shadowing(self):
        result = run(
            let("x", int_lit(1)),
            block(let("x", int_lit(2)), log(ident("x"))),
            log(ident("x")),
        )
        assert result.texts == ["2", "1"]

    def test_redeclaration(self):
        result = run(let("x", int_lit(1)), let("x", int_lit(2)))
        assert isinstance(result.error, RedeclarationError)
        assert result.error_message == "identifier 'x' has already been declared"

    @pytest.mark.parametrize("new_value", [int_lit(2), str_lit("two"), bool_lit(False)])
    def test_const_reassignment(self, new_value):
        """Test that a const rejects assignment whatever the new value's kind."""
        result = run(const("y", int_lit(1)), assign("y", new_value))
        assert isinstance(result.error, ImmutableAssignmentError)
        assert result.error.subject == "y"

    def test_const_compound_assignment(self):
        """Test that const is checked before the arithmetic runs."""
        result = run(const("y", str_lit("a")), compound("y", TokenType.PLUS_ASSIGN, int_lit(1)))
        assert isinstance(result.error, ImmutableAssignmentError)

    def test_const_increment(self):
        result = run(const("y", int_lit(1)), increment("y"))
        assert isinstance(result.error, ImmutableAssignmentError)

    def test_assign_undeclared(self):
        result = run(assign("ghost", int_lit(1)))
        assert isinstance(result.error, UndefinedVariableError)
        assert result.error_message == "'ghost' is not defined"

    def test_let_reassignment(self):
        result = run(let("x", int_lit(0)), assign("x", int_lit(9)), log(ident("x")))
        assert result.texts == ["9"]

    def test_decrement(self):
        result = run(
            let("x", int_lit(0)),
            UpdateStatement(span=NO_SPAN, target=ident("x"), operator=TokenType.DECREMENT),
            log(ident("x")),
        )
        assert result.texts == ["-1"]

    def test_increment_text(self):
        result = run(let("s", str_lit("a")), increment("s"))
        assert isinstance(result.error, V12TypeError)

    def test_declaration_without_initializer(self):
        result = run(VarDecl(span=NO_SPAN, name="z", mutable=False, initializer=None))
        assert isinstance(result.error, V12TypeError)
        assert "initializer" in result.error_message


# --- Interpreter: expressions ---

class TestExpressions:
    """Test operators and literal evaluation."""

    def test_big_sum(self):
        result = run(
            const("math", binop(
                int_lit("10879879879879879879879879898798701087987987987987987987987989879870"),
                TokenType.PLUS,
                int_lit("587987987989879879879879879879898798798794587987987989879879879879879879898798798794"),
            )),
            log(ident("math")),
        )
        assert result.texts == [
            "587987987989879890759759759759778678678674486786689077867867867867867867886788678664"
        ]

    @pytest.mark.parametrize("left,op,right,expected", [
        ("7", TokenType.MINUS, "10", "-3"),
        ("-7", TokenType.SLASH, "2", "-3"),
        ("-7", TokenType.PERCENT, "2", "-1"),
        ("999999999999999999", TokenType.STAR, "999999999999999999",
         "999999999999999998000000000000000001"),
    ])
    def test_arithmetic(self, left, op, right, expected):
        result = run(log(binop(int_lit(left), op, int_lit(right))))
        assert result.texts == [expected]

    @pytest.mark.parametrize("left,op,right,expected", [
        ("1", TokenType.LT, "2", "true"),
        ("-1", TokenType.LT, "-2", "false"),
        ("5", TokenType.LE, "5", "true"),
        ("5", TokenType.GE, "6", "false"),
        ("100000000000000000000", TokenType.GT, "99999999999999999999", "true"),
        ("007", TokenType.EQ, "7", "true"),
        ("7", TokenType.NE, "7", "false"),
    ])
    def test_comparison(self, left, op, right, expected):
        result = run(log(binop(int_lit(left), op, int_lit(right))))
        assert result.texts == [expected]

    def test_text_equality(self):
        result = run(log(binop(str_lit("a"), TokenType.EQ, str_lit("a"))))
        assert result.texts == ["true"]

    def test_mixed_kind_equality(self):
        result = run(log(binop(str_lit("1"), TokenType.EQ, int_lit(1))))
        assert isinstance(result.error, V12TypeError)

    def test_text_arithmetic_rejected(self):
        result = run(log(binop(str_lit("a"), TokenType.PLUS, int_lit(1))))
        assert isinstance(result.error, V12TypeError)
        assert result.error_message == (
            "operator '+' requires integer operands, found text and integer"
        )

    def test_division_by_zero(self):
        span = SourceSpan.at(4, 9)
        result = run(log(binop(int_lit(1), TokenType.SLASH, int_lit(0), span=span)))
        assert isinstance(result.error, DivisionByZeroError)
        assert result.error.code == "E406"
        assert result.diagnostic.span == span

    def test_remainder_by_zero(self):
        result = run(log(binop(int_lit(1), TokenType.PERCENT, int_lit("-0"))))
        assert isinstance(result.error, DivisionByZeroError)

    def test_logical_short_circuit(self):
        """Test that the right operand is not evaluated when not needed."""
        result = run(
            log(binop(bool_lit(False), TokenType.AND, ident("undefined_name"))),
            log(binop(bool_lit(True), TokenType.OR, ident("undefined_name"))),
            log(binop(bool_lit(True), TokenType.AND, bool_lit(False))),
        )
        assert result.success
        assert result.texts == ["false", "true", "false"]

    def test_logical_requires_booleans(self):
        result = run(log(binop(int_lit(1), TokenType.AND, bool_lit(True))))
        assert isinstance(result.error, V12TypeError)

    def test_unary(self):
        result = run(
            log(UnaryOp(span=NO_SPAN, operator=TokenType.MINUS, operand=int_lit(5))),
            log(UnaryOp(span=NO_SPAN, operator=TokenType.NOT, operand=bool_lit(False))),
        )
        assert result.texts == ["-5", "true"]

    def test_unary_minus_on_boolean(self):
        result = run(log(UnaryOp(span=NO_SPAN, operator=TokenType.MINUS, operand=bool_lit(True))))
        assert isinstance(result.error, V12TypeError)

    def test_malformed_literal(self):
        result = run(log(int_lit("12x")))
        assert isinstance(result.error, MalformedLiteralError)
        assert result.error.subject == "12x"

    def test_if_else(self):
        result = run(
            let("x", int_lit(3)),
            IfStatement(
                span=NO_SPAN,
                condition=binop(ident("x"), TokenType.GT, int_lit(5)),
                then_branch=block(log(str_lit("big"))),
                else_branch=block(log(str_lit("small"))),
            ),
        )
        assert result.texts == ["small"]


# --- Interpreter: output and calls ---

class TestOutput:
    """Test output statements, method calls and failure behavior."""

    def test_output_statement(self):
        result = run(output("warn", str_lit("w")), output("info", int_lit(1)))
        assert result.records == [
            OutputRecord(Severity.WARN, "w"),
            OutputRecord(Severity.INFO, "1"),
        ]

    def test_unknown_console_method(self):
        result = run(console_call("debug", str_lit("x")))
        assert isinstance(result.error, V12TypeError)
        assert result.error_message == "console.debug is not a function"

    def test_unknown_receiver(self):
        call = MethodCall(span=NO_SPAN, object=ident("Math"), method="max", arguments=[])
        result = run(ExpressionStatement(span=NO_SPAN, expression=call))
        assert isinstance(result.error, UndefinedVariableError)

    def test_method_on_variable(self):
        call = MethodCall(span=NO_SPAN, object=ident("x"), method="log", arguments=[])
        result = run(let("x", int_lit(1)), ExpressionStatement(span=NO_SPAN, expression=call))
        assert isinstance(result.error, V12TypeError)

    def test_call_as_value(self):
        call = MethodCall(span=NO_SPAN, object=ident("console"), method="log", arguments=[])
        result = run(let("x", call))
        assert isinstance(result.error, V12TypeError)
        assert "does not produce a value" in result.error_message

    def test_records_before_error_remain(self):
        result = run(
            log(str_lit("before")),
            log(ident("missing")),
            log(str_lit("after")),
        )
        assert not result.success
        assert result.texts == ["before"]

    def test_run_raises(self):
        interpreter = Interpreter()
        with pytest.raises(EvaluationError):
            interpreter.run(program(log(ident("missing"))))

    def test_run_returns_context(self):
        ctx = Interpreter().run(program(const("y", int_lit(1))))
        assert ctx.lookup("y") == int_val(1)

    def test_custom_sink(self):
        sink = MemorySink()
        execute(program(log(str_lit("hi"))), sink=sink)
        assert sink.texts == ["hi"]

    def test_reused_interpreter_reports_each_run_separately(self):
        """Test that a result holds only the output of its own run."""
        interpreter = Interpreter()
        prog = program(log(int_lit(1)))
        assert interpreter.execute(prog).texts == ["1"]
        assert interpreter.execute(prog).texts == ["1"]
        assert interpreter.sink.texts == ["1", "1"]

    def test_records_with_console_sink(self):
        """Test that results carry records when output goes to the terminal."""
        out, err = io.StringIO(), io.StringIO()
        sink = ConsoleSink(color=False, stdout=out, stderr=err)
        result = execute(program(log(str_lit("hi")), console_call("warn", str_lit("w"))), sink=sink)
        assert result.records == [
            OutputRecord(Severity.INFO, "hi"),
            OutputRecord(Severity.WARN, "w"),
        ]
        assert out.getvalue() == "hi\n"
        assert err.getvalue() == "w\n"

    def test_trace_hook(self):
        seen = []
        execute(
            program(let("x", int_lit(1)), counted_loop("i", 0, 2, log(ident("i")))),
            trace=lambda stmt, ctx: seen.append((type(stmt).__name__, ctx.current_scope.depth)),
        )
        assert seen == [
            ("VarDecl", 0),
            ("ForStatement", 0),
            ("VarDecl", 1),
            ("ExpressionStatement", 2),
            ("UpdateStatement", 1),
            ("ExpressionStatement", 2),
            ("UpdateStatement", 1),
        ]
