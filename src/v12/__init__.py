"""
V12 - evaluator core for a minimal JavaScript-flavoured scripting language.

This package provides:
- BigInt engine: exact integer arithmetic of unbounded size
- AST: the node types an external parser produces
- Interpreter: executes a Program, sending output to a sink
- Loader: reads programs serialized as YAML/JSON AST documents
- Checker: reports scope and mutability errors without running

Usage:
    from v12 import load_program, execute

    program = load_program("examples/all.yaml")
    result = execute(program)
    if result.success:
        for record in result.records:
            print(record.severity.value, record.text)
    else:
        print(result.diagnostic.format())
"""

__version__ = "0.1.0"

from .tokens import (
    TokenType,
    SourceLocation,
    SourceSpan,
)

from .bigint import (
    BigInt,
    Ordering,
    parse_integer,
    from_int,
    to_decimal_string,
    add,
    subtract,
    multiply,
    divide,
    remainder,
    negate,
    compare,
    compare_magnitude,
)

from .ast import (
    AstNode,
    Program,
    # Expressions
    Expression,
    Literal,
    Identifier,
    BinaryOp,
    UnaryOp,
    MethodCall,
    # Statements
    Statement,
    VarDecl,
    AssignmentStatement,
    UpdateStatement,
    OutputStatement,
    ExpressionStatement,
    Block,
    ForStatement,
    WhileStatement,
    IfStatement,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    V12Error,
    LoaderError,
    EvaluationError,
    MalformedLiteralError,
    RedeclarationError,
    UndefinedVariableError,
    ImmutableAssignmentError,
    DivisionByZeroError,
)

from .runtime import (
    Value,
    ValueKind,
    Severity,
    OutputSink,
    OutputRecord,
    MemorySink,
    ConsoleSink,
    ExecutionContext,
    Interpreter,
    ExecutionResult,
    execute,
)

from .loader import (
    load_program,
    loads_program,
    program_from_data,
)

from .checker import (
    Checker,
    CheckResult,
    check,
)

__all__ = [
    '__version__',
    # Tokens
    'TokenType',
    'SourceLocation',
    'SourceSpan',
    # BigInt
    'BigInt',
    'Ordering',
    'parse_integer',
    'from_int',
    'to_decimal_string',
    'add',
    'subtract',
    'multiply',
    'divide',
    'remainder',
    'negate',
    'compare',
    'compare_magnitude',
    # AST
    'AstNode',
    'Program',
    'Expression',
    'Literal',
    'Identifier',
    'BinaryOp',
    'UnaryOp',
    'MethodCall',
    'Statement',
    'VarDecl',
    'AssignmentStatement',
    'UpdateStatement',
    'OutputStatement',
    'ExpressionStatement',
    'Block',
    'ForStatement',
    'WhileStatement',
    'IfStatement',
    # Errors (the E405 TypeError is available as v12.errors.TypeError)
    'ErrorSeverity',
    'Diagnostic',
    'DiagnosticCollector',
    'V12Error',
    'LoaderError',
    'EvaluationError',
    'MalformedLiteralError',
    'RedeclarationError',
    'UndefinedVariableError',
    'ImmutableAssignmentError',
    'DivisionByZeroError',
    # Runtime
    'Value',
    'ValueKind',
    'Severity',
    'OutputSink',
    'OutputRecord',
    'MemorySink',
    'ConsoleSink',
    'ExecutionContext',
    'Interpreter',
    'ExecutionResult',
    'execute',
    # Loader
    'load_program',
    'loads_program',
    'program_from_data',
    # Checker
    'Checker',
    'CheckResult',
    'check',
]
