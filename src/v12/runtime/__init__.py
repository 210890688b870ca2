"""
V12 Runtime - Tree-walking interpreter for V12 programs.

This module provides:
- Interpreter: Executes a parsed Program
- Value: Runtime values (integer, text, boolean)
- ExecutionContext: Scope chain and binding table
- Output sinks: Where console output goes
- BuiltinRegistry: The console object
"""

from .values import (
    Value,
    ValueKind,
    int_val,
    text_val,
    bool_val,
    render,
    TRUE,
    FALSE,
)

from .sink import (
    Severity,
    OutputSink,
    OutputRecord,
    MemorySink,
    ConsoleSink,
)

from .context import (
    Binding,
    Scope,
    ExecutionContext,
    create_context,
)

from .builtins import (
    BuiltinMethod,
    BuiltinRegistry,
    get_builtin_registry,
)

from .interpreter import (
    Interpreter,
    ExecutionResult,
    execute,
)

__all__ = [
    # Values
    'Value',
    'ValueKind',
    'int_val',
    'text_val',
    'bool_val',
    'render',
    'TRUE',
    'FALSE',

    # Sinks
    'Severity',
    'OutputSink',
    'OutputRecord',
    'MemorySink',
    'ConsoleSink',

    # Context
    'Binding',
    'Scope',
    'ExecutionContext',
    'create_context',

    # Builtins
    'BuiltinMethod',
    'BuiltinRegistry',
    'get_builtin_registry',

    # Interpreter
    'Interpreter',
    'ExecutionResult',
    'execute',
]
