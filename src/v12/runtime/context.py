"""
Execution context for the V12 interpreter.

Manages the scope chain (binding tables with mutability tags) and the
sink that receives program output.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Iterator
from contextlib import contextmanager

from .values import Value
from .sink import OutputSink, MemorySink, Severity
from ..errors import (
    error_redeclaration,
    error_undefined_variable,
    error_immutable_assignment,
)
from ..tokens import SourceSpan


@dataclass
class Binding:
    """A named value and whether it may be reassigned."""
    name: str
    value: Value
    mutable: bool


@dataclass
class Scope:
    """
    A single scope frame containing variable bindings.

    Scopes form a chain via the `parent` field for lexical scoping.
    Reads see through to outer frames; writes go to the frame that owns
    the binding.
    """
    bindings: Dict[str, Binding] = field(default_factory=dict)
    parent: Optional["Scope"] = None
    name: str = "anonymous"  # For debugging

    def find(self, name: str) -> Optional[Binding]:
        """Look up a binding in this scope or parent scopes."""
        scope = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def owns(self, name: str) -> bool:
        """Check if the binding lives in this frame (not a parent)."""
        return name in self.bindings

    @property
    def depth(self) -> int:
        """Number of frames from the global scope (which is depth 0)."""
        depth = 0
        scope = self.parent
        while scope is not None:
            depth += 1
            scope = scope.parent
        return depth


@dataclass
class ExecutionContext:
    """
    The full execution context for interpreting one V12 program.

    Tracks:
    - The scope chain
    - The output sink
    - Program name (for messages)
    """
    current_scope: Scope = field(default_factory=lambda: Scope(name="global"))
    sink: OutputSink = field(default_factory=MemorySink)
    program_name: str = "<program>"

    # -- Binding table -------------------------------------------------

    def declare(self, name: str, value: Value, mutable: bool,
                span: SourceSpan = None) -> None:
        """
        Declare a new binding in the current frame.

        Shadowing a binding from an outer frame is allowed.

        Raises:
            RedeclarationError: if the current frame already binds `name`.
        """
        if self.current_scope.owns(name):
            raise error_redeclaration(name, span)
        self.current_scope.bindings[name] = Binding(name, value, mutable)

    def lookup(self, name: str, span: SourceSpan = None) -> Value:
        """
        Resolve a name, innermost frame first.

        Raises:
            UndefinedVariableError: if no active frame binds `name`.
        """
        binding = self.current_scope.find(name)
        if binding is None:
            raise error_undefined_variable(name, span)
        return binding.value

    def assign(self, name: str, value: Value, span: SourceSpan = None) -> None:
        """
        Replace the value of an existing binding in the frame that owns it.

        Raises:
            UndefinedVariableError: if no active frame binds `name`.
            ImmutableAssignmentError: if the binding was declared const.
        """
        self._writable_binding(name, span).value = value

    def current_for_update(self, name: str, span: SourceSpan = None) -> Value:
        """
        Return the value of a binding about to be updated in place (x += 1, x++).

        Raises the same errors as `assign`, before the new value is computed.
        """
        return self._writable_binding(name, span).value

    def _writable_binding(self, name: str, span: SourceSpan) -> Binding:
        binding = self.current_scope.find(name)
        if binding is None:
            raise error_undefined_variable(name, span)
        if not binding.mutable:
            raise error_immutable_assignment(name, span)
        return binding

    def is_defined(self, name: str) -> bool:
        return self.current_scope.find(name) is not None

    @contextmanager
    def new_scope(self, name: str = "block") -> Iterator[Scope]:
        """
        Context manager to create a new nested scope.

        Usage:
            with ctx.new_scope("for-loop"):
                # variables declared here are local to this scope
                ctx.declare("i", int_val(0), mutable=True)
        """
        old_scope = self.current_scope
        self.current_scope = Scope(parent=old_scope, name=name)
        try:
            yield self.current_scope
        finally:
            self.current_scope = old_scope

    # -- Output --------------------------------------------------------

    def emit(self, severity: Severity, text: str) -> None:
        """Route one output record to the sink."""
        self.sink.emit(severity, text)


def create_context(sink: OutputSink = None, program_name: str = "<program>") -> ExecutionContext:
    """
    Create a fresh execution context with an empty global scope.

    Args:
        sink: Where output records go (defaults to an in-memory sink)
        program_name: Name used in messages
    """
    return ExecutionContext(
        sink=sink if sink is not None else MemorySink(),
        program_name=program_name,
    )
