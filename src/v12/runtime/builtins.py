"""
Built-in objects for the V12 interpreter.

Currently this is the `console` object, whose methods route rendered
arguments to the output sink with a fixed severity.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .values import Value, render
from .sink import Severity


@dataclass
class BuiltinMethod:
    """A method on a built-in object."""
    object_name: str
    name: str
    implementation: Callable[["ExecutionContext", List[Value]], None]
    description: str = ""


class BuiltinRegistry:
    """
    Registry of built-in object methods, keyed by (object, method).
    """

    def __init__(self):
        self._methods: Dict[Tuple[str, str], BuiltinMethod] = {}
        self._register_all()

    def get_method(self, object_name: str, method_name: str) -> Optional[BuiltinMethod]:
        """Look up a method by object and method name."""
        return self._methods.get((object_name, method_name))

    def register(self, method: BuiltinMethod) -> None:
        """Register a method."""
        self._methods[(method.object_name, method.name)] = method

    def has_object(self, object_name: str) -> bool:
        return any(obj == object_name for obj, _ in self._methods)

    def _register_all(self) -> None:
        self._register_console()

    # --- console ---

    def _register_console(self) -> None:
        """Register console.log/info/warn/error."""

        def _writer(severity: Severity):
            def _write(ctx, args: List[Value]) -> None:
                # Multiple arguments print space-separated, as console.log does
                ctx.emit(severity, " ".join(render(arg) for arg in args))
            return _write

        self.register(BuiltinMethod("console", "log", _writer(Severity.INFO),
                                    "Print to standard output"))
        self.register(BuiltinMethod("console", "info", _writer(Severity.INFO),
                                    "Alias for console.log"))
        self.register(BuiltinMethod("console", "warn", _writer(Severity.WARN),
                                    "Print a warning"))
        self.register(BuiltinMethod("console", "error", _writer(Severity.ERROR),
                                    "Print an error"))


# Global registry instance
_registry: Optional[BuiltinRegistry] = None


def get_builtin_registry() -> BuiltinRegistry:
    """Get the global built-in registry."""
    global _registry
    if _registry is None:
        _registry = BuiltinRegistry()
    return _registry
