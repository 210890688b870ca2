"""
V12-specific exceptions and error handling.

Error code ranges:
- E1xx: Program document (loader) errors
- E4xx: Evaluation errors
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E101, E401, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None
    hints: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: severity[code]: message
        header = f"{self.severity.value}[{self.code}]: {self.message}"
        if self.span is not None and self.span.start.line > 0:
            header = f"{self.span.start}: {header}"
        parts.append(header)

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)


class V12Error(Exception):
    """Base exception for V12 errors."""

    def __init__(self, diagnostic: Diagnostic, subject: Optional[str] = None):
        self.diagnostic = diagnostic
        self.subject = subject  # Offending identifier or literal text
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    def __str__(self) -> str:
        return self.diagnostic.format()


class LoaderError(V12Error):
    """Malformed program document (E1xx)."""
    pass


class EvaluationError(V12Error):
    """Error raised while evaluating a program (E4xx)."""
    pass


class MalformedLiteralError(EvaluationError):
    """Literal text is not a valid digit sequence (E401)."""
    pass


class RedeclarationError(EvaluationError):
    """Identifier declared twice in one scope frame (E402)."""
    pass


class UndefinedVariableError(EvaluationError):
    """Identifier not bound in any active scope frame (E403)."""
    pass


class ImmutableAssignmentError(EvaluationError):
    """Assignment to a const binding (E404)."""
    pass


class TypeError(EvaluationError):
    """Operator or condition applied to incompatible value kinds (E405)."""
    pass


class DivisionByZeroError(EvaluationError):
    """Division or remainder by the integer zero (E406)."""
    pass


def _error(code: str, message: str, span: Optional[SourceSpan],
           hints: List[str] = None) -> Diagnostic:
    return Diagnostic(
        code=code,
        message=message,
        severity=ErrorSeverity.ERROR,
        span=span,
        hints=hints or [],
    )


# --- Loader error codes ---

def error_invalid_document(message: str, span: SourceSpan = None) -> LoaderError:
    """E101: Malformed program document."""
    return LoaderError(_error("E101", message, span))


# --- Evaluation error codes ---

def error_malformed_literal(text: str, span: SourceSpan = None) -> MalformedLiteralError:
    """E401: Malformed integer literal."""
    diag = _error(
        "E401",
        f"malformed integer literal '{text}'",
        span,
        hints=["integer literals are decimal digits with an optional leading '-'"],
    )
    return MalformedLiteralError(diag, subject=text)


def error_redeclaration(name: str, span: SourceSpan = None) -> RedeclarationError:
    """E402: Identifier already declared in this scope."""
    diag = _error("E402", f"identifier '{name}' has already been declared", span)
    return RedeclarationError(diag, subject=name)


def error_undefined_variable(name: str, span: SourceSpan = None) -> UndefinedVariableError:
    """E403: Undefined identifier."""
    diag = _error("E403", f"'{name}' is not defined", span)
    return UndefinedVariableError(diag, subject=name)


def error_immutable_assignment(name: str, span: SourceSpan = None) -> ImmutableAssignmentError:
    """E404: Assignment to constant variable."""
    diag = _error(
        "E404",
        f"assignment to constant variable '{name}'",
        span,
        hints=[f"declare '{name}' with 'let' to allow reassignment"],
    )
    return ImmutableAssignmentError(diag, subject=name)


def error_type_mismatch(message: str, span: SourceSpan = None,
                        subject: str = None) -> TypeError:
    """E405: Value kind mismatch."""
    return TypeError(_error("E405", message, span), subject=subject)


def error_division_by_zero(span: SourceSpan = None) -> DivisionByZeroError:
    """E406: Division by zero."""
    return DivisionByZeroError(_error("E406", "division by zero", span))


class DiagnosticCollector:
    """Collects diagnostics during static checking."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self._error_count >= self.max_errors

