"""
Output sinks for V12 programs.

The interpreter never prints. Every output statement becomes one
``emit(severity, text)`` call on the sink it was given, in program order.
"""

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, List, Optional, Protocol


class Severity(Enum):
    """Classification of an output record."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @classmethod
    def parse(cls, name: str) -> "Severity":
        """Look up a severity by name ('info', 'warn', 'error')."""
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(f"Unknown severity: {name!r}") from None


class OutputSink(Protocol):
    """Consumer of classified output records."""

    def emit(self, severity: Severity, text: str) -> None:
        ...


@dataclass(frozen=True)
class OutputRecord:
    """One emitted line of program output."""
    severity: Severity
    text: str

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.text}"


@dataclass
class MemorySink:
    """Captures records in memory, in emission order."""
    records: List[OutputRecord] = field(default_factory=list)

    def emit(self, severity: Severity, text: str) -> None:
        self.records.append(OutputRecord(severity, text))

    @property
    def texts(self) -> List[str]:
        return [r.text for r in self.records]

    def by_severity(self, severity: Severity) -> List[OutputRecord]:
        return [r for r in self.records if r.severity is severity]

    def clear(self) -> None:
        self.records.clear()


# ANSI escape codes
RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
YELLOW = "\033[33m"

_STYLES = {
    Severity.INFO: "",
    Severity.WARN: YELLOW,
    Severity.ERROR: BOLD + RED,
}


class ConsoleSink:
    """
    Writes records to the terminal.

    Info goes to stdout; warnings and errors go to stderr, colored yellow
    and bold red when `color` is enabled.
    """

    def __init__(self, color: bool = True, stdout: Optional[IO[str]] = None,
                 stderr: Optional[IO[str]] = None):
        self.color = color
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdout(self) -> IO[str]:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> IO[str]:
        return self._stderr if self._stderr is not None else sys.stderr

    def emit(self, severity: Severity, text: str) -> None:
        stream = self.stdout if severity is Severity.INFO else self.stderr
        style = _STYLES[severity] if self.color else ""
        if style:
            stream.write(f"{style}{text}{RESET}\n")
        else:
            stream.write(f"{text}\n")
        stream.flush()
