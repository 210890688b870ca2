"""
Source positions and token kinds shared by the V12 AST.

The lexer and parser live outside this package; these types are the
contract an external parser uses to describe literal kinds, operators
and source locations in the AST it hands to the evaluator.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


class TokenType(Enum):
    """Literal kinds and operators recognized in V12 programs."""

    # --- Literals ---
    INT_LITERAL = auto()        # 42, 1087987987987987...
    STRING_LITERAL = auto()     # "Hello, V12!"
    BOOL_LITERAL = auto()       # true, false

    # --- Arithmetic ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /  (truncating integer division)
    PERCENT = auto()            # %

    # --- Comparison ---
    EQ = auto()                 # ==
    NE = auto()                 # !=
    LT = auto()                 # <
    LE = auto()                 # <=
    GT = auto()                 # >
    GE = auto()                 # >=

    # --- Logical ---
    AND = auto()                # &&
    OR = auto()                 # ||
    NOT = auto()                # !

    # --- Assignment / update ---
    ASSIGN = auto()             # =
    PLUS_ASSIGN = auto()        # +=
    MINUS_ASSIGN = auto()       # -=
    STAR_ASSIGN = auto()        # *=
    INCREMENT = auto()          # ++
    DECREMENT = auto()          # --


# Operator spellings as they appear in source text
OPERATOR_SYMBOLS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "==": TokenType.EQ,
    "===": TokenType.EQ,
    "!=": TokenType.NE,
    "!==": TokenType.NE,
    "<": TokenType.LT,
    "<=": TokenType.LE,
    ">": TokenType.GT,
    ">=": TokenType.GE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "!": TokenType.NOT,
    "=": TokenType.ASSIGN,
    "+=": TokenType.PLUS_ASSIGN,
    "-=": TokenType.MINUS_ASSIGN,
    "*=": TokenType.STAR_ASSIGN,
    "++": TokenType.INCREMENT,
    "--": TokenType.DECREMENT,
}

ARITHMETIC_OPERATORS = frozenset({
    TokenType.PLUS, TokenType.MINUS, TokenType.STAR,
    TokenType.SLASH, TokenType.PERCENT,
})

COMPARISON_OPERATORS = frozenset({
    TokenType.EQ, TokenType.NE,
    TokenType.LT, TokenType.LE, TokenType.GT, TokenType.GE,
})

LOGICAL_OPERATORS = frozenset({TokenType.AND, TokenType.OR})

# Compound assignment operator -> the binary operator it applies
COMPOUND_ASSIGNMENTS = {
    TokenType.PLUS_ASSIGN: TokenType.PLUS,
    TokenType.MINUS_ASSIGN: TokenType.MINUS,
    TokenType.STAR_ASSIGN: TokenType.STAR,
}


def operator_symbol(op: TokenType) -> str:
    """Return the canonical source spelling of an operator."""
    for symbol, token_type in OPERATOR_SYMBOLS.items():
        if token_type is op:
            return symbol
    return op.name


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int = 0     # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"

    @classmethod
    def at(cls, line: int, column: int = 1, filename: Optional[str] = None) -> "SourceSpan":
        """Create a zero-width span at a single position."""
        loc = SourceLocation(line=line, column=column, filename=filename)
        return cls(start=loc, end=loc)


# Span used for nodes built without source positions (tests, generated ASTs)
NO_SPAN = SourceSpan.at(0, 0)
