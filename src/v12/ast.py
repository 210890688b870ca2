"""
Abstract Syntax Tree (AST) node definitions for V12 programs.

The AST is produced by an external parser (or by ``v12.loader`` from a
serialized document) and is only read by the evaluator, never mutated.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Union
from abc import ABC
from .tokens import SourceSpan, TokenType, NO_SPAN


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Literal(Expression):
    """A literal value.

    Integer literals keep their source text (``value`` is a str) so that
    operands of any length reach the BigInt engine untruncated.
    """
    value: Union[str, bool]
    literal_type: TokenType  # INT_LITERAL, STRING_LITERAL, BOOL_LITERAL


@dataclass
class Identifier(Expression):
    """A variable reference."""
    name: str


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, i < 10, x && y)."""
    left: Expression
    operator: TokenType
    right: Expression


@dataclass
class UnaryOp(Expression):
    """A unary operation (e.g., -n, !done)."""
    operator: TokenType
    operand: Expression


@dataclass
class MethodCall(Expression):
    """A method call on a named object (e.g., console.log(x))."""
    object: Expression
    method: str
    arguments: List[Expression] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class VarDecl(Statement):
    """A variable declaration.

        let x = 0;      # mutable
        const y = 1;    # immutable
    """
    name: str
    mutable: bool
    initializer: Optional[Expression]


@dataclass
class AssignmentStatement(Statement):
    """An assignment to an existing variable (x = 5, x += 1)."""
    target: Identifier
    value: Expression
    operator: TokenType = TokenType.ASSIGN


@dataclass
class UpdateStatement(Statement):
    """An increment or decrement (i++, i--)."""
    target: Identifier
    operator: TokenType  # INCREMENT or DECREMENT


@dataclass
class OutputStatement(Statement):
    """Emit a value to the output sink with a severity."""
    severity: str  # "info", "warn" or "error"
    argument: Expression


@dataclass
class ExpressionStatement(Statement):
    """An expression evaluated for its effect (e.g., console.log(i))."""
    expression: Expression


@dataclass
class Block(Statement):
    """A braced block of statements with its own scope."""
    statements: List[Statement] = field(default_factory=list)


@dataclass
class ForStatement(Statement):
    """A counted loop: for (init; condition; update) body.

    ``init`` runs once in the loop's own scope; ``body`` runs in a fresh
    scope on every iteration. Any of init, condition and update may be
    omitted; a missing condition is always true.
    """
    init: Optional[Statement]
    condition: Optional[Expression]
    update: Optional[Statement]
    body: Block


@dataclass
class WhileStatement(Statement):
    """A while loop (while (condition) body)."""
    condition: Expression
    body: Block


@dataclass
class IfStatement(Statement):
    """An if statement with an optional else branch."""
    condition: Expression
    then_branch: Block
    else_branch: Optional[Statement] = None  # Block or a nested IfStatement


@dataclass
class Program(AstNode):
    """A complete program: statements executed in order."""
    statements: List[Statement] = field(default_factory=list)
    name: str = "<program>"


# =============================================================================
# Builders
# =============================================================================
#
# Short constructors for ASTs assembled in code, where source positions
# are not available.

def int_lit(text: Union[str, int], span: SourceSpan = NO_SPAN) -> Literal:
    return Literal(span=span, value=str(text), literal_type=TokenType.INT_LITERAL)


def str_lit(text: str, span: SourceSpan = NO_SPAN) -> Literal:
    return Literal(span=span, value=text, literal_type=TokenType.STRING_LITERAL)


def bool_lit(flag: bool, span: SourceSpan = NO_SPAN) -> Literal:
    return Literal(span=span, value=bool(flag), literal_type=TokenType.BOOL_LITERAL)


def ident(name: str, span: SourceSpan = NO_SPAN) -> Identifier:
    return Identifier(span=span, name=name)


def binop(left: Expression, operator: TokenType, right: Expression,
          span: SourceSpan = NO_SPAN) -> BinaryOp:
    return BinaryOp(span=span, left=left, operator=operator, right=right)


def let(name: str, initializer: Optional[Expression], span: SourceSpan = NO_SPAN) -> VarDecl:
    return VarDecl(span=span, name=name, mutable=True, initializer=initializer)


def const(name: str, initializer: Optional[Expression], span: SourceSpan = NO_SPAN) -> VarDecl:
    return VarDecl(span=span, name=name, mutable=False, initializer=initializer)


def assign(name: str, value: Expression, span: SourceSpan = NO_SPAN) -> AssignmentStatement:
    return AssignmentStatement(span=span, target=ident(name, span), value=value)


def increment(name: str, span: SourceSpan = NO_SPAN) -> UpdateStatement:
    return UpdateStatement(span=span, target=ident(name, span), operator=TokenType.INCREMENT)


def output(severity: str, argument: Expression, span: SourceSpan = NO_SPAN) -> OutputStatement:
    return OutputStatement(span=span, severity=severity, argument=argument)


def console_call(method: str, *arguments: Expression,
                 span: SourceSpan = NO_SPAN) -> ExpressionStatement:
    call = MethodCall(span=span, object=ident("console", span), method=method,
                      arguments=list(arguments))
    return ExpressionStatement(span=span, expression=call)


def block(*statements: Statement, span: SourceSpan = NO_SPAN) -> Block:
    return Block(span=span, statements=list(statements))


def for_loop(init: Optional[Statement], condition: Optional[Expression],
             update: Optional[Statement], body: Block,
             span: SourceSpan = NO_SPAN) -> ForStatement:
    return ForStatement(span=span, init=init, condition=condition, update=update, body=body)


def program(*statements: Statement, name: str = "<program>") -> Program:
    return Program(span=NO_SPAN, statements=list(statements), name=name)
