"""Expression nodes.

Nodes are compared and hashed by identity (`eq=False`): the interpreter keys its
table of resolved scope distances on the node objects themselves, so two textually
identical references at different places in the source must stay distinct."""

from dataclasses import dataclass
from typing import List, Optional

from treelox.language.lox_types import LoxPrimitive
from treelox.lexing.token import Token


class Expr:
    """Base class for expressions which have differing attributes."""


@dataclass(eq=False)
class AssignExpr(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class BinaryExpr(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class CallExpr(Expr):
    callee: Expr
    paren: Token  # The closing parenthesis, used to locate errors.
    arguments: List[Expr]


@dataclass(eq=False)
class GetExpr(Expr):
    target: Expr
    name: Token


@dataclass(eq=False)
class GroupingExpr(Expr):
    expression: Expr


@dataclass(eq=False)
class LiteralExpr(Expr):
    value: LoxPrimitive


@dataclass(eq=False)
class LogicalExpr(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class SetExpr(Expr):
    target: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class SuperExpr(Expr):
    keyword: Token
    method: Token


@dataclass(eq=False)
class ThisExpr(Expr):
    keyword: Token


@dataclass(eq=False)
class UnaryExpr(Expr):
    operator: Token
    right: Expr


@dataclass(eq=False)
class VariableExpr(Expr):
    name: Token


def binding_name(expr: Expr) -> Optional[Token]:
    """The token naming the binding a resolvable expression refers to."""
    if isinstance(expr, (AssignExpr, VariableExpr)):
        return expr.name
    if isinstance(expr, (SuperExpr, ThisExpr)):
        return expr.keyword
    return None
