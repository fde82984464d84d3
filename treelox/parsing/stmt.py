from dataclasses import dataclass
from typing import List, Optional

from treelox.lexing.token import Token
from treelox.parsing.expr import Expr, VariableExpr


class Stmt:
    """Base class for Lox statements."""


@dataclass(eq=False)
class BlockStmt(Stmt):
    """A group of statements that is evaluated in its own scope."""
    statements: List[Stmt]


@dataclass(eq=False)
class FunctionStmt(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]  # Executed directly in the call's scope, not wrapped in a further block.


@dataclass(eq=False)
class ClassStmt(Stmt):
    name: Token
    superclass: Optional[VariableExpr]
    methods: List[FunctionStmt]


@dataclass(eq=False)
class ExpressionStmt(Stmt):
    expression: Expr


@dataclass(eq=False)
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class PrintStmt(Stmt):
    expression: Expr


@dataclass(eq=False)
class ReturnStmt(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class VarStmt(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt
