from __future__ import annotations

from enum import IntEnum, auto
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from treelox.lexing.token import Tk, Token
from treelox.parsing.expr import *
from treelox.parsing.stmt import *
from treelox.utilities.error import LoxErrorHandler, LoxSyntaxError
from treelox.utilities.streamview import StreamView

T = TypeVar("T")


class Prec(IntEnum):
    """Binding strength, loosest first."""
    NONE = auto()
    ASSIGNMENT = auto()
    OR = auto()
    AND = auto()
    EQUALITY = auto()
    COMPARISON = auto()
    TERM = auto()
    FACTOR = auto()
    UNARY = auto()
    CALL = auto()


def _left_assoc(prec: Prec) -> Tuple[int, int]:
    return prec, prec


def _right_assoc(prec: Prec) -> Tuple[int, int]:
    # Parsing the RHS one level looser lets an operator of the same strength nest to the right.
    return prec, prec - 1


# Infix and postfix operators: (binding power towards the left, precedence to parse the RHS with).
BINDING_POWER: Dict[Tk, Tuple[int, int]] = {
    Tk.EQUAL: _right_assoc(Prec.ASSIGNMENT),
    Tk.OR: _left_assoc(Prec.OR),
    Tk.AND: _left_assoc(Prec.AND),
    Tk.BANG_EQUAL: _left_assoc(Prec.EQUALITY),
    Tk.EQUAL_EQUAL: _left_assoc(Prec.EQUALITY),
    Tk.GREATER: _left_assoc(Prec.COMPARISON),
    Tk.GREATER_EQUAL: _left_assoc(Prec.COMPARISON),
    Tk.LESS: _left_assoc(Prec.COMPARISON),
    Tk.LESS_EQUAL: _left_assoc(Prec.COMPARISON),
    Tk.MINUS: _left_assoc(Prec.TERM),
    Tk.PLUS: _left_assoc(Prec.TERM),
    Tk.SLASH: _left_assoc(Prec.FACTOR),
    Tk.STAR: _left_assoc(Prec.FACTOR),
    # Postfix: these take no RHS expression.
    Tk.LEFT_PAREN: _left_assoc(Prec.CALL),
    Tk.DOT: _left_assoc(Prec.CALL),
}

KEYWORD_VALUES = {
    Tk.TRUE: True,
    Tk.FALSE: False,
    Tk.NIL: None,
}

# Tokens at which error recovery may resume parsing.
STATEMENT_KEYWORDS = (Tk.CLASS, Tk.FUN, Tk.VAR, Tk.FOR, Tk.IF, Tk.WHILE, Tk.PRINT, Tk.RETURN)


class Parser:
    """Turns a token list into statements.

    Statements are parsed by recursive descent, with one parselet per leading keyword.
    Expressions are parsed by precedence climbing in the style of a Pratt parser, as
    described by Aleksey Kladov:
    https://matklad.github.io/2020/04/13/simple-but-powerful-pratt-parsing.html.

    A syntax error abandons the current declaration only: it is reported, the parser
    skips ahead to a likely statement boundary and carries on.
    """

    def __init__(self, tokens: List[Token], error_handler: LoxErrorHandler) -> None:
        self._tv = StreamView(tokens)
        self._error_handler = error_handler

        self._declaration_parselets: Dict[Tk, Callable[[], Stmt]] = {
            Tk.CLASS: self._class_declaration,
            Tk.FUN: lambda: self._function("function"),
            Tk.VAR: self._variable_declaration,
        }
        self._statement_parselets: Dict[Tk, Callable[[], Stmt]] = {
            Tk.FOR: self._for_statement,
            Tk.IF: self._if_statement,
            Tk.LEFT_BRACE: lambda: BlockStmt(self._block()),
            Tk.PRINT: self._print_statement,
            Tk.RETURN: self._return_statement,
            Tk.WHILE: self._while_statement,
        }

    def parse(self) -> List[Stmt]:
        statements: List[Stmt] = list()
        while not self._at_end():
            if (declaration := self._declaration()) is not None:
                statements.append(declaration)
        return statements

    # ~~~ Helper functions ~~~

    def _at_end(self) -> bool:
        return self._tv.peek_unwrap().token_type is Tk.EOF

    def _expect_next(self, expected: Tk, message: str) -> Token:
        if not self._tv.match(expected):
            raise LoxSyntaxError.at_token(self._tv.peek_unwrap(), message)
        return self._tv.advance()

    def _expect_punct(self, symbol: Tk, message: str) -> None:
        self._expect_next(symbol, f"Expect '{symbol.spelling}' {message}.")

    def _synchronize(self) -> None:
        """Skip the rest of a broken statement: stop after a semicolon or before a keyword
        that starts a statement."""
        while not self._at_end():
            if self._tv.advance().token_type is Tk.SEMICOLON:
                return
            if self._tv.match(*STATEMENT_KEYWORDS):
                return

    def _comma_separated(self, item: Callable[[], T], closing_message: str) -> List[T]:
        """Items up to a closing parenthesis. The opening one has already been consumed."""
        items: List[T] = list()
        if not self._tv.match(Tk.RIGHT_PAREN):
            items.append(item())
            while self._tv.advance_if_match(Tk.COMMA):
                items.append(item())
        self._expect_punct(Tk.RIGHT_PAREN, closing_message)
        return items

    def _leading(self, table: Dict[Tk, Callable[[], Stmt]]) -> Optional[Callable[[], Stmt]]:
        """Consume the next token if it selects a parselet in `table`, and return that parselet."""
        parselet = table.get(self._tv.peek_unwrap().token_type)
        if parselet is not None:
            self._tv.advance()
        return parselet

    # ~~~ Declarations ~~~

    def _declaration(self) -> Optional[Stmt]:
        try:
            parselet = self._leading(self._declaration_parselets)
            return parselet() if parselet is not None else self._statement()
        except LoxSyntaxError as error:
            self._error_handler.err(error)
            self._synchronize()
            return None

    def _class_declaration(self) -> ClassStmt:
        name = self._expect_next(Tk.IDENTIFIER, "Expect class name.")
        superclass = None
        if self._tv.advance_if_match(Tk.LESS):
            superclass = VariableExpr(self._expect_next(Tk.IDENTIFIER, "Expect superclass name."))

        self._expect_punct(Tk.LEFT_BRACE, "before class body")
        methods: List[FunctionStmt] = list()
        while not self._tv.match(Tk.RIGHT_BRACE) and not self._at_end():
            methods.append(self._function("method"))
        self._expect_punct(Tk.RIGHT_BRACE, "after class body")
        return ClassStmt(name, superclass, methods)

    def _function(self, kind: str) -> FunctionStmt:
        name = self._expect_next(Tk.IDENTIFIER, f"Expect {kind} name.")
        self._expect_punct(Tk.LEFT_PAREN, f"after {kind} name")
        params = self._comma_separated(
            lambda: self._expect_next(Tk.IDENTIFIER, "Expect parameter name."),
            "after parameters"
        )
        self._expect_punct(Tk.LEFT_BRACE, f"before {kind} body")
        return FunctionStmt(name, params, self._block())

    def _variable_declaration(self) -> VarStmt:
        name = self._expect_next(Tk.IDENTIFIER, "Expect variable name.")
        initializer = self._expression() if self._tv.advance_if_match(Tk.EQUAL) else None
        self._expect_punct(Tk.SEMICOLON, "after variable declaration")
        return VarStmt(name, initializer)

    # ~~~ Statements ~~~

    def _statement(self) -> Stmt:
        parselet = self._leading(self._statement_parselets)
        if parselet is not None:
            return parselet()
        expression = self._expression()
        self._expect_punct(Tk.SEMICOLON, "after expression")
        return ExpressionStmt(expression)

    def _block(self) -> List[Stmt]:
        """Declarations up to the closing brace. The opening one has already been consumed."""
        statements: List[Stmt] = list()
        while not self._tv.match(Tk.RIGHT_BRACE) and not self._at_end():
            if (declaration := self._declaration()) is not None:
                statements.append(declaration)
        self._expect_punct(Tk.RIGHT_BRACE, "after block")
        return statements

    def _for_statement(self) -> Stmt:
        """There is no for-loop node: the clauses are rearranged into a while loop.

            for (init; cond; incr) body    =>    { init; while (cond) { body; incr; } }
        """
        self._expect_punct(Tk.LEFT_PAREN, "after 'for'")
        initializer: Optional[Stmt] = None
        if self._tv.advance_if_match(Tk.VAR):
            initializer = self._variable_declaration()
        elif not self._tv.advance_if_match(Tk.SEMICOLON):
            expression = self._expression()
            self._expect_punct(Tk.SEMICOLON, "after expression")
            initializer = ExpressionStmt(expression)

        condition: Expr = LiteralExpr(True)
        if not self._tv.match(Tk.SEMICOLON):
            condition = self._expression()
        self._expect_punct(Tk.SEMICOLON, "after loop condition")

        increment = None if self._tv.match(Tk.RIGHT_PAREN) else self._expression()
        self._expect_punct(Tk.RIGHT_PAREN, "after for clauses")

        loop: Stmt = self._statement()
        if increment is not None:
            loop = BlockStmt([loop, ExpressionStmt(increment)])
        loop = WhileStmt(condition, loop)
        if initializer is not None:
            loop = BlockStmt([initializer, loop])
        return loop

    def _if_statement(self) -> IfStmt:
        self._expect_punct(Tk.LEFT_PAREN, "after 'if'")
        condition = self._expression()
        self._expect_punct(Tk.RIGHT_PAREN, "after if condition")
        then_branch = self._statement()
        # A dangling `else` binds to the nearest `if`.
        else_branch = self._statement() if self._tv.advance_if_match(Tk.ELSE) else None
        return IfStmt(condition, then_branch, else_branch)

    def _print_statement(self) -> PrintStmt:
        value = self._expression()
        self._expect_punct(Tk.SEMICOLON, "after value")
        return PrintStmt(value)

    def _return_statement(self) -> ReturnStmt:
        keyword = self._tv.previous()
        value = None if self._tv.match(Tk.SEMICOLON) else self._expression()
        self._expect_punct(Tk.SEMICOLON, "after return value")
        return ReturnStmt(keyword, value)

    def _while_statement(self) -> WhileStmt:
        self._expect_punct(Tk.LEFT_PAREN, "after 'while'")
        condition = self._expression()
        self._expect_punct(Tk.RIGHT_PAREN, "after condition")
        return WhileStmt(condition, self._statement())

    # ~~~ Expressions ~~~

    def _expression(self, min_power: int = Prec.NONE) -> Expr:
        """Parse an expression whose operators all bind tighter than `min_power`.

        With `-a * b + c` this reads `-` and recurses at UNARY strength, which stops at
        `*` and yields `(-a)`. The loop then takes `*` (FACTOR > NONE) and recurses at
        FACTOR for `b`, stopping at `+`. Back at NONE, `+` is taken the same way, giving
        `((-a) * b) + c`. An operator that does not bind tighter than `min_power`
        is left for the caller.
        """
        left = self._prefix()

        while True:
            operator = self._tv.peek_unwrap()
            power = BINDING_POWER.get(operator.token_type)
            if power is None or power[0] <= min_power:
                return left
            self._tv.advance()
            left = self._infix(left, operator, power[1])

    def _infix(self, left: Expr, operator: Token, right_power: int) -> Expr:
        op_type = operator.token_type
        if op_type is Tk.LEFT_PAREN:
            arguments = self._comma_separated(self._expression, "after arguments")
            return CallExpr(left, self._tv.previous(), arguments)
        if op_type is Tk.DOT:
            return GetExpr(left, self._expect_next(Tk.IDENTIFIER, "Expect property name after '.'."))

        right = self._expression(right_power)
        if op_type is Tk.EQUAL:
            return self._assignment(operator, left, right)
        if op_type in (Tk.AND, Tk.OR):
            return LogicalExpr(left, operator, right)
        return BinaryExpr(left, operator, right)

    def _prefix(self) -> Expr:
        """Unary operators and primary expressions."""
        token = self._tv.peek_unwrap()
        token_type = token.token_type

        if token_type in (Tk.NUMBER, Tk.STRING):
            self._tv.advance()
            return LiteralExpr(token.literal)
        if token_type in KEYWORD_VALUES:
            self._tv.advance()
            return LiteralExpr(KEYWORD_VALUES[token_type])
        if token_type is Tk.IDENTIFIER:
            self._tv.advance()
            return VariableExpr(token)
        if token_type is Tk.THIS:
            self._tv.advance()
            return ThisExpr(token)
        if token_type is Tk.SUPER:
            self._tv.advance()
            self._expect_punct(Tk.DOT, "after 'super'")
            return SuperExpr(token, self._expect_next(Tk.IDENTIFIER, "Expect superclass method name."))
        if token_type in (Tk.BANG, Tk.MINUS):
            self._tv.advance()
            return UnaryExpr(token, self._expression(Prec.UNARY))
        if token_type is Tk.LEFT_PAREN:
            self._tv.advance()
            enclosed = self._expression()
            self._expect_punct(Tk.RIGHT_PAREN, "after expression")
            return GroupingExpr(enclosed)

        # Nothing consumed, so recovery starts from the offending token.
        raise LoxSyntaxError.at_token(token, "Expect expression.")

    def _assignment(self, equals: Token, target: Expr, value: Expr) -> Expr:
        if isinstance(target, VariableExpr):
            return AssignExpr(target.name, value)
        if isinstance(target, GetExpr):
            return SetExpr(target.target, target.name, value)
        # Reported but not raised: the parser is not lost, so there is nothing to recover from.
        self._error_handler.err(LoxSyntaxError.at_token(equals, "Invalid assignment target."))
        return target


__all__ = ("Parser",)
