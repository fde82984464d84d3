from contextlib import nullcontext
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Type, Union

from treelox.language.lox_class import INITIALIZER_NAME
from treelox.lexing.token import Token
from treelox.parsing.expr import *
from treelox.parsing.stmt import *
from treelox.utilities.error import NOT_REACHED, LoxErrorHandler, LoxSyntaxError
from treelox.utilities.scoped_state_handler import ScopedStateHandler
from treelox.utilities.stacked_map import StackedMap

if TYPE_CHECKING:
    from treelox.runtime.interpreter import Interpreter


class FunctionKind(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassKind(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Static pass that binds every variable reference to the scope that declares it.

    Each scope frame maps a name to whether its declaration has finished (`False`
    while the initializer is being resolved). The global scope has no frame:
    anything not found in a frame is left for the interpreter to find in the
    globals at runtime.

    Errors are reported to the error handler as they are found and resolution
    carries on, so a single pass surfaces every static error in the program."""

    def __init__(self, interpreter: "Interpreter", error_handler: LoxErrorHandler) -> None:
        self._interpreter = interpreter
        self._error_handler = error_handler
        self._scopes: StackedMap[str, bool] = StackedMap()
        self._current_function: ScopedStateHandler[FunctionKind] = ScopedStateHandler(FunctionKind.NONE)
        self._current_class: ScopedStateHandler[ClassKind] = ScopedStateHandler(ClassKind.NONE)

        self._statement_resolvers: Dict[Type[Stmt], Callable[[Any], None]] = {
            BlockStmt: self._resolve_block,
            ClassStmt: self._resolve_class,
            ExpressionStmt: self._resolve_expression_stmt,
            FunctionStmt: self._resolve_function_stmt,
            IfStmt: self._resolve_if,
            PrintStmt: self._resolve_print,
            ReturnStmt: self._resolve_return,
            VarStmt: self._resolve_var,
            WhileStmt: self._resolve_while,
        }
        self._expression_resolvers: Dict[Type[Expr], Callable[[Any], None]] = {
            AssignExpr: self._resolve_assign,
            BinaryExpr: self._resolve_binary,
            CallExpr: self._resolve_call,
            GetExpr: self._resolve_get,
            GroupingExpr: self._resolve_grouping,
            LiteralExpr: self._resolve_literal,
            LogicalExpr: self._resolve_binary,
            SetExpr: self._resolve_set,
            SuperExpr: self._resolve_super,
            ThisExpr: self._resolve_this,
            UnaryExpr: self._resolve_unary,
            VariableExpr: self._resolve_variable,
        }

    def resolve(self, statements: List[Stmt]) -> None:
        self._scopes.clear()
        self._resolve_statements(statements)

    # ~~~ Helper functions ~~~

    def _resolve_statements(self, statements: List[Stmt]) -> None:
        for stmt in statements:
            self._resolve_stmt(stmt)

    def _resolve_stmt(self, stmt: Stmt) -> None:
        try:
            resolver = self._statement_resolvers[type(stmt)]
        except KeyError:
            raise NOT_REACHED from None
        resolver(stmt)

    def _resolve_expr(self, expr: Expr) -> None:
        try:
            resolver = self._expression_resolvers[type(expr)]
        except KeyError:
            raise NOT_REACHED from None
        resolver(expr)

    def _error(self, token: Token, message: str) -> None:
        self._error_handler.err(LoxSyntaxError.at_token(token, message))

    def _declare(self, name: Token) -> None:
        if not self._scopes.is_local():  # Globals may be redeclared freely.
            return
        scope = self._scopes.innermost
        if name.lexeme in scope:
            self._error(name, "Variable with this name already declared in this scope.")
        scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        if not self._scopes.is_local():
            return
        self._scopes.innermost[name.lexeme] = True

    def _resolve_local(self, expr: Expr, name: Token) -> None:
        distance = self._scopes.distance_to(name.lexeme)
        if distance is not None:
            self._interpreter.resolve(expr, distance)
        # Not found: assume it is global.

    def _resolve_function(self, function: FunctionStmt, kind: FunctionKind) -> None:
        with self._current_function.enter(kind), self._scopes.scope():
            for param in function.params:
                self._declare(param)
                self._define(param)
            self._resolve_statements(function.body)

    # ~~~ Statement resolvers ~~~

    def _resolve_block(self, stmt: BlockStmt) -> None:
        with self._scopes.scope():
            self._resolve_statements(stmt.statements)

    def _resolve_class(self, stmt: ClassStmt) -> None:
        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None and stmt.superclass.name.lexeme == stmt.name.lexeme:
            self._error(stmt.superclass.name, "A class cannot inherit from itself.")

        kind = ClassKind.SUBCLASS if stmt.superclass is not None else ClassKind.CLASS
        with self._current_class.enter(kind):
            if stmt.superclass is not None:
                self._resolve_expr(stmt.superclass)

            # `super` sits one scope further out than `this`.
            with self._scopes.scope() if stmt.superclass is not None else nullcontext() as super_scope:
                if super_scope is not None:
                    super_scope["super"] = True
                with self._scopes.scope() as this_scope:
                    this_scope["this"] = True
                    for method in stmt.methods:
                        self._resolve_function(
                            method,
                            FunctionKind.INITIALIZER if method.name.lexeme == INITIALIZER_NAME else FunctionKind.METHOD
                        )

    def _resolve_expression_stmt(self, stmt: ExpressionStmt) -> None:
        self._resolve_expr(stmt.expression)

    def _resolve_function_stmt(self, stmt: FunctionStmt) -> None:
        # Define eagerly so that the function can refer to itself recursively.
        self._declare(stmt.name)
        self._define(stmt.name)
        self._resolve_function(stmt, FunctionKind.FUNCTION)

    def _resolve_if(self, stmt: IfStmt) -> None:
        self._resolve_expr(stmt.condition)
        self._resolve_stmt(stmt.then_branch)
        if stmt.else_branch is not None:
            self._resolve_stmt(stmt.else_branch)

    def _resolve_print(self, stmt: PrintStmt) -> None:
        self._resolve_expr(stmt.expression)

    def _resolve_return(self, stmt: ReturnStmt) -> None:
        if self._current_function.state is FunctionKind.NONE:
            self._error(stmt.keyword, "Cannot return from top-level code.")
        if stmt.value is not None:
            if self._current_function.state is FunctionKind.INITIALIZER:
                self._error(stmt.keyword, "Cannot return a value from an initializer.")
            self._resolve_expr(stmt.value)

    def _resolve_var(self, stmt: VarStmt) -> None:
        self._declare(stmt.name)
        if stmt.initializer is not None:
            self._resolve_expr(stmt.initializer)
        self._define(stmt.name)

    def _resolve_while(self, stmt: WhileStmt) -> None:
        self._resolve_expr(stmt.condition)
        self._resolve_stmt(stmt.body)

    # ~~~ Expression resolvers ~~~

    def _resolve_assign(self, expr: AssignExpr) -> None:
        self._resolve_expr(expr.value)
        self._resolve_local(expr, expr.name)

    def _resolve_binary(self, expr: Union[BinaryExpr, LogicalExpr]) -> None:
        self._resolve_expr(expr.left)
        self._resolve_expr(expr.right)

    def _resolve_call(self, expr: CallExpr) -> None:
        self._resolve_expr(expr.callee)
        for argument in expr.arguments:
            self._resolve_expr(argument)

    def _resolve_get(self, expr: GetExpr) -> None:
        # Property names are looked up dynamically, only the object is resolved.
        self._resolve_expr(expr.target)

    def _resolve_grouping(self, expr: GroupingExpr) -> None:
        self._resolve_expr(expr.expression)

    def _resolve_literal(self, expr: LiteralExpr) -> None:
        pass

    def _resolve_set(self, expr: SetExpr) -> None:
        self._resolve_expr(expr.value)
        self._resolve_expr(expr.target)

    def _resolve_super(self, expr: SuperExpr) -> None:
        if self._current_class.state is ClassKind.NONE:
            self._error(expr.keyword, "Cannot use 'super' outside of a class.")
        elif self._current_class.state is not ClassKind.SUBCLASS:
            self._error(expr.keyword, "Cannot use 'super' in a class with no superclass.")
        self._resolve_local(expr, expr.keyword)

    def _resolve_this(self, expr: ThisExpr) -> None:
        if self._current_class.state is ClassKind.NONE:
            self._error(expr.keyword, "Cannot use 'this' outside of a class.")
            return
        self._resolve_local(expr, expr.keyword)

    def _resolve_unary(self, expr: UnaryExpr) -> None:
        self._resolve_expr(expr.right)

    def _resolve_variable(self, expr: VariableExpr) -> None:
        # Check that the name is in the innermost frame at all before reading its flag.
        if self._scopes.is_local() and self._scopes.innermost.get(expr.name.lexeme) is False:
            self._error(expr.name, "Cannot read local variable in its own initializer.")
        self._resolve_local(expr, expr.name)
