from contextlib import contextmanager, nullcontext
from operator import ge, gt, le, lt, mul, sub
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Type, Union

from treelox.language.lox_callable import LoxCallable, LoxFunction, LoxReturn, NativeFunction
from treelox.language.lox_class import INITIALIZER_NAME, LoxClass, LoxInstance
from treelox.language.lox_types import LoxObject, LoxPrimitive, lox_division, lox_equality, lox_object_to_str, lox_truth
from treelox.language.natives import builtin_natives
from treelox.lexing.token import Tk, Token
from treelox.parsing.expr import *
from treelox.parsing.stmt import *
from treelox.runtime.environment import Environment
from treelox.utilities import all_of_one_type
from treelox.utilities.error import NOT_REACHED, LoxErrorHandler, LoxRuntimeError

# Result of executing a statement: `None` to fall through to the next one.
Signal = Optional[LoxReturn]

# Operators that accept numbers only. `+` also concatenates strings and `==`/`!=`
# accept anything, so those are handled separately.
NUMERIC_OPERATIONS: Dict[Tk, Callable[[float, float], Union[bool, float]]] = {
    Tk.MINUS: sub,
    Tk.STAR: mul,
    Tk.SLASH: lox_division,
    Tk.GREATER: gt,
    Tk.GREATER_EQUAL: ge,
    Tk.LESS: lt,
    Tk.LESS_EQUAL: le,
}


class Interpreter:
    """Executes resolved statements.

    Variable references found in the distance table are read from exactly that many
    scopes out of the current one. Anything else is a global."""
    # pylint: disable=invalid-name

    def __init__(self, error_handler: LoxErrorHandler) -> None:
        self._error_handler = error_handler
        self._locals: Dict[Expr, int] = dict()
        self.reinitialize_environment()

        # Dispatch on the exact node type. Every node class must appear here.
        self._statement_executors: Dict[Type[Stmt], Callable[[Any], Signal]] = {
            BlockStmt: self._exec_block,
            ClassStmt: self._exec_class,
            ExpressionStmt: self._exec_expression,
            FunctionStmt: self._exec_function,
            IfStmt: self._exec_if,
            PrintStmt: self._exec_print,
            ReturnStmt: self._exec_return,
            VarStmt: self._exec_var,
            WhileStmt: self._exec_while,
        }
        self._expression_evaluators: Dict[Type[Expr], Callable[[Any], LoxObject]] = {
            AssignExpr: self._eval_assign,
            BinaryExpr: self._eval_binary,
            CallExpr: self._eval_call,
            GetExpr: self._eval_get,
            GroupingExpr: self._eval_grouping,
            LiteralExpr: self._eval_literal,
            LogicalExpr: self._eval_logical,
            SetExpr: self._eval_set,
            SuperExpr: self._eval_super,
            ThisExpr: self._eval_this,
            UnaryExpr: self._eval_unary,
            VariableExpr: self._eval_variable,
        }

    def interpret(self, statements: List[Stmt]) -> None:
        """Run `statements` in the global scope, stopping at the first runtime error."""
        try:
            for stmt in statements:
                if self._execute(stmt) is not None:
                    # The resolver rejects `return` outside of functions.
                    raise NOT_REACHED
        except LoxRuntimeError as error:
            self._error_handler.err(error)

    def resolve(self, expr: Expr, depth: int) -> None:
        """Record that `expr` refers to a binding `depth` scopes out from where it is evaluated."""
        # Entries are never dropped: functions declared on an earlier REPL line still need them.
        self._locals[expr] = depth

    @property
    def locals(self) -> Mapping[Expr, int]:
        return MappingProxyType(self._locals)

    @property
    def environment(self) -> Environment:
        """The innermost scope at this point of execution."""
        return self._environment

    def define_native(self, name: str, arity: int, function: Callable[..., LoxObject]) -> None:
        self.globals.define(name, NativeFunction(name, arity, function))

    def reinitialize_environment(self) -> None:
        self.globals = Environment()
        self._environment = self.globals
        for native in builtin_natives():
            self.globals.define(native.name, native)

    def execute_block(self, statements: Sequence[Stmt], environment: Environment) -> Signal:
        """Execute `statements` in `environment`, then restore whatever scope was active before."""
        with self._entered(environment):
            for stmt in statements:
                if (signal := self._execute(stmt)) is not None:
                    return signal
        return None

    # ~~~ Helper functions ~~~

    def _execute(self, stmt: Stmt) -> Signal:
        try:
            executor = self._statement_executors[type(stmt)]
        except KeyError:
            raise NOT_REACHED from None
        return executor(stmt)

    def _evaluate(self, expr: Expr) -> LoxObject:
        try:
            evaluator = self._expression_evaluators[type(expr)]
        except KeyError:
            raise NOT_REACHED from None
        return evaluator(expr)

    @contextmanager
    def _entered(self, environment: Environment) -> Iterator[None]:
        outer = self._environment
        self._environment = environment
        try:
            yield
        finally:
            self._environment = outer

    def _look_up_variable(self, name: Token, expr: Expr) -> LoxObject:
        distance = self._locals.get(expr)
        if distance is not None:
            return self._environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    @staticmethod
    def _check_numbers(operator: Token, *operands: LoxObject) -> None:
        if all_of_one_type((float,), *operands):
            return
        message = "Operand must be a number." if len(operands) == 1 else "Operands must be numbers."
        raise LoxRuntimeError.at_token(operator, message)

    # ~~~ Statement executors ~~~

    def _exec_block(self, stmt: BlockStmt) -> Signal:
        return self.execute_block(stmt.statements, Environment(self._environment))

    def _exec_class(self, stmt: ClassStmt) -> Signal:
        superclass: Optional[LoxClass] = None
        if stmt.superclass is not None:
            evaluated = self._evaluate(stmt.superclass)
            if not isinstance(evaluated, LoxClass):
                raise LoxRuntimeError.at_token(stmt.superclass.name, "Superclass must be a class.")
            superclass = evaluated

        # Declare the name first so that methods may refer to the class itself.
        self._environment.define(stmt.name.lexeme, None)

        with self._entered(Environment(self._environment)) if superclass is not None else nullcontext():
            if superclass is not None:
                self._environment.define("super", superclass)
            methods = {
                method.name.lexeme: LoxFunction(method, self._environment, method.name.lexeme == INITIALIZER_NAME)
                for method in stmt.methods
            }

        self._environment.assign(stmt.name, LoxClass(stmt.name.lexeme, superclass, methods))
        return None

    def _exec_expression(self, stmt: ExpressionStmt) -> Signal:
        self._evaluate(stmt.expression)
        return None

    def _exec_function(self, stmt: FunctionStmt) -> Signal:
        self._environment.define(stmt.name.lexeme, LoxFunction(stmt, self._environment))
        return None

    def _exec_if(self, stmt: IfStmt) -> Signal:
        if lox_truth(self._evaluate(stmt.condition)):
            return self._execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self._execute(stmt.else_branch)
        return None

    def _exec_print(self, stmt: PrintStmt) -> Signal:
        print(lox_object_to_str(self._evaluate(stmt.expression)))
        return None

    def _exec_return(self, stmt: ReturnStmt) -> Signal:
        return LoxReturn(None if stmt.value is None else self._evaluate(stmt.value))

    def _exec_var(self, stmt: VarStmt) -> Signal:
        # A declaration without an initializer binds nil.
        value = None if stmt.initializer is None else self._evaluate(stmt.initializer)
        self._environment.define(stmt.name.lexeme, value)
        return None

    def _exec_while(self, stmt: WhileStmt) -> Signal:
        while lox_truth(self._evaluate(stmt.condition)):
            if (signal := self._execute(stmt.body)) is not None:
                return signal
        return None

    # ~~~ Expression evaluators ~~~

    def _eval_assign(self, expr: AssignExpr) -> LoxObject:
        value = self._evaluate(expr.value)
        distance = self._locals.get(expr)
        if distance is not None:
            self._environment.assign_at(distance, expr.name, value)
        else:
            self.globals.assign(expr.name, value)
        return value

    def _eval_binary(self, expr: BinaryExpr) -> Union[bool, float, str]:
        """Both operands are evaluated, left first, before any type check. No operator
        converts between types: `"a" + 1` is an error, not `"a1"`."""
        left = self._evaluate(expr.left)
        right = self._evaluate(expr.right)
        op = expr.operator.token_type

        if op is Tk.EQUAL_EQUAL:
            return lox_equality(left, right)
        if op is Tk.BANG_EQUAL:
            return not lox_equality(left, right)
        if op is Tk.PLUS:
            if not all_of_one_type((float, str), left, right):
                raise LoxRuntimeError.at_token(expr.operator, "Operands must be two numbers or two strings.")
            return left + right  # type: ignore  # Both floats or both strs.
        if op in NUMERIC_OPERATIONS:
            self._check_numbers(expr.operator, left, right)
            return NUMERIC_OPERATIONS[op](left, right)  # type: ignore
        raise NOT_REACHED

    def _eval_call(self, expr: CallExpr) -> LoxObject:
        callee = self._evaluate(expr.callee)
        arguments = [self._evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError.at_token(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity:
            raise LoxRuntimeError.at_token(
                expr.paren, f"Expected {callee.arity} arguments but got {len(arguments)}."
            )
        return callee.call(self, arguments)

    def _eval_get(self, expr: GetExpr) -> LoxObject:
        target = self._evaluate(expr.target)
        if isinstance(target, LoxInstance):
            return target.get(expr.name)
        raise LoxRuntimeError.at_token(expr.name, "Only instances have properties.")

    def _eval_grouping(self, expr: GroupingExpr) -> LoxObject:
        return self._evaluate(expr.expression)

    def _eval_literal(self, expr: LiteralExpr) -> LoxPrimitive:
        return expr.value

    def _eval_logical(self, expr: LogicalExpr) -> LoxObject:
        """Short-circuits, and yields the deciding operand itself rather than a boolean."""
        left = self._evaluate(expr.left)
        left_decides = lox_truth(left) if expr.operator.token_type is Tk.OR else not lox_truth(left)
        return left if left_decides else self._evaluate(expr.right)

    def _eval_set(self, expr: SetExpr) -> LoxObject:
        target = self._evaluate(expr.target)
        if not isinstance(target, LoxInstance):
            raise LoxRuntimeError.at_token(expr.name, "Only instances have fields.")
        value = self._evaluate(expr.value)
        target.set(expr.name, value)
        return value

    def _eval_super(self, expr: SuperExpr) -> LoxObject:
        distance = self._locals[expr]
        superclass = self._environment.get_at(distance, "super")
        # `this` is always bound in the scope just inside the one binding `super`.
        instance = self._environment.get_at(distance - 1, "this")
        assert isinstance(superclass, LoxClass) and isinstance(instance, LoxInstance)

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError.at_token(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)

    def _eval_this(self, expr: ThisExpr) -> LoxObject:
        return self._look_up_variable(expr.keyword, expr)

    def _eval_unary(self, expr: UnaryExpr) -> Union[bool, float]:
        operand = self._evaluate(expr.right)
        op = expr.operator.token_type
        if op is Tk.BANG:
            return not lox_truth(operand)
        if op is Tk.MINUS:
            self._check_numbers(expr.operator, operand)
            return -operand  # type: ignore  # Checked to be a float.
        raise NOT_REACHED

    def _eval_variable(self, expr: VariableExpr) -> LoxObject:
        return self._look_up_variable(expr.name, expr)
