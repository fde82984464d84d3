from treelox.lexing.scanner import Scanner
from treelox.lexing.token import Tk
from treelox.parsing.expr import AssignExpr, BinaryExpr, CallExpr, GetExpr, LiteralExpr, SetExpr, VariableExpr
from treelox.parsing.stmt import BlockStmt, ClassStmt, ExpressionStmt, PrintStmt, VarStmt, WhileStmt


def scan(source, error_handler):
    return Scanner(source, error_handler).scan_tokens()


def test_tokens_carry_lines(error_handler):
    tokens = scan('var a = "multi\nline";\nprint a;', error_handler)
    assert [(token.token_type, token.line) for token in tokens] == [
        (Tk.VAR, 1),
        (Tk.IDENTIFIER, 1),
        (Tk.EQUAL, 1),
        (Tk.STRING, 2),
        (Tk.SEMICOLON, 2),
        (Tk.PRINT, 3),
        (Tk.IDENTIFIER, 3),
        (Tk.SEMICOLON, 3),
        (Tk.EOF, 3),
    ]
    assert tokens[3].literal == "multi\nline"
    assert tokens[-1].lexeme == ""


def test_keywords_are_case_sensitive(error_handler):
    tokens = scan("class Class CLASS", error_handler)
    assert [token.token_type for token in tokens] == [Tk.CLASS, Tk.IDENTIFIER, Tk.IDENTIFIER, Tk.EOF]


def test_numbers_and_comments(error_handler):
    tokens = scan("12.5 // ignored\n7.", error_handler)
    assert [(token.token_type, token.literal) for token in tokens] == [
        (Tk.NUMBER, 12.5),
        (Tk.NUMBER, 7.0),
        (Tk.DOT, None),
        (Tk.EOF, None),
    ]


def test_scanner_errors_do_not_stop_scanning(error_handler, diagnostics):
    tokens = scan("@ 1\n#", error_handler)
    assert [token.token_type for token in tokens] == [Tk.NUMBER, Tk.EOF]
    assert diagnostics == [(1, "", "Unexpected character."), (2, "", "Unexpected character.")]


def test_identifiers_are_ascii_only(error_handler, diagnostics):
    tokens = scan("\u00e9 _a9 b\u0663", error_handler)
    assert [(token.token_type, token.lexeme) for token in tokens] == [
        (Tk.IDENTIFIER, "_a9"),
        (Tk.IDENTIFIER, "b"),
        (Tk.EOF, ""),
    ]
    assert diagnostics == [(1, "", "Unexpected character."), (1, "", "Unexpected character.")]


def test_precedence_and_associativity(parse):
    (stmt,) = parse("a = b = 1 + 2 * 3 - 4;")
    assert isinstance(stmt, ExpressionStmt)
    outer = stmt.expression
    assert isinstance(outer, AssignExpr) and outer.name.lexeme == "a"
    inner = outer.value
    assert isinstance(inner, AssignExpr) and inner.name.lexeme == "b"
    # (1 + (2 * 3)) - 4
    minus = inner.value
    assert isinstance(minus, BinaryExpr) and minus.operator.token_type is Tk.MINUS
    plus = minus.left
    assert isinstance(plus, BinaryExpr) and plus.operator.token_type is Tk.PLUS
    assert isinstance(plus.right, BinaryExpr) and plus.right.operator.token_type is Tk.STAR


def test_property_assignment_becomes_set(parse):
    (stmt,) = parse("a.b.c = 1;")
    expr = stmt.expression
    assert isinstance(expr, SetExpr)
    assert expr.name.lexeme == "c"
    assert isinstance(expr.target, GetExpr) and expr.target.name.lexeme == "b"


def test_call_records_closing_paren(parse):
    (stmt,) = parse("f(1,\n2\n)(3);")
    outer = stmt.expression
    assert isinstance(outer, CallExpr) and outer.paren.line == 3
    assert isinstance(outer.callee, CallExpr) and len(outer.callee.arguments) == 2


def test_for_desugars_to_while(parse):
    (stmt,) = parse("for (var i = 0; i < 3; i = i + 1) print i;")
    assert isinstance(stmt, BlockStmt)
    initializer, loop = stmt.statements
    assert isinstance(initializer, VarStmt)
    assert isinstance(loop, WhileStmt)
    body, increment = loop.body.statements
    assert isinstance(body, PrintStmt)
    assert isinstance(increment.expression, AssignExpr)


def test_empty_for_clauses_loop_forever(parse):
    (stmt,) = parse("for (;;) {}")
    assert isinstance(stmt, WhileStmt)
    assert isinstance(stmt.condition, LiteralExpr) and stmt.condition.value is True


def test_class_declaration(parse):
    (stmt,) = parse("class B < A { init(x) {} m() {} }")
    assert isinstance(stmt, ClassStmt)
    assert isinstance(stmt.superclass, VariableExpr) and stmt.superclass.name.lexeme == "A"
    assert [method.name.lexeme for method in stmt.methods] == ["init", "m"]


def test_invalid_assignment_target_does_not_unwind(parse, diagnostics):
    statements = parse("1 + 2 = 3;\nprint 4;")
    assert len(statements) == 2
    assert diagnostics == [(1, " at '='", "Invalid assignment target.")]


def test_parser_recovers_at_statement_boundaries(parse, diagnostics):
    statements = parse("var = 1;\nprint 2;\nvar b = ;\nclass C {}")
    assert [type(stmt) for stmt in statements] == [PrintStmt, ClassStmt]
    assert diagnostics == [
        (1, " at '='", "Expect variable name."),
        (3, " at ';'", "Expect expression."),
    ]


def test_error_at_end(parse, diagnostics):
    parse("{ print 1;")
    assert diagnostics == [(1, " at end", "Expect '}' after block.")]
