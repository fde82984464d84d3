import pytest

from treelox.lexing.token import Tk, Token
from treelox.parsing.expr import BinaryExpr, LiteralExpr
from treelox.parsing.stmt import PrintStmt
from treelox.utilities.error import EX_DATAERR, EX_SOFTWARE, LoxExit


def run(resolve, interpreter, source):
    interpreter.interpret(resolve(source))


def test_hand_built_tree(interpreter, capsys):
    plus = Token.create_arbitrary(Tk.PLUS, "+", line=1)
    interpreter.interpret([PrintStmt(BinaryExpr(LiteralExpr(1.0), plus, LiteralExpr(2.0)))])
    assert capsys.readouterr().out == "3\n"


def test_active_scope_is_restored_after_runtime_error(resolve, interpreter, diagnostics):
    run(resolve, interpreter, "fun f() {\n  {\n    nil + 1;\n  }\n}\nf();")
    assert diagnostics == [(3, None, "Operands must be two numbers or two strings.")]
    assert interpreter.environment is interpreter.globals


def test_arity_is_checked_before_the_body_runs(resolve, interpreter, diagnostics, capsys):
    run(resolve, interpreter, 'fun f(a) { print "body"; }\nf();')
    assert capsys.readouterr().out == ""
    assert diagnostics == [(2, None, "Expected 1 arguments but got 0.")]


def test_define_native(resolve, interpreter, capsys):
    interpreter.define_native("double", 1, lambda x: x * 2)
    run(resolve, interpreter, "print double(21); print double;")
    assert capsys.readouterr().out == "42\n<native fn>\n"


def test_clock_is_predefined(resolve, interpreter, capsys):
    run(resolve, interpreter, "print clock() > 0;")
    assert capsys.readouterr().out == "true\n"


def test_each_property_access_binds_a_fresh_method(resolve, interpreter, capsys):
    run(
        resolve,
        interpreter,
        "class A { m() { return this; } }\n"
        "var a = A();\n"
        "var m1 = a.m;\n"
        "var m2 = a.m;\n"
        "print m1 == m2;\n"
        "print m1() == m2();\n"
        "print m1() == a;"
    )
    assert capsys.readouterr().out == "false\ntrue\ntrue\n"


def test_return_from_nested_loop(resolve, interpreter, capsys):
    run(
        resolve,
        interpreter,
        "fun find() {\n"
        "  var i = 0;\n"
        "  while (true) {\n"
        "    {\n"
        "      if (i == 3) return i;\n"
        "    }\n"
        "    i = i + 1;\n"
        "  }\n"
        "}\n"
        "print find();\n"
        "print find;"
    )
    assert capsys.readouterr().out == "3\n<fn find>\n"
    assert interpreter.environment is interpreter.globals


def test_closures_capture_declaration_scope(resolve, interpreter, capsys):
    run(
        resolve,
        interpreter,
        'var a = "global";\n'
        "{\n"
        "  fun show() { print a; }\n"
        "  show();\n"
        '  var a = "block";\n'
        "  show();\n"
        "}"
    )
    assert capsys.readouterr().out == "global\nglobal\n"


def test_static_error_stops_before_execution(lox, diagnostics, capsys):
    with pytest.raises(LoxExit) as exit_request:
        lox.run("print 1;\nprint;")
    assert exit_request.value.code == EX_DATAERR
    assert capsys.readouterr().out == ""
    assert diagnostics == [(2, " at ';'", "Expect expression.")]


def test_resolver_error_stops_before_execution(lox, diagnostics, capsys):
    with pytest.raises(LoxExit):
        lox.run('print "reached";\nreturn;')
    assert capsys.readouterr().out == ""
    assert diagnostics == [(2, " at 'return'", "Cannot return from top-level code.")]


def test_first_runtime_error_stops_the_batch(lox, diagnostics, capsys):
    lox.run('print 1;\nprint -"a";\nprint 2;')
    assert capsys.readouterr().out == "1\n"
    assert diagnostics == [(2, None, "Operand must be a number.")]
    assert lox.error_handler.had_runtime_error


def test_globals_survive_between_runs(lox, capsys):
    lox.run("var a = 1;")
    lox.run("a = a + 1; print a;")
    assert capsys.readouterr().out == "2\n"


def test_run_file_exits_with_software_error(lox, tmp_path):
    script = tmp_path / "boom.lox"
    script.write_text("print nil.field;\n")
    with pytest.raises(LoxExit) as exit_request:
        lox.run_file(str(script))
    assert exit_request.value.code == EX_SOFTWARE


def test_division_follows_ieee(resolve, interpreter, capsys):
    run(resolve, interpreter, "print 1 / 0; print -1 / 0; print 0 / 0; print 0 / 0 == 0 / 0;")
    assert capsys.readouterr().out == "Infinity\n-Infinity\nNaN\nfalse\n"


@pytest.mark.parametrize(
    "source, printed",
    [
        ("3", "3"),
        ("-0", "-0"),
        ("2.5", "2.5"),
        ("100000000000000000000", "1E+20"),
        ("1 / 10000000", "1E-07"),
    ],
)
def test_number_formatting(resolve, interpreter, capsys, source, printed):
    run(resolve, interpreter, f"print {source};")
    assert capsys.readouterr().out == printed + "\n"


def test_deep_recursion_does_not_exhaust_the_host_stack(lox, diagnostics, capsys):
    lox.run("fun count(n) { if (n == 0) return 0; return count(n - 1) + 1; } print count(1000);")
    assert diagnostics == []
    assert capsys.readouterr().out == "1000\n"


def test_functions_from_earlier_runs_keep_their_distances(lox, capsys):
    lox.run("fun counter() { var i = 0; fun next() { i = i + 1; return i; } return next; }")
    lox.run("var tick = counter();")
    lox.run("tick(); print tick();")
    assert capsys.readouterr().out == "2\n"
