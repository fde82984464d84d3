from treelox.parsing.expr import AssignExpr, SuperExpr, ThisExpr, VariableExpr, binding_name


def distances_by_name(interpreter):
    """Collapse the resolution table into `{name: [depth, ...]}` in source order."""
    table = {}
    for expr, depth in sorted(interpreter.locals.items(), key=lambda item: binding_name(item[0]).line):
        table.setdefault(binding_name(expr).lexeme, []).append(depth)
    return table


def test_nested_block_reference_counts_every_scope(resolve, interpreter):
    statements = resolve("{ var a = 1; { { print a; } } }")
    reference = statements[0].statements[1].statements[0].statements[0].expression
    assert isinstance(reference, VariableExpr)
    assert interpreter.locals[reference] == 2


def test_globals_are_left_out_of_the_table(resolve, interpreter):
    resolve("var a = 1; print a; a = 2; fun f() { print a; }")
    assert len(interpreter.locals) == 0


def test_parameter_and_local_depths(resolve, interpreter):
    resolve(
        "fun f(x) {\n"
        "  var y = x;\n"
        "  { print y; }\n"
        "}"
    )
    assert distances_by_name(interpreter) == {"x": [0], "y": [1]}


def test_closure_reference_reaches_enclosing_function(resolve, interpreter):
    resolve(
        "fun outer() {\n"
        "  var a = 1;\n"
        "  fun inner() {\n"
        "    a = a + 1;\n"
        "  }\n"
        "}"
    )
    kinds = {type(expr): depth for expr, depth in interpreter.locals.items() if binding_name(expr).lexeme == "a"}
    assert kinds == {AssignExpr: 1, VariableExpr: 1}


def test_identical_references_are_separate_entries(resolve, interpreter):
    resolve("{ var a = 1; print a; print a; }")
    references = [expr for expr in interpreter.locals if isinstance(expr, VariableExpr)]
    assert len(references) == 2
    assert references[0] is not references[1]
    assert all(interpreter.locals[expr] == 0 for expr in references)


def test_this_and_super_depths(resolve, interpreter):
    resolve(
        "class A { m() {} }\n"
        "class B < A {\n"
        "  m() {\n"
        "    print this;\n"
        "    super.m();\n"
        "  }\n"
        "}"
    )
    depths = {type(expr): depth for expr, depth in interpreter.locals.items()}
    assert depths[ThisExpr] == 1
    assert depths[SuperExpr] == 2


def test_all_static_errors_are_collected(resolve, diagnostics, error_handler):
    resolve(
        "return 1;\n"
        "print this;\n"
        "fun f() { var a = 1; var a = 2; }\n"
        "{ var b = b; }"
    )
    assert error_handler.had_static_error
    assert diagnostics == [
        (1, " at 'return'", "Cannot return from top-level code."),
        (2, " at 'this'", "Cannot use 'this' outside of a class."),
        (3, " at 'a'", "Variable with this name already declared in this scope."),
        (4, " at 'b'", "Cannot read local variable in its own initializer."),
    ]


def test_global_self_reference_in_initializer_is_allowed(resolve, error_handler):
    resolve("var a = a;")
    assert not error_handler.error_state


def test_class_errors(resolve, diagnostics):
    resolve(
        "class A < A {}\n"
        "class B { init() { return 1; } m() { super.m(); } }\n"
        "print super.x;"
    )
    assert diagnostics == [
        (1, " at 'A'", "A class cannot inherit from itself."),
        (2, " at 'return'", "Cannot return a value from an initializer."),
        (2, " at 'super'", "Cannot use 'super' in a class with no superclass."),
        (3, " at 'super'", "Cannot use 'super' outside of a class."),
    ]


def test_bare_return_in_initializer_is_allowed(resolve, error_handler):
    resolve("class A { init() { return; } }")
    assert not error_handler.error_state
