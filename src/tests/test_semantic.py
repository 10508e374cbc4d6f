"""
Tests del recorrido semántico.
Cada programa se escribe como derivación serializada con los helpers de `derivations`.
"""

import pytest

from derivations import (
    addr_factor, assign, assign_deref, assign_paren, binary, call_factor, comparison, delete, deref_factor,
    find, id_expr, id_factor, main, new_factor, null_factor, num_expr, num_factor, paren_factor,
    println, procedure, product, program, run, while_, expr,
)


def messages(diag):
    return [d.message for d in diag]


class TestScenarios:
    """Programas completos pequeños."""

    def test_int_variable_assign_and_print(self):
        """int x = 0; x = 5; println(x);"""
        lines = program(main(
            decls=[("x", False, 0)],
            stmts=[assign("x", num_expr(5)), println(id_expr("x"))],
        ))
        tree, diag, _ = run(lines)

        assert messages(diag) == []
        dcl_x = [d for d in find(tree, "dcl") if d.children[1].lexeme == "x"][0]
        assert dcl_x.type == "int"
        assert dcl_x.children[1].type == "int"
        assignment = find(tree, "statement", ["lvalue", "BECOMES", "expr", "SEMI"])[0]
        assert assignment.type == ""
        assert assignment.children[0].type == "int"
        assert assignment.children[2].type == "int"
        printed = find(tree, "statement", ["PRINTLN", "LPAREN", "expr", "RPAREN", "SEMI"])[0]
        assert printed.children[2].type == "int"

    def test_pointer_first_parameter_is_allowed(self):
        lines = program(main(first=("a", True), second=("b", False)))
        _, diag, _ = run(lines)
        assert messages(diag) == []

    def test_second_parameter_of_wain_must_be_int(self):
        lines = program(main(
            second=("b", True),
            decls=[("x", False, 0)],
            stmts=[assign("x", num_expr(5)), println(id_expr("x"))],
        ))
        _, diag, _ = run(lines)
        assert messages(diag) == ["second parameter of entry point is not int type"]

    def test_address_of_int_assigned_to_pointer(self):
        """int x = 5; int *p = NULL; p = &x;"""
        lines = program(main(
            decls=[("x", False, 5), ("p", True, None)],
            stmts=[assign("p", expr(addr_factor("x")))],
        ))
        tree, diag, _ = run(lines)

        assert messages(diag) == []
        assignment = find(tree, "statement", ["lvalue", "BECOMES", "expr", "SEMI"])[0]
        assert assignment.children[0].type == "int*"
        amp = find(tree, "factor", ["AMP", "lvalue"])[0]
        assert amp.type == "int*"
        assert amp.children[1].type == "int"


class TestDeclarations:

    def test_redeclaration_reports_once_and_keeps_first_binding(self):
        lines = program(main(
            decls=[("x", False, 1), ("x", True, None)],
            stmts=[assign("x", num_expr(2))],
        ))
        _, diag, analysis = run(lines)

        errs = messages(diag)
        assert len(errs) == 1
        assert "already declared" in errs[0]
        wain = [s for s in analysis["symbols"] if s["scope"] == "wain"][0]
        assert {"name": "x", "type": "int"} in wain["entries"]

    def test_parameter_redeclared_in_body(self):
        lines = program(main(decls=[("a", False, 3)]))
        _, diag, _ = run(lines)
        assert len(diag) == 1
        assert "already declared" in messages(diag)[0]

    def test_initializer_type_must_match(self):
        lines = program(main(decls=[("p", True, 5), ("x", False, None)]))
        _, diag, _ = run(lines)
        errs = messages(diag)
        assert len(errs) == 2
        assert all("type casting error" in m for m in errs)

    def test_undeclared_variable_does_not_cascade(self):
        lines = program(main(
            decls=[("p", True, None)],
            stmts=[println(id_expr("y")), assign("y", id_expr("p")), println(expr(deref_factor("y")))],
        ))
        tree, diag, _ = run(lines)

        errs = messages(diag)
        assert len(errs) == 3
        assert all("not declared" in m for m in errs)
        deref = find(tree, "factor", ["STAR", "factor"])[0]
        assert deref.type == ""

    def test_scopes_are_per_procedure(self):
        f = procedure("f", params=[("n", False)], decls=[("x", False, 1)], ret=id_expr("x"))
        lines = program(main(stmts=[println(id_expr("x"))]), procedures=[f])
        _, diag, analysis = run(lines)

        errs = messages(diag)
        assert len(errs) == 1
        assert "Variable x was not declared" in errs[0]
        assert [s["scope"] for s in analysis["symbols"]] == ["f", "wain"]


class TestProcedures:

    def test_signatures_are_registered(self):
        f = procedure("f", params=[("a", False), ("p", True)])
        g = procedure("g", params=[("c", False)])
        h = procedure("h")
        _, diag, analysis = run(program(main(), procedures=[f, g, h]))

        assert messages(diag) == []
        assert analysis["procedures"] == [
            {"name": "f", "params": ["int", "int*"]},
            {"name": "g", "params": ["int"]},
            {"name": "h", "params": []},
        ]

    @pytest.mark.parametrize("params", [(), (("a", False),)])
    def test_duplicate_procedure_reports_once(self, params):
        first = procedure("f", params=params)
        second = procedure("f", params=[("x", True)])
        _, diag, analysis = run(program(main(), procedures=[first, second]))

        errs = messages(diag)
        assert len(errs) == 1
        assert "procedure already exists" in errs[0]
        # Gana el primer registro
        assert analysis["procedures"][0]["params"] == [t for t in ("int",) if params]

    def test_call_is_int_without_argument_checks(self):
        f = procedure("f", params=[("a", False)])
        lines = program(main(
            decls=[("x", False, 0), ("p", True, None)],
            stmts=[assign("x", expr(call_factor("f", [id_expr("p"), num_expr(1)]))),
                   assign("x", expr(call_factor("g")))],
        ), procedures=[f])
        tree, diag, _ = run(lines)

        assert messages(diag) == []
        calls = [n for n in find(tree, "factor") if n.shape[:2] == ("ID", "LPAREN")]
        assert [c.type for c in calls] == ["int", "int"]
        assert find(tree, "arglist")[0].type == ""


POINTER_DECLS = [("x", False, 1), ("y", False, 2), ("p", True, None), ("q", True, None)]


def arithmetic(expr_lines):
    tree, diag, _ = run(program(main(decls=POINTER_DECLS, stmts=[println(num_expr(0)), assign("x", expr_lines)])))
    top = find(tree, "statement", ["lvalue", "BECOMES", "expr", "SEMI"])[0].children[2]
    return top, messages(diag)


class TestPointerArithmetic:

    @pytest.mark.parametrize("left, op, right, expected", [
        ("p", "PLUS", "x", "int*"),
        ("x", "PLUS", "p", "int*"),
        ("x", "PLUS", "y", "int"),
        ("p", "MINUS", "x", "int*"),
        ("p", "MINUS", "q", "int*"),
        ("x", "MINUS", "y", "int"),
    ])
    def test_result_types(self, left, op, right, expected):
        top, _ = arithmetic(binary(id_expr(left), op, id_factor(right)))
        assert top.type == expected

    def test_int_minus_pointer_is_an_error(self):
        top, errs = arithmetic(binary(id_expr("x"), "MINUS", id_factor("p")))
        assert any("cannot subtract pointer from int" in m for m in errs)
        assert top.type == "int"

    @pytest.mark.parametrize("op", ["STAR", "SLASH", "PCT"])
    def test_multiplicative_operands_must_be_int(self, op):
        top, errs = arithmetic(product(id_factor("p"), op, num_factor(2)))
        assert len([m for m in errs if "operand must be int" in m]) == 1
        assert top.type == "int"

    def test_multiplication_of_ints(self):
        top, errs = arithmetic(product(id_factor("x"), "STAR", paren_factor(id_expr("y"))))
        assert errs == []
        assert top.type == "int"


class TestPointerOperators:

    def test_dereference_pointer_gives_int(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign("x", expr(deref_factor("p")))]))
        tree, diag, _ = run(lines)
        assert messages(diag) == []
        assert find(tree, "factor", ["STAR", "factor"])[0].type == "int"

    def test_dereference_int_is_rejected(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign("x", expr(deref_factor("x")))]))
        tree, diag, _ = run(lines)
        errs = messages(diag)
        assert len(errs) == 1
        assert "expected pointer operand" in errs[0]
        assert find(tree, "factor", ["STAR", "factor"])[0].type == "int"

    def test_dereference_as_lvalue(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign_deref("p", num_expr(7))]))
        tree, diag, _ = run(lines)
        assert messages(diag) == []
        assert find(tree, "lvalue", ["STAR", "factor"])[0].type == "int"

    def test_parenthesized_lvalue_takes_inner_type(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign_paren("p", expr(null_factor()))]))
        tree, diag, _ = run(lines)
        assert messages(diag) == []
        assert find(tree, "lvalue", ["LPAREN", "lvalue", "RPAREN"])[0].type == "int*"

    def test_parenthesized_lvalue_mismatch(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign_paren("x", id_expr("p"))]))
        _, diag, _ = run(lines)
        assert messages(diag) == ["type mismatch: int = int*"]

    def test_address_of_pointer_is_rejected(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign("q", expr(addr_factor("p")))]))
        _, diag, _ = run(lines)
        errs = messages(diag)
        assert len(errs) == 1
        assert "expected int operand" in errs[0]

    def test_new_and_delete(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign("p", expr(new_factor(10))), delete(id_expr("p"))]))
        tree, diag, _ = run(lines)
        assert messages(diag) == []
        assert find(tree, "factor", ["NEW", "INT", "LBRACK", "expr", "RBRACK"])[0].type == "int*"

    def test_delete_int_is_rejected(self):
        _, diag, _ = run(program(main(decls=POINTER_DECLS, stmts=[delete(id_expr("x"))])))
        assert len(diag) == 1

    def test_null_literal(self):
        lines = program(main(decls=POINTER_DECLS, stmts=[assign("p", expr(null_factor()))]))
        tree, diag, _ = run(lines)
        assert messages(diag) == []
        assert find(tree, "NULL")[-1].type == "int*"


class TestStatements:

    def test_println_pointer_is_rejected(self):
        _, diag, _ = run(program(main(decls=POINTER_DECLS, stmts=[println(id_expr("p"))])))
        errs = messages(diag)
        assert len(errs) == 1
        assert "println" in errs[0]

    def test_assignment_mismatch(self):
        _, diag, _ = run(program(main(decls=POINTER_DECLS, stmts=[assign("x", id_expr("p"))])))
        assert messages(diag) == ["type mismatch: int = int*"]

    def test_comparison_mismatch(self):
        loop = while_(comparison(id_expr("x"), "LT", id_expr("p")), [println(id_expr("x"))])
        tree, diag, _ = run(program(main(decls=POINTER_DECLS, stmts=[loop])))

        errs = messages(diag)
        assert len(errs) == 1
        assert "type mismatch during comparison" in errs[0]
        assert find(tree, "test")[0].type == ""

    def test_comparison_of_pointers(self):
        loop = while_(comparison(id_expr("p"), "NE", id_expr("q")), [])
        _, diag, _ = run(program(main(decls=POINTER_DECLS, stmts=[loop])))
        assert messages(diag) == []

    def test_statements_have_no_type(self):
        tree, _, _ = run(program(main(decls=POINTER_DECLS, stmts=[assign("x", num_expr(1))])))
        assert all(s.type == "" for s in find(tree, "statement"))


class TestReturnCheck:

    def test_return_pointer_ignored_by_default(self):
        _, diag, _ = run(program(main(first=("a", True), ret=id_expr("a"))))
        assert messages(diag) == []

    def test_return_pointer_reported_when_enabled(self):
        f = procedure("f", decls=[("p", True, None)], ret=id_expr("p"))
        lines = program(main(first=("a", True), ret=id_expr("a")), procedures=[f])
        _, diag, _ = run(lines, check_returns=True)
        assert messages(diag) == ["return type is not int", "return type is not int"]
