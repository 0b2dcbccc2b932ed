import io
import math
from collections.abc import Callable
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lox import lox_ast as ast
from lox.lox_constants import TokenType
from lox.lox_errors import ErrorReporter
from lox.lox_interpreter import (
    Interpreter,
    divide,
    format_number,
    is_equal,
    is_truthy,
    stringify,
)
from lox.lox_lexer import Token
from lox.lox_session import LoxSession

RunLox = Callable[[str], Any]


def output(run_lox: RunLox, source: str) -> list[str]:
    result = run_lox(source)
    assert result.ok, result.errors
    return list(result.lines)


# ----------------
#  Value helpers
# ----------------


def test_truthiness() -> None:
    assert is_truthy(None) is False
    assert is_truthy(False) is False
    assert is_truthy(True) is True
    assert is_truthy(0.0) is True
    assert is_truthy("") is True


def test_equality_is_type_strict() -> None:
    assert is_equal(None, None)
    assert not is_equal(None, False)
    assert not is_equal(True, 1.0)
    assert not is_equal(1.0, "1")
    assert is_equal("a", "a")
    assert is_equal(2.0, 2.0)


@pytest.mark.parametrize(
    "value,text",
    [
        (None, "nil"),
        (True, "true"),
        (False, "false"),
        (3.0, "3"),
        (-3.0, "-3"),
        (2.5, "2.5"),
        (0.1, "0.1"),
        (math.inf, "Infinity"),
        (-math.inf, "-Infinity"),
        (math.nan, "NaN"),
        ("text", "text"),
    ],
)
def test_stringify(value: Any, text: str) -> None:
    assert stringify(value) == text


def test_divide_follows_ieee() -> None:
    assert divide(1.0, 0.0) == math.inf
    assert divide(-1.0, 0.0) == -math.inf
    assert divide(1.0, -0.0) == -math.inf
    assert math.isnan(divide(0.0, 0.0))
    assert divide(7.0, 2.0) == 3.5


def test_format_number_drops_only_trailing_zero_fraction() -> None:
    assert format_number(10.0) == "10"
    assert format_number(10.25) == "10.25"


@pytest.mark.parametrize(
    "value,text",
    [
        (1e23, "100000000000000000000000"),
        (1e-07, "0.0000001"),
        (-2.5e-05, "-0.000025"),
        (-0.0, "-0"),
    ],
)
def test_format_number_never_uses_exponents(value: float, text: str) -> None:
    assert format_number(value) == text


# ------------
#  Evaluation
# ------------


@pytest.mark.parametrize(
    "expression,expected",
    [
        ("1 + 2", "3"),
        ("7 / 2", "3.5"),
        ("2 * 3 - 4", "2"),
        ("-(1 + 2)", "-3"),
        ("1.5 * 2", "3"),
        ("1 / 0", "Infinity"),
        ("-1 / 0", "-Infinity"),
        ("0 / 0", "NaN"),
        ('"con" + "cat"', "concat"),
        ("1 < 2", "true"),
        ("2 <= 2", "true"),
        ("1 > 2", "false"),
        ("3 >= 4", "false"),
        ("nil == nil", "true"),
        ("nil == false", "false"),
        ("1 == 1", "true"),
        ('1 == "1"', "false"),
        ("true == 1", "false"),
        ('"a" != "b"', "true"),
        ("!nil", "true"),
        ("!0", "false"),
        ('!""', "false"),
        ('nil or "x"', "x"),
        ('"a" or "b"', "a"),
        ('"a" and "b"', "b"),
        ("false and undefined", "false"),
        ("true or undefined", "true"),
        ("nil", "nil"),
    ],
)
def test_expressions(run_lox: RunLox, expression: str, expected: str) -> None:
    assert output(run_lox, f"print {expression};") == [expected]


@pytest.mark.parametrize(
    "source,message",
    [
        ('print 1 + "a";', "Operands must be two numbers or two strings."),
        ('print "a" + nil;', "Operands must be two numbers or two strings."),
        ('print "a" < "b";', "Operands must be numbers."),
        ("print 1 * nil;", "Operands must be numbers."),
        ('print -"a";', "Operand must be a number."),
        ("print x;", "Undefined variable 'x'."),
        ("x = 1;", "Undefined variable 'x'."),
        ('"x"();', "Can only call functions and classes."),
        ("fun f(a) {} f();", "Expected 1 arguments but got 0."),
        ("fun f() {} f(1, 2);", "Expected 0 arguments but got 2."),
        ("var x = 1; print x.y;", "Only instances have properties."),
        ("var x = 1; x.y = 2;", "Only instances have fields."),
        ("class A {} print A().nope;", "Undefined property 'nope'."),
        ('var S = "x"; class A < S {}', "Superclass must be a class."),
        (
            "class A {} class B < A { m() { return super.nope(); } } B().m();",
            "Undefined property 'nope'.",
        ),
        ("class A { init(x) {} } A();", "Expected 1 arguments but got 0."),
        ("fun f() { f(); } f();", "Stack overflow."),
    ],
)
def test_runtime_errors(run_lox: RunLox, source: str, message: str) -> None:
    result = run_lox(source)
    assert not result.ok
    assert result.session.reporter.had_runtime_error
    assert not result.session.reporter.had_error
    assert result.errors == [f"{message}\n[line 1]"]


def test_runtime_error_reports_line_of_operator(run_lox: RunLox) -> None:
    result = run_lox('var a = 1;\nvar b = "x";\nprint a\n  - b;')
    assert result.errors == ["Operands must be numbers.\n[line 4]"]


def test_runtime_error_halts_remaining_statements(run_lox: RunLox) -> None:
    result = run_lox('print "before"; "x"(); print "after";')
    assert result.lines == ["before"]
    assert result.errors == ["Can only call functions and classes.\n[line 1]"]


def test_static_error_prevents_execution(run_lox: RunLox) -> None:
    result = run_lox("var a = 1; { var a = a + 1; print a; }")
    assert not result.ok
    assert result.lines == []
    assert result.errors == [
        "[line 1] Error at 'a': Can't read local variable in its own initializer."
    ]


# -----------------------
#  Statements and scopes
# -----------------------


def test_variables_and_blocks(run_lox: RunLox) -> None:
    source = """
    var a = "global a";
    var b = "global b";
    {
        var a = "outer a";
        {
            var a = "inner a";
            print a;
            print b;
        }
        print a;
    }
    print a;
    """
    assert output(run_lox, source) == ["inner a", "global b", "outer a", "global a"]


def test_uninitialized_variable_is_nil(run_lox: RunLox) -> None:
    assert output(run_lox, "var a; print a;") == ["nil"]


def test_assignment_is_an_expression(run_lox: RunLox) -> None:
    assert output(run_lox, "var a; var b; a = b = 3; print a; print b = 4;") == [
        "3",
        "4",
    ]


def test_if_else(run_lox: RunLox) -> None:
    source = """
    if (0) print "zero is truthy"; else print "no";
    if (nil) print "no"; else print "nil is falsy";
    if (false) print "no";
    """
    assert output(run_lox, source) == ["zero is truthy", "nil is falsy"]


def test_while_loop(run_lox: RunLox) -> None:
    assert output(run_lox, "var i = 0; while (i < 3) { print i; i = i + 1; }") == [
        "0",
        "1",
        "2",
    ]


def test_for_loop(run_lox: RunLox) -> None:
    source = """
    var a = 0;
    var temp;
    for (var b = 1; a < 30; b = temp + b) {
        print a;
        temp = a;
        a = b;
    }
    """
    assert output(run_lox, source) == ["0", "1", "1", "2", "3", "5", "8", "13", "21"]


def test_for_loop_variable_is_scoped_to_loop(run_lox: RunLox) -> None:
    result = run_lox("for (var i = 0; i < 1; i = i + 1) {} print i;")
    assert result.errors == ["Undefined variable 'i'.\n[line 1]"]


def test_closure_sees_declaration_time_binding(run_lox: RunLox) -> None:
    source = """
    var a = "global";
    {
        fun showA() { print a; }
        showA();
        var a = "block";
        showA();
    }
    """
    assert output(run_lox, source) == ["global", "global"]


# -----------
#  Functions
# -----------


def test_counter_closure(run_lox: RunLox) -> None:
    source = """
    fun makeCounter() { var i = 0; fun count() { i = i + 1; return i; } return count; }
    var c = makeCounter(); print c(); print c();
    """
    assert output(run_lox, source) == ["1", "2"]


def test_counters_are_independent(run_lox: RunLox) -> None:
    source = """
    fun makeCounter() { var i = 0; fun count() { i = i + 1; return i; } return count; }
    var a = makeCounter();
    var b = makeCounter();
    a(); a();
    print a();
    print b();
    """
    assert output(run_lox, source) == ["3", "1"]


def test_recursion(run_lox: RunLox) -> None:
    source = """
    fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }
    print fib(15);
    """
    assert output(run_lox, source) == ["610"]


def test_deep_recursion(run_lox: RunLox) -> None:
    source = """
    fun count(n) { if (n > 0) return count(n - 1) + 1; return 0; }
    print count(1000);
    """
    assert output(run_lox, source) == ["1000"]


def test_stack_overflow_leaves_session_usable() -> None:
    out, err = io.StringIO(), io.StringIO()
    session = LoxSession(out=out, err=err)
    assert not session.run("var depth = 0; fun dive() { depth = depth + 1; dive(); } dive();")
    assert err.getvalue() == "Stack overflow.\n[line 1]\n"
    assert session.interpreter.environment is session.interpreter.globals

    session.reset_errors()
    assert session.run("print depth > 500;")
    assert out.getvalue() == "true\n"


def test_return_unwinds_nested_loops(run_lox: RunLox) -> None:
    source = """
    fun find() {
        while (true) {
            for (var i = 0; ; i = i + 1) {
                if (i == 3) { return i; }
            }
        }
    }
    print find();
    """
    assert output(run_lox, source) == ["3"]


def test_function_without_return_yields_nil(run_lox: RunLox) -> None:
    assert output(run_lox, "fun f() { 1; } print f(); fun g() { return; } print g();") == [
        "nil",
        "nil",
    ]


def test_callable_string_forms(run_lox: RunLox) -> None:
    source = """
    fun f() {}
    class A { m() {} }
    print f;
    print clock;
    print A;
    print A();
    print A().m;
    """
    assert output(run_lox, source) == ["<fn f>", "<native fn>", "A", "A instance", "<fn m>"]


def test_clock_returns_seconds(run_lox: RunLox) -> None:
    assert output(run_lox, "print clock() > 0;") == ["true"]


def test_define_native_registers_host_function() -> None:
    out = io.StringIO()
    interpreter = Interpreter(ErrorReporter(stream=io.StringIO()), out)
    native = interpreter.define_native("square", 1, lambda x: x * x)
    paren = Token(TokenType.RIGHT_PAREN, ")", None, 1)
    call = ast.Call(ast.Variable(Token(TokenType.IDENTIFIER, "square")), paren, [ast.Literal(4.0)])
    assert interpreter.interpret([ast.Print(call)])
    assert out.getvalue() == "16\n"
    assert interpreter.globals.values["square"] is native


# ---------
#  Classes
# ---------


def test_fields_and_methods(run_lox: RunLox) -> None:
    source = """
    class Point {
        init(x, y) { this.x = x; this.y = y; }
        sum() { return this.x + this.y; }
    }
    var p = Point(1, 2);
    print p.sum();
    p.x = 10;
    print p.sum();
    """
    assert output(run_lox, source) == ["3", "12"]


def test_bound_method_remembers_instance(run_lox: RunLox) -> None:
    source = """
    class Person {
        init(name) { this.name = name; }
        greet() { return "hi " + this.name; }
    }
    var greet = Person("ada").greet;
    print greet();
    """
    assert output(run_lox, source) == ["hi ada"]


def test_initializer_always_returns_instance(run_lox: RunLox) -> None:
    source = """
    class A { init() { this.n = 1; return; } }
    var a = A();
    print a.init() == a;
    print a.n;
    """
    assert output(run_lox, source) == ["true", "1"]


def test_field_shadows_method(run_lox: RunLox) -> None:
    source = """
    class A { m() { return "method"; } }
    var a = A();
    print a.m();
    a.m = "field";
    print a.m;
    """
    assert output(run_lox, source) == ["method", "field"]


def test_super_call(run_lox: RunLox) -> None:
    source = """
    class A { greet() { return "A"; } }
    class B < A { greet() { return "B->" + super.greet(); } }
    print B().greet();
    """
    assert output(run_lox, source) == ["B->A"]


def test_super_is_bound_to_the_declaring_class(run_lox: RunLox) -> None:
    source = """
    class A { m() { return "A"; } }
    class B < A { m() { return "B" + super.m(); } }
    class C < B { m() { return "C" + super.m(); } }
    print C().m();
    """
    assert output(run_lox, source) == ["CBA"]


def test_method_dispatch_follows_the_receiver(run_lox: RunLox) -> None:
    source = """
    class A { run() { return this.name(); } name() { return "A"; } }
    class B < A { name() { return "B"; } }
    print B().run();
    print A().run();
    """
    assert output(run_lox, source) == ["B", "A"]


def test_inherited_methods_and_initializer(run_lox: RunLox) -> None:
    source = """
    class A { init(n) { this.n = n; } double() { return this.n * 2; } }
    class B < A {}
    print B(21).double();
    """
    assert output(run_lox, source) == ["42"]


def test_instances_are_equal_only_to_themselves(run_lox: RunLox) -> None:
    source = "class A {} var a = A(); print a == a; print a == A();"
    assert output(run_lox, source) == ["true", "false"]


# ----------------
#  Property tests
# ----------------


@given(
    st.integers(min_value=-(10**9), max_value=10**9),
    st.integers(min_value=-(10**9), max_value=10**9),
)
def test_integer_sums(a: int, b: int) -> None:
    out = io.StringIO()

    source = f"print {a} + {b}; print {a} - {b}; print {a} < {b};"
    LoxSession(out=out, err=io.StringIO()).run(source)
    assert out.getvalue().splitlines() == [str(a + b), str(a - b), str(a < b).lower()]


@given(
    st.text(alphabet="abcxyz 019", max_size=20),
    st.text(alphabet="abcxyz 019", max_size=20),
)
def test_string_concatenation(left: str, right: str) -> None:
    out = io.StringIO()

    LoxSession(out=out, err=io.StringIO()).run(f'print "{left}" + "{right}";')
    assert out.getvalue() == left + right + "\n"
