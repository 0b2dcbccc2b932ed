import pytest

from lox import lox_ast as ast
from lox.lox_constants import TokenType
from lox.lox_environment import Environment
from lox.lox_errors import LoxRuntimeError
from lox.lox_interpreter import Interpreter
from lox.lox_lexer import Token
from lox.lox_runtime import (
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    NativeFunction,
    ReturnSignal,
)


def ident(lexeme: str) -> Token:
    return Token(TokenType.IDENTIFIER, lexeme, None, 1)


def method(lexeme: str, *params: str, body: list[ast.Stmt] | None = None) -> ast.Function:
    return ast.Function(ident(lexeme), [ident(p) for p in params], body or [])


def test_native_function() -> None:
    native = NativeFunction("twice", 1, lambda x: x * 2)
    assert native.arity() == 1
    assert native.call(Interpreter(), [2.0]) == 4.0
    assert str(native) == "<native fn>"
    assert isinstance(native, LoxCallable)


def test_function_string_form_and_arity() -> None:
    fn = LoxFunction(method("add", "a", "b"), Environment())
    assert str(fn) == "<fn add>"
    assert fn.arity() == 2
    assert fn.name == "add"


def test_function_returns_value_of_return_statement() -> None:
    body: list[ast.Stmt] = [ast.Return(Token(TokenType.RETURN, "return"), ast.Literal(3.0))]
    fn = LoxFunction(method("three", body=body), Environment())
    assert fn.call(Interpreter(), []) == 3.0


def test_function_without_return_yields_nil() -> None:
    fn = LoxFunction(method("noop"), Environment())
    assert fn.call(Interpreter(), []) is None


def test_bind_leaves_original_untouched() -> None:
    klass = LoxClass("A", None, {})
    fn = LoxFunction(method("m"), Environment())
    bound = fn.bind(LoxInstance(klass))
    assert bound is not fn
    assert bound.closure.enclosing is fn.closure
    assert "this" in bound.closure.values
    assert "this" not in fn.closure.values


def test_find_method_walks_superclass_chain() -> None:
    base_m = LoxFunction(method("m"), Environment())
    base_n = LoxFunction(method("n"), Environment())
    child_m = LoxFunction(method("m"), Environment())
    base = LoxClass("Base", None, {"m": base_m, "n": base_n})
    child = LoxClass("Child", base, {"m": child_m})
    assert child.find_method("m") is child_m
    assert child.find_method("n") is base_n
    assert child.find_method("missing") is None


def test_class_arity_follows_initializer() -> None:
    init = LoxFunction(method("init", "a", "b"), Environment(), is_initializer=True)
    base = LoxClass("Base", None, {"init": init})
    assert LoxClass("Plain", None, {}).arity() == 0
    assert base.arity() == 2
    assert LoxClass("Child", base, {}).arity() == 2


def test_calling_a_class_makes_an_instance() -> None:
    klass = LoxClass("Point", None, {})
    instance = klass.call(Interpreter(), [])
    assert isinstance(instance, LoxInstance)
    assert instance.klass is klass
    assert str(klass) == "Point"
    assert str(instance) == "Point instance"


def test_instance_fields_shadow_methods() -> None:
    klass = LoxClass("A", None, {"m": LoxFunction(method("m"), Environment())})
    instance = LoxInstance(klass)
    assert isinstance(instance.get(ident("m")), LoxFunction)
    instance.set(ident("m"), 1.0)
    assert instance.get(ident("m")) == 1.0


def test_instance_undefined_property() -> None:
    instance = LoxInstance(LoxClass("A", None, {}))
    with pytest.raises(LoxRuntimeError, match="Undefined property 'nope'."):
        instance.get(ident("nope"))


def test_return_signal_defaults_to_nil() -> None:
    assert ReturnSignal().value is None
    assert ReturnSignal(1.0) == ReturnSignal(1.0)
