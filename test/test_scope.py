# test_scope.py

import pytest

from plc.PlcErrors import PlcBindingError
from plc.PlcScope import Function, Scope, Variable
from plc.PlcTypes import Type


def test_variable_defaults():
    v = Variable(name="x")

    assert v.name == "x"
    assert v.type_t == Type.ANY
    assert v.mutable is True
    assert v.value is None


def test_function_defaults():
    f = Function(name="f")

    assert f.param_types == []
    assert f.return_type == Type.NIL
    assert f.num_of_params == 0


def test_function_invoke_passes_arguments():
    f = Function("add", [Type.INTEGER, Type.INTEGER], Type.INTEGER, lambda args: args[0] + args[1])

    assert f.num_of_params == 2
    assert f.invoke([2, 3]) == 5


def test_function_without_body_cannot_be_invoked():
    f = Function("f")

    with pytest.raises(PlcBindingError, match="no body"):
        f.invoke([])


def test_function_invoke_checks_argument_count():
    f = Function("f", [Type.ANY], Type.NIL, lambda args: None)

    with pytest.raises(PlcBindingError, match="expects 1 argument\\(s\\), received 2"):
        f.invoke([1, 2])


# ---------- variables ----------


def test_define_variable_and_lookup():
    scope = Scope()

    v = scope.define_variable("x", Type.INTEGER, False, 1)

    assert scope.lookup_variable("x") is v
    assert v.type_t == Type.INTEGER
    assert v.mutable is False
    assert v.value == 1


def test_define_variable_duplicate_raises():
    scope = Scope()
    scope.define_variable("x", Type.INTEGER, True)

    with pytest.raises(PlcBindingError, match="Variable name already exists"):
        scope.define_variable("x", Type.DECIMAL, True)


def test_lookup_missing_variable_raises():
    scope = Scope()

    with pytest.raises(PlcBindingError, match="Use of undeclared identifier 'nope'"):
        scope.lookup_variable("nope")


def test_lookup_finds_parent_scope():
    """
    Variables from parent scopes are visible in child scopes.
    """
    parent = Scope()
    x = parent.define_variable("x", Type.INTEGER, True)

    child = parent.child()

    assert child.parent is parent
    assert child.lookup_variable("x") is x


def test_child_may_shadow_parent():
    parent = Scope()
    outer = parent.define_variable("x", Type.INTEGER, True)
    child = parent.child()

    inner = child.define_variable("x", Type.STRING, True)

    assert child.lookup_variable("x") is inner
    assert parent.lookup_variable("x") is outer


def test_child_definitions_are_invisible_to_parent():
    parent = Scope()
    child = parent.child()
    child.define_variable("y", Type.INTEGER, True)

    with pytest.raises(PlcBindingError):
        parent.lookup_variable("y")


# ---------- functions ----------


def test_functions_are_keyed_by_name_and_arity():
    scope = Scope()
    f0 = scope.define_function("f", [], Type.INTEGER)
    f1 = scope.define_function("f", [Type.INTEGER], Type.STRING)

    assert scope.lookup_function("f", 0) is f0
    assert scope.lookup_function("f", 1) is f1


def test_define_function_duplicate_raises():
    scope = Scope()
    scope.define_function("f", [Type.ANY], Type.NIL)

    with pytest.raises(PlcBindingError, match="'f/1'"):
        scope.define_function("f", [Type.INTEGER], Type.INTEGER)


def test_lookup_function_wrong_arity_raises():
    scope = Scope()
    scope.define_function("f", [Type.ANY], Type.NIL)

    with pytest.raises(PlcBindingError, match="'f' with 2 argument"):
        scope.lookup_function("f", 2)


def test_lookup_function_walks_parents():
    parent = Scope()
    f = parent.define_function("print", [Type.ANY], Type.NIL)

    assert parent.child().child().lookup_function("print", 1) is f


def test_variables_and_functions_share_names():
    scope = Scope()
    v = scope.define_variable("f", Type.INTEGER, True)
    f = scope.define_function("f", [], Type.INTEGER)

    assert scope.lookup_variable("f") is v
    assert scope.lookup_function("f", 0) is f
