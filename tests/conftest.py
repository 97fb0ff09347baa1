"""Shared fixtures for declarative-init tests."""

import pytest

from declarative_init import Initializer


@pytest.fixture
def foo_bar():
    """Parent class with one param and one option."""
    class Foo(Initializer):
        pass

    Foo.param("foo").option("bar")
    return Foo


@pytest.fixture
def foo_bar_child(foo_bar):
    """Subclass of foo_bar adding a param and an option."""
    class Bar(foo_bar):
        pass

    Bar.param("baz").option("qux")
    return Bar
