"""Exceptions raised while declaring parameters and constructing instances.

Declaration-time errors (duplicate, reserved, misordered parameters) surface
when `param`/`option` is called. TypeConstraintError surfaces when an
instance is constructed. Missing arguments and unknown options are left to
Python's own call machinery and arrive as plain TypeError.
"""

from types import FunctionType
from typing import Any


class InitializerError(Exception):
    """Base class for all declarative-init errors."""


class DuplicateParameterError(InitializerError, ValueError):
    """A parameter name was declared twice for the same class."""

    def __init__(self, name: str, declared=()):
        self.name = name
        available = ", ".join(declared)
        super().__init__(
            f"Parameter '{name}' is already declared. "
            f"Declared parameters: [{available}]"
        )


class ReservedNameError(InitializerError, ValueError):
    """A parameter name is not a usable identifier or is reserved."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"Invalid parameter name {name!r}: {reason}")


class ParameterOrderError(InitializerError, ValueError):
    """A required positional parameter follows one with a default."""

    def __init__(self, name: str, defaulted: str):
        self.name = name
        super().__init__(
            f"Positional parameter '{name}' has no default but follows "
            f"'{defaulted}', which has one. Give '{name}' a default or "
            f"declare it as an option."
        )


class TypeConstraintError(InitializerError, TypeError):
    """A supplied argument was rejected by its declared type."""

    def __init__(self, name: str, value: Any, constraint: Any = None, reason: str = ""):
        self.name = name
        self.value = value
        self.constraint = constraint
        if isinstance(constraint, type):
            expected = constraint.__name__
        elif isinstance(constraint, FunctionType):
            expected = constraint.__qualname__
        else:
            expected = repr(constraint)
        message = f"Argument '{name}' rejected by type {expected}: got {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
