"""Code fragments and the default plugins that produce them.

A plugin is any callable `(name, settings) -> Optional[CodeFragment]`. The
builder calls every registered plugin for each declared parameter and keeps
the non-None results in order.

Fragments come in two kinds:
- Statement: lowered to source lines in the generated __init__ body
- Callback: called with the instance after all statements have run

Default plugins, in registration order:
- type_constraint: check/coerce the incoming value (Statement)
- variable_setter: store the value on the instance (Statement)
- default_value: fill in values that were not supplied (Callback)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional
import inspect
import types
import typing

from .constants import CHECK_TYPE_NAME, UNDEFINED, UNDEFINED_NAME, slot_name
from .errors import TypeConstraintError

Plugin = Callable[[str, Mapping[str, Any]], Optional["CodeFragment"]]


class CodeFragment(ABC):
    """One piece of generated construction logic for a single parameter."""

    name: str


class Statement(CodeFragment):
    """Fragment executed inline in the constructor body."""

    @abstractmethod
    def render(self) -> List[str]:
        """Source lines for the constructor body (unindented)."""

    def bindings(self) -> Dict[str, Any]:
        """Objects the rendered lines refer to by name."""
        return {}


@dataclass(frozen=True)
class Assignment(Statement):
    """Store the argument in the parameter's instance slot."""
    name: str

    def render(self) -> List[str]:
        return [f"self.{slot_name(self.name)} = {self.name}"]


@dataclass(frozen=True)
class TypeCheck(Statement):
    """Run the type capability on the argument before it is stored.

    Unsupplied arguments (UNDEFINED) are skipped; defaults are not checked.
    """
    name: str
    constraint: Any

    @property
    def binding_name(self) -> str:
        return f"__type_{self.name}__"

    def render(self) -> List[str]:
        return [
            f"if {self.name} is not {UNDEFINED_NAME}:",
            f"    {self.name} = {CHECK_TYPE_NAME}({self.name!r}, {self.binding_name}, {self.name})",
        ]

    def bindings(self) -> Dict[str, Any]:
        return {self.binding_name: self.constraint}


@dataclass(frozen=True)
class Callback(CodeFragment):
    """Fragment run with the instance once all statements have executed."""
    name: str
    function: Callable[[Any], None]

    def __call__(self, instance: Any) -> None:
        self.function(instance)


def is_instance_constraint(constraint: Any) -> bool:
    """Whether a type capability is checked with isinstance rather than called.

    Classes, tuples of classes and unions (`int | None`, `Optional[int]`)
    are isinstance constraints.
    """
    if isinstance(constraint, (type, tuple, types.UnionType)):
        return True
    return typing.get_origin(constraint) is typing.Union


def check_type(name: str, constraint: Any, value: Any) -> Any:
    """Validate (and possibly coerce) a value against its type capability.

    Classes, tuples of classes and unions are checked with isinstance and
    never coerce. Any other callable is called with the value and its result
    replaces the value; TypeError or ValueError from it counts as rejection.

    Args:
        name: Parameter name (for error messages)
        constraint: Class, tuple of classes, union, or callable
        value: The supplied argument

    Returns:
        The value to store

    Raises:
        TypeConstraintError: If the capability rejects the value
    """
    if is_instance_constraint(constraint):
        if not isinstance(value, constraint):
            raise TypeConstraintError(name, value, constraint, f"got {type(value).__name__}")
        return value

    try:
        return constraint(value)
    except TypeConstraintError:
        raise
    except (TypeError, ValueError) as e:
        raise TypeConstraintError(name, value, constraint, str(e)) from e


def variable_setter(name: str, settings: Mapping[str, Any]) -> Statement:
    return Assignment(name)


def type_constraint(name: str, settings: Mapping[str, Any]) -> Optional[Statement]:
    constraint = settings.get("type", UNDEFINED)
    if constraint is UNDEFINED or constraint is None:
        return None
    if not is_instance_constraint(constraint) and not callable(constraint):
        raise TypeError(
            f"Parameter {name}: type must be a class, union or callable, "
            f"got {type(constraint).__name__}"
        )
    return TypeCheck(name, constraint)


def _takes_instance(name: str, default: Callable) -> bool:
    """Whether a callable default wants the instance as its only argument.

    Classes are factories and are always called without arguments. Other
    callables are inspected: no required positional parameters means a
    zero-argument thunk, exactly one means it receives the instance.
    """
    if isinstance(default, type):
        return False
    try:
        sig = inspect.signature(default)
    except (TypeError, ValueError):
        return False

    required = [
        p for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    ]
    if len(required) > 1:
        raise TypeError(
            f"Parameter {name}: default must take no arguments or only the instance, "
            f"got a callable requiring {len(required)} arguments"
        )
    return len(required) == 1


def default_value(name: str, settings: Mapping[str, Any]) -> Optional[Callback]:
    """Assign the default when the argument was not supplied.

    A callable default is a thunk. Zero-argument callables (`list`, `dict`,
    `lambda: 0`) are called as-is; a callable taking one argument receives
    the instance, so it can read parameters that were already assigned.
    Non-callables are used as the value. Explicitly passed None is kept.
    """
    if "default" not in settings:
        return None

    default = settings["default"]
    slot = slot_name(name)

    if not callable(default):
        def compute(instance: Any) -> Any:
            return default
    elif _takes_instance(name, default):
        compute = default
    else:
        def compute(instance: Any) -> Any:
            return default()

    def assign_default(instance: Any) -> None:
        if getattr(instance, slot, UNDEFINED) is UNDEFINED:
            setattr(instance, slot, compute(instance))

    assign_default.__qualname__ = f"default_value.<{name}>"
    return Callback(name, assign_default)


DEFAULT_PLUGINS = (type_constraint, variable_setter, default_value)
