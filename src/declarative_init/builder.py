"""Immutable builder that regenerates a class initializer.

The builder accumulates parameter declarations and, when applied to a
class, writes three things onto it:

    1. A read-only property per parameter (unless reader=False)
    2. A generated __init__ whose signature mirrors the declarations
    3. A private `_after_initialize` hook running deferred callbacks

Every method that looks like a mutation returns a new builder, so a
subclass can keep declaring parameters on a builder it shares with its
parent without changing what the parent generates:

    builder = (Builder()
               .define("foo", {"option": False})
               .define("bar", {"option": True, "default": None})
               .tolerant_to_unknown_options())
    builder.apply(SomeClass)

The constructor is regenerated from scratch on every apply. Declarations
only happen at class-definition time, so the O(parameters) cost is paid
once per declaration, never per instance.
"""

from dataclasses import dataclass, field, replace
from operator import attrgetter
from typing import Any, Dict, Mapping, Tuple
import logging

from .constants import (
    AFTER_INITIALIZE_HOOK,
    CHECK_TYPE_NAME,
    OPTIONS_CATCHALL,
    UNDEFINED,
    UNDEFINED_NAME,
    slot_name,
)
from .plugins import DEFAULT_PLUGINS, Callback, CodeFragment, Plugin, Statement, check_type
from .signature import Signature

logger = logging.getLogger(__name__)

_INDENT = "    "


@dataclass(frozen=True)
class Builder:
    """Accumulator of parameter declarations for one class.

    Attributes:
        signature: Parameters declared so far
        plugins: Code-generation strategies, in the order they are applied
        parts: Code fragments produced by the plugins, in declaration order
        tolerant: Whether the constructor swallows unknown keyword arguments
    """
    signature: Signature = field(default_factory=Signature)
    plugins: Tuple[Plugin, ...] = DEFAULT_PLUGINS
    parts: Tuple[CodeFragment, ...] = ()
    tolerant: bool = False

    def register(self, plugin: Plugin) -> 'Builder':
        """Add a plugin applied to parameters defined from now on.

        Registering a plugin that is already present returns an equal
        builder.
        """
        if not callable(plugin):
            raise TypeError(f"Plugin must be callable, got {type(plugin).__name__}")
        if plugin in self.plugins:
            return self
        return replace(self, plugins=self.plugins + (plugin,))

    def tolerant_to_unknown_options(self) -> 'Builder':
        """Make the constructor accept and discard unknown keyword arguments."""
        return replace(self, tolerant=True)

    def intolerant_to_unknown_options(self) -> 'Builder':
        """Make unknown keyword arguments raise Python's own TypeError."""
        return replace(self, tolerant=False)

    def define(self, name: str, settings: Mapping[str, Any]) -> 'Builder':
        """Declare a new parameter.

        Args:
            name: Parameter name
            settings: Declaration settings; "option" selects keyword vs positional

        Returns:
            New builder with the parameter and its code fragments appended

        Raises:
            DuplicateParameterError: If name is already declared
            ReservedNameError: If name cannot be used as a parameter
            ParameterOrderError: If a required positional follows a defaulted one
        """
        settings = dict(settings)
        signature = self.signature.add(name, settings)

        fragments = []
        for plugin in self.plugins:
            fragment = plugin(name, settings)
            if fragment is not None:
                fragments.append(fragment)

        logger.debug(
            f"Defined {'option' if settings.get('option') else 'param'} '{name}' "
            f"with {len(fragments)} fragment(s)"
        )
        return replace(self, signature=signature, parts=self.parts + tuple(fragments))

    def statements(self) -> Tuple[Statement, ...]:
        return tuple(part for part in self.parts if isinstance(part, Statement))

    def callbacks(self) -> Tuple[Callback, ...]:
        return tuple(part for part in self.parts if isinstance(part, Callback))

    def render_parameter_list(self) -> str:
        """Constructor parameters after `self`, including the catch-all if tolerant."""
        rendered = [self.signature.render_parameter_list(), f"**{OPTIONS_CATCHALL}" if self.tolerant else ""]
        return ", ".join(part for part in rendered if part)

    def source(self) -> str:
        """Python source of the generated __init__."""
        params = ", ".join(part for part in ("self", self.render_parameter_list()) if part)
        lines = [f"def __init__({params}):"]
        for statement in self.statements():
            lines.extend(_INDENT + line for line in statement.render())
        lines.append(f"{_INDENT}self.{AFTER_INITIALIZE_HOOK}()")
        return "\n".join(lines) + "\n"

    def apply(self, target: type) -> type:
        """Install readers, __init__ and the after-initialize hook on target.

        Safe to call repeatedly; each call replaces whatever a previous
        call installed.

        Args:
            target: Class to install the generated members on

        Returns:
            The target class
        """
        self._define_readers(target)
        self._reload_initializer(target)
        self._reload_callback(target)
        logger.debug(
            f"Applied initializer to {target.__qualname__}: "
            f"({self.render_parameter_list()})"
        )
        return target

    def __call__(self, target: type) -> type:
        return self.apply(target)

    def _define_readers(self, target: type) -> None:
        for spec in self.signature:
            if spec.has_reader:
                reader = property(attrgetter(slot_name(spec.name)), doc=f"Value of the '{spec.name}' parameter.")
                setattr(target, spec.name, reader)

    def _namespace(self) -> Dict[str, Any]:
        namespace: Dict[str, Any] = {
            UNDEFINED_NAME: UNDEFINED,
            CHECK_TYPE_NAME: check_type,
        }
        for statement in self.statements():
            namespace.update(statement.bindings())
        return namespace

    def _reload_initializer(self, target: type) -> None:
        source = self.source()
        namespace = self._namespace()
        logger.debug(f"Generated initializer for {target.__qualname__}:\n{source}")
        exec(source, namespace)

        init = namespace["__init__"]
        init.__qualname__ = f"{target.__qualname__}.__init__"
        init.__module__ = target.__module__
        setattr(target, "__init__", init)

    def _reload_callback(self, target: type) -> None:
        callbacks = self.callbacks()

        def _after_initialize(self) -> None:
            for callback in callbacks:
                callback(self)

        _after_initialize.__name__ = AFTER_INITIALIZE_HOOK
        _after_initialize.__qualname__ = f"{target.__qualname__}.{AFTER_INITIALIZE_HOOK}"
        setattr(target, AFTER_INITIALIZE_HOOK, _after_initialize)

    def describe(self) -> Dict[str, Any]:
        """Export the builder state as a JSON-serializable dictionary."""
        data = self.signature.to_dict()
        data["signature"] = self.render_parameter_list()
        data["tolerant"] = self.tolerant
        data["plugins"] = [getattr(p, "__name__", repr(p)) for p in self.plugins]
        return data

    def __repr__(self) -> str:
        """Compact representation for debugging."""
        return (
            f"Builder("
            f"params={len(self.signature.positionals())}, "
            f"options={len(self.signature.options())}, "
            f"plugins={len(self.plugins)}, "
            f"parts={len(self.parts)}, "
            f"tolerant={self.tolerant})"
        )
