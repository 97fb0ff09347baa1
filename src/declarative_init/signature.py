"""Parameter declarations and the constructor signature they produce.

This module implements the two value types the builder accumulates:
- ParameterSpec: One declared parameter (positional "param" or keyword "option")
- Signature: Ordered, immutable record of all parameters declared so far

Both are frozen. Signature.add returns a new Signature, so a class and its
subclasses can share one Signature until either of them declares more.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple
from types import MappingProxyType
import keyword

from .constants import RESERVED_NAMES, UNDEFINED, UNDEFINED_NAME, slot_name
from .errors import DuplicateParameterError, ParameterOrderError, ReservedNameError


def _validate_name(name: str) -> None:
    if not isinstance(name, str):
        raise ReservedNameError(repr(name), f"expected str, got {type(name).__name__}")
    if not name.isidentifier():
        raise ReservedNameError(name, "not a valid Python identifier")
    if keyword.iskeyword(name):
        raise ReservedNameError(name, "is a Python keyword")
    if name.startswith("__") and name.endswith("__"):
        raise ReservedNameError(name, "dunder names are reserved")
    if name in RESERVED_NAMES:
        raise ReservedNameError(name, "reserved by the generated initializer")


@dataclass(frozen=True)
class ParameterSpec:
    """Specification for a single declared parameter.

    Attributes:
        name: Parameter identifier, also the reader and keyword name
        option: True for keyword options, False for positional params
        default: Fallback value or thunk (zero-arg, or taking the instance); UNDEFINED if none
        type: Type capability (class, union or validating/coercing callable); UNDEFINED if none
        reader: Whether to generate a public reader (None means the default, True)
        settings: All declaration settings, including keys only plugins understand
    """
    name: str
    option: bool = False
    default: Any = UNDEFINED
    type: Any = UNDEFINED
    reader: Optional[bool] = None
    settings: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate the name and freeze settings."""
        _validate_name(self.name)
        if self.reader not in (None, True, False):
            raise ValueError(
                f"Parameter {self.name}: reader must be True, False or None, got {self.reader!r}"
            )
        object.__setattr__(self, 'settings', MappingProxyType(dict(self.settings)))

    @classmethod
    def from_settings(cls, name: str, settings: Mapping[str, Any]) -> 'ParameterSpec':
        """Build a spec from raw declaration settings."""
        return cls(
            name=name,
            option=bool(settings.get("option", False)),
            default=settings.get("default", UNDEFINED),
            type=settings.get("type", UNDEFINED),
            reader=settings.get("reader"),
            settings=settings,
        )

    @property
    def has_default(self) -> bool:
        return self.default is not UNDEFINED

    @property
    def has_reader(self) -> bool:
        return self.reader is not False

    def render(self) -> str:
        """Render this parameter as it appears in the constructor signature."""
        if self.has_default:
            return f"{self.name}={UNDEFINED_NAME}"
        return self.name

    def to_dict(self) -> Dict[str, Any]:
        """Export as a JSON-serializable dictionary."""
        return {
            "name": self.name,
            "kind": "option" if self.option else "param",
            "default": _describe(self.default),
            "type": _describe(self.type),
            "reader": self.has_reader,
        }


def _describe(value: Any) -> Optional[str]:
    if value is UNDEFINED:
        return None
    if callable(value):
        return getattr(value, "__qualname__", None) or repr(value)
    return repr(value)


@dataclass(frozen=True)
class Signature:
    """Ordered record of every parameter declared for a class.

    Insertion order is significant: positional params keep their
    declaration order and come first in the constructor, followed by
    options in their declaration order.

    Attributes:
        specs: Declared parameters in declaration order
    """
    specs: Tuple[ParameterSpec, ...] = ()

    def __post_init__(self):
        """Freeze specs and build the name lookup."""
        object.__setattr__(self, 'specs', tuple(self.specs))
        object.__setattr__(
            self, '_spec_dict', MappingProxyType({spec.name: spec for spec in self.specs})
        )

    def add(self, name: str, settings: Mapping[str, Any]) -> 'Signature':
        """Return a new Signature with one more parameter appended.

        Args:
            name: Parameter name
            settings: Declaration settings (option, default, type, reader, ...)

        Returns:
            New Signature; this one is left unchanged

        Raises:
            DuplicateParameterError: If name is already declared
            ReservedNameError: If name cannot be used as a parameter
            ParameterOrderError: If a required positional follows a defaulted one
        """
        if name in self._spec_dict:
            raise DuplicateParameterError(name, self.names())

        for existing in self.names():
            if name == slot_name(existing) or existing == slot_name(name):
                raise ReservedNameError(
                    name, f"its reader or storage slot collides with parameter '{existing}'"
                )

        spec = ParameterSpec.from_settings(name, settings)

        if not spec.option and not spec.has_default:
            defaulted = [p.name for p in self.positionals() if p.has_default]
            if defaulted:
                raise ParameterOrderError(name, defaulted[-1])

        return Signature(self.specs + (spec,))

    def parameters(self) -> Tuple[ParameterSpec, ...]:
        """All parameters in declaration order."""
        return self.specs

    def positionals(self) -> Tuple[ParameterSpec, ...]:
        return tuple(spec for spec in self.specs if not spec.option)

    def options(self) -> Tuple[ParameterSpec, ...]:
        return tuple(spec for spec in self.specs if spec.option)

    def names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.specs)

    def get(self, name: str) -> ParameterSpec:
        """Get a parameter by name.

        Raises:
            KeyError: If the parameter is not declared
        """
        if name not in self._spec_dict:
            raise KeyError(f"Unknown parameter: {name}. Available: {sorted(self._spec_dict.keys())}")
        return self._spec_dict[name]

    def render_parameter_list(self) -> str:
        """Render the formal parameters of the constructor (without self).

        Positional params come first, then a bare `*` and the options, so
        options are keyword-only. Defaulted parameters get the UNDEFINED
        sentinel as their literal default; the default value itself is
        computed after all assignments.

        Example:
            >>> sig = Signature().add("foo", {}).add("bar", {"option": True, "default": 1})
            >>> sig.render_parameter_list()
            'foo, *, bar=__undefined__'
        """
        parts = [spec.render() for spec in self.positionals()]
        options = self.options()
        if options:
            parts.append("*")
            parts.extend(spec.render() for spec in options)
        return ", ".join(parts)

    def __iter__(self) -> Iterator[ParameterSpec]:
        return iter(self.specs)

    def __contains__(self, name: str) -> bool:
        return name in self._spec_dict

    def __len__(self) -> int:
        return len(self.specs)

    def to_dict(self) -> Dict[str, Any]:
        """Export the signature as a JSON-serializable dictionary."""
        return {
            "parameters": [spec.to_dict() for spec in self.specs],
            "signature": self.render_parameter_list(),
        }
