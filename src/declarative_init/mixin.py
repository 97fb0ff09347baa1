"""Class-level DSL for declaring initializer parameters.

Subclass Initializer and declare parameters with the `param` and `option`
classmethods. Each declaration regenerates the class's __init__ and readers:

    class User(Initializer):
        pass

    (User
     .param("name", type=str)
     .option("email", default=None)
     .option("admin", default=False, reader=False))

    user = User("ada", email="ada@example.com")
    user.name  # "ada"

Subclasses start from their parent's declarations and extend them without
changing the parent.
"""

from typing import Any, ClassVar, Dict
import logging

from .builder import Builder
from .errors import ReservedNameError
from .plugins import Plugin

logger = logging.getLogger(__name__)


class Initializer:
    """Base class providing the param/option declaration DSL.

    The class's Builder lives in `_initializer_builder`. A subclass receives
    its parent's Builder by reference when it is created. Until it declares
    parameters of its own it keeps following the parent: later declarations
    on the parent reach it too, matching the __init__ it inherits. Its first
    own declaration forks the (immutable) Builder, and from then on parent
    and subclass evolve independently.
    """

    _initializer_builder: ClassVar[Builder] = Builder()

    def __init_subclass__(cls, **kwargs):
        """Attach the parent's builder to the new subclass."""
        super().__init_subclass__(**kwargs)
        cls._initializer_builder = cls._initializer_builder

    @classmethod
    def param(cls, name: str, **options: Any) -> type:
        """Declare a positional parameter.

        Args:
            name: Parameter name
            **options: default (value, zero-argument thunk, or thunk taking the instance),
                type (class, union, or validating/coercing callable),
                reader (False to skip the public reader)

        Returns:
            The class itself, for chaining
        """
        return cls._define(name, {"option": False, **options})

    @classmethod
    def option(cls, name: str, **options: Any) -> type:
        """Declare a keyword parameter.

        Args:
            name: Parameter name
            **options: Same as for `param`

        Returns:
            The class itself, for chaining
        """
        return cls._define(name, {"option": True, **options})

    @classmethod
    def tolerant_to_unknown_options(cls) -> type:
        """Accept and discard keyword arguments that match no option."""
        return cls._update_builder(cls._initializer_builder.tolerant_to_unknown_options())

    @classmethod
    def intolerant_to_unknown_options(cls) -> type:
        """Reject keyword arguments that match no option (the default)."""
        return cls._update_builder(cls._initializer_builder.intolerant_to_unknown_options())

    @classmethod
    def register_plugin(cls, plugin: Plugin) -> type:
        """Apply an extra plugin to parameters declared from now on."""
        return cls._update_builder(cls._initializer_builder.register(plugin))

    @classmethod
    def describe_initializer(cls) -> Dict[str, Any]:
        """JSON-serializable description of the declared parameters."""
        data = cls._initializer_builder.describe()
        data["class"] = f"{cls.__module__}:{cls.__qualname__}"
        return data

    @classmethod
    def _define(cls, name: str, settings: Dict[str, Any]) -> type:
        # Readers would replace the classmethods the DSL itself relies on
        if name in DSL_NAMES:
            raise ReservedNameError(name, "shadows a member of Initializer")
        return cls._update_builder(cls._initializer_builder.define(name, settings))

    @classmethod
    def _update_builder(cls, builder: Builder) -> type:
        if cls is Initializer:
            raise TypeError("Declare parameters on a subclass of Initializer, not on Initializer itself")
        previous = cls._initializer_builder
        if builder is previous:
            return cls
        cls._initializer_builder = builder
        logger.debug(f"Reloading initializer of {cls.__qualname__}: {builder!r}")
        builder.apply(cls)
        cls._follow_parent(previous, builder)
        return cls

    @classmethod
    def _follow_parent(cls, previous: Builder, builder: Builder) -> None:
        # Subclasses without own declarations inherit the regenerated members
        # through the MRO; keep their builder in step with them.
        for subclass in cls.__subclasses__():
            if subclass.__dict__.get("_initializer_builder") is previous:
                subclass._initializer_builder = builder
                subclass._follow_parent(previous, builder)


DSL_NAMES = frozenset(
    name for name in vars(Initializer)
    if not (name.startswith("__") and name.endswith("__"))
)
