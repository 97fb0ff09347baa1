"""Public API for declarative-init."""

# DSL
from .mixin import Initializer

# Core
from .builder import Builder
from .signature import ParameterSpec, Signature

# Plugins
from .plugins import (
    Plugin,
    CodeFragment,
    Statement,
    Assignment,
    TypeCheck,
    Callback,
    check_type,
    type_constraint,
    variable_setter,
    default_value,
    DEFAULT_PLUGINS,
)

# Errors
from .errors import (
    InitializerError,
    DuplicateParameterError,
    ParameterOrderError,
    ReservedNameError,
    TypeConstraintError,
)

# Constants
from .constants import UNDEFINED

# Version
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("declarative-init")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "Initializer",
    "Builder",
    "ParameterSpec",
    "Signature",
    "Plugin",
    "CodeFragment",
    "Statement",
    "Assignment",
    "TypeCheck",
    "Callback",
    "check_type",
    "type_constraint",
    "variable_setter",
    "default_value",
    "DEFAULT_PLUGINS",
    "InitializerError",
    "DuplicateParameterError",
    "ParameterOrderError",
    "ReservedNameError",
    "TypeConstraintError",
    "UNDEFINED",
    "__version__",
]
