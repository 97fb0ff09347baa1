"""Shared constants for generated initializers."""


class _Undefined:
    """Marker for an argument that was not supplied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()

# Private hook installed on every class with a generated __init__
AFTER_INITIALIZE_HOOK = "_after_initialize"

# Names bound in the namespace of generated code
UNDEFINED_NAME = "__undefined__"
CHECK_TYPE_NAME = "__check_type__"
OPTIONS_CATCHALL = "__options__"

SLOT_PREFIX = "_"

RESERVED_NAMES = frozenset({"self", AFTER_INITIALIZE_HOOK})


def slot_name(name: str) -> str:
    """Instance attribute that stores the value of parameter `name`."""
    return f"{SLOT_PREFIX}{name}"
