"""declarative-init: declare constructor parameters, get __init__ generated.

Classes declare positional params and keyword options through a small
class-level DSL. An immutable builder regenerates the constructor, readers,
type checks and default handling on every declaration, and subclasses
extend their parent's declarations without altering them.
"""

# Export the public API
from .api import *  # noqa: F403, F401
from .api import __all__, __version__  # noqa: F401
