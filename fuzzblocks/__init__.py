"""Block structure analysis and reduction for flat fuzzer IL programs."""

from . import constants as _constants
from . import operations as _operations
from . import il as _il
from .constants import *  # noqa: F401,F403
from .operations import *  # noqa: F401,F403
from .il import *  # noqa: F401,F403

__all__ = []
__all__ += getattr(_constants, "__all__", [])
__all__ += getattr(_operations, "__all__", [])
__all__ += getattr(_il, "__all__", [])
