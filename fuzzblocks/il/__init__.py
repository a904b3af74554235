"""
Flat IL programs and the block structure encoded in them.

Control flow is not a tree here: loops, conditionals, try/catch and function
bodies are marker instructions in a flat list, and every nesting query is a
depth-counting scan over that list.

| Layer                       | Module        |
<---------------------------- + ------------- >
| Program model               | ``core``      |
| Blocks and block groups     | ``blocks``    |
| Reduction oracles           | ``verifier``  |
| Reducers and driver         | ``reducer``   |
| Nesting graph and export    | ``analysis``  |
| Text/JSON serialization     | ``serialize`` |
"""

from . import core as _core
from . import blocks as _blocks
from . import verifier as _verifier
from . import reducer as _reducer
from . import analysis as _analysis
from . import serialize as _serialize
from .cli import main, parse_args

from .core import *
from .blocks import *
from .verifier import *
from .reducer import *
from .analysis import *
from .serialize import *

__all__ = []
for module in (_core, _blocks, _verifier, _reducer, _analysis, _serialize):
    __all__.extend(getattr(module, '__all__', []))
__all__ += ['main', 'parse_args']
__all__ = list(dict.fromkeys(__all__))
