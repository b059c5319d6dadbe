from .testutils import *
from .testutils import __all__
