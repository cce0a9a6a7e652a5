"""
jspcompose - Build-time JSP layout composer

Composes page templates with shared layouts, sections and variables.
"""

__version__ = "1.0.0"

from .compiler import PageCompiler
from .processor import TreeProcessor
from .cache import LayoutCache
from .errors import CompositionError
from .log import LOG, state_connectToLogger

__all__ = [
    "PageCompiler",
    "TreeProcessor",
    "LayoutCache",
    "CompositionError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
