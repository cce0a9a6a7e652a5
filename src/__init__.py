"""
jspcompose - Build-time JSP layout composer

Composes page templates with shared layouts, named sections and variables
ahead of time, producing plain JSP files.
"""

__version__ = "1.0.0"

from .lib import PageCompiler, TreeProcessor, LayoutCache, CompositionError, LOG, state_connectToLogger

__all__ = [
    "PageCompiler",
    "TreeProcessor",
    "LayoutCache",
    "CompositionError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
