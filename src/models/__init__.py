"""
Models package for jspcompose

Contains data structures and type definitions for the composition pipeline.
"""

from .state import ProgramState, pipeline
from .directives import DirectiveSpec, DirectiveCategory, ALL_DIRECTIVES, LAYOUT_VARIABLE
from .document import LineBuffer, PageDocument, LayoutDocument, CompositionStage, indent_copy

__all__ = [
    "ProgramState",
    "pipeline",
    "DirectiveSpec",
    "DirectiveCategory",
    "ALL_DIRECTIVES",
    "LAYOUT_VARIABLE",
    "LineBuffer",
    "PageDocument",
    "LayoutDocument",
    "CompositionStage",
    "indent_copy",
]
