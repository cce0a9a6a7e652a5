"""
Document models for the composition engine

A document is handled as a LineBuffer: an ordered, mutable list of text
lines. Every engine pass rewrites a LineBuffer in place; no pass ever
splits or merges the text of a line it did not recognize.
"""

import re
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Pattern


_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_INDENT = re.compile(r"\s*")


def indent_copy(line: str) -> str:
    """Return the leading whitespace of a line"""
    match = _INDENT.match(line)
    return match.group(0) if match else ""


class LineBuffer(list):
    """
    Ordered sequence of document lines

    A plain list of str with the span helpers used by the rewrite passes.
    Spans are inclusive on both ends, mirroring how directive markers are
    located (first line .. closing line).
    """

    @classmethod
    def text_parse(cls, text: str) -> "LineBuffer":
        """
        Split text into lines on \\n, \\r\\n or \\r

        A trailing line break does not produce an empty final line.

        Example:
            >>> LineBuffer.text_parse("a\\r\\nb\\n")
            ['a', 'b']
        """
        if not text:
            return cls()
        lines = _LINE_BREAK.split(text)
        if lines and lines[-1] == "":
            lines.pop()
        return cls(lines)

    def text_render(self, separator: str = "\n") -> str:
        """Join lines with separator (no trailing separator)"""
        return separator.join(self)

    def copy(self) -> "LineBuffer":
        return type(self)(self)

    def match_find(self, pattern: Pattern[str], start: int = 0) -> int:
        """
        Index of the first line at or after start that fully matches pattern

        Returns:
            Line index, or -1 if no line matches
        """
        for index in range(max(start, 0), len(self)):
            if pattern.fullmatch(self[index]):
                return index
        return -1

    def span_copy(self, start: int, end: int) -> "LineBuffer":
        return type(self)(self[start:end + 1])

    def span_remove(self, start: int, end: int) -> None:
        del self[start:end + 1]

    def span_replace(self, start: int, end: int, lines: Iterable[str]) -> int:
        """
        Replace lines start..end with new lines

        Returns:
            Number of lines inserted
        """
        replacement = list(lines)
        self[start:end + 1] = replacement
        return len(replacement)

    def indent_get(self, index: int) -> str:
        return indent_copy(self[index])


class CompositionStage(Enum):
    """
    Passes a page goes through, strictly in this order

    LAYOUT_RESOLVED and SECTIONS_INJECTED are skipped for pages without a
    layout; BLANK_LINES_STRIPPED only happens when minimizing.
    """
    LOADED = "loaded"
    VARIABLES_EXTRACTED = "variables-extracted"
    SECTIONS_EXTRACTED = "sections-extracted"
    LAYOUT_RESOLVED = "layout-resolved"
    SECTIONS_INJECTED = "sections-injected"
    VARIABLES_MERGED = "variables-merged"
    PLACEHOLDERS_SUBSTITUTED = "placeholders-substituted"
    BLANK_LINES_STRIPPED = "blank-lines-stripped"
    DIRECTIVES_MERGED = "directives-merged"
    EMITTED = "emitted"


@dataclass
class LayoutDocument:
    """
    Layout a page inherits from

    Attributes:
        name: File name of the layout (e.g., "main.jsp")
        source: Private working copy of the layout lines
    """
    name: str
    source: LineBuffer


@dataclass
class PageDocument:
    """
    Page template moving through the composition passes

    Attributes:
        name: File name of the page (e.g., "index.jsp")
        source: Page lines, rewritten in place by each pass
        sections: Named content blocks extracted from the page
        variables: Variables declared by the page itself
        mergedVariables: Layout variables overlaid by page variables
        layout: Inherited layout, if the page names one
        includeName: File name of the body include written for a layout
        stage: Last pass completed
    """
    name: str
    source: LineBuffer
    sections: Dict[str, LineBuffer] = field(default_factory=dict)
    variables: Dict[str, str] = field(default_factory=dict)
    mergedVariables: Dict[str, str] = field(default_factory=dict)
    layout: Optional[LayoutDocument] = None
    includeName: Optional[str] = None
    stage: CompositionStage = CompositionStage.LOADED
