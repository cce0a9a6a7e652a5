"""
Directive specification and metadata models

Defines every comment-embedded directive the engine recognizes. Each
DirectiveSpec carries the compiled line pattern the rewrite passes use,
so the markup surface lives in one place.
"""

import re
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Pattern


class DirectiveCategory(Enum):
    """
    Categories of composition directives

    Used for organization and for documenting the markup surface.
    """
    VARIABLE = "variable"    # @variables:, @variable, @variables block
    SECTION = "section"      # @name begin / @name end
    LAYOUT = "layout"        # @doBody, @name, @name?
    PAGE = "page"            # <%@ page ... %>


@dataclass(frozen=True)
class DirectiveSpec:
    """
    Specification for a line-level directive

    Attributes:
        name: Directive name
        category: Category for organization
        description: Human-readable description
        pattern: Compiled pattern that must match the whole line
        examples: Example lines
    """
    name: str
    category: DirectiveCategory
    description: str
    pattern: Pattern[str]
    examples: List[str] = field(default_factory=list)

    def matches(self, line: str) -> bool:
        """Check whether a whole line is an instance of this directive"""
        return self.pattern.fullmatch(line) is not None


VARIABLES_IMPORT = DirectiveSpec(
    name="variables:",
    category=DirectiveCategory.VARIABLE,
    description="Import every entry of a key/value file from the config directory",
    pattern=re.compile(r"\s*<!--\s*@variables\s*:.*-->\s*", re.IGNORECASE),
    examples=["<!-- @variables: site.properties -->"],
)

VARIABLE_INLINE = DirectiveSpec(
    name="variable",
    category=DirectiveCategory.VARIABLE,
    description="Declare one variable on a single line",
    pattern=re.compile(
        r"\s*<!--\s*@(?:variable\s+)?(?P<name>[^\s=:?]+)\s*=.*-->\s*", re.IGNORECASE
    ),
    examples=["<!-- @variable title=Home -->", "<!-- @title=Home -->"],
)

VARIABLES_BLOCK_START = DirectiveSpec(
    name="variables",
    category=DirectiveCategory.VARIABLE,
    description="Open a multi-line block of name=value declarations",
    pattern=re.compile(r"\s*<!--\s*@variables\s*", re.IGNORECASE),
    examples=["<!-- @variables", "title=Home", "__layout=main", "-->"],
)

VARIABLES_BLOCK_END = DirectiveSpec(
    name="-->",
    category=DirectiveCategory.VARIABLE,
    description="Close a variables block",
    pattern=re.compile(r"\s*-->\s*"),
)

SECTION_BEGIN = DirectiveSpec(
    name="begin",
    category=DirectiveCategory.SECTION,
    description="Open a named section in a page",
    pattern=re.compile(r"\s*<!--\s*@(?P<name>\S+)\s+begin\s*-->\s*", re.IGNORECASE),
    examples=["<!-- @header begin -->"],
)

SECTION_END = DirectiveSpec(
    name="end",
    category=DirectiveCategory.SECTION,
    description="Close a named section in a page",
    pattern=re.compile(r"\s*<!--\s*@(?P<name>\S+)\s+end\s*-->\s*", re.IGNORECASE),
    examples=["<!-- @header end -->"],
)

DO_BODY = DirectiveSpec(
    name="doBody",
    category=DirectiveCategory.LAYOUT,
    description="Position in a layout where the page body is included",
    pattern=re.compile(r"\s*<!--\s*@doBody\s*-->\s*", re.IGNORECASE),
    examples=["<!-- @doBody -->"],
)

SECTION_REFERENCE = DirectiveSpec(
    name="section",
    category=DirectiveCategory.LAYOUT,
    description="Position in a layout where a page section is injected ('?' = optional)",
    pattern=re.compile(r"\s*<!--\s*@(?P<name>\S+?)(?P<optional>\?)?\s*-->\s*", re.IGNORECASE),
    examples=["<!-- @header -->", "<!-- @scripts? -->"],
)

PAGE_START = DirectiveSpec(
    name="page",
    category=DirectiveCategory.PAGE,
    description="First line of a page directive",
    pattern=re.compile(r"\s*<%@\s*page.*"),
    examples=['<%@ page contentType="text/html" %>'],
)

PAGE_END = DirectiveSpec(
    name="%>",
    category=DirectiveCategory.PAGE,
    description="Line closing a page directive",
    pattern=re.compile(r".*%>\s*"),
)

PAGE_BLANK = DirectiveSpec(
    name="page-blank",
    category=DirectiveCategory.PAGE,
    description="Page directive carrying no attributes",
    pattern=re.compile(r"\s*<%@\s*page\s*%>\s*"),
)

ALL_DIRECTIVES: List[DirectiveSpec] = [
    VARIABLES_IMPORT,
    VARIABLE_INLINE,
    VARIABLES_BLOCK_START,
    VARIABLES_BLOCK_END,
    SECTION_BEGIN,
    SECTION_END,
    DO_BODY,
    SECTION_REFERENCE,
    PAGE_START,
    PAGE_END,
    PAGE_BLANK,
]

# Reserved variable naming the inherited layout document
LAYOUT_VARIABLE = '__layout'

# Charset names accepted for the pageEncoding attribute (e.g. UTF-8, Shift_JIS, latin_1)
CHARSET_NAME = re.compile(r"[A-Za-z\d][\w.:+-]*")


def directives_listByCategory(category: DirectiveCategory) -> List[DirectiveSpec]:
    """Get all directive specs in a category"""
    return [spec for spec in ALL_DIRECTIVES if spec.category == category]
