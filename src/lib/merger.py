"""
Page directive merging

A composed document must carry exactly one set of managed page attributes:

    <%@ page session="false" trimDirectiveWhitespaces="true" pageEncoding="UTF-8"%>

The first <%@ page ... %> directive (possibly spread over several lines)
receives the policy values; every later directive loses the managed
attributes and keeps only its own (import=..., contentType=...). A later
directive left with no attributes becomes "<!-- @page removed -->". When a
document has no page directive at all, one is prepended.

Merging is idempotent: merging merged output changes nothing.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from ..models.document import LineBuffer
from ..models.directives import PAGE_START, PAGE_END, PAGE_BLANK, CHARSET_NAME
from .log import LOG


SESSION_ATTR = re.compile(r'session\s*=\s*"\s*(true|false)\s*"')
TRIM_ATTR = re.compile(r'trimDirectiveWhitespaces\s*=\s*"\s*(true|false)\s*"')
ENCODING_ATTR = re.compile(r'pageEncoding\s*=\s*"[^"]*"')

_WHITESPACE_RUN = re.compile(r'\s{2,}')


def bool_format(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True)
class DirectivePolicy:
    """
    Values enforced on the first page directive

    Attributes:
        session: Value of the session attribute
        trimDirectiveWhitespaces: Value of the trimDirectiveWhitespaces attribute
        pageEncoding: Value of the pageEncoding attribute, or None to leave
                      the first directive's pageEncoding as written
    """
    session: bool = False
    trimDirectiveWhitespaces: bool = True
    pageEncoding: Optional[str] = None

    def __post_init__(self) -> None:
        if self.pageEncoding and not CHARSET_NAME.fullmatch(self.pageEncoding):
            raise ValueError(f"Invalid pageEncoding charset name: {self.pageEncoding!r}")

    def attributes_get(self) -> List[Tuple[Pattern[str], str]]:
        """Managed (pattern, attribute text) pairs enforced by this policy"""
        attributes = [
            (SESSION_ATTR, f'session="{bool_format(self.session)}"'),
            (TRIM_ATTR, f'trimDirectiveWhitespaces="{bool_format(self.trimDirectiveWhitespaces)}"'),
        ]
        if self.pageEncoding:
            attributes.append((ENCODING_ATTR, f'pageEncoding="{self.pageEncoding}"'))
        return attributes

    def directive_make(self) -> str:
        """Page directive synthesized for documents that have none"""
        attributes = " ".join(text for _pattern, text in self.attributes_get())
        return f"<%@ page {attributes}%>"


def directive_join(source: LineBuffer, start: int, end: int) -> str:
    """Join the lines of a directive span with single spaces"""
    return " ".join(source[start:end + 1])


def attribute_append(directive: str, attribute: str) -> str:
    """
    Insert an attribute before the closing '%>'

    Example:
        >>> attribute_append('<%@ page import="x" %>', ' session="false"')
        '<%@ page import="x"  session="false"%>'
    """
    idx = directive.rindex("%>")
    return directive[:idx] + attribute + "%>"


class DirectiveMerger:
    """
    Merges the page directives of one document according to a policy
    """

    def __init__(self, policy: Optional[DirectivePolicy] = None):
        self.policy = policy or DirectivePolicy()

    def merge(self, source: LineBuffer) -> None:
        """
        Merge every page directive in source, in place

        A directive whose closing '%>' never appears ends the merge; the
        remaining lines are left as written.
        """
        merged = False
        start = source.match_find(PAGE_START.pattern)
        while start != -1:
            end = source.match_find(PAGE_END.pattern, start)
            if end == -1:
                LOG(f"Page directive at line {start + 1} is not closed, stopped merging", level=1)
                break

            directive = directive_join(source, start, end)
            if not merged:
                directive = self.first_merge(directive)
                merged = True
            else:
                directive = self.duplicate_strip(directive)

            if PAGE_BLANK.matches(directive):
                replacement = "<!-- @page removed -->"
            else:
                replacement = _WHITESPACE_RUN.sub(" ", directive)
            source.span_replace(start, end, [replacement])

            start = source.match_find(PAGE_START.pattern, start + 1)

        if not merged:
            source.insert(0, self.policy.directive_make())
            LOG("No page directive found, one was prepended", level=3)

    def first_merge(self, directive: str) -> str:
        """Set every managed attribute to its policy value"""
        for pattern, attribute in self.policy.attributes_get():
            if pattern.search(directive):
                directive = pattern.sub(lambda _match, a=attribute: a, directive)
            else:
                directive = attribute_append(directive, f" {attribute}")
        return directive

    def duplicate_strip(self, directive: str) -> str:
        """Remove every managed attribute from a later directive"""
        for pattern in (SESSION_ATTR, TRIM_ATTR, ENCODING_ATTR):
            directive = pattern.sub("", directive)
        return directive
