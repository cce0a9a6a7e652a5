"""
Section extraction (pages) and section injection (layouts)

A page defines named sections:

    <!-- @header begin -->
    <link rel="stylesheet" href="home.css">
    <!-- @header end -->

and a layout requests them, plus the body of the page:

    <head>
      <!-- @header -->
      <!-- @scripts? -->
    </head>
    <body>
      <!-- @doBody -->
    </body>

Sections are pulled out of the page (leaving "<!-- @header removed -->"),
then spliced into a private copy of the layout. The layout includes the
rest of the page through a generated <%@ include %> of the body include.
"""

from typing import Dict, Optional

from ..models.document import LineBuffer
from ..models.directives import SECTION_BEGIN, SECTION_END, DO_BODY, SECTION_REFERENCE
from ..models.results import SectionReference
from .errors import DuplicateMarker, MissingRequiredMarker, UnterminatedBlock
from .log import LOG


class SectionExtractor:
    """
    Pulls named sections out of a page document
    """

    def __init__(self, document_name: str):
        self.document_name = document_name

    def extract(self, source: LineBuffer) -> Dict[str, LineBuffer]:
        """
        Extract every begin/end section from source

        Each begin..end span is replaced in place by one
        "<!-- @name removed -->" line with the begin line's indentation.

        Returns:
            Mapping of section name -> content lines (empty when begin and
            end are adjacent), in document order

        Raises:
            UnterminatedBlock: A begin marker is not closed by an end marker
                               of the same name before the next begin marker
            DuplicateMarker: A section name is defined twice
        """
        sections: Dict[str, LineBuffer] = {}

        start = source.match_find(SECTION_BEGIN.pattern)
        while start != -1:
            name = SECTION_BEGIN.pattern.fullmatch(source[start]).group('name')

            end = self.end_find(source, start)
            if end == -1:
                raise UnterminatedBlock(
                    f"@{name} must have a closing directive (jsp={self.document_name})",
                    self.document_name, name,
                )
            if SECTION_END.pattern.fullmatch(source[end]).group('name') != name:
                raise UnterminatedBlock(
                    f"@{name} must have a closing directive (jsp={self.document_name})",
                    self.document_name, name,
                )
            if name in sections:
                raise DuplicateMarker(
                    f"@{name} is duplicated (jsp={self.document_name})",
                    self.document_name, name,
                )

            sections[name] = source.span_copy(start + 1, end - 1)
            indent = source.indent_get(start)
            source.span_replace(start, end, [f"{indent}<!-- @{name} removed -->"])
            LOG(f"Extracted section '{name}' ({len(sections[name])} lines) from {self.document_name}", level=2)

            start = source.match_find(SECTION_BEGIN.pattern, start + 1)

        return sections

    @staticmethod
    def end_find(source: LineBuffer, start: int) -> int:
        """
        Index of the end marker closing the section opened at start

        Returns:
            Line index, or -1 if another begin marker or the end of the
            document comes first
        """
        for index in range(start + 1, len(source)):
            line = source[index]
            if SECTION_END.matches(line):
                return index
            if SECTION_BEGIN.matches(line):
                return -1
        return -1


class LayoutComposer:
    """
    Splices page sections and the body include into a layout document
    """

    def __init__(self, layout_name: str, page_name: str):
        """
        Args:
            layout_name: Layout file name, used in @doBody error messages
            page_name: Page file name, used in section error messages
        """
        self.layout_name = layout_name
        self.page_name = page_name

    def compose(
        self, layout: LineBuffer, sections: Dict[str, LineBuffer], include_name: str
    ) -> None:
        """
        Compose layout in place

        Raises:
            MissingRequiredMarker: No @doBody, or a required section is absent
            DuplicateMarker: More than one @doBody
        """
        self.body_inject(layout, include_name)
        self.sections_inject(layout, sections)

    def body_inject(self, layout: LineBuffer, include_name: str) -> None:
        """
        Replace the single <!-- @doBody --> with a processed marker followed
        by an include of the page body
        """
        pos = layout.match_find(DO_BODY.pattern)
        if pos == -1:
            raise MissingRequiredMarker(
                f"@doBody is required (layout={self.layout_name})",
                self.layout_name, "doBody",
            )
        if layout.match_find(DO_BODY.pattern, pos + 1) != -1:
            raise DuplicateMarker(
                f"@doBody is duplicated (layout={self.layout_name})",
                self.layout_name, "doBody",
            )

        indent = layout.indent_get(pos)
        layout.span_replace(pos, pos, [
            f"{indent}<!-- @doBody processed -->",
            f'{indent}<%@ include file="{include_name}" %>',
        ])
        LOG(f"Body of {self.page_name} included as {include_name}", level=2)

    @staticmethod
    def reference_parse(line: str) -> Optional[SectionReference]:
        """
        Parse a section reference line

        Returns:
            SectionReference, or None if line is not a section reference
        """
        match = SECTION_REFERENCE.pattern.fullmatch(line)
        if not match:
            return None
        return SectionReference(
            name=match.group('name'), required=match.group('optional') is None
        )

    def sections_inject(self, layout: LineBuffer, sections: Dict[str, LineBuffer]) -> None:
        """
        Replace every section reference with the page's section content

        Injected content is wrapped in begin/end comments and is never
        scanned for further references.
        """
        pos = layout.match_find(SECTION_REFERENCE.pattern)
        while pos != -1:
            reference = self.reference_parse(layout[pos])
            indent = layout.indent_get(pos)
            content = sections.get(reference.name)

            if content is not None:
                injected = [f"{indent}<!-- @{reference.name} begin -->"]
                injected.extend(content)
                injected.append(f"{indent}<!-- @{reference.name} end -->")
                pos += layout.span_replace(pos, pos, injected)
                LOG(f"Injected section '{reference.name}' into {self.layout_name}", level=2)
            elif reference.required:
                raise MissingRequiredMarker(
                    f"@{reference.name} is required (jsp={self.page_name})",
                    self.page_name, reference.name,
                )
            else:
                layout[pos] = f"{indent}<!-- @{reference.name}? undefined -->"
                LOG(f"Optional section '{reference.name}' undefined for {self.page_name}", level=2)
                pos += 1

            pos = layout.match_find(SECTION_REFERENCE.pattern, pos)
