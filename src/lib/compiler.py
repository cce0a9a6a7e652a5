"""
Page compiler: composes one template document

Runs the passes over a page in a fixed order:

    variables -> sections -> layout -> inject sections -> merge variables
    -> substitute placeholders -> (strip blank lines) -> merge directives

A page naming a layout (<!-- @variable __layout=main -->) produces two
documents: its body include (index_inc.jsp) and the composed layout
written under the page's own name (index.jsp). Any other page produces
one document.
"""

import re
from pathlib import Path
from typing import List, Optional

from ..config import AppSettings, appsettings
from ..models.document import LineBuffer, PageDocument, LayoutDocument, CompositionStage
from ..models.results import ComposedDocument
from .cache import LayoutCache
from .errors import EmptyReference
from .merger import DirectiveMerger, DirectivePolicy
from .sections import SectionExtractor, LayoutComposer
from .variables import VariableResolver, placeholders_substitute
from .log import LOG


_BLANK_LINE = re.compile(r"\s*")


def blankLines_strip(source: LineBuffer) -> None:
    """Remove every whitespace-only line from source"""
    source[:] = [line for line in source if not _BLANK_LINE.fullmatch(line)]


class PageCompiler:
    """
    Composes template documents that share one config directory

    Responsibilities:
    - Extract page variables and sections
    - Resolve the inherited layout through the layout cache
    - Inject sections and the body include into the layout
    - Substitute placeholders and merge page directives
    """

    def __init__(
        self,
        config_dir: Path,
        cache: Optional[LayoutCache] = None,
        settings: Optional[AppSettings] = None,
        minimize: Optional[bool] = None,
    ) -> None:
        """
        Initialize compiler

        Args:
            config_dir: Directory holding layouts and variable import files
            cache: Layout cache shared across pages of a run (new if None)
            settings: Settings to use (defaults to the appsettings singleton)
            minimize: Override settings.minimize
        """
        self.config_dir = Path(config_dir)
        self.cache = cache if cache is not None else LayoutCache()
        self.settings = settings or appsettings
        self.minimize = self.settings.minimize if minimize is None else minimize
        self.encoding = self.settings.encoding_resolve()
        self.merger = DirectiveMerger(DirectivePolicy(
            session=self.settings.session,
            trimDirectiveWhitespaces=self.settings.trim_directive_whitespaces,
            pageEncoding=self.settings.pageEncoding_get(),
        ))

    def compile(self, name: str, source: LineBuffer) -> List[ComposedDocument]:
        """
        Compose one page

        Args:
            name: Page file name (e.g., "index.jsp")
            source: Page lines; consumed (rewritten in place)

        Returns:
            [body include, composed layout] when the page has a layout,
            otherwise [page]

        Raises:
            CompositionError: On any markup violation
            OSError: If a layout or import file cannot be read
        """
        page = PageDocument(name=name, source=source)

        self.variables_extract(page)
        self.sections_extract(page)
        if self.layout_resolve(page):
            self.sections_inject(page)
        self.variables_merge(page)
        self.placeholders_substitute(page)
        if self.minimize:
            self.blankLines_strip(page)
        self.directives_merge(page)
        return self.documents_emit(page)

    def text_compile(self, name: str, text: str) -> List[ComposedDocument]:
        """Compose a page given as text"""
        return self.compile(name, LineBuffer.text_parse(text))

    def variables_extract(self, page: PageDocument) -> None:
        VariableResolver(page.name, self.config_dir).resolve(page.source, page.variables)
        page.stage = CompositionStage.VARIABLES_EXTRACTED
        LOG(f"{page.name}: {len(page.variables)} variable(s)", level=3)

    def sections_extract(self, page: PageDocument) -> None:
        page.sections = SectionExtractor(page.name).extract(page.source)
        page.stage = CompositionStage.SECTIONS_EXTRACTED

    def layoutName_get(self, page: PageDocument) -> Optional[str]:
        """
        Layout named by the page's reserved layout variable

        Raises:
            EmptyReference: If the variable is present but empty
        """
        layout_name = page.variables.get(self.settings.layout_variable)
        if layout_name is None:
            return None
        if not layout_name:
            raise EmptyReference(
                f"{self.settings.layout_variable} is required (jsp={page.name})",
                page.name, self.settings.layout_variable,
            )
        return layout_name

    def layout_resolve(self, page: PageDocument) -> bool:
        """
        Load the page's layout and read its variables

        Returns:
            True if the page has a layout
        """
        layout_name = self.layoutName_get(page)
        if layout_name is None:
            return False

        layout_file = self.settings.layoutFile_make(layout_name)
        page.layout = LayoutDocument(
            name=layout_file,
            source=self.cache.layout_get(self.config_dir / layout_file, self.encoding),
        )
        page.includeName = self.settings.includeName_make(page.name)

        VariableResolver(layout_file, self.config_dir).resolve(
            page.layout.source, page.mergedVariables
        )
        page.stage = CompositionStage.LAYOUT_RESOLVED
        LOG(f"{page.name}: layout {layout_file}, include {page.includeName}", level=2)
        return True

    def sections_inject(self, page: PageDocument) -> None:
        LayoutComposer(page.layout.name, page.name).compose(
            page.layout.source, page.sections, page.includeName
        )
        page.stage = CompositionStage.SECTIONS_INJECTED

    def variables_merge(self, page: PageDocument) -> None:
        """Overlay page variables on the layout variables; the page wins"""
        page.mergedVariables.update(page.variables)
        page.stage = CompositionStage.VARIABLES_MERGED

    def documents_each(self, page: PageDocument) -> List[LineBuffer]:
        """Sources that make it to output: layout first, then page"""
        if page.layout is not None:
            return [page.layout.source, page.source]
        return [page.source]

    def placeholders_substitute(self, page: PageDocument) -> None:
        for source in self.documents_each(page):
            placeholders_substitute(source, page.mergedVariables)
        page.stage = CompositionStage.PLACEHOLDERS_SUBSTITUTED

    def blankLines_strip(self, page: PageDocument) -> None:
        for source in self.documents_each(page):
            blankLines_strip(source)
        page.stage = CompositionStage.BLANK_LINES_STRIPPED

    def directives_merge(self, page: PageDocument) -> None:
        for source in self.documents_each(page):
            self.merger.merge(source)
        page.stage = CompositionStage.DIRECTIVES_MERGED

    def documents_emit(self, page: PageDocument) -> List[ComposedDocument]:
        page.stage = CompositionStage.EMITTED
        if page.layout is not None:
            return [
                ComposedDocument(name=page.includeName, source=page.source),
                ComposedDocument(name=page.name, source=page.layout.source),
            ]
        return [ComposedDocument(name=page.name, source=page.source)]
