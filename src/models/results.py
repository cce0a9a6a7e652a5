"""
Engine result models

Type-safe structures returned by the composition passes.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from .document import LineBuffer


@dataclass
class SectionReference:
    """
    Section marker found in a layout

    Returned by LayoutComposer.reference_parse() for a line such as
    "<!-- @header? -->".

    Attributes:
        name: Section name without the optional marker
        required: False when the reference ends with '?'

    Example:
        "<!-- @header -->"   -> SectionReference(name="header", required=True)
        "<!-- @scripts? -->" -> SectionReference(name="scripts", required=False)
    """
    name: str
    required: bool


@dataclass
class ComposedDocument:
    """
    One output artifact of a page composition

    Attributes:
        name: File name the document is written under (e.g., "index.jsp",
              "index_inc.jsp")
        source: Final document lines
    """
    name: str
    source: LineBuffer


@dataclass
class ProcessResult:
    """
    Summary of a tree processing run

    Attributes:
        templateDirs: Template directories that were processed
        pagesComposed: Number of template documents composed
        includesWritten: Number of body include documents written
        filesCopied: Number of non-template files copied through
        written: Every output path, in write order
    """
    templateDirs: List[Path] = field(default_factory=list)
    pagesComposed: int = 0
    includesWritten: int = 0
    filesCopied: int = 0
    written: List[Path] = field(default_factory=list)

    def summary_make(self) -> Dict[str, Any]:
        """Plain dict view used by the CLI report stage"""
        return {
            'status': True,
            'template_dirs': [str(path) for path in self.templateDirs],
            'pages_composed': self.pagesComposed,
            'includes_written': self.includesWritten,
            'files_copied': self.filesCopied,
        }
