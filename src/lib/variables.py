"""
Variable declarations and placeholder substitution

Three directive forms declare variables, and they are processed in this
order, each exhausted before the next begins:

1. Import:  <!-- @variables: site.properties -->
2. Inline:  <!-- @variable title=Home -->   (shorthand: <!-- @title=Home -->)
3. Block:   <!-- @variables
            title=Home
            // comment
            __layout=main
            -->

All forms write into one mapping, so a later form overrides an earlier one
for the same name (import < inline < block). Each directive is rewritten to
a "processed" marker carrying the original indentation; only the first
inline directive keeps a marker, later ones are deleted.

Placeholders @{name} and @(name) are then replaced with literal values.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Tuple

from ..models.document import LineBuffer, indent_copy
from ..models.directives import (
    VARIABLES_IMPORT,
    VARIABLE_INLINE,
    VARIABLES_BLOCK_START,
    VARIABLES_BLOCK_END,
)
from .errors import EmptyReference, MalformedAssignment, UnterminatedBlock
from .imports import variablesFile_load
from .log import LOG


_NAME_VALUE = re.compile(r"[^\s=]+\s*=.*")


def nameValue_split(name_value: str) -> Tuple[str, str]:
    """
    Split "name = value" at the first '='

    Both parts are trimmed; the value may be empty.

    Example:
        >>> nameValue_split(" title = Home = Page ")
        ('title', 'Home = Page')
    """
    idx = name_value.index('=')
    return name_value[:idx].strip(), name_value[idx + 1:].strip()


class VariableResolver:
    """
    Extracts variable declarations from a document

    Handles:
    - Imports of external key/value files from the config directory
    - Single-line declarations
    - Multi-line declaration blocks
    """

    def __init__(self, document_name: str, config_dir: Path):
        """
        Args:
            document_name: Page or layout file name, used in error messages
            config_dir: Directory import references are resolved against
        """
        self.document_name = document_name
        self.config_dir = Path(config_dir)

    def resolve(
        self, source: LineBuffer, variables: Optional[Dict[str, str]] = None
    ) -> Dict[str, str]:
        """
        Collect every variable declared in source

        Rewrites source in place and fills variables (a new dict if None).

        Returns:
            The variables mapping

        Raises:
            EmptyReference: Import directive without a file reference
            UnterminatedBlock: Variables block without closing '-->'
            MalformedAssignment: Block line that is not name=value
            OSError: Import file cannot be read
        """
        if variables is None:
            variables = {}
        self.imports_resolve(source, variables)
        self.inlines_resolve(source, variables)
        self.blocks_resolve(source, variables)
        return variables

    def imports_resolve(self, source: LineBuffer, variables: Dict[str, str]) -> None:
        """Process every <!-- @variables: file --> directive"""
        pos = source.match_find(VARIABLES_IMPORT.pattern)
        while pos != -1:
            line = source[pos]
            colon = line.index(':')
            file_location = line[colon + 1:line.index('-->', colon)].strip()
            if not file_location:
                raise EmptyReference(
                    f"@variables: is invalid (jsp={self.document_name})",
                    self.document_name, "variables:",
                )

            source[pos] = f"{indent_copy(line)}<!-- {file_location} processed -->"

            imported = variablesFile_load(self.config_dir / file_location)
            variables.update(imported)
            LOG(f"Imported {len(imported)} variable(s) from {file_location} ({self.document_name})", level=2)

            pos = source.match_find(VARIABLES_IMPORT.pattern, pos + 1)

    def inlines_resolve(self, source: LineBuffer, variables: Dict[str, str]) -> None:
        """Process every single-line variable declaration"""
        marked = False
        pos = source.match_find(VARIABLE_INLINE.pattern)
        while pos != -1:
            line = source[pos]
            match = VARIABLE_INLINE.pattern.fullmatch(line)
            name = match.group('name')
            equals = line.index('=', match.end('name'))
            value = line[equals + 1:line.index('-->', equals)].strip()
            variables[name] = value
            LOG(f"Variable {name}={value!r} ({self.document_name})", level=3)

            if not marked:
                source[pos] = f"{indent_copy(line)}<!-- @variable(s) processed -->"
                marked = True
                pos += 1
            else:
                del source[pos]
            pos = source.match_find(VARIABLE_INLINE.pattern, pos)

    def blocks_resolve(self, source: LineBuffer, variables: Dict[str, str]) -> None:
        """Process every multi-line <!-- @variables ... --> block"""
        start = source.match_find(VARIABLES_BLOCK_START.pattern)
        while start != -1:
            end = source.match_find(VARIABLES_BLOCK_END.pattern, start + 1)
            if end == -1:
                raise UnterminatedBlock(
                    f"@variables must have a closing directive (jsp={self.document_name})",
                    self.document_name, "variables",
                )

            for raw in source[start + 1:end]:
                name_value = raw.strip()
                if not name_value or name_value.startswith('//'):
                    continue
                if not _NAME_VALUE.fullmatch(name_value):
                    raise MalformedAssignment(
                        f"Variable is invalid (name/value={name_value}, jsp={self.document_name})",
                        self.document_name, name_value,
                    )
                name, value = nameValue_split(name_value)
                variables[name] = value

            indent = source.indent_get(start)
            source.span_replace(start, end, [f"{indent}<!-- @variables processed -->"])
            LOG(f"Variables block at line {start + 1} processed ({self.document_name})", level=2)

            start = source.match_find(VARIABLES_BLOCK_START.pattern, start + 1)


def placeholders_compile(name: str) -> List[Pattern[str]]:
    """
    Patterns for @{name} and @(name), case-insensitive on the name

    Example:
        placeholders_compile("title") matches "@{title}", "@{ TITLE }",
        "@(title)" and "@( Title )"
    """
    quoted = re.escape(name)
    return [
        re.compile(r"@\{\s*" + quoted + r"\s*}", re.IGNORECASE),
        re.compile(r"@\(\s*" + quoted + r"\s*\)", re.IGNORECASE),
    ]


def placeholders_substitute(source: LineBuffer, variables: Dict[str, str]) -> None:
    """
    Replace every known placeholder in source with its literal value

    Variables are applied to each line in mapping order. Placeholders naming
    an unknown variable are left untouched.
    """
    compiled = [
        (placeholders_compile(name), value) for name, value in variables.items()
    ]
    for index, line in enumerate(source):
        for patterns, value in compiled:
            for pattern in patterns:
                line = pattern.sub(lambda _match, v=value: v, line)
        source[index] = line
