"""
Loaders for variable import files

An import directive names a file relative to the config directory:

    <!-- @variables: site.properties -->
    <!-- @variables: theme.yaml -->

.yaml/.yml files are read with PyYAML and must hold a top-level mapping.
Any other file is read as a Java-style .properties file:

    # comment            ! comment
    title = Home         title: Home         title Home
    long = first \\
           second
    copyright = \\u00a9 2015

Entries are returned in file order; a repeated key keeps its last value.
"""

import re
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

import yaml


_ESCAPES = {'t': '\t', 'n': '\n', 'r': '\r', 'f': '\f'}
_UNICODE_ESCAPE = re.compile(r'[0-9a-fA-F]{4}')
_KEY_TERMINATORS = '=: \t\f'


def logicalLines_read(text: str) -> Iterator[str]:
    """
    Join natural lines into logical lines

    A line ending in an odd number of backslashes continues on the next
    line; the continuation's leading whitespace is dropped. Blank and
    comment lines are skipped.
    """
    pending: List[str] = []
    for raw in re.split(r'\r\n|\r|\n', text):
        line = raw.lstrip(' \t\f')
        if not pending and (not line or line[0] in '#!'):
            continue
        trailing = len(line) - len(line.rstrip('\\'))
        if trailing % 2 == 1:
            pending.append(line[:-1])
            continue
        pending.append(line)
        yield ''.join(pending)
        pending = []
    if pending:
        yield ''.join(pending)


def escapes_decode(text: str) -> str:
    """
    Decode properties escapes (\\t \\n \\r \\f \\uXXXX, \\x -> x)

    Raises:
        ValueError: On a malformed \\uXXXX escape
    """
    out: List[str] = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char != '\\' or pos + 1 >= len(text):
            out.append(char)
            pos += 1
            continue
        escaped = text[pos + 1]
        if escaped == 'u':
            digits = text[pos + 2:pos + 6]
            if not _UNICODE_ESCAPE.fullmatch(digits):
                raise ValueError(f"Malformed \\uxxxx encoding: \\u{digits}")
            out.append(chr(int(digits, 16)))
            pos += 6
        else:
            out.append(_ESCAPES.get(escaped, escaped))
            pos += 2
    return ''.join(out)


def keyValue_split(line: str) -> Tuple[str, str]:
    """
    Split a logical line into raw key and raw value

    The key ends at the first unescaped '=', ':' or whitespace. Whitespace
    and at most one '=' or ':' separate it from the value.
    """
    pos = 0
    while pos < len(line):
        char = line[pos]
        if char == '\\':
            pos += 2
            continue
        if char in _KEY_TERMINATORS:
            break
        pos += 1
    key = line[:pos]

    rest = line[pos:].lstrip(' \t\f')
    if rest[:1] in ('=', ':'):
        rest = rest[1:].lstrip(' \t\f')
    return key, rest


def properties_parse(text: str) -> Dict[str, str]:
    """Parse .properties text into an ordered dict"""
    entries: Dict[str, str] = {}
    for line in logicalLines_read(text):
        key, value = keyValue_split(line)
        entries[escapes_decode(key)] = escapes_decode(value)
    return entries


def yaml_parse(text: str, source: str = "<yaml>") -> Dict[str, str]:
    """
    Parse a YAML mapping into string variables

    Scalars are stringified (booleans as "true"/"false"), null becomes "".

    Raises:
        ValueError: If the document is not a mapping or a value is not scalar
    """
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Variables file must contain a mapping: {source}")

    entries: Dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            raise ValueError(f"Variable '{key}' must be a scalar: {source}")
        if value is None:
            entries[str(key)] = ""
        elif isinstance(value, bool):
            entries[str(key)] = "true" if value else "false"
        else:
            entries[str(key)] = str(value)
    return entries


def variablesFile_load(path: Path) -> Dict[str, str]:
    """
    Load a variable import file (UTF-8)

    Args:
        path: File to read; the suffix selects YAML or properties parsing

    Returns:
        Ordered dict of variable name -> value

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file content is malformed
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in ('.yaml', '.yml'):
        return yaml_parse(text, source=str(path))
    return properties_parse(text)
