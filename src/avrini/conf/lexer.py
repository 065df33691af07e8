"""
Line classifier for avrdude.conf.

Each physical line of avrdude.conf is classified on its own, without any
knowledge of the surrounding lines, into one of the LineKind categories.
The structural parser works only on these classified lines.

Example avrdude.conf fragment:
    part
        desc = "ATmega328P";
        signature = 0x1e 0x95 0x0f;
        memory "flash"
            paged = yes;
            page_size = 128;
            num_pages = 256;
        ;
    ;
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

TAB_WIDTH = 8
INDENT_WIDTH = 4

_SUBSECTION_RE = re.compile(r'^    ([A-Za-z0-9_]+)\s+"([^"]*)"\s*$')
_QUOTED_PARAM_RE = re.compile(r'^\s*([A-Za-z0-9_]+)\s*=\s*"([^"]*)"\s*;\s*$')
_PARAM_RE = re.compile(r"^\s*([A-Za-z0-9_]+)\s*=\s*([^;]*);\s*$")


class LineKind(Enum):
    """Categories a single avrdude.conf line can fall into."""

    BLANK = "blank"
    SECTION_HEADER = "section_header"
    SUBSECTION_HEADER = "subsection_header"
    PARAM = "param"
    SECTION_END = "section_end"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ClassifiedLine:
    """
    A classified source line.

    The meaning of name/value depends on kind:
        SECTION_HEADER:    name = section name
        SUBSECTION_HEADER: name = subsection kind, value = quoted value
        PARAM:             name = key, value = trimmed value
        UNRECOGNIZED:      raw = original text
    """

    kind: LineKind
    lineno: int
    name: str = ""
    value: str = ""
    raw: str = ""
    indent: int = 0

    @property
    def key(self) -> str:
        return self.name


def get_indent(line: str) -> int:
    """Count leading spaces."""
    return len(line) - len(line.lstrip(" "))


def parse_param(line: str):
    """
    Match a `key = value;` or `key = "value";` statement.

    Returns:
        (key, value) tuple with the value trimmed, or None
    """
    match = _QUOTED_PARAM_RE.match(line)
    if match:
        return match.group(1), match.group(2).strip()
    match = _PARAM_RE.match(line)
    if match:
        return match.group(1), match.group(2).strip()
    return None


def classify_line(line: str, lineno: int = 0) -> ClassifiedLine:
    """
    Classify one tab-expanded line.

    Args:
        line: Line text with tabs already expanded; a trailing newline is ignored
        lineno: 1-based line number carried into the result

    Returns:
        ClassifiedLine for the line
    """
    line = line.rstrip("\r\n")
    stripped = line.strip()
    indent = get_indent(line)

    if not stripped or stripped.startswith("#"):
        return ClassifiedLine(LineKind.BLANK, lineno)

    if indent == 0 and line[0].isalpha():
        # Global directives such as `default_serial = "/dev/ttyS0";`
        param = parse_param(line)
        if param is not None:
            return ClassifiedLine(
                LineKind.PARAM, lineno, name=param[0], value=param[1], indent=0
            )
        name = stripped.split("#", 1)[0].strip()
        return ClassifiedLine(LineKind.SECTION_HEADER, lineno, name=name)

    if indent == INDENT_WIDTH:
        match = _SUBSECTION_RE.match(line)
        if match:
            return ClassifiedLine(
                LineKind.SUBSECTION_HEADER,
                lineno,
                name=match.group(1),
                value=match.group(2),
                indent=indent,
            )

    if indent >= INDENT_WIDTH:
        param = parse_param(line)
        if param is not None:
            return ClassifiedLine(
                LineKind.PARAM, lineno, name=param[0], value=param[1], indent=indent
            )

    if stripped == ";":
        return ClassifiedLine(LineKind.SECTION_END, lineno, indent=indent)

    return ClassifiedLine(LineKind.UNRECOGNIZED, lineno, raw=line, indent=indent)


def iter_lines(text: str, tab_width: int = TAB_WIDTH) -> Iterator[ClassifiedLine]:
    """
    Classify every line of an avrdude.conf document, numbering from 1.

    Only \\n ends a line, so line numbers match what an editor shows even
    when the text holds form feeds or other characters str.splitlines()
    treats as breaks.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    for lineno, line in enumerate(lines, start=1):
        yield classify_line(line.rstrip("\r").expandtabs(tab_width), lineno)
