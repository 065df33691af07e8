"""
Structural parser for avrdude.conf.

This module walks classified lines through a two-level nesting state
machine (section, subsection) and collects every `part` section into a
RawPart: its top-level parameters plus the parameters of each
`memory "<name>"` block. All other sections and subsections are checked
for correct nesting and then discarded.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..errors import GrammarError
from .lexer import TAB_WIDTH, ClassifiedLine, LineKind, iter_lines

PART_SECTION = "part"
MEMORY_SUBSECTION = "memory"


@dataclass(frozen=True)
class RawPart:
    """Unvalidated contents of one `part` section, in source order."""

    start_line: int
    params: Dict[str, str] = field(default_factory=dict)
    memory: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def memory_block(self, name: str) -> Optional[Dict[str, str]]:
        return self.memory.get(name)


class ParserState(Enum):
    OUTSIDE = "outside"
    IN_SECTION = "in_section"
    IN_SUBSECTION = "in_subsection"


class ConfParser:
    """
    State machine turning classified lines into RawPart records.

    Usage:
        parser = ConfParser()
        for line in iter_lines(text):
            parser.feed(line)
        parts = parser.finish()

    Or simply:
        parts = ConfParser().parse(text)
    """

    def __init__(self):
        self.state = ParserState.OUTSIDE
        self.parts: List[RawPart] = []
        self._section = ""
        self._section_line = 0
        self._subsection = ""
        self._subsection_line = 0
        self._memory_name: Optional[str] = None
        self._part_line: Optional[int] = None
        self._params: Dict[str, str] = {}
        self._memory: Dict[str, Dict[str, str]] = {}
        self._last_line = 0

    @property
    def in_part(self) -> bool:
        return self._part_line is not None

    def parse(self, text: str, tab_width: int = TAB_WIDTH) -> List[RawPart]:
        """
        Parse a whole avrdude.conf document.

        Args:
            text: Document text
            tab_width: Tab stop width used before classification

        Returns:
            Parts in source order

        Raises:
            GrammarError: On illegal nesting or an unterminated section
        """
        return self.feed_all(iter_lines(text, tab_width))

    def feed_all(self, lines: Iterable[ClassifiedLine]) -> List[RawPart]:
        for line in lines:
            self.feed(line)
        return self.finish()

    def feed(self, line: ClassifiedLine) -> None:
        """Advance the state machine by one classified line."""
        self._last_line = line.lineno
        kind = line.kind

        if kind == LineKind.BLANK:
            return
        if kind == LineKind.UNRECOGNIZED:
            logging.debug(f"line {line.lineno}: ignoring unrecognized line: {line.raw.strip()}")
            return

        if self.state == ParserState.OUTSIDE:
            self._feed_outside(line)
        elif self.state == ParserState.IN_SECTION:
            self._feed_section(line)
        else:
            self._feed_subsection(line)

    def finish(self) -> List[RawPart]:
        """
        Finish parsing and return the collected parts.

        Raises:
            GrammarError: If a section or subsection is still open
        """
        if self.state == ParserState.IN_SUBSECTION:
            raise GrammarError(
                f"unterminated subsection '{self._subsection}' opened at line "
                + f"{self._subsection_line}",
                self._last_line,
            )
        if self.state == ParserState.IN_SECTION:
            raise GrammarError(
                f"unterminated section '{self._section}' opened at line {self._section_line}",
                self._last_line,
            )
        logging.info(f"Parsed {len(self.parts)} part sections")
        return list(self.parts)

    def _feed_outside(self, line: ClassifiedLine) -> None:
        if line.kind == LineKind.SECTION_HEADER:
            self.state = ParserState.IN_SECTION
            self._section = line.name
            self._section_line = line.lineno
            if line.name == PART_SECTION:
                self._part_line = line.lineno
                self._params = {}
                self._memory = {}
            return

        if line.kind == LineKind.PARAM and line.indent == 0:
            # Global directive (default_programmer etc.), not part of any part
            logging.debug(f"line {line.lineno}: skipping global directive '{line.key}'")
            return

        self._unexpected(line)

    def _feed_section(self, line: ClassifiedLine) -> None:
        if line.kind == LineKind.SUBSECTION_HEADER:
            self.state = ParserState.IN_SUBSECTION
            self._subsection = line.name
            self._subsection_line = line.lineno
            self._memory_name = None
            if line.name == MEMORY_SUBSECTION:
                if not line.value:
                    raise GrammarError("memory block has an empty name", line.lineno)
                self._memory_name = line.value
                if self.in_part:
                    self._memory.setdefault(line.value, {})
            return

        if line.kind == LineKind.PARAM and line.indent > 0:
            if self.in_part:
                self._params[line.key] = line.value
            return

        if line.kind == LineKind.SECTION_END:
            self._close_section()
            return

        self._unexpected(line)

    def _feed_subsection(self, line: ClassifiedLine) -> None:
        if line.kind == LineKind.PARAM and line.indent > 0:
            if self.in_part and self._memory_name is not None:
                self._memory[self._memory_name][line.key] = line.value
            return

        if line.kind == LineKind.SECTION_END:
            self.state = ParserState.IN_SECTION
            self._subsection = ""
            self._memory_name = None
            return

        self._unexpected(line)

    def _close_section(self) -> None:
        if self._part_line is not None:
            self.parts.append(
                RawPart(
                    start_line=self._part_line,
                    params=self._params,
                    memory=self._memory,
                )
            )
            self._params = {}
            self._memory = {}
            self._part_line = None
        self.state = ParserState.OUTSIDE
        self._section = ""

    def _unexpected(self, line: ClassifiedLine) -> None:
        if self.state == ParserState.OUTSIDE:
            where = "outside of any section"
        elif self.state == ParserState.IN_SECTION:
            where = f"inside section '{self._section}'"
        else:
            where = f"inside subsection '{self._subsection}' of section '{self._section}'"

        if line.kind == LineKind.SECTION_HEADER:
            what = f"section header '{line.name}'"
        elif line.kind == LineKind.SUBSECTION_HEADER:
            what = f"subsection header '{line.name} \"{line.value}\"'"
        elif line.kind == LineKind.SECTION_END:
            what = "section terminator ';'"
        elif line.kind == LineKind.PARAM:
            what = f"parameter '{line.key}' at indent {line.indent}"
        else:
            what = f"{line.kind.value} line"

        raise GrammarError(f"unexpected {what} {where}", line.lineno)


def parse_conf(text: str, tab_width: int = TAB_WIDTH) -> List[RawPart]:
    """Parse avrdude.conf text into RawPart records."""
    return ConfParser().parse(text, tab_width)
