"""avrdude.conf reading: line classification, structural parsing and input loading."""

from .lexer import ClassifiedLine, LineKind, classify_line, iter_lines
from .parser import ConfParser, RawPart, parse_conf
from .source import ConfSource, DownloadError, write_atomic

__all__ = [
    "ClassifiedLine",
    "LineKind",
    "classify_line",
    "iter_lines",
    "ConfParser",
    "RawPart",
    "parse_conf",
    "ConfSource",
    "DownloadError",
    "write_atomic",
]
