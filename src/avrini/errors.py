"""
Error and warning types for avrdude.conf conversion.

Every fatal condition raised while parsing or normalizing an avrdude.conf
file derives from AvrdudeConfError and carries the line number it refers
to (when one is known). Non-fatal conditions are collected as
ConversionWarning records instead of being raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AvrdudeConfError(Exception):
    """Base exception for fatal avrdude.conf conversion errors."""

    def __init__(self, message: str, lineno: Optional[int] = None):
        """
        Initialize the error.

        Args:
            message: Human-readable description of the problem
            lineno: 1-based source line the error refers to, if known
        """
        super().__init__(message)
        self.message = message
        self.lineno = lineno

    def __str__(self) -> str:
        if self.lineno is not None:
            return f"line {self.lineno}: {self.message}"
        return self.message


class GrammarError(AvrdudeConfError):
    """Unexpected nesting, empty memory name, or unterminated section."""

    pass


class MissingRequiredField(AvrdudeConfError):
    """A required part field (desc, signature, flash, geometry) is absent."""

    def __init__(self, field_name: str, message: str, lineno: Optional[int] = None):
        super().__init__(message, lineno)
        self.field_name = field_name


class InvalidNumericLiteral(AvrdudeConfError):
    """A value expected to be decimal or 0x-hexadecimal failed to parse."""

    pass


class InvalidDeviceSignature(AvrdudeConfError):
    """A signature does not tokenize into exactly 3 bytes in range 0-255."""

    pass


class InvalidBooleanLiteral(AvrdudeConfError):
    """A boolean field holds something other than the accepted literals."""

    pass


class PageSizeNotEven(AvrdudeConfError):
    """Flash page size (in bytes) is odd and cannot be converted to words."""

    pass


class PageSizeNotPowerOfTwo(AvrdudeConfError):
    """Flash page size (in words) is not a power of two."""

    pass


class DuplicatePartName(AvrdudeConfError):
    """Two parts normalize to the same lowercased name."""

    pass


class WarningKind(Enum):
    """Kinds of non-fatal diagnostics."""

    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    FLASH_SIZE_OUT_OF_RANGE = "FlashSizeOutOfRange"


@dataclass(frozen=True)
class ConversionWarning:
    """A non-fatal diagnostic produced during normalization."""

    kind: WarningKind
    message: str
    lineno: Optional[int] = None

    def __str__(self) -> str:
        if self.lineno is not None:
            return f"line {self.lineno}: {self.message}"
        return self.message
