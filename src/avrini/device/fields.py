"""
Field parsers for raw avrdude.conf values.

avrdude.conf stores numbers either as decimal or as 0x-prefixed
hexadecimal, booleans as yes/no, and signatures as three byte tokens.
"""

import re
from typing import Optional

from ..errors import (
    InvalidBooleanLiteral,
    InvalidDeviceSignature,
    InvalidNumericLiteral,
)
from .models import DeviceSignature

_DECIMAL_RE = re.compile(r"-?[0-9]+")
_HEX_RE = re.compile(r"0x([0-9A-Fa-f]+)")

SIGNATURE_LENGTH = 3


def parse_inthex(text: str, lineno: Optional[int] = None) -> int:
    """
    Parse a decimal or 0x-prefixed hexadecimal integer.

    Args:
        text: Literal as written in the source (already trimmed)
        lineno: Line used in the error message

    Returns:
        Parsed integer value

    Raises:
        InvalidNumericLiteral: If text is neither form

    Example:
        parse_inthex("128")   # 128
        parse_inthex("0x1e")  # 30
    """
    if _DECIMAL_RE.fullmatch(text):
        return int(text)
    match = _HEX_RE.fullmatch(text)
    if match:
        return int(match.group(1), 16)
    raise InvalidNumericLiteral(f"invalid integer literal: '{text}'", lineno)


def parse_signature(text: str, lineno: Optional[int] = None) -> DeviceSignature:
    """
    Parse a device signature such as "0x1e 0x95 0x0f" or "30 151 2".

    Raises:
        InvalidDeviceSignature: On a wrong token count, an unparsable token
            or a byte outside 0-255
    """
    values = []
    for token in text.split():
        try:
            value = parse_inthex(token)
        except InvalidNumericLiteral:
            raise InvalidDeviceSignature(
                f"signature '{text}' has unparsable byte '{token}'", lineno
            ) from None
        if value < 0 or value > 255:
            raise InvalidDeviceSignature(
                f"signature '{text}' has byte out of range: {value}", lineno
            )
        values.append(value)

    if len(values) != SIGNATURE_LENGTH:
        raise InvalidDeviceSignature(
            f"signature '{text}' must have {SIGNATURE_LENGTH} bytes, got {len(values)}",
            lineno,
        )

    return DeviceSignature(tuple(values))


def parse_strict_bool(text: str, lineno: Optional[int] = None) -> bool:
    """Parse an avrdude.conf boolean; only 'yes' and 'no' are accepted."""
    if text == "yes":
        return True
    if text == "no":
        return False
    raise InvalidBooleanLiteral(f"expected 'yes' or 'no', got '{text}'", lineno)


def parse_bool(text: str) -> bool:
    """Parse a boolean from a generated device INI (yes/no/true/false)."""
    if text in ("yes", "true"):
        return True
    if text in ("no", "false"):
        return False
    raise InvalidBooleanLiteral(f"wrong boolean value: {text}")

