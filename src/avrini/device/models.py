"""
Device records for AVR parts.

This module holds the normalized records produced from avrdude.conf parts
(DeviceConfig and its pieces) and the DeviceInfo view a programmer builds
when it reads a device back from the generated INI file.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# Flash above this many bytes can't be addressed by the 16-bit page math
FLASH_SIZE_LIMIT = 0x10000  # 64KB

_CODE_RE = re.compile(r"0x([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})")


def is_power_of_two(value: int) -> bool:
    """Return True for 1, 2, 4, 8, ...; False for zero and negatives."""
    if value <= 0:
        return False
    while value > 1:
        if value % 2 == 1:
            return False
        value //= 2
    return True


@dataclass(frozen=True)
class DeviceSignature:
    """Three-byte signature identifying a chip variant."""

    values: Tuple[int, ...]

    @property
    def code(self) -> str:
        """Signature as written to the INI, e.g. 0x1E950F."""
        return "0x" + "".join(f"{value:02X}" for value in self.values)

    @classmethod
    def from_code(cls, code: str) -> Optional["DeviceSignature"]:
        """Parse a 0xXXXXXX device code back into bytes, or None if malformed."""
        match = _CODE_RE.fullmatch(code.strip())
        if not match:
            return None
        return cls(tuple(int(group, 16) for group in match.groups()))

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class FlashGeometry:
    """Paged flash layout of a device."""

    page_size: int  # Page size in 16-bit words
    page_count: int
    paged: bool = True

    @property
    def page_byte_size(self) -> int:
        return self.page_size * 2

    @property
    def flash_size(self) -> int:
        """Total flash in bytes."""
        return self.page_byte_size * self.page_count

    @property
    def exceeds_limit(self) -> bool:
        return self.flash_size > FLASH_SIZE_LIMIT


@dataclass(frozen=True)
class DeviceConfig:
    """A validated part, ready to be written as one INI section."""

    name: str  # Lowercased desc, unique across the output
    desc: str
    device_code: DeviceSignature
    geometry: Optional[FlashGeometry] = None
    start_line: int = 0

    @property
    def paged(self) -> bool:
        return self.geometry is not None and self.geometry.paged

    def fields(self) -> Dict[str, str]:
        """
        INI key/value pairs for this device, in output order.

        Returns:
            Ordered mapping of name, device_code, paged and (for paged
            flash) page_size and page_count
        """
        values = {
            "name": self.desc,
            "device_code": self.device_code.code,
            "paged": "yes" if self.paged else "no",
        }
        if self.geometry is not None:
            values["page_size"] = str(self.geometry.page_size)
            values["page_count"] = str(self.geometry.page_count)
        return values


@dataclass
class DeviceInfo:
    """Device parameters as a programmer reads them from a device INI."""

    name: str
    signature: Optional[DeviceSignature] = None
    device_type: str = "avr"
    paged: bool = True
    page_size: int = 0  # Page size in words
    page_count: int = 0
    extra: Dict[str, str] = field(default_factory=dict)

    @property
    def page_byte_size(self) -> int:
        return self.page_size * 2

    @property
    def flash_size(self) -> int:
        return self.page_byte_size * self.page_count

    @property
    def word_mask(self) -> int:
        return self.page_size - 1

    @property
    def byte_mask(self) -> int:
        return self.page_byte_size - 1

    @property
    def page_mask(self) -> int:
        """Mask selecting the page part of a word address."""
        return 0xFFFF ^ self.word_mask

    def valid(self) -> bool:
        """Check the geometry is usable for programming."""
        if self.page_size == 0 or self.page_count == 0:
            return False
        if not is_power_of_two(self.page_size):
            return False

        if self.device_type == "avr":
            return 0 < self.flash_size < FLASH_SIZE_LIMIT
        if self.device_type == "arm":
            return self.flash_size > 0
        return False
