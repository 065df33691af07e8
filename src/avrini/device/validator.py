"""
Validation and normalization of raw avrdude.conf parts.

DeviceValidator turns the RawPart records collected by the structural
parser into DeviceConfig records:
1. Require desc and signature (fatal or skipped, depending on policy)
2. Parse the signature into a 3-byte device code
3. Require a flash memory block
4. Decide whether flash is paged
5. Validate page geometry and compute the flash size
6. Enforce unique lowercased names
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..conf.parser import RawPart
from ..errors import (
    ConversionWarning,
    DuplicatePartName,
    InvalidNumericLiteral,
    MissingRequiredField,
    PageSizeNotEven,
    PageSizeNotPowerOfTwo,
    WarningKind,
)
from .fields import parse_inthex, parse_signature, parse_strict_bool
from .models import FLASH_SIZE_LIMIT, DeviceConfig, FlashGeometry, is_power_of_two

FLASH_MEMORY = "flash"
DEFAULT_PAGE_COUNT_FIELD = "num_pages"


class PagedDefault(Enum):
    """What to assume when a flash block has no `paged` field."""

    NO = "no"
    YES = "yes"
    REQUIRED = "required"


@dataclass(frozen=True)
class ValidationPolicy:
    """Options controlling how strictly parts are validated."""

    strict: bool = False  # Abort on missing desc/signature instead of skipping
    paged_default: PagedDefault = PagedDefault.NO
    page_count_field: str = DEFAULT_PAGE_COUNT_FIELD


@dataclass
class ValidationResult:
    """Devices accepted from a run, plus the warnings raised along the way."""

    devices: List[DeviceConfig] = field(default_factory=list)
    warnings: List[ConversionWarning] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [device.name for device in self.devices]


class DeviceValidator:
    """
    Normalizes RawPart records into DeviceConfig records.

    Example usage:
        validator = DeviceValidator(ValidationPolicy(strict=True))
        result = validator.validate(parts)
        for device in result.devices:
            print(device.name, device.device_code)
    """

    def __init__(self, policy: Optional[ValidationPolicy] = None):
        self.policy = policy or ValidationPolicy()

    def validate(self, parts: Iterable[RawPart]) -> ValidationResult:
        """
        Validate parts in source order.

        Args:
            parts: RawPart records from the structural parser

        Returns:
            ValidationResult with accepted devices and warnings

        Raises:
            AvrdudeConfError: On the first fatal problem
        """
        result = ValidationResult()
        accepted: Dict[str, DeviceConfig] = {}

        for part in parts:
            device = self.normalize_part(part, result.warnings)
            if device is None:
                continue

            if device.name in accepted:
                first = accepted[device.name]
                raise DuplicatePartName(
                    f"duplicate part '{device.name}' (first defined at line {first.start_line})",
                    part.start_line,
                )

            accepted[device.name] = device
            result.devices.append(device)

        logging.info(f"Validated {len(result.devices)} devices, {len(result.warnings)} warnings")
        return result

    def normalize_part(
        self, part: RawPart, warnings: List[ConversionWarning]
    ) -> Optional[DeviceConfig]:
        """
        Normalize a single part.

        Args:
            part: Raw part to normalize
            warnings: List that receives non-fatal diagnostics

        Returns:
            DeviceConfig, or None if the part was skipped
        """
        lineno = part.start_line

        missing = [key for key in ("desc", "signature") if key not in part.params]
        if missing:
            message = f"part is missing required field(s): {', '.join(missing)}"
            if self.policy.strict:
                raise MissingRequiredField(missing[0], message, lineno)
            logging.warning(f"line {lineno}: {message}, skipping")
            warnings.append(
                ConversionWarning(WarningKind.MISSING_REQUIRED_FIELD, f"{message}, skipped", lineno)
            )
            return None

        desc = part.params["desc"]
        signature = parse_signature(part.params["signature"], lineno)

        flash = part.memory_block(FLASH_MEMORY)
        if flash is None:
            raise MissingRequiredField(
                FLASH_MEMORY, f"part '{desc}' has no flash memory block", lineno
            )

        geometry = None
        if self._is_paged(desc, flash, lineno):
            geometry = self._build_geometry(desc, flash, lineno)
            if geometry.exceeds_limit:
                message = (
                    f"part '{desc}' flash size {geometry.flash_size / 1024:g}K exceeds "
                    + f"{FLASH_SIZE_LIMIT // 1024}K"
                )
                logging.warning(f"line {lineno}: {message}")
                warnings.append(
                    ConversionWarning(WarningKind.FLASH_SIZE_OUT_OF_RANGE, message, lineno)
                )

        return DeviceConfig(
            name=desc.lower(),
            desc=desc,
            device_code=signature,
            geometry=geometry,
            start_line=lineno,
        )

    def _is_paged(self, desc: str, flash: Dict[str, str], lineno: int) -> bool:
        if "paged" in flash:
            return parse_strict_bool(flash["paged"], lineno)

        if self.policy.paged_default == PagedDefault.REQUIRED:
            raise MissingRequiredField(
                "paged", f"part '{desc}' flash block has no 'paged' field", lineno
            )
        return self.policy.paged_default == PagedDefault.YES

    def _build_geometry(self, desc: str, flash: Dict[str, str], lineno: int) -> FlashGeometry:
        page_count_field = self.policy.page_count_field
        for key in ("page_size", page_count_field):
            if key not in flash:
                raise MissingRequiredField(
                    key, f"part '{desc}' paged flash has no '{key}' field", lineno
                )

        page_size = halve_page_size(parse_inthex(flash["page_size"], lineno), lineno)

        page_count = parse_inthex(flash[page_count_field], lineno)
        if page_count <= 0:
            raise InvalidNumericLiteral(
                f"part '{desc}' {page_count_field} must be positive, got {page_count}", lineno
            )

        return FlashGeometry(page_size=page_size, page_count=page_count)


def halve_page_size(page_size: int, lineno: Optional[int] = None) -> int:
    """
    Convert a page size in bytes to words.

    Raises:
        PageSizeNotEven: If the byte size is odd
        PageSizeNotPowerOfTwo: If the word size is not a power of two
    """
    if page_size % 2 == 1:
        raise PageSizeNotEven(f"page_size is odd: {page_size}", lineno)

    words = page_size // 2
    if not is_power_of_two(words):
        raise PageSizeNotPowerOfTwo(
            f"page_size {page_size} is not a power of two ({words} words)", lineno
        )
    return words
