"""Device records: validation, serialization and INI lookup."""

from .ini_reader import DeviceIni, DeviceIniError, default_search_paths
from .models import (
    FLASH_SIZE_LIMIT,
    DeviceConfig,
    DeviceInfo,
    DeviceSignature,
    FlashGeometry,
    is_power_of_two,
)
from .serializer import serialize_devices
from .validator import DeviceValidator, PagedDefault, ValidationPolicy, ValidationResult

__all__ = [
    "FLASH_SIZE_LIMIT",
    "DeviceConfig",
    "DeviceInfo",
    "DeviceSignature",
    "FlashGeometry",
    "is_power_of_two",
    "DeviceIni",
    "DeviceIniError",
    "default_search_paths",
    "serialize_devices",
    "DeviceValidator",
    "PagedDefault",
    "ValidationPolicy",
    "ValidationResult",
]
