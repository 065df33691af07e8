"""avrini - convert avrdude.conf into per-device INI files for AVR programmers."""

from .device.ini_reader import DeviceIni, DeviceIniError
from .device.models import DeviceConfig, DeviceInfo, DeviceSignature, FlashGeometry
from .errors import AvrdudeConfError, ConversionWarning
from .orchestrator import ConversionOptions, ConversionOrchestrator, ConversionResult

__version__ = "0.1.0"

__all__ = [
    "AvrdudeConfError",
    "ConversionOptions",
    "ConversionOrchestrator",
    "ConversionResult",
    "ConversionWarning",
    "DeviceConfig",
    "DeviceIni",
    "DeviceIniError",
    "DeviceInfo",
    "DeviceSignature",
    "FlashGeometry",
]
