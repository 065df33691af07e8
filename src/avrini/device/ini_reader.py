"""
Reader for generated device INI files.

This module loads an INI file produced by the converter (or written by
hand in the same format) and looks devices up by name, the way the
programmer does before talking to a chip.
"""

import configparser
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..errors import InvalidBooleanLiteral
from .fields import parse_bool
from .models import DeviceInfo, DeviceSignature

_KNOWN_KEYS = {"name", "type", "device_code", "paged", "page_size", "page_count"}


def default_search_paths(name: str) -> List[Path]:
    """
    Places a programmer looks for a device INI, in lookup order.

    Args:
        name: Device name as given by the user

    Returns:
        pigro.ini in the working directory, then the per-user and
        system-wide shared files and per-device files
    """
    home = Path.home()
    return [
        Path("pigro.ini"),
        home / ".pigro" / "devices.ini",
        home / ".pigro" / f"{name}.ini",
        Path("/usr/share/pigro/devices.ini"),
        Path(f"/usr/share/pigro/{name}.ini"),
    ]


class DeviceIniError(Exception):
    """Exception raised for device INI errors."""

    pass


class DeviceIni:
    """
    Parser for device INI files.

    Example devices.ini:
        [atmega8]

        name = ATmega8
        device_code = 0x1E9307
        paged = yes
        page_size = 32
        page_count = 128

    Usage:
        ini = DeviceIni(Path("avrdude.ini"))
        names = ini.get_devices()
        info = ini.get_device("ATmega8")

        # Or search pigro.ini, ~/.pigro/... and /usr/share/pigro/...
        info = DeviceIni.find("ATmega8").get_device("ATmega8")
    """

    def __init__(self, ini_path: Path):
        """
        Initialize the reader with a device INI file.

        Args:
            ini_path: Path to the INI file

        Raises:
            DeviceIniError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = ini_path

        if not ini_path.exists():
            raise DeviceIniError(f"Device file not found: {ini_path}")

        self.config = configparser.ConfigParser(interpolation=None)

        try:
            self.config.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise DeviceIniError(f"Failed to parse {ini_path}: {e}") from e

    @classmethod
    def find(cls, name: str, search_paths: Optional[Sequence[Path]] = None) -> "DeviceIni":
        """
        Open the first INI file along the search path that defines a device.

        Args:
            name: Device name, any case
            search_paths: Files to try in order (default_search_paths() if not given)

        Returns:
            DeviceIni for the first file holding the device

        Raises:
            DeviceIniError: If no file defines the device, or a file on the
                path cannot be parsed
        """
        paths = list(search_paths) if search_paths is not None else default_search_paths(name)

        for path in paths:
            if not path.is_file():
                continue
            ini = cls(path)
            if ini.has_device(name):
                logging.info(f"Found device '{name}' in {path}")
                return ini
            logging.debug(f"Device '{name}' not in {path}")

        searched = ", ".join(str(path) for path in paths)
        raise DeviceIniError(f"Device '{name}' not found in any of: {searched}")

    def get_devices(self) -> List[str]:
        """
        Get the names of all devices in the file.

        Returns:
            Section names in file order (e.g., ['atmega8', 'attiny85'])
        """
        return self.config.sections()

    def has_device(self, name: str) -> bool:
        """Check if a device exists (case-insensitive)."""
        return name.lower() in self.config

    def get_device_options(self, name: str) -> Dict[str, str]:
        """
        Get the raw key/value pairs of a device.

        Raises:
            DeviceIniError: If the device is not found
        """
        section = name.lower()
        if section not in self.config:
            available = ", ".join(self.get_devices())
            raise DeviceIniError(
                f"Device '{name}' not found in {self.ini_path}. "
                + f"Available devices: {available or 'none'}"
            )
        return {key: value.strip() for key, value in self.config[section].items()}

    def get_device(self, name: str) -> DeviceInfo:
        """
        Load a device's parameters.

        Args:
            name: Device name, any case (e.g., 'ATmega8')

        Returns:
            DeviceInfo with signature and flash geometry

        Raises:
            DeviceIniError: If the device is missing or holds invalid values
        """
        options = self.get_device_options(name)
        device_type = options.get("type", "avr")

        signature = None
        if device_type == "avr":
            signature = DeviceSignature.from_code(options.get("device_code", ""))
            if signature is None:
                raise DeviceIniError(
                    f"Device '{name}' has invalid device_code: '{options.get('device_code', '')}'"
                )

        try:
            paged = parse_bool(options.get("paged", "yes"))
        except InvalidBooleanLiteral as e:
            raise DeviceIniError(f"Device '{name}': {e}") from e

        return DeviceInfo(
            name=options.get("name", name),
            signature=signature,
            device_type=device_type,
            paged=paged,
            page_size=self._get_int(name, options, "page_size"),
            page_count=self._get_int(name, options, "page_count"),
            extra={k: v for k, v in options.items() if k not in _KNOWN_KEYS},
        )

    @staticmethod
    def _get_int(name: str, options: Dict[str, str], key: str) -> int:
        value = options.get(key, "0")
        try:
            return int(value, 0)
        except ValueError as e:
            raise DeviceIniError(f"Device '{name}' has invalid {key}: '{value}'") from e
