"""
INI serializer for validated devices.

Each device becomes one block:

    <blank line>
    [atmega328p]
    <blank line>
    name = ATmega328P
    device_code = 0x1E950F
    paged = yes
    page_size = 64
    page_count = 256

Values are written as-is; every value DeviceConfig.fields() produces is
already canonical (hex codes, decimal integers, yes/no).
"""

from typing import Dict, Iterable

from .models import DeviceConfig


def render_section(name: str, values: Dict[str, str]) -> str:
    """Render one `[name]` block followed by its key = value lines."""
    lines = ["\n", f"[{name}]\n", "\n"]
    for key, value in values.items():
        lines.append(f"{key} = {value}\n")
    return "".join(lines)


def serialize_devices(devices: Iterable[DeviceConfig]) -> str:
    """Render devices in order as the full INI document."""
    return "".join(render_section(device.name, device.fields()) for device in devices)
