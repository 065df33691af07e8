"""Shared fixtures for avrini tests."""

import logging
from pathlib import Path

import pytest

from avrini.cli_utils import _installed_handlers

DATA_DIR = Path(__file__).parent / "data"

MINIMAL_CONF = """\
part
    desc = "Test Chip";
    signature = "30 151 2";
    memory "flash"
        paged = "yes";
        page_size = "128";
        num_pages = "10";
    ;
;
"""


def make_part(
    desc="Test Chip",
    signature="0x1e 0x97 0x02",
    flash="        paged = yes;\n        page_size = 128;\n        num_pages = 10;\n",
):
    """Build the text of one part section; pass None to leave a field out."""
    lines = ["part\n"]
    if desc is not None:
        lines.append(f'    desc = "{desc}";\n')
    if signature is not None:
        lines.append(f"    signature = {signature};\n")
    if flash is not None:
        lines.append('    memory "flash"\n')
        lines.append(flash)
        lines.append("      ;\n")
    lines.append("  ;\n")
    return "".join(lines)


@pytest.fixture(autouse=True)
def remove_cli_log_handlers():
    """Drop handlers the CLI installed on the root logger during a test."""
    yield
    root = logging.getLogger()
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()


@pytest.fixture
def minimal_conf_text():
    """Smallest valid avrdude.conf with one paged part."""
    return MINIMAL_CONF


@pytest.fixture
def part_text():
    """Fixture exposing make_part to tests."""
    return make_part


@pytest.fixture
def sample_conf_path():
    """Realistic avrdude.conf excerpt shipped with the tests."""
    return DATA_DIR / "avrdude_sample.conf"


@pytest.fixture
def write_conf(tmp_path):
    """Fixture returning a helper that writes avrdude.conf text to tmp_path."""

    def _write(text, name="avrdude.conf"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write
