"""
Integration tests converting a realistic avrdude.conf excerpt.

The sample file mixes programmer sections, global directives, tab-indented
lines, multi-line values, a part without a signature, a derived part and a
part with more than 64K of flash.
"""

import sys

import pytest

from avrini.cli import main
from avrini.device.ini_reader import DeviceIni
from avrini.errors import WarningKind
from avrini.orchestrator import ConversionOptions, ConversionOrchestrator

EXPECTED_INI = """
[atmega8]

name = ATmega8
device_code = 0x1E9307
paged = yes
page_size = 32
page_count = 128

[at90s1200]

name = AT90S1200
device_code = 0x1E9001
paged = no

[attiny85]

name = ATtiny85
device_code = 0x1E930B
paged = yes
page_size = 32
page_count = 128

[atmega128]

name = ATmega128
device_code = 0x1E9702
paged = yes
page_size = 128
page_count = 512
"""


class TestSampleConf:
    """End-to-end conversion of tests/data/avrdude_sample.conf"""

    def test_convert(self, sample_conf_path, tmp_path):
        """Test the full conversion output."""
        output = tmp_path / "avrdude.ini"
        result = ConversionOrchestrator().convert(
            ConversionOptions(input=sample_conf_path, output=output)
        )

        assert result.success, result.message
        assert output.read_text() == EXPECTED_INI
        assert [d.name for d in result.devices] == [
            "atmega8",
            "at90s1200",
            "attiny85",
            "atmega128",
        ]

    def test_warnings(self, sample_conf_path, tmp_path):
        """Test the skipped part and the oversized flash are reported."""
        result = ConversionOrchestrator().convert(
            ConversionOptions(input=sample_conf_path, output=tmp_path / "avrdude.ini")
        )

        assert [(w.kind, w.lineno) for w in result.warnings] == [
            (WarningKind.MISSING_REQUIRED_FIELD, 23),
            (WarningKind.FLASH_SIZE_OUT_OF_RANGE, 113),
        ]

    def test_strict_fails_on_common_part(self, sample_conf_path, tmp_path):
        """Test strict mode stops at the part without a signature."""
        output = tmp_path / "avrdude.ini"
        result = ConversionOrchestrator().convert(
            ConversionOptions(input=sample_conf_path, output=output, strict=True)
        )

        assert not result.success
        assert result.lineno == 23
        assert not output.exists()

    def test_blocksize_page_count(self, sample_conf_path, tmp_path):
        """Test taking the page count from blocksize."""
        result = ConversionOrchestrator().convert(
            ConversionOptions(
                input=sample_conf_path,
                output=tmp_path / "avrdude.ini",
                page_count_field="blocksize",
            )
        )

        assert result.success
        counts = {d.name: d.geometry.page_count for d in result.devices if d.geometry}
        assert counts == {"atmega8": 64, "attiny85": 32, "atmega128": 128}

    def test_reconversion_is_identical(self, sample_conf_path, tmp_path):
        """Test converting twice gives byte-identical output."""
        first = tmp_path / "first.ini"
        second = tmp_path / "second.ini"
        orchestrator = ConversionOrchestrator()
        orchestrator.convert(ConversionOptions(input=sample_conf_path, output=first))
        orchestrator.convert(ConversionOptions(input=sample_conf_path, output=second))

        assert first.read_bytes() == second.read_bytes()

    def test_output_reads_back(self, sample_conf_path, tmp_path):
        """Test the generated INI loads in the device reader."""
        output = tmp_path / "avrdude.ini"
        ConversionOrchestrator().convert(ConversionOptions(input=sample_conf_path, output=output))

        ini = DeviceIni(output)
        assert ini.get_devices() == ["atmega8", "at90s1200", "attiny85", "atmega128"]

        m8 = ini.get_device("ATmega8")
        assert m8.signature.code == "0x1E9307"
        assert m8.valid()

        assert not ini.get_device("ATmega128").valid()

    def test_cli(self, sample_conf_path, tmp_path, monkeypatch, capsys):
        """Test the CLI on the sample file."""
        output = tmp_path / "avrdude.ini"
        monkeypatch.setattr(
            sys, "argv", ["avrini", "convert", str(sample_conf_path), "-o", str(output)]
        )

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "Devices: 4" in captured.out
        assert "Warnings: 2" in captured.out
        assert "MissingRequiredField: line 23" in captured.out
        assert output.read_text() == EXPECTED_INI
