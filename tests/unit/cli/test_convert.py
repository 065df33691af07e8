"""Tests for CLI convert command."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from avrini.cli import main
from avrini.device.models import DeviceConfig, DeviceSignature
from avrini.device.validator import PagedDefault
from avrini.errors import ConversionWarning, GrammarError, WarningKind
from avrini.orchestrator import ConversionResult


class TestCLIConvert:
    """Tests for the 'avrini convert' command."""

    @pytest.fixture
    def conf_path(self, write_conf, minimal_conf_text):
        """Write a valid avrdude.conf."""
        return write_conf(minimal_conf_text)

    @pytest.fixture
    def mock_orchestrator(self):
        """Patch ConversionOrchestrator in the CLI module."""
        with patch("avrini.cli.ConversionOrchestrator") as mock_orch_class:
            yield mock_orch_class.return_value

    @pytest.fixture
    def success_result(self, tmp_path):
        """Create a successful conversion result."""
        return ConversionResult(
            success=True,
            devices=[
                DeviceConfig(
                    name="test chip",
                    desc="Test Chip",
                    device_code=DeviceSignature((0x1E, 0x97, 0x02)),
                )
            ],
            warnings=[
                ConversionWarning(
                    WarningKind.FLASH_SIZE_OUT_OF_RANGE, "part 'X' flash size 128K exceeds 64K", 9
                )
            ],
            output_path=tmp_path / "avrdude.ini",
            elapsed=0.25,
            message="Converted 1 devices",
        )

    @pytest.fixture
    def failure_result(self):
        """Create a failed conversion result."""
        error = GrammarError("unterminated section 'part' opened at line 1", 3)
        return ConversionResult(success=False, message=str(error), error=error)

    def test_convert_success(self, conf_path, monkeypatch, capsys):
        """Test a real conversion end to end through the CLI."""
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "Conversion successful!" in captured.out
        assert "Devices: 1" in captured.out
        assert "Warnings: 0" in captured.out
        output = conf_path.with_suffix(".ini")
        assert output.exists()
        assert "[test chip]" in output.read_text()

    def test_convert_explicit_output(self, conf_path, tmp_path, monkeypatch):
        """Test the -o option."""
        output = tmp_path / "out" / "devices.ini"
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path), "-o", str(output)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        assert output.read_text().startswith("\n[test chip]\n")

    def test_convert_failure(self, write_conf, monkeypatch, capsys):
        """Test a grammar error exits 1 with the line number."""
        path = write_conf('part\n    desc = "A";\n')
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Conversion failed!" in captured.out
        assert "line 2: unterminated section 'part'" in captured.out
        assert not path.with_suffix(".ini").exists()

    def test_convert_prints_warnings(self, conf_path, mock_orchestrator, success_result, monkeypatch, capsys):
        """Test warnings are printed with their kind and line."""
        mock_orchestrator.convert.return_value = success_result
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "FlashSizeOutOfRange: line 9: part 'X' flash size 128K exceeds 64K" in captured.out
        assert "Warnings: 1" in captured.out
        assert "Time: 0.25s" in captured.out

    def test_convert_failure_result(self, conf_path, mock_orchestrator, failure_result, monkeypatch, capsys):
        """Test a failed result exits 1."""
        mock_orchestrator.convert.return_value = failure_result
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "line 3: unterminated section" in capsys.readouterr().out

    def test_convert_options(self, conf_path, mock_orchestrator, success_result, monkeypatch):
        """Test flags end up in ConversionOptions."""
        mock_orchestrator.convert.return_value = success_result
        monkeypatch.setattr(
            sys,
            "argv",
            [
                "avrini",
                "convert",
                str(conf_path),
                "--strict",
                "--paged-default",
                "required",
                "--page-count-field",
                "blocksize",
                "--tab-width",
                "4",
            ],
        )

        with pytest.raises(SystemExit):
            main()

        options = mock_orchestrator.convert.call_args.args[0]
        assert options.strict is True
        assert options.paged_default == PagedDefault.REQUIRED
        assert options.page_count_field == "blocksize"
        assert options.tab_width == 4

    def test_convert_default_options(self, conf_path, mock_orchestrator, success_result, monkeypatch):
        """Test default options."""
        mock_orchestrator.convert.return_value = success_result
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path)])

        with pytest.raises(SystemExit):
            main()

        options = mock_orchestrator.convert.call_args.args[0]
        assert options.strict is False
        assert options.paged_default == PagedDefault.NO
        assert options.page_count_field == "num_pages"
        assert options.tab_width == 8

    def test_convert_verbose(self, conf_path, monkeypatch, capsys):
        """Test verbose output shows the policy and phases."""
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path), "-v"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "Policy: lenient" in captured.out
        assert "[1/4] Reading" in captured.out

    def test_convert_log_file(self, conf_path, tmp_path, monkeypatch):
        """Test --log-file writes a log."""
        log_file = tmp_path / "logs" / "avrini.log"
        monkeypatch.setattr(
            sys, "argv", ["avrini", "convert", str(conf_path), "--log-file", str(log_file)]
        )

        with pytest.raises(SystemExit):
            main()

        assert log_file.exists()
        assert "Parsed 1 part sections" in log_file.read_text()

    def test_missing_input(self, tmp_path, monkeypatch, capsys):
        """Test a missing input path exits 2."""
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(tmp_path / "none.conf")])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2
        assert "Path does not exist" in capsys.readouterr().out

    def test_input_is_directory(self, tmp_path, monkeypatch, capsys):
        """Test a directory input exits 2."""
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(tmp_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2
        assert "not a file" in capsys.readouterr().out

    def test_output_is_directory(self, conf_path, tmp_path, monkeypatch, capsys):
        """Test a directory output exits 2."""
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path), "-o", str(tmp_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2
        assert "Output path is a directory" in capsys.readouterr().out

    def test_invalid_paged_default(self, conf_path, monkeypatch):
        """Test argparse rejects unknown policies."""
        monkeypatch.setattr(
            sys, "argv", ["avrini", "convert", str(conf_path), "--paged-default", "maybe"]
        )

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2

    def test_unexpected_error(self, conf_path, mock_orchestrator, monkeypatch, capsys):
        """Test unexpected exceptions exit 1."""
        mock_orchestrator.convert.side_effect = RuntimeError("boom")
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "RuntimeError: boom" in capsys.readouterr().out

    def test_permission_error(self, conf_path, mock_orchestrator, monkeypatch, capsys):
        """Test permission errors exit 1."""
        mock_orchestrator.convert.side_effect = PermissionError("read-only")
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Permission denied" in capsys.readouterr().out

    def test_keyboard_interrupt(self, conf_path, mock_orchestrator, monkeypatch):
        """Test Ctrl-C exits 130."""
        mock_orchestrator.convert.side_effect = KeyboardInterrupt()
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", str(conf_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 130

    def test_url_input_skips_path_check(self, mock_orchestrator, success_result, monkeypatch):
        """Test URLs are passed through without a local path check."""
        mock_orchestrator.convert.return_value = success_result
        url = "https://example.org/avrdude.conf"
        monkeypatch.setattr(sys, "argv", ["avrini", "convert", url])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        options = mock_orchestrator.convert.call_args.args[0]
        assert options.input == url
        assert options.output_path == Path.cwd() / "avrdude.ini"


class TestCLIMain:
    """Tests for top-level CLI behavior."""

    def test_no_command_prints_help(self, monkeypatch, capsys):
        """Test running without a command shows help."""
        monkeypatch.setattr(sys, "argv", ["avrini"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        assert "convert" in capsys.readouterr().out

    def test_version(self, monkeypatch, capsys):
        """Test --version."""
        monkeypatch.setattr(sys, "argv", ["avrini", "--version"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        assert "avrini 0.1.0" in capsys.readouterr().out
