"""
Command-line interface for avrini.

This module provides the `avrini` CLI tool for converting avrdude.conf
into the device INI format read by the programmer.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from avrini import __version__
from avrini.cli_utils import ErrorFormatter, PathValidator, setup_logging
from avrini.device.ini_reader import DeviceIni, DeviceIniError
from avrini.device.validator import DEFAULT_PAGE_COUNT_FIELD, PagedDefault
from avrini.orchestrator import ConversionOptions, ConversionOrchestrator


@dataclass
class ConvertArgs:
    """Arguments for the convert command."""

    input: str
    output: Optional[Path] = None
    strict: bool = False
    paged_default: str = PagedDefault.NO.value
    page_count_field: str = DEFAULT_PAGE_COUNT_FIELD
    tab_width: int = 8
    verbose: bool = False
    log_file: Optional[Path] = None


@dataclass
class ShowArgs:
    """Arguments for the show command."""

    device: str
    ini_path: Optional[Path] = None
    verbose: bool = False


def convert_command(args: ConvertArgs) -> None:
    """Convert avrdude.conf to a device INI file.

    Examples:
        avrini convert avrdude.conf                    # Writes avrdude.ini
        avrini convert avrdude.conf -o devices.ini     # Explicit output
        avrini convert avrdude.conf --strict           # Fail on parts without desc/signature
        avrini convert avrdude.conf --page-count-field blocksize
        avrini convert https://example.org/avrdude.conf -o avrdude.ini
    """
    print(f"avrini converter v{__version__}")
    print()

    try:
        options = ConversionOptions(
            input=args.input,
            output=args.output,
            strict=args.strict,
            paged_default=PagedDefault(args.paged_default),
            page_count_field=args.page_count_field,
            tab_width=args.tab_width,
        )

        if args.verbose:
            print(f"Input: {options.input}")
            print(f"Output: {options.output_path}")
            print(f"Policy: {'strict' if options.strict else 'lenient'}, "
                  + f"paged default '{options.paged_default.value}', "
                  + f"page count from '{options.page_count_field}'")
            print()
        else:
            print(f"Converting {options.input}...")

        orchestrator = ConversionOrchestrator(verbose=args.verbose)
        result = orchestrator.convert(options)

        for warning in result.warnings:
            ErrorFormatter.print_conversion_warning(warning)

        if result.success:
            ErrorFormatter.print_success("Conversion successful!")
            print()
            print(f"Output: {result.output_path}")
            print(f"Devices: {len(result.devices)}")
            print(f"Warnings: {len(result.warnings)}")
            print(f"Time: {result.elapsed:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Conversion failed!", result.message)
            sys.exit(1)

    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def show_command(args: ShowArgs) -> None:
    """Show one device from a generated INI file.

    Examples:
        avrini show atmega8 --ini avrdude.ini
        avrini show ATtiny85                  # Searches pigro.ini, ~/.pigro/, /usr/share/pigro/
    """
    try:
        if args.ini_path is not None:
            ini = DeviceIni(args.ini_path)
        else:
            ini = DeviceIni.find(args.device)
        info = ini.get_device(args.device)

        print(f"Device: {info.name}")
        print(f"  Type:        {info.device_type}")
        if info.signature is not None:
            print(f"  Signature:   {info.signature.code}")
        print(f"  Paged:       {'yes' if info.paged else 'no'}")
        print(f"  Page size:   {info.page_size} words ({info.page_byte_size} bytes)")
        print(f"  Page count:  {info.page_count}")
        print(f"  Flash size:  {info.flash_size} bytes")
        if args.verbose:
            print(f"  Word mask:   0x{info.word_mask & 0xFFFF:04X}")
            print(f"  Page mask:   0x{info.page_mask & 0xFFFF:04X}")
            for key, value in info.extra.items():
                print(f"  {key}: {value}")

        if info.valid():
            sys.exit(0)
        ErrorFormatter.print_warning(f"Device '{args.device}' has unusable flash geometry")
        sys.exit(1)

    except DeviceIniError as e:
        ErrorFormatter.print_error("Device lookup failed!", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main() -> None:
    """avrini - avrdude.conf to device INI converter."""
    parser = argparse.ArgumentParser(
        prog="avrini",
        description="avrini - convert avrdude.conf into programmer device INI files",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"avrini {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Convert command
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert avrdude.conf to a device INI file",
    )
    convert_parser.add_argument(
        "input",
        help="avrdude.conf path or http(s) URL",
    )
    convert_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output INI path (default: input path with .ini suffix)",
    )
    convert_parser.add_argument(
        "-s",
        "--strict",
        action="store_true",
        help="Fail on parts without desc/signature instead of skipping them",
    )
    convert_parser.add_argument(
        "--paged-default",
        choices=[policy.value for policy in PagedDefault],
        default=PagedDefault.NO.value,
        help="Assumed value when a flash block has no 'paged' field (default: no)",
    )
    convert_parser.add_argument(
        "--page-count-field",
        default=DEFAULT_PAGE_COUNT_FIELD,
        help=f"Flash field holding the page count (default: {DEFAULT_PAGE_COUNT_FIELD})",
    )
    convert_parser.add_argument(
        "--tab-width",
        type=int,
        default=8,
        help="Tab stop width of the input (default: 8)",
    )
    convert_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )
    convert_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a detailed log to this file",
    )

    # Show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show a device from a generated INI file",
    )
    show_parser.add_argument(
        "device",
        help="Device name (case-insensitive)",
    )
    show_parser.add_argument(
        "-i",
        "--ini",
        dest="ini_path",
        type=Path,
        default=None,
        help="Device INI file (default: search pigro.ini, ~/.pigro/ and /usr/share/pigro/)",
    )
    show_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show masks and extra fields",
    )

    # Parse arguments
    parsed_args = parser.parse_args()

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    # Execute command
    if parsed_args.command == "convert":
        PathValidator.validate_input(parsed_args.input)
        PathValidator.validate_output(parsed_args.output)
        setup_logging(verbose=parsed_args.verbose, log_file=parsed_args.log_file)
        convert_args = ConvertArgs(
            input=parsed_args.input,
            output=parsed_args.output,
            strict=parsed_args.strict,
            paged_default=parsed_args.paged_default,
            page_count_field=parsed_args.page_count_field,
            tab_width=parsed_args.tab_width,
            verbose=parsed_args.verbose,
            log_file=parsed_args.log_file,
        )
        convert_command(convert_args)
    elif parsed_args.command == "show":
        setup_logging(verbose=parsed_args.verbose)
        show_args = ShowArgs(
            device=parsed_args.device,
            ini_path=parsed_args.ini_path,
            verbose=parsed_args.verbose,
        )
        show_command(show_args)


if __name__ == "__main__":
    main()
