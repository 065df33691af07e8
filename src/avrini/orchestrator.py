"""
Conversion orchestration for avrdude.conf files.

This module runs the whole conversion and is the single place where fatal
errors are caught:
- Reading the input (local file or URL)
- Structural parsing into raw parts
- Validation and normalization into devices
- Serialization and one atomic write of the output INI
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .conf.lexer import TAB_WIDTH
from .conf.parser import ConfParser
from .conf.source import ConfSource, DownloadError, write_atomic
from .device.models import DeviceConfig
from .device.serializer import serialize_devices
from .device.validator import (
    DEFAULT_PAGE_COUNT_FIELD,
    DeviceValidator,
    PagedDefault,
    ValidationPolicy,
)
from .errors import AvrdudeConfError, ConversionWarning

DEFAULT_OUTPUT_NAME = "avrdude.ini"


@dataclass
class ConversionOptions:
    """Everything a conversion run can be configured with."""

    input: Union[str, Path]
    output: Optional[Path] = None
    strict: bool = False
    paged_default: PagedDefault = PagedDefault.NO
    page_count_field: str = DEFAULT_PAGE_COUNT_FIELD
    tab_width: int = TAB_WIDTH

    @property
    def output_path(self) -> Path:
        """Output path, defaulting to avrdude.ini beside a local input."""
        if self.output is not None:
            return Path(self.output)
        if ConfSource.is_url(self.input):
            return Path.cwd() / DEFAULT_OUTPUT_NAME
        return Path(self.input).with_suffix(".ini")

    def policy(self) -> ValidationPolicy:
        return ValidationPolicy(
            strict=self.strict,
            paged_default=self.paged_default,
            page_count_field=self.page_count_field,
        )


@dataclass
class ConversionResult:
    """Result of a complete conversion."""

    success: bool
    devices: List[DeviceConfig] = field(default_factory=list)
    warnings: List[ConversionWarning] = field(default_factory=list)
    output_path: Optional[Path] = None
    text: str = ""
    elapsed: float = 0.0
    message: str = ""
    error: Optional[Exception] = None

    @property
    def lineno(self) -> Optional[int]:
        """Line of the fatal error, if any."""
        return getattr(self.error, "lineno", None)


class ConversionOrchestrator:
    """
    Orchestrates avrdude.conf to INI conversion.

    Example usage:
        orchestrator = ConversionOrchestrator()
        result = orchestrator.convert(ConversionOptions(input="avrdude.conf"))
        if result.success:
            print(f"Wrote {len(result.devices)} devices to {result.output_path}")
        else:
            print(result.message)
    """

    def __init__(self, source: Optional[ConfSource] = None, verbose: bool = False):
        """
        Initialize conversion orchestrator.

        Args:
            source: Input reader (a default ConfSource if not given)
            verbose: Print progress for each phase
        """
        self.source = source or ConfSource()
        self.verbose = verbose

    def convert(self, options: ConversionOptions) -> ConversionResult:
        """
        Read, convert and write in one run.

        The output file is written only when every phase succeeded.

        Args:
            options: Conversion options

        Returns:
            ConversionResult; success is False on any fatal conversion error

        Raises:
            FileNotFoundError: If a local input doesn't exist
        """
        start_time = time.time()

        try:
            if self.verbose:
                print(f"[1/4] Reading {options.input}...")
            text = self.source.read(options.input)
        except DownloadError as e:
            return self._failure(e, start_time)

        result = self.convert_text(text, options)
        if not result.success:
            return result

        if self.verbose:
            print(f"[4/4] Writing {options.output_path}...")
        result.output_path = write_atomic(options.output_path, result.text)
        result.elapsed = time.time() - start_time
        return result

    def convert_text(self, text: str, options: ConversionOptions) -> ConversionResult:
        """
        Convert avrdude.conf text to INI text without touching the filesystem.

        Args:
            text: avrdude.conf document
            options: Conversion options (input/output are ignored)

        Returns:
            ConversionResult with devices, warnings and the INI text
        """
        start_time = time.time()

        try:
            if self.verbose:
                print("[2/4] Parsing part sections...")
            parts = ConfParser().parse(text, options.tab_width)

            if self.verbose:
                print(f"      Found {len(parts)} parts")
                print("[3/4] Validating devices...")
            validation = DeviceValidator(options.policy()).validate(parts)

        except AvrdudeConfError as e:
            return self._failure(e, start_time)

        return ConversionResult(
            success=True,
            devices=validation.devices,
            warnings=validation.warnings,
            text=serialize_devices(validation.devices),
            elapsed=time.time() - start_time,
            message=f"Converted {len(validation.devices)} devices",
        )

    @staticmethod
    def _failure(error: Exception, start_time: float) -> ConversionResult:
        logging.error(f"Conversion failed: {error}")
        return ConversionResult(
            success=False,
            elapsed=time.time() - start_time,
            message=str(error),
            error=error,
        )
