"""CLI utility functions for avrini.

This module provides common utilities used across CLI commands including:
- Logging setup
- Error handling and formatting
- Input/output path validation
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

from avrini.conf.source import ConfSource
from avrini.errors import ConversionWarning

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Handlers installed by setup_logging, replaced on each call
_installed_handlers: List[logging.Handler] = []


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Setup logging for CLI commands.

    Args:
        verbose: Log INFO and DEBUG messages to the console, not just warnings
        log_file: Optional path for a rotating log file
    """
    logger = logging.getLogger()
    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    # Rotating file handler (optional)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_file),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "File not found", "Conversion failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        """Print formatted success message."""
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        """Print formatted warning message."""
        print(f"{ErrorFormatter.YELLOW}! {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_conversion_warning(warning: ConversionWarning) -> None:
        """Print a conversion warning tagged with its kind."""
        ErrorFormatter.print_warning(f"{warning.kind.value}: {warning}")

    @staticmethod
    def handle_file_not_found(error: FileNotFoundError) -> None:
        """Handle FileNotFoundError with standard formatting."""
        ErrorFormatter.print_error("Error: File not found", str(error))
        sys.exit(1)

    @staticmethod
    def handle_permission_error(error: PermissionError) -> None:
        """Handle PermissionError with standard formatting."""
        ErrorFormatter.print_error("Error: Permission denied", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        print()
        ErrorFormatter.print_warning("Conversion interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class PathValidator:
    """Validates input and output locations."""

    @staticmethod
    def validate_input(location: Union[str, Path]) -> None:
        """Validate that a local input exists and is a file. URLs are not checked.

        Raises:
            SystemExit: If path doesn't exist or isn't a file
        """
        if ConfSource.is_url(location):
            return
        path = Path(location)
        if not path.exists():
            print(f"{ErrorFormatter.RED}✗ Error: Path does not exist: {path}{ErrorFormatter.RESET}")
            sys.exit(2)
        if not path.is_file():
            print(f"{ErrorFormatter.RED}✗ Error: Path is not a file: {path}{ErrorFormatter.RESET}")
            sys.exit(2)

    @staticmethod
    def validate_output(path: Optional[Path]) -> None:
        """Validate that an output path, if given, is not a directory.

        Raises:
            SystemExit: If path is an existing directory
        """
        if path is not None and path.is_dir():
            print(
                f"{ErrorFormatter.RED}✗ Error: Output path is a directory: {path}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
