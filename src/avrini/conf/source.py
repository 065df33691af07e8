"""Loading avrdude.conf input and writing converted output.

This module reads the avrdude.conf text from a local path or downloads it
from an http(s) URL, and writes the generated INI atomically.
"""

import logging
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

import requests
from tqdm import tqdm


class DownloadError(Exception):
    """Raised when downloading avrdude.conf fails."""

    pass


class ConfSource:
    """Reads avrdude.conf from a file path or URL."""

    def __init__(self, chunk_size: int = 8192, show_progress: bool = True, timeout: int = 30):
        """Initialize source reader.

        Args:
            chunk_size: Size of chunks for streaming downloads
            show_progress: Whether to show a progress bar for downloads
            timeout: HTTP timeout in seconds
        """
        self.chunk_size = chunk_size
        self.show_progress = show_progress
        self.timeout = timeout

    @staticmethod
    def is_url(location: Union[str, Path]) -> bool:
        """Check whether a location is an http(s) URL."""
        return urlparse(str(location)).scheme in ("http", "https")

    def read(self, location: Union[str, Path], encoding: str = "utf-8-sig") -> str:
        """Read the whole avrdude.conf document.

        Args:
            location: Local path or http(s) URL
            encoding: Text encoding of the document

        Returns:
            Document text

        Raises:
            FileNotFoundError: If a local path doesn't exist
            DownloadError: If the download fails
        """
        if self.is_url(location):
            return self.download(str(location), encoding)

        path = Path(location)
        if not path.is_file():
            raise FileNotFoundError(f"avrdude.conf not found: {path}")
        logging.info(f"Reading {path}")
        return path.read_text(encoding=encoding, errors="replace")

    def download(self, url: str, encoding: str = "utf-8-sig") -> str:
        """Download avrdude.conf from a URL.

        Raises:
            DownloadError: If the request fails or returns an error status
        """
        logging.info(f"Downloading {url}")
        try:
            response = requests.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()

            total_size = int(response.headers.get("content-length", 0))

            progress_bar = None
            if self.show_progress and total_size > 0:
                filename = Path(urlparse(url).path).name
                progress_bar = tqdm(
                    total=total_size,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    desc=f"Downloading {filename}",
                )

            chunks = []
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    chunks.append(chunk)
                    if progress_bar:
                        progress_bar.update(len(chunk))

            if progress_bar:
                progress_bar.close()

        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e

        return b"".join(chunks).decode(encoding, errors="replace")


def write_atomic(dest_path: Union[str, Path], text: str, encoding: str = "utf-8") -> Path:
    """Write text to dest_path through a temporary file and a rename.

    The destination is either fully replaced or left untouched.

    Returns:
        Path to the written file
    """
    dest_path = Path(dest_path)
    dest_path.parent.mkdir(parents=True, exist_ok=True)

    temp_file = dest_path.with_suffix(dest_path.suffix + ".tmp")

    try:
        with open(temp_file, "w", encoding=encoding, newline="\n") as f:
            f.write(text)
        temp_file.replace(dest_path)
    except Exception:
        if temp_file.exists():
            temp_file.unlink()
        raise

    logging.info(f"Wrote {dest_path}")
    return dest_path
