#!/usr/bin/env python3
"""
File Utilities for the Compliance Helper Scripts

Input validation (done before any remote call), rule package export with
filename sanitizing and collision handling, and keyword file parsing.
"""

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from config import (
    DEFAULT_EXPORT_NAME,
    INVALID_FILENAME_CHARS,
    MAX_FILE_SIZE_BYTES,
    MAX_FILE_SIZE_MB,
    TIMESTAMP_FORMAT,
)
from src.core.errors import ConfigurationError

XML_BYTE_PREFIXES = (b"<", b"\xef\xbb\xbf<", b"\xff\xfe<\x00", b"\xfe\xff\x00<")


def validate_input_file(path: Union[str, Path]) -> Path:
    """
    Check an input file before it is sent anywhere.

    Raises:
        ConfigurationError: missing path, not a file, or too large
    """
    if not path or not str(path).strip():
        raise ConfigurationError("No input file was given")
    file_path = Path(path).expanduser()
    if not file_path.exists():
        raise ConfigurationError(f"Input file does not exist: {file_path}")
    if not file_path.is_file():
        raise ConfigurationError(f"Input path is not a file: {file_path}")
    size = file_path.stat().st_size
    if size > MAX_FILE_SIZE_BYTES:
        raise ConfigurationError(
            f"Input file is larger than {MAX_FILE_SIZE_MB} MB: {file_path}",
            {"file_size": size, "max_size": MAX_FILE_SIZE_BYTES},
        )
    return file_path


def validate_output_directory(path: Union[str, Path]) -> Path:
    """
    Check that an output directory exists.

    Raises:
        ConfigurationError: missing or not a directory
    """
    output_dir = Path(path).expanduser()
    if not output_dir.exists():
        raise ConfigurationError(f"Output directory does not exist: {output_dir}")
    if not output_dir.is_dir():
        raise ConfigurationError(f"Output path is not a directory: {output_dir}")
    return output_dir


def sanitize_filename(name: Optional[str], default: str = DEFAULT_EXPORT_NAME) -> str:
    """
    Make a display name safe to use as a file name.

    Invalid characters and control characters become underscores; the
    result is trimmed of whitespace and trailing dots. An empty result is
    replaced by the default name.
    """
    if not name:
        return default
    cleaned = "".join(
        "_" if ch in INVALID_FILENAME_CHARS or ord(ch) < 32 else ch
        for ch in name
    )
    cleaned = cleaned.strip().rstrip(". ").strip()
    if not cleaned or set(cleaned) == {"_"}:
        return default
    return cleaned


def looks_like_xml_bytes(data: bytes) -> bool:
    return data.lstrip(b" \t\r\n").startswith(XML_BYTE_PREFIXES)


def _handle_collision(dest_path: Path) -> Path:
    """Add a timestamp (and a counter when needed) to a taken file name"""
    timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    candidate = dest_path.parent / f"{dest_path.stem}_{timestamp}{dest_path.suffix}"
    counter = 1
    while candidate.exists():
        candidate = dest_path.parent / f"{dest_path.stem}_{timestamp}_{counter}{dest_path.suffix}"
        counter += 1
    return candidate


def write_export(output_dir: Union[str, Path], base_name: str, payload: Union[str, bytes],
                 overwrite: bool = False) -> Path:
    """
    Write an exported payload.

    Args:
        output_dir: Existing directory
        base_name: Display name of the exported item (sanitized here)
        payload: XML text (written as UTF-8) or raw bytes (written verbatim)
        overwrite: Replace an existing file instead of adding a timestamp

    Returns:
        Path of the written file
    """
    output_dir = validate_output_directory(output_dir)
    if isinstance(payload, str):
        suffix = ".xml"
    elif looks_like_xml_bytes(payload):
        suffix = ".xml"
    else:
        suffix = ".bin"

    dest_path = output_dir / f"{sanitize_filename(base_name)}{suffix}"
    if dest_path.exists() and not overwrite:
        dest_path = _handle_collision(dest_path)

    if isinstance(payload, str):
        dest_path.write_text(payload, encoding="utf-8")
    else:
        dest_path.write_bytes(bytes(payload))
    return dest_path


def parse_keywords(text: str) -> List[str]:
    """
    Split keyword text into a clean list.

    Accepts one keyword per line and/or comma separated values (quoted
    values may contain commas). Blank entries are dropped and duplicates
    removed, keeping first occurrence order.
    """
    keywords = []
    seen = set()
    for row in csv.reader(io.StringIO(text)):
        for cell in row:
            keyword = cell.strip()
            if keyword and keyword not in seen:
                seen.add(keyword)
                keywords.append(keyword)
    return keywords


def read_keywords(path: Union[str, Path]) -> List[str]:
    """
    Read keywords from a text or CSV file.

    Raises:
        ConfigurationError: unreadable file or no keywords in it
    """
    file_path = validate_input_file(path)
    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        try:
            text = file_path.read_text(encoding="utf-16")
        except UnicodeError as e:
            raise ConfigurationError(f"Keyword file is neither UTF-8 nor UTF-16: {file_path} ({e})")
    keywords = parse_keywords(text)
    if not keywords:
        raise ConfigurationError(f"No keywords found in {file_path}")
    return keywords
