"""I/O utility functions for file and directory operations."""

import re
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from podcast_video.core.errors import UploadTooLargeError


def sanitize_file_name(name: str) -> str:
    """
    Make a file name safe for the filesystem.

    Args:
        name: Original file name (e.g. from an upload)

    Returns:
        Name with every character outside [A-Za-z0-9-_.] replaced by "_"
    """
    name = re.sub(r"[^A-Za-z0-9\-_.]", "_", name)
    # Limit length
    if len(name) > 100:
        stem, dot, suffix = name.rpartition(".")
        name = f"{stem[:90]}{dot}{suffix[:9]}" if dot else name[:100]
    return name


def unique_file_path(directory: Path, original_name: Optional[str], fallback: str = "upload") -> Path:
    """Build a collision-free path that keeps the original extension."""
    safe_name = sanitize_file_name(original_name or "") or fallback
    return directory / f"{uuid.uuid4()}_{safe_name}"


def copy_stream_capped(source: BinaryIO, target_path: Path, max_bytes: int, chunk_size: int = 1024 * 1024) -> int:
    """
    Copy a file-like object to disk, refusing to exceed `max_bytes`.

    Returns:
        Number of bytes written

    Raises:
        UploadTooLargeError: if the stream is larger than the cap
    """
    total = 0
    with open(target_path, "wb") as f:
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            total += len(chunk)
            if total > max_bytes:
                raise UploadTooLargeError(
                    f"Uploaded file {target_path.name} exceeds the {max_bytes // (1024 * 1024)} MB limit."
                )
            f.write(chunk)
    return total
