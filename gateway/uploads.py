"""Upload storage for files attached to chat queries.

Files are written once under a collision-free name and handed to the
dispatch engine as :class:`UploadedFile`, whose ``open()`` returns a fresh
handle every time.  Multipart retries therefore always re-send the complete
bytes instead of a half-consumed stream.
"""

from __future__ import annotations

import io
import random
import shutil
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from core.logging import logger

__all__ = [
    "UploadedFile",
    "UploadStore",
]

_BASE36 = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class UploadedFile:
    """Re-openable file attachment: a byte source plus its original name."""

    filename: str
    path: Optional[Path] = None
    data: Optional[bytes] = None

    def __post_init__(self) -> None:
        if self.path is None and self.data is None:
            raise ValueError("UploadedFile needs a path or in-memory data")

    @classmethod
    def from_bytes(cls, filename: str, data: bytes) -> "UploadedFile":
        return cls(filename=filename, data=data)

    def open(self) -> BinaryIO:
        """Return a new binary handle positioned at the first byte."""
        if self.path is not None:
            return open(self.path, "rb")
        return io.BytesIO(self.data)

    def read(self) -> bytes:
        with self.open() as fh:
            return fh.read()


class UploadStore:
    """Writes uploads into a directory as ``{epoch_ms}-{rnd}{ext}``."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _stored_name(filename: str) -> str:
        ts = int(time.time() * 1000)
        rnd = "".join(random.choice(_BASE36) for _ in range(6))
        return f"{ts}-{rnd}{Path(filename).suffix}"

    def save(self, filename: str, source: Union[bytes, BinaryIO]) -> UploadedFile:
        target = self.directory / self._stored_name(filename)
        with open(target, "wb") as out:
            if isinstance(source, (bytes, bytearray)):
                out.write(source)
            else:
                shutil.copyfileobj(source, out)
        logger.info(f"Stored upload '{filename}' as {target.name}")
        return UploadedFile(filename=filename, path=target)
