"""Export boundary: transient byte handles, archives and output files."""

import io
import time
import zipfile
from pathlib import Path
from typing import Iterable, List, Tuple

from .models import ProcessedImage


class ExportHandle:
    """
    Transient reference to an output buffer for download or export.

    Handles must be released once their result is superseded or deleted;
    reading a released handle raises ``ValueError``.
    """

    def __init__(self, data: bytes, name: str):
        self.name = name
        self._view = memoryview(data)
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def open(self) -> io.BytesIO:
        """Return a fresh readable stream over the buffer."""
        if self._released:
            raise ValueError(f"Export handle for {self.name} was released")
        return io.BytesIO(self._view.tobytes())

    def release(self) -> None:
        if not self._released:
            self._view.release()
            self._released = True


def archive_entries(results: Iterable[ProcessedImage]) -> List[Tuple[str, bytes]]:
    """One ``(output_name, bytes)`` entry per completed image."""
    return [(result.output_name, result.data) for result in results]


def build_archive(results: Iterable[ProcessedImage]) -> bytes:
    """Bundle completed images into a single zip container."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        for name, data in archive_entries(results):
            archive.writestr(name, data)
    return buffer.getvalue()


def default_archive_name() -> str:
    return f"listing-images-{int(time.time() * 1000)}.zip"


def write_outputs(results: Iterable[ProcessedImage], directory: Path) -> List[Path]:
    """Write each completed image into ``directory`` under its output name."""
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for name, data in archive_entries(results):
        path = directory / name
        path.write_bytes(data)
        written.append(path)
    return written
