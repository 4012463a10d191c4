"""Output sinks receiving rendered sitemap documents.

A sink writes one document per call and returns a handle for it:
- FileSink: writes UTF-8 bytes to ``<base_dir>/<name>``, returns the Path
- GzipFileSink: same bytes in a gzip container, ``.gz`` appended to the name
- StringSink: keeps the document in memory and returns it as a string

Files are opened and closed within a single ``write`` call.
"""

import gzip
import logging
from pathlib import Path
from typing import List, Optional, Union

from sitemap_errors import ConfigError

logger = logging.getLogger(__name__)

GZIP_SUFFIX = '.gz'


class FileSink:
    """Writes documents as plain files into a directory.

    Attributes:
        base_dir: Directory receiving the files, or None when only string
            output is wanted.
    """

    suffix = ''

    def __init__(self, base_dir: Optional[Union[str, Path]]) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def path_for(self, name: str) -> Path:
        """Resolve the file path a document named ``name`` is written to.

        Raises:
            ConfigError: If no base directory is configured.
        """
        if self.base_dir is None:
            raise ConfigError("To write to files, base_dir must not be None")
        return self.base_dir / (name + self.suffix)

    def _open(self, path: Path):
        return path.open('wb')

    def write(self, data: bytes, name: str) -> Path:
        """Write one document.

        Args:
            data: UTF-8 encoded document.
            name: File name, e.g. ``sitemap1.xml``.

        Returns:
            Path of the written file.
        """
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._open(path) as f:
            f.write(data)
        logger.info(f"Wrote {len(data)} bytes to {path}")
        return path


class GzipFileSink(FileSink):
    """Writes documents as gzip-compressed files (``name.gz``)."""

    suffix = GZIP_SUFFIX

    def _open(self, path: Path):
        return gzip.open(path, 'wb')


class StringSink:
    """Collects documents in memory instead of touching storage.

    Attributes:
        documents: Every document written so far, in write order.
    """

    def __init__(self) -> None:
        self.documents: List[str] = []

    def write(self, data: bytes, name: str) -> str:
        document = data.decode('utf-8')
        self.documents.append(document)
        return document


def make_file_sink(base_dir: Optional[Union[str, Path]], use_gzip: bool = False) -> FileSink:
    """Return the file sink matching the ``gzip`` option."""
    return GzipFileSink(base_dir) if use_gzip else FileSink(base_dir)
