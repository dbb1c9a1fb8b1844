"""Tar archive extraction for staged sources.

Compression (gzip, bzip2, xz or none) is detected from the archive
contents. Members are extracted with the "tar" filter, which rejects
absolute paths and paths escaping the destination while keeping file
modes.
"""

import logging
import tarfile
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class ArchiveError(Exception):
    """Raised when an archive cannot be read or extracted."""

    pass


def extract_archive(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """Extract a tar archive into destination.

    Member paths are taken as relative to destination, which is created
    if missing.

    Raises:
        ArchiveError: If the archive is missing, corrupt, or contains unsafe members.
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    logger.info(
        "Extracting archive",
        extra={"archive": str(archive_path), "destination": str(destination)},
    )
    try:
        destination.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, mode="r:*") as archive:
            archive.extractall(destination, filter="tar")
    except tarfile.TarError as exc:
        raise ArchiveError(f"extracting {archive_path}: {exc}") from exc
    except OSError as exc:
        raise ArchiveError(f"extracting {archive_path}: {exc}") from exc
