"""Archivers that compress a directory into a zip file."""

import logging
import os
import subprocess
import zipfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ArchiveError(Exception):
    """Raised when a directory could not be archived."""


class Archiver(Protocol):
    """Compresses a directory tree into a single zip file."""

    def archive(self, source_dir: Path, dest_zip: Path) -> None:
        """Write source_dir (and everything under it) to dest_zip."""
        ...


class ZipCommandArchiver:
    """Archiver backed by the `zip` command-line utility."""

    def __init__(self, command: str = "zip"):
        self.command = command

    def archive(self, source_dir: Path, dest_zip: Path) -> None:
        # Run from the parent so entries are stored as <name>.dSYM/...; dest_zip must be absolute
        args = [self.command, "-r", "-q", os.path.abspath(dest_zip), source_dir.name]
        logger.debug(f"Running {' '.join(args)} in {source_dir.parent}")
        try:
            subprocess.run(
                args,
                cwd=source_dir.parent,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            raise ArchiveError(f"{self.command} failed for {source_dir}: {e}") from e


class ZipFileArchiver:
    """In-process archiver using the zipfile module."""

    def archive(self, source_dir: Path, dest_zip: Path) -> None:
        try:
            with zipfile.ZipFile(dest_zip, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                zf.write(source_dir, source_dir.name)
                for path in sorted(source_dir.rglob("*")):
                    zf.write(path, path.relative_to(source_dir.parent))
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Could not archive {source_dir}: {e}") from e
