"""Staging of dSYM artifacts into a temporary upload directory."""

from symbolup.staging.archiver import ArchiveError, Archiver, ZipCommandArchiver, ZipFileArchiver
from symbolup.staging.dsyms import (
    STAGING_DIR_PREFIX,
    ScanResult,
    cleanup_staging,
    prepare_artifacts,
    scan_directory,
    validate_path,
    zip_directory,
)

__all__ = [
    "ArchiveError",
    "Archiver",
    "STAGING_DIR_PREFIX",
    "ScanResult",
    "ZipCommandArchiver",
    "ZipFileArchiver",
    "cleanup_staging",
    "prepare_artifacts",
    "scan_directory",
    "validate_path",
    "zip_directory",
]
