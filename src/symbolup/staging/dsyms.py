"""Locate, zip and stage iOS dSYMs for upload."""

import logging
import os
import shutil
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from symbolup.errors import OSErrorKind, UserFriendlyError, raise_as_user_friendly_os_error
from symbolup.models import StagingResult
from symbolup.staging.archiver import ArchiveError, Archiver, ZipCommandArchiver

logger = logging.getLogger(__name__)

STAGING_DIR_PREFIX = "symbolup_dSYMs_upload_"

DSYMS_DIR_NAME = "dSYMs"
DSYM_SUFFIX = ".dSYM"
DSYM_ZIP_SUFFIX = ".dSYM.zip"
DSYM_ZIP_SUFFIXES = (DSYM_ZIP_SUFFIX, ".dSYMs.zip")


@dataclass
class ScanResult:
    """Children of a dSYMs directory worth uploading."""

    dsym_dirs: list[str] = field(default_factory=list)
    dsym_zip_files: list[str] = field(default_factory=list)


def _is_dsyms_dir(path: Path) -> bool:
    return path.name == DSYMS_DIR_NAME


def _is_dsym_zip(path: Path) -> bool:
    return path.name.endswith(DSYM_ZIP_SUFFIXES)


def _is_dsym_dir(path: Path) -> bool:
    return path.name.endswith(DSYM_SUFFIX)


def _check_type(path: Path, want_dir: bool, wrong_type: str, not_found: str):
    try:
        mode = path.stat().st_mode
    except OSError as e:
        raise_as_user_friendly_os_error(
            e,
            {
                OSErrorKind.NOT_FOUND: not_found,
                OSErrorKind.PERMISSION_DENIED: (
                    f"Permission denied while accessing {path}. Please check your access rights."
                ),
            },
        )

    matches = stat.S_ISDIR(mode) if want_dir else stat.S_ISREG(mode)
    if not matches:
        raise UserFriendlyError(wrong_type)


def validate_path(dsyms_path: str | Path) -> Path:
    """
    Validate a user-supplied dSYM location.

    Accepted shapes, checked in order:
    1. a directory named 'dSYMs'
    2. a file ending in '.dSYM.zip' or '.dSYMs.zip'
    3. a directory ending in '.dSYM'

    Args:
        dsyms_path: Path as given by the user, relative or absolute

    Returns:
        The absolute, normalized path (symlinks are not followed)

    Raises:
        UserFriendlyError: If the path is missing, has the wrong type, or matches no shape
    """
    abs_path = Path(os.path.abspath(dsyms_path))

    if _is_dsyms_dir(abs_path):
        _check_type(
            abs_path,
            want_dir=True,
            wrong_type="Invalid input: Expected a 'dSYMs/' directory but got a file.",
            not_found="Path not found: Ensure the provided directory exists before re-running.",
        )
        return abs_path

    if _is_dsym_zip(abs_path):
        _check_type(
            abs_path,
            want_dir=False,
            wrong_type="Invalid input: Expected a '.dSYM.zip' or '.dSYMs.zip' file.",
            not_found=(
                f"File not found: Ensure the provided file [{abs_path}] exists before re-running."
            ),
        )
        return abs_path

    if _is_dsym_dir(abs_path):
        _check_type(
            abs_path,
            want_dir=True,
            wrong_type="Invalid input: Expected a '.dSYM' directory but got a file.",
            not_found="Directory not found: Ensure the provided directory exists before re-running.",
        )
        return abs_path

    raise UserFriendlyError(
        "Invalid input: Expected a path named 'dSYMs' or ending in "
        "'.dSYM', '.dSYMs.zip', or '.dSYM.zip'."
    )


def scan_directory(dsyms_dir: Path) -> ScanResult:
    """Sort the immediate children of a dSYMs directory into dSYM dirs and dSYM zips."""
    result = ScanResult()

    for entry in sorted(Path(dsyms_dir).iterdir()):
        is_dsym_dir = entry.name.endswith(DSYM_SUFFIX)
        is_dsym_zip = entry.name.endswith(DSYM_ZIP_SUFFIX)
        if not (is_dsym_dir or is_dsym_zip):
            continue

        try:
            mode = entry.stat().st_mode
        except OSError as e:
            raise_as_user_friendly_os_error(
                e,
                {
                    OSErrorKind.NOT_FOUND: (
                        f"Error accessing file or directory at {entry}. "
                        "Please ensure it exists and is accessible."
                    ),
                    OSErrorKind.PERMISSION_DENIED: (
                        f"Permission denied while accessing {entry}. "
                        "Please check your access rights."
                    ),
                },
            )

        if is_dsym_dir and stat.S_ISDIR(mode):
            result.dsym_dirs.append(entry.name)
        elif is_dsym_zip and stat.S_ISREG(mode):
            result.dsym_zip_files.append(entry.name)

    logger.debug(
        f"Found {len(result.dsym_dirs)} dSYM directories and "
        f"{len(result.dsym_zip_files)} dSYM zips in {dsyms_dir}"
    )
    return result


def zip_directory(
    parent_dir: Path,
    dir_name: str,
    dest_dir: Path,
    archiver: Archiver | None = None,
) -> Path:
    """
    Zip a single dSYM directory into dest_dir.

    Returns:
        Path of the created '<dir_name>.zip'
    """
    archiver = archiver or ZipCommandArchiver()
    source_path = Path(parent_dir) / dir_name
    zip_path = Path(dest_dir) / f"{dir_name}.zip"

    try:
        archiver.archive(source_path, zip_path)
    except ArchiveError as e:
        raise UserFriendlyError(
            f"Failed to zip {source_path}. Please ensure you have the necessary "
            "permissions and that the zip command is available.",
            e,
        ) from e

    return zip_path


def _copy_into(src: Path, dest: Path) -> Path:
    try:
        shutil.copyfile(src, dest)
    except OSError as e:
        raise_as_user_friendly_os_error(
            e,
            {
                OSErrorKind.NOT_FOUND: (
                    f"Failed to copy {src} to {dest}. "
                    "Please ensure the file exists and is not in use."
                ),
                OSErrorKind.PERMISSION_DENIED: (
                    f"Permission denied while copying {src}. Please check your access rights."
                ),
            },
        )
    return dest


def prepare_artifacts(
    dsyms_path: str | Path,
    archiver: Archiver | None = None,
) -> StagingResult:
    """
    Validate a dSYM location and stage its artifacts in a fresh temp directory.

    The caller owns the returned staging directory and must remove it with
    cleanup_staging() once uploads are done.

    Args:
        dsyms_path: A 'dSYMs' directory, a '.dSYM' directory, or a '.dSYM.zip'/'.dSYMs.zip' file
        archiver: Archiver used for directories; defaults to the zip command

    Returns:
        StagingResult with the staged zip files and the staging directory
    """
    abs_path = validate_path(dsyms_path)
    staging_dir = Path(tempfile.mkdtemp(prefix=STAGING_DIR_PREFIX))
    logger.debug(f"Staging {abs_path} in {staging_dir}")

    result = StagingResult(staging_dir=staging_dir)

    # The caller never sees staging_dir if staging fails, so remove it here
    try:
        if _is_dsyms_dir(abs_path):
            scan = scan_directory(abs_path)
            for dir_name in scan.dsym_dirs:
                result.files.append(zip_directory(abs_path, dir_name, staging_dir, archiver))
            for zip_name in scan.dsym_zip_files:
                result.files.append(_copy_into(abs_path / zip_name, staging_dir / zip_name))
        elif _is_dsym_zip(abs_path):
            result.files.append(_copy_into(abs_path, staging_dir / abs_path.name))
        else:
            result.files.append(
                zip_directory(abs_path.parent, abs_path.name, staging_dir, archiver)
            )
    except Exception:
        cleanup_staging(staging_dir)
        raise

    return result


def cleanup_staging(staging_dir: str | Path) -> None:
    """Remove a staging directory created by prepare_artifacts(); never raises."""
    staging_dir = Path(staging_dir)

    if STAGING_DIR_PREFIX not in staging_dir.name:
        logger.warning(
            f"Refusing to delete '{staging_dir}' as it does not appear to be "
            "a temp dSYMs upload directory."
        )
        return

    try:
        shutil.rmtree(staging_dir)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove temporary directory '{staging_dir}': {e}")
