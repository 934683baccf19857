"""Shared value types for staging and transfer."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ProgressInfo:
    """A single progress tick for an upload."""

    progress: float
    loaded: int
    total: int

    @classmethod
    def from_bytes(cls, loaded: int, total: int) -> "ProgressInfo":
        """Build a tick from byte counts; a zero total counts as complete."""
        progress = (loaded / total) * 100 if total else 100.0
        return cls(progress=progress, loaded=loaded, total=total)


ProgressCallback = Callable[[ProgressInfo], None]


@dataclass
class FileReference:
    """A local file and the form field it is sent under."""

    path: Path
    field_name: str = "file"

    def __post_init__(self):
        self.path = Path(self.path)


@dataclass
class UploadRequest:
    """Everything needed for one single-file upload."""

    url: str
    file: FileReference
    token: str | None = None
    parameters: dict[str, str | int] = field(default_factory=dict)
    on_progress: ProgressCallback | None = None


@dataclass
class StagingResult:
    """Files staged for upload and the temporary directory holding them."""

    files: list[Path] = field(default_factory=list)
    staging_dir: Path | None = None
