"""HTTP transfers to the symbol upload service."""

import json
import logging
from pathlib import Path
from typing import Any, BinaryIO, Literal, Protocol

import requests
from requests_toolbelt import MultipartEncoder, MultipartEncoderMonitor

from symbolup.models import ProgressCallback, ProgressInfo, UploadRequest
from symbolup.transfer.errors import MetadataFetchError
from symbolup.transfer.mock import upload_mock

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-SF-Token"


class Uploader(Protocol):
    """Any function that performs a single-file upload."""

    def __call__(self, request: UploadRequest) -> None: ...


class _ProgressReader:
    """File-like body that reports progress as requests reads it."""

    def __init__(self, fileobj: BinaryIO, total: int, on_progress: ProgressCallback | None):
        self._fileobj = fileobj
        self._total = total
        self._on_progress = on_progress
        self.loaded = 0

    def __len__(self) -> int:
        return self._total

    def read(self, size: int = -1) -> bytes:
        chunk = self._fileobj.read(size)
        if chunk:
            self.loaded += len(chunk)
            if self._on_progress:
                self._on_progress(ProgressInfo.from_bytes(self.loaded, self._total))
        return chunk


def _token_headers(token: str | None) -> dict[str, str]:
    return {TOKEN_HEADER: token} if token else {}


def _describe_response(response: requests.Response | None) -> str:
    status = response.status_code if response is not None else None
    reason = response.reason if response is not None else None
    data: Any = None
    if response is not None:
        try:
            data = response.json()
        except ValueError:
            data = response.text
    return f"HTTP {status}: {reason}\nResponse Data: {json.dumps(data, indent=2)}"


def content_type_for(path: Path) -> str:
    """Content type for a mapping file upload."""
    if path.suffix.lower() == ".gz":
        return "application/gzip"
    return "text/plain"


def fetch_metadata(url: str, token: str) -> list[str]:
    """
    Fetch the list of mapping files already known to the service.

    Args:
        url: Metadata endpoint
        token: Access token sent in the token header

    Returns:
        Parsed JSON response body

    Raises:
        MetadataFetchError: If the HTTP call failed or the body is not JSON
    """
    headers = {**_token_headers(token), "Accept": "application/json"}

    try:
        response = requests.get(url, headers=headers)
        response.raise_for_status()
    except requests.RequestException as e:
        raise MetadataFetchError(_describe_response(e.response)) from e

    try:
        return response.json()
    except requests.JSONDecodeError as e:
        raise MetadataFetchError(_describe_response(response)) from e


def upload_stream(request: UploadRequest) -> None:
    """Upload a single file as the raw PUT body."""
    path = request.file.path
    file_size = path.stat().st_size

    headers = {
        "Content-Type": content_type_for(path),
        **_token_headers(request.token),
        "Content-Length": str(file_size),
    }

    logger.debug(f"PUT {request.url} ({file_size} bytes, {headers['Content-Type']})")
    with open(path, "rb") as f:
        body = _ProgressReader(f, file_size, request.on_progress)
        response = requests.put(request.url, data=body, headers=headers)
    response.raise_for_status()


def upload_multipart(request: UploadRequest) -> None:
    """
    Upload a file plus extra form parameters as a multipart/form-data PUT.

    The form is streamed from disk as requests reads it. Various errors are
    left to the caller; see classify_and_log_error().
    """
    path = request.file.path
    file_size = path.stat().st_size

    def on_read(monitor: MultipartEncoderMonitor):
        if request.on_progress:
            total = monitor.len or file_size
            request.on_progress(ProgressInfo.from_bytes(monitor.bytes_read, total))

    with open(path, "rb") as f:
        fields: dict[str, Any] = {key: str(value) for key, value in request.parameters.items()}
        fields[request.file.field_name] = (path.name, f, "application/octet-stream")
        monitor = MultipartEncoderMonitor(MultipartEncoder(fields=fields), on_read)

        headers = {
            "Content-Type": monitor.content_type,
            "Content-Length": str(monitor.len),
            **_token_headers(request.token),
        }

        logger.debug(f"PUT {request.url} (multipart, {monitor.len} bytes)")
        response = requests.put(request.url, data=monitor, headers=headers)
    response.raise_for_status()


UploaderKind = Literal["stream", "multipart", "mock"]

_UPLOADERS: dict[str, Uploader] = {
    "stream": upload_stream,
    "multipart": upload_multipart,
    "mock": upload_mock,
}


def get_uploader(kind: UploaderKind) -> Uploader:
    """Look up an upload function by name."""
    try:
        return _UPLOADERS[kind]
    except KeyError:
        raise ValueError(f"Unknown uploader '{kind}'. Available: {list(_UPLOADERS)}") from None
