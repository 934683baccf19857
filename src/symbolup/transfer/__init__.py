"""HTTP transfers: metadata fetch, uploads, and error logging."""

from symbolup.transfer.client import (
    TOKEN_HEADER,
    Uploader,
    fetch_metadata,
    get_uploader,
    upload_multipart,
    upload_stream,
)
from symbolup.transfer.errors import (
    ErrorClassification,
    MetadataFetchError,
    classify_and_log_error,
    classify_error,
)
from symbolup.transfer.mock import upload_mock

__all__ = [
    "ErrorClassification",
    "MetadataFetchError",
    "TOKEN_HEADER",
    "Uploader",
    "classify_and_log_error",
    "classify_error",
    "fetch_metadata",
    "get_uploader",
    "upload_mock",
    "upload_multipart",
    "upload_stream",
]
