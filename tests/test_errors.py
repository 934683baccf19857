"""Tests for user-facing errors and HTTP error classification."""

import errno
import logging

import pytest
import requests

from symbolup.errors import OSErrorKind, UserFriendlyError, raise_as_user_friendly_os_error
from symbolup.transfer import ErrorClassification, classify_and_log_error, classify_error

URL = "https://api.us0.example.com/v2/rum-mfm/dsym"
CONTEXT = "Failed to upload App.dSYM.zip"

logger = logging.getLogger("symbolup.tests")


def http_error(status_code: int, body: bytes = b"", reason: str = "") -> requests.HTTPError:
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = body
    response.encoding = "utf-8"
    return requests.HTTPError(f"{status_code} {reason}", response=response)


def connection_error() -> requests.ConnectionError:
    request = requests.Request("PUT", URL).prepare()
    return requests.ConnectionError(OSError("Connection refused"), request=request)


def messages(caplog, level: int) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.levelno == level]


class TestRaiseAsUserFriendly:
    """Tests for the OS error lookup table."""

    def test_kind_of(self):
        """OSErrorKind.of should sort errors into not-found, permission-denied and other."""
        assert OSErrorKind.of(FileNotFoundError(errno.ENOENT, "x")) is OSErrorKind.NOT_FOUND
        assert OSErrorKind.of(PermissionError(errno.EACCES, "x")) is OSErrorKind.PERMISSION_DENIED
        assert OSErrorKind.of(OSError(errno.EIO, "x")) is OSErrorKind.OTHER

    def test_mapped_message(self):
        """raise_as_user_friendly_os_error should use the message mapped to the error kind."""
        err = FileNotFoundError(errno.ENOENT, "No such file", "/tmp/a")
        with pytest.raises(UserFriendlyError, match="custom not found") as exc_info:
            raise_as_user_friendly_os_error(err, {OSErrorKind.NOT_FOUND: "custom not found"})
        assert exc_info.value.cause is err
        assert exc_info.value.__cause__ is err

    def test_unmapped_kind_names_path(self):
        """raise_as_user_friendly_os_error should fall back to a message naming the path."""
        err = PermissionError(errno.EACCES, "Permission denied", "/tmp/secret")
        with pytest.raises(UserFriendlyError) as exc_info:
            raise_as_user_friendly_os_error(err, {OSErrorKind.NOT_FOUND: "custom not found"})
        assert "/tmp/secret" in exc_info.value.message
        assert "Permission denied" in exc_info.value.message

    def test_user_friendly_error_passes_through(self):
        """raise_as_user_friendly_os_error should re-raise a UserFriendlyError unchanged."""
        original = UserFriendlyError("already friendly")
        with pytest.raises(UserFriendlyError) as exc_info:
            raise_as_user_friendly_os_error(original, {})
        assert exc_info.value is original

    def test_non_os_error_is_wrapped(self):
        """raise_as_user_friendly_os_error should wrap errors that are not OS errors."""
        with pytest.raises(UserFriendlyError, match="An unexpected error occurred: bad"):
            raise_as_user_friendly_os_error(ValueError("bad"), {})


class TestClassifyError:
    """Tests for classify_error()."""

    @pytest.mark.parametrize(
        "error, expected",
        [
            (http_error(413, reason="Payload Too Large"), ErrorClassification.PAYLOAD_TOO_LARGE),
            (http_error(503, reason="Service Unavailable"), ErrorClassification.SERVER_ERROR),
            (http_error(401, reason="Unauthorized"), ErrorClassification.SERVER_ERROR),
            (connection_error(), ErrorClassification.NO_RESPONSE),
            (requests.exceptions.MissingSchema("Invalid URL"), ErrorClassification.REQUEST_CONSTRUCTION_FAILURE),
            (ValueError("nope"), ErrorClassification.UNKNOWN),
            ("a thrown string", ErrorClassification.UNKNOWN),
        ],
    )
    def test_classification(self, error, expected):
        """classify_error should follow status, response, then request precedence."""
        assert classify_error(error) is expected


class TestClassifyAndLogError:
    """Tests for classify_and_log_error()."""

    def test_payload_too_large_is_a_warning(self, caplog):
        """classify_and_log_error should log a 413 as warnings."""
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            handled = classify_and_log_error(
                http_error(413, reason="Payload Too Large"), CONTEXT, URL, logger
            )

        assert handled is True
        assert messages(caplog, logging.WARNING) == ["413 Payload Too Large", CONTEXT]
        assert messages(caplog, logging.ERROR) == []

    def test_server_error_logs_body(self, caplog):
        """classify_and_log_error should log status, body and context for other statuses."""
        error = http_error(500, b"database on fire", "Internal Server Error")
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            handled = classify_and_log_error(error, CONTEXT, URL, logger)

        assert handled is True
        assert messages(caplog, logging.ERROR) == [
            "500 Internal Server Error",
            "database on fire",
            CONTEXT,
        ]

    def test_server_error_without_body(self, caplog):
        """classify_and_log_error should note when the body is empty."""
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            classify_and_log_error(http_error(502, reason="Bad Gateway"), CONTEXT, URL, logger)

        assert "Error data not available" in messages(caplog, logging.ERROR)

    def test_no_response(self, caplog):
        """classify_and_log_error should log the underlying cause when no response came back."""
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            handled = classify_and_log_error(connection_error(), CONTEXT, URL, logger)

        assert handled is True
        assert messages(caplog, logging.ERROR) == [
            f"Response from {URL} was not received",
            "Connection refused",
            CONTEXT,
        ]

    def test_no_response_without_cause(self, caplog):
        """classify_and_log_error should skip the cause line when there is none."""
        error = requests.Timeout(request=requests.Request("PUT", URL).prepare())
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            classify_and_log_error(error, CONTEXT, URL, logger)

        assert messages(caplog, logging.ERROR) == [
            f"Response from {URL} was not received",
            CONTEXT,
        ]

    def test_request_not_sent(self, caplog):
        """classify_and_log_error should log the error message when the request was never sent."""
        error = requests.exceptions.InvalidURL("Invalid URL 'nope'")
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            handled = classify_and_log_error(error, CONTEXT, "nope", logger)

        assert handled is True
        assert messages(caplog, logging.ERROR) == [
            "Request to nope could not be sent",
            "Invalid URL 'nope'",
            CONTEXT,
        ]

    def test_request_not_sent_without_message(self, caplog):
        """classify_and_log_error should fall back to a generic message."""
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            classify_and_log_error(requests.RequestException(), CONTEXT, URL, logger)

        assert "An unknown error occurred" in messages(caplog, logging.ERROR)

    @pytest.mark.parametrize("error", ["a thrown string", RuntimeError("kaboom")])
    def test_unexpected_error(self, caplog, error):
        """classify_and_log_error should return False for errors not from requests."""
        with caplog.at_level(logging.DEBUG, logger="symbolup.tests"):
            handled = classify_and_log_error(error, CONTEXT, URL, logger)

        assert handled is False
        assert messages(caplog, logging.ERROR) == [
            f"An unexpected error occurred: {error}",
            CONTEXT,
        ]
