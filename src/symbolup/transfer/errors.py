"""Classification and logging of HTTP client errors."""

import logging
from enum import Enum

import requests


class MetadataFetchError(Exception):
    """Raised when mapping metadata could not be fetched."""


class ErrorClassification(Enum):
    """What went wrong with an HTTP call, judged from the error's shape."""

    PAYLOAD_TOO_LARGE = "payload_too_large"
    SERVER_ERROR = "server_error"
    NO_RESPONSE = "no_response"
    REQUEST_CONSTRUCTION_FAILURE = "request_construction_failure"
    UNKNOWN = "unknown"


def is_http_error(error: object) -> bool:
    """Whether error came from the HTTP client."""
    return isinstance(error, requests.RequestException)


def classify_error(error: object) -> ErrorClassification:
    """Classify an error by whether it carries a response, a request, or neither."""
    if not is_http_error(error):
        return ErrorClassification.UNKNOWN

    # Response.__bool__ reflects the status, so compare against None
    if error.response is not None:
        if error.response.status_code == 413:
            return ErrorClassification.PAYLOAD_TOO_LARGE
        return ErrorClassification.SERVER_ERROR
    if error.request is not None:
        return ErrorClassification.NO_RESPONSE
    return ErrorClassification.REQUEST_CONSTRUCTION_FAILURE


def _underlying_cause(error: BaseException) -> BaseException | None:
    cause = error.__cause__ or error.__context__
    if cause is None and error.args and isinstance(error.args[0], BaseException):
        cause = error.args[0]
    return cause


def classify_and_log_error(
    error: object,
    context: str,
    url: str,
    logger: logging.Logger | logging.LoggerAdapter,
) -> bool:
    """
    Log a failed HTTP operation in a user-readable way.

    Args:
        error: The caught error, of any type
        context: Message describing the operation that failed
        url: Target URL of the operation
        logger: Logger to write to

    Returns:
        True if error came from the HTTP client, False otherwise
    """
    classification = classify_error(error)

    if classification is ErrorClassification.PAYLOAD_TOO_LARGE:
        response = error.response
        logger.warning(f"{response.status_code} {response.reason}")
        logger.warning(context)
    elif classification is ErrorClassification.SERVER_ERROR:
        response = error.response
        logger.error(f"{response.status_code} {response.reason}")
        body = response.text
        logger.error(body if isinstance(body, str) and body else "Error data not available")
        logger.error(context)
    elif classification is ErrorClassification.NO_RESPONSE:
        logger.error(f"Response from {url} was not received")
        cause = _underlying_cause(error)
        if cause is not None and str(cause):
            logger.error(str(cause))
        logger.error(context)
    elif classification is ErrorClassification.REQUEST_CONSTRUCTION_FAILURE:
        logger.error(f"Request to {url} could not be sent")
        logger.error(str(error) or "An unknown error occurred")
        logger.error(context)
    else:
        logger.error(f"An unexpected error occurred: {error}")
        logger.error(context)
        return False

    return True
