"""User-facing errors and OS error translation."""

import errno
from enum import Enum


class UserFriendlyError(Exception):
    """An error whose message can be shown to the user as is."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class OSErrorKind(Enum):
    """Coarse categories of OS errors that get their own messages."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"

    @classmethod
    def of(cls, err: OSError) -> "OSErrorKind":
        if isinstance(err, FileNotFoundError) or err.errno == errno.ENOENT:
            return cls.NOT_FOUND
        if isinstance(err, PermissionError) or err.errno in (errno.EACCES, errno.EPERM):
            return cls.PERMISSION_DENIED
        return cls.OTHER


def raise_as_user_friendly_os_error(
    err: BaseException,
    messages: dict[OSErrorKind, str],
):
    """
    Re-raise an exception as a UserFriendlyError.

    Args:
        err: The caught exception
        messages: Message to use for each OS error kind; kinds not listed
            fall back to a generic message naming the failing path

    Raises:
        UserFriendlyError: Always. An incoming UserFriendlyError is re-raised unchanged.
    """
    if isinstance(err, UserFriendlyError):
        raise err

    if not isinstance(err, OSError):
        raise UserFriendlyError(f"An unexpected error occurred: {err}", err) from err

    message = messages.get(OSErrorKind.of(err))
    if message is None:
        message = (
            f"An unexpected error occurred while accessing {err.filename}: "
            f"{err.strerror or err}"
        )
    raise UserFriendlyError(message, err) from err
