"""Request failure taxonomy.

Every failure in the resolution pipeline surfaces as exactly one of these
kinds. OS errors are classified at the point they are detected so raw
filesystem errors never reach the HTTP layer.
"""

import errno


class RequestError(Exception):
    """Base class for request resolution failures.

    The detail is for logs only; clients see the status code and a short
    generic message.
    """

    kind = "error"
    status = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFound(RequestError):
    """Missing file, filtered file, or no index found."""

    kind = "not_found"
    status = 404


class PermissionDenied(RequestError):
    """Document root escape or OS permission failure."""

    kind = "permission_denied"
    status = 403


class TooManyRedirects(RequestError):
    """Symlink cycle or too many levels of indirection."""

    kind = "too_many_redirects"
    status = 500


class InternalError(RequestError):
    """Unexpected directory in place of a file, rendering failure."""

    kind = "internal_error"
    status = 500


def classify_os_error(err: OSError | ValueError, path: str) -> RequestError:
    """Map a low-level error onto the request error taxonomy.

    Args:
        err: Error raised by an os/filesystem call
        path: Path being accessed when the error occurred

    Returns:
        RequestError subclass instance describing the failure
    """
    if isinstance(err, ValueError):
        # os functions reject paths with embedded NUL bytes this way
        return NotFound(f"{path!r}: invalid path")
    if isinstance(err, FileNotFoundError | NotADirectoryError):
        return NotFound(f"{path}: {err.strerror}")
    if isinstance(err, PermissionError):
        return PermissionDenied(f"{path}: {err.strerror}")
    if err.errno == errno.ELOOP:
        return TooManyRedirects(f"{path}: {err.strerror}")
    return InternalError(f"{path}: {err}")
