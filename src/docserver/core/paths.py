"""Secure path resolution below the document root.

Turns an untrusted URL path into a filesystem path that is verified to exist,
to stay inside the document root (also through symlinks), and not to match
any configured filter.
"""

import logging
import os
import posixpath
import re
import stat
from collections.abc import Sequence

from docserver.core.errors import (
    InternalError,
    NotFound,
    PermissionDenied,
    RequestError,
    TooManyRedirects,
    classify_os_error,
)

logger = logging.getLogger(__name__)

MAX_LINK_LEVELS = 5

INDEX_CANDIDATES = ("index.md", "README.md")


def canonicalize(root: str, request_path: str) -> str:
    """Join a request path below the document root.

    Dot segments and duplicate separators are resolved textually, without
    touching the filesystem. ``..`` cannot climb above the root, so the
    result is always lexically inside it.

    Args:
        root: Absolute document root
        request_path: Untrusted URL path (e.g. "/guide/../index.md")

    Returns:
        Normalized absolute filesystem path
    """
    url_path = posixpath.normpath("/" + request_path.lstrip("/"))
    relative = url_path.lstrip("/")
    if not relative:
        return os.path.normpath(root)
    return os.path.normpath(os.path.join(root, *relative.split("/")))


def _lstat(path: str) -> os.stat_result:
    try:
        return os.lstat(path)
    except (OSError, ValueError) as e:
        raise classify_os_error(e, path) from e


def resolve_symlinks(path: str, max_depth: int = MAX_LINK_LEVELS) -> str:
    """Follow symbolic links in the final path component.

    Absolute link targets replace the path; relative targets are resolved
    against the directory containing the link. At most ``max_depth`` links
    are followed so cycles terminate.

    Args:
        path: Absolute filesystem path
        max_depth: Maximum number of links to follow

    Returns:
        Path whose final component is not a symbolic link

    Raises:
        NotFound: A path along the chain doesn't exist
        PermissionDenied: A path along the chain can't be inspected
        TooManyRedirects: Still a link after ``max_depth`` hops
    """
    logger.debug(f"Resolving: {path}")
    st = _lstat(path)

    for _ in range(max_depth):
        if not stat.S_ISLNK(st.st_mode):
            break
        try:
            target = os.readlink(path)
        except OSError as e:
            raise classify_os_error(e, path) from e

        if os.path.isabs(target):
            path = os.path.normpath(target)
            logger.debug(f"Link to: {path}")
        else:
            path = os.path.normpath(os.path.join(os.path.dirname(path), target))
            logger.debug(f"Link to: {path} ({target})")

        st = _lstat(path)

    if stat.S_ISLNK(st.st_mode):
        raise TooManyRedirects(f"{path}: too many levels of indirection")

    return path


def relative_to_root(path: str, root: str) -> str:
    """Return ``path`` relative to ``root``, refusing anything outside it.

    Raises:
        PermissionDenied: No relative path exists or it leaves the root
    """
    try:
        relative = os.path.relpath(path, root)
    except ValueError as e:
        raise PermissionDenied(f"{path}: no relative path to {root}") from e
    if relative[:2] == "..":
        raise PermissionDenied(f"{path}: escapes document root ({relative})")
    return relative


def check_access(path: str, root: str, filters: Sequence[re.Pattern[str]] = ()) -> str:
    """Confirm that a symlink-resolved path may be served.

    Args:
        path: Absolute path with symlinks already resolved
        root: Absolute document root
        filters: Compiled patterns; a match marks the path as absent

    Returns:
        The path relative to ``root``

    Raises:
        PermissionDenied: Path leaves the root or can't be opened
        NotFound: Path matches a filter, doesn't exist or isn't a regular file
    """
    relative = relative_to_root(path, root)
    # Intermediate directories may themselves be links leading elsewhere
    real_relative = relative_to_root(os.path.realpath(path), root)

    for pattern in filters:
        if pattern.search(relative) or pattern.search(real_relative):
            logger.debug(f"Matched on filter: {pattern.pattern}")
            raise NotFound(f"{relative}: request filtered")

    try:
        st = os.stat(path)
    except (OSError, ValueError) as e:
        raise classify_os_error(e, path) from e
    # Opening a FIFO or device would block the event loop
    if not stat.S_ISREG(st.st_mode):
        raise NotFound(f"{path}: not a regular file")

    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        raise classify_os_error(e, path) from e

    return relative


def find_index(directory: str, candidates: Sequence[str] = INDEX_CANDIDATES) -> str:
    """Locate the index document of a directory.

    Candidates are tried in order; the first one that resolves wins.

    Raises:
        NotFound: No candidate resolves
        InternalError: The first resolving candidate is a directory
    """
    for candidate in candidates:
        candidate_path = os.path.join(directory, candidate)
        logger.debug(f"Find index: {candidate_path}")
        try:
            index = resolve_symlinks(candidate_path)
        except RequestError as e:
            logger.debug(f"Skipping index candidate: {e.detail}")
            continue

        if os.path.isdir(index):
            raise InternalError(f"{index}: found directory looking for index")
        return index

    raise NotFound(f"{directory}: no index found")
