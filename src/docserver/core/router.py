"""Request routing.

Turns one request path into a terminal outcome: a file to serve (rendered
or raw), a redirect, or a raised RequestError.
"""

import logging
import mimetypes
import os
import re
import stat
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import quote

from docserver.core.errors import classify_os_error
from docserver.core.paths import (
    INDEX_CANDIDATES,
    canonicalize,
    check_access,
    find_index,
    relative_to_root,
    resolve_symlinks,
)
from docserver.core.types import URLPath

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = ".md"


@dataclass(frozen=True)
class ServeMarkdown:
    """Render the file as Markdown inside the page template."""

    path: str
    title: str


@dataclass(frozen=True)
class ServeRaw:
    """Send the file bytes verbatim."""

    path: str
    content_type: str | None


@dataclass(frozen=True)
class Redirect:
    """Redirect the client to a canonical URL."""

    location: URLPath


RequestOutcome = ServeMarkdown | ServeRaw | Redirect


class DocumentRouter:
    """Resolves request paths against a document root.

    Holds only read-only state; every call re-walks the filesystem.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        filters: Sequence[re.Pattern[str]] = (),
        *,
        index_candidates: Sequence[str] = INDEX_CANDIDATES,
    ) -> None:
        """Initialize router.

        Args:
            root: Document root; made absolute and real here
            filters: Compiled patterns for paths to report as missing
            index_candidates: Index file names tried in order for directories
        """
        self._root = os.path.realpath(os.fspath(root))
        self._filters = tuple(filters)
        self._index_candidates = tuple(index_candidates)

    @property
    def root(self) -> str:
        """Absolute document root."""
        return self._root

    @property
    def filters(self) -> tuple[re.Pattern[str], ...]:
        """Active request filters."""
        return self._filters

    def resolve(self, request_path: str, *, raw: bool = False) -> RequestOutcome:
        """Resolve a request path to an outcome.

        Args:
            request_path: URL path from the request
            raw: Serve Markdown files as raw bytes

        Returns:
            ServeMarkdown, ServeRaw or Redirect

        Raises:
            RequestError: Resolution failed
        """
        canonical = canonicalize(self._root, request_path)
        path = resolve_symlinks(canonical)

        try:
            st = os.stat(path)
        except (OSError, ValueError) as e:
            raise classify_os_error(e, path) from e

        if stat.S_ISDIR(st.st_mode):
            if not request_path.endswith("/"):
                # Keeps relative links in the rendered page pointing inside the directory
                return Redirect(self._directory_url(canonical))
            path = find_index(path, self._index_candidates)

        relative = check_access(path, self._root, self._filters)
        logger.debug(f"Resolved: {path}")
        return self._dispatch(path, relative, raw=raw)

    def _directory_url(self, canonical: str) -> URLPath:
        relative = relative_to_root(canonical, self._root)
        if relative == ".":
            return URLPath("/")
        return URLPath("/" + quote(relative.replace(os.sep, "/")) + "/")

    def _dispatch(self, path: str, relative: str, *, raw: bool) -> RequestOutcome:
        _, ext = os.path.splitext(path)
        if ext == MARKDOWN_EXTENSION and not raw:
            return ServeMarkdown(path=path, title=relative.replace(os.sep, "/"))
        content_type, _ = mimetypes.guess_type(path, strict=False)
        return ServeRaw(path=path, content_type=content_type)
