"""Configuration management for docserver.

Supports TOML configuration format with auto-discovery.
"""

import os
import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "docserver.toml"

DEFAULT_ERROR_MESSAGES: dict[int, str] = {
    403: "Forbidden",
    404: "Not found",
    500: "Internal Server Error",
}


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(frozen=True)
class DocsConfig:
    """Document root configuration.

    ``root`` is absolute and has symlinks resolved; ``filters`` are compiled.
    """

    root: Path = field(default_factory=lambda: Path(os.path.realpath(".")))
    chroot: bool = False
    filters: tuple[re.Pattern[str], ...] = ()


@dataclass(frozen=True)
class TemplatesConfig:
    """Template file configuration. None selects the built-in default."""

    page: Path | None = None
    error: Path | None = None


@dataclass(frozen=True)
class ErrorsConfig:
    """Short messages shown to clients per HTTP status."""

    messages: dict[int, str] = field(default_factory=lambda: dict(DEFAULT_ERROR_MESSAGES))

    def message_for(self, status: int) -> str:
        return self.messages.get(status) or DEFAULT_ERROR_MESSAGES.get(status, "Error")


@dataclass(frozen=True)
class CliSettings:
    """Overrides collected from the command line. None leaves config as is."""

    host: str | None = None
    port: int | None = None
    root: Path | None = None
    chroot: bool | None = None
    filters: tuple[str, ...] = ()
    page_template: Path | None = None
    error_template: Path | None = None


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    server: ServerConfig
    docs: DocsConfig
    templates: TemplatesConfig
    errors: ErrorsConfig
    config_path: Path | None = None

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        cli_settings: CliSettings | None = None,
    ) -> "Config":
        """Load configuration from file and apply CLI overrides.

        If config_path is provided, loads from that file.
        Otherwise, searches for docserver.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file
            cli_settings: Optional command line overrides

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            config = cls._load_from_file(config_path)
        else:
            discovered_path = cls._discover_config()
            if discovered_path is None:
                config = cls._default()
            else:
                config = cls._load_from_file(discovered_path)

        if cli_settings is None:
            return config

        return config.with_overrides(
            host=cli_settings.host,
            port=cli_settings.port,
            root=cli_settings.root,
            chroot=cli_settings.chroot,
            extra_filters=cli_settings.filters,
            page_template=cli_settings.page_template,
            error_template=cli_settings.error_template,
        )

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        return cls(
            server=ServerConfig(),
            docs=DocsConfig(),
            templates=TemplatesConfig(),
            errors=ErrorsConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            docs=cls._parse_docs(data.get("docs"), config_dir),
            templates=cls._parse_templates(data.get("templates"), config_dir),
            errors=cls._parse_errors(data.get("errors")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section.

        Args:
            data: Raw server section data

        Returns:
            ServerConfig instance
        """
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8000)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_docs(cls, data: object, config_dir: Path) -> DocsConfig:
        """Parse docs configuration section.

        Args:
            data: Raw docs section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            DocsConfig instance
        """
        if data is None:
            return DocsConfig(root=_real_path(config_dir))

        if not isinstance(data, dict):
            raise ValueError("docs section must be a dictionary")

        root = data.get("root", ".")
        if not isinstance(root, str):
            raise ValueError("docs.root must be a string")

        chroot = data.get("chroot", False)
        if not isinstance(chroot, bool):
            raise ValueError("docs.chroot must be a boolean")

        filters_raw = data.get("filters", [])
        if not isinstance(filters_raw, list):
            raise ValueError("docs.filters must be a list")
        for item in filters_raw:
            if not isinstance(item, str):
                raise ValueError("docs.filters items must be strings")

        return DocsConfig(
            root=_real_path(config_dir / root),
            chroot=chroot,
            filters=compile_filters(filters_raw),
        )

    @classmethod
    def _parse_templates(cls, data: object, config_dir: Path) -> TemplatesConfig:
        """Parse templates configuration section.

        Args:
            data: Raw templates section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            TemplatesConfig instance
        """
        if data is None:
            return TemplatesConfig()

        if not isinstance(data, dict):
            raise ValueError("templates section must be a dictionary")

        paths: dict[str, Path | None] = {}
        for name in ("page", "error"):
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"templates.{name} must be a string")
            paths[name] = config_dir / value if value is not None else None

        return TemplatesConfig(page=paths["page"], error=paths["error"])

    @classmethod
    def _parse_errors(cls, data: object) -> ErrorsConfig:
        """Parse errors configuration section.

        Keys are HTTP status codes, values short messages:

            [errors]
            404 = "Nothing here"
        """
        if data is None:
            return ErrorsConfig()

        if not isinstance(data, dict):
            raise ValueError("errors section must be a dictionary")

        messages = dict(DEFAULT_ERROR_MESSAGES)
        for key, value in data.items():
            if not key.isdigit():
                raise ValueError(f"errors.{key} must be an HTTP status code")
            if not isinstance(value, str):
                raise ValueError(f"errors.{key} must be a string")
            messages[int(key)] = value

        return ErrorsConfig(messages=messages)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        root: Path | None = None,
        chroot: bool | None = None,
        extra_filters: tuple[str, ...] | list[str] = (),
        page_template: Path | None = None,
        error_template: Path | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. Extra filters are
        appended to the configured ones. The original Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            root: Override docs.root
            chroot: Override docs.chroot
            extra_filters: Additional filter patterns
            page_template: Override templates.page
            error_template: Override templates.error

        Returns:
            New Config instance with overrides applied

        Raises:
            ValueError: If a filter pattern is invalid
        """
        server = replace(
            self.server,
            host=host if host is not None else self.server.host,
            port=port if port is not None else self.server.port,
        )

        docs = replace(
            self.docs,
            root=_real_path(root) if root is not None else self.docs.root,
            chroot=chroot if chroot is not None else self.docs.chroot,
            filters=self.docs.filters + compile_filters(extra_filters),
        )

        templates = replace(
            self.templates,
            page=page_template if page_template is not None else self.templates.page,
            error=error_template if error_template is not None else self.templates.error,
        )

        return replace(self, server=server, docs=docs, templates=templates)

    def with_root(self, root: Path) -> "Config":
        """Return a copy rooted at ``root`` as given, without resolving it."""
        return replace(self, docs=replace(self.docs, root=root))


def compile_filters(patterns: tuple[str, ...] | list[str]) -> tuple[re.Pattern[str], ...]:
    """Compile filter regular expressions.

    Raises:
        ValueError: If a pattern is not a valid regular expression
    """
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ValueError(f"Invalid filter {pattern!r}: {e}") from e
    return tuple(compiled)


def parse_addr(addr: str) -> tuple[str | None, int]:
    """Split a ``host:port`` listen address.

    An empty host (":8000") means the configured default.

    Raises:
        ValueError: If the port is missing or not a number
    """
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address {addr!r}, expected host:port")
    return (host.strip("[]") or None), int(port)


def _real_path(path: Path) -> Path:
    return Path(os.path.realpath(path))
