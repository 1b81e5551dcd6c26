"""Shared test fixtures."""

import os
from pathlib import Path

import pytest
from docserver.config import Config, DocsConfig, ErrorsConfig, ServerConfig, TemplatesConfig


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """Create an empty document root.

    Returned with symlinks resolved so it compares equal to the root the
    router works with.
    """
    root = tmp_path / "docs"
    root.mkdir(exist_ok=True)
    return Path(os.path.realpath(root))


@pytest.fixture
def test_config(docs_root: Path) -> Config:
    """Create a test configuration serving docs_root without filters."""
    return Config(
        server=ServerConfig(),
        docs=DocsConfig(root=docs_root),
        templates=TemplatesConfig(),
        errors=ErrorsConfig(),
    )

