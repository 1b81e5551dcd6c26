"""Tests for server module."""

from pathlib import Path

import pytest
from docserver import server
from docserver.app_keys import errors_key, renderer_key, router_key, templates_key
from docserver.config import Config
from docserver.core.templates import PageTemplates
from docserver.server import create_app, enter_chroot, run_server


class TestCreateApp:
    """Tests for create_app()."""

    def test__valid_config__returns_configured_app(self, test_config: Config) -> None:
        """Create app with valid configuration."""
        app = create_app(test_config)

        assert router_key in app
        assert renderer_key in app
        assert templates_key in app
        assert app[router_key].root == str(test_config.docs.root)
        assert app[errors_key] is test_config.errors

    def test__filters__passed_to_router(self, test_config: Config) -> None:
        config = test_config.with_overrides(extra_filters=["secret", "draft"])

        app = create_app(config)

        assert [p.pattern for p in app[router_key].filters] == ["secret", "draft"]

    def test__explicit_templates__used(self, test_config: Config) -> None:
        templates = PageTemplates.load()

        app = create_app(test_config, templates=templates)

        assert app[templates_key] is templates

    def test__missing_template_file__raises(self, test_config: Config, tmp_path: Path) -> None:
        config = test_config.with_overrides(page_template=tmp_path / "missing.html")

        with pytest.raises(OSError):
            create_app(config)


class TestChroot:
    """Tests for enter_chroot()."""

    def test__enter_chroot__roots_config_at_slash(
        self,
        test_config: Config,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        calls: list[tuple[str, object]] = []
        monkeypatch.setattr(server.os, "chroot", lambda path: calls.append(("chroot", path)))
        monkeypatch.setattr(server.os, "chdir", lambda path: calls.append(("chdir", path)))

        config = enter_chroot(test_config)

        assert calls == [("chroot", test_config.docs.root), ("chdir", "/")]
        assert config.docs.root == Path("/")

    def test__run_server__chroots_before_serving(
        self,
        test_config: Config,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """The app is built for the chrooted root."""
        config = test_config.with_overrides(chroot=True)
        served: list[object] = []
        monkeypatch.setattr(server.os, "chroot", lambda path: None)
        monkeypatch.setattr(server.os, "chdir", lambda path: None)
        monkeypatch.setattr(server.web, "run_app", lambda app, **kwargs: served.append(app))

        run_server(config)

        assert len(served) == 1
        assert served[0][router_key].root == "/"  # type: ignore[index]

    def test__run_server__without_chroot__serves_configured_root(
        self,
        test_config: Config,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        served: list[object] = []
        monkeypatch.setattr(server.web, "run_app", lambda app, **kwargs: served.append(app))

        run_server(test_config)

        assert served[0][router_key].root == str(test_config.docs.root)  # type: ignore[index]
