"""Tests for CLI commands."""

from pathlib import Path

import pytest
from click.testing import CliRunner
from reted import cli as cli_module
from reted.cli import cli
from reted.core.cache import TalkCache


class TestCacheClearCommand:
    """Tests for the cache clear command."""

    def test__clears_entries(self, tmp_path: Path) -> None:
        cache_dir = tmp_path / "cache"
        cache = TalkCache(cache_dir)
        cache.set("talks", "foo-bar", {"slug": "foo-bar"})

        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            args = ["cache", "clear", "--cache-dir", str(cache_dir)]
            result = runner.invoke(cli, args)

        assert result.exit_code == 0
        assert f"Cleared cache in {cache_dir}" in result.output
        assert cache.get("talks", "foo-bar") is None

    def test__invalid_config__exits_with_error(self, tmp_path: Path) -> None:
        """Report configuration errors instead of a traceback."""
        config_file = tmp_path / "reted.toml"
        config_file.write_text('[server]\nport = "eighty"\n')

        runner = CliRunner()
        result = runner.invoke(cli, ["cache", "clear", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "server.port must be an integer" in result.output


class TestBrowseCommand:
    """Tests for the browse command."""

    @pytest.fixture
    def calls(self, monkeypatch: pytest.MonkeyPatch) -> list[tuple]:
        recorded: list[tuple] = []

        async def fake_browse(server_url, locations, *, random_talk):
            recorded.append((server_url, locations, random_talk))
            return "Foo Bar | ReTed", "Foo Bar\nby Ada Lovelace", "/talks/foo-bar"

        monkeypatch.setattr(cli_module, "_browse", fake_browse)
        return recorded

    def test__prints_final_page(self, calls: list[tuple]) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli, ["browse", "/", "/talks/foo-bar", "-s", "http://localhost:9000"]
        )

        assert result.exit_code == 0
        assert calls == [("http://localhost:9000", ["/", "/talks/foo-bar"], False)]
        assert "Foo Bar | ReTed" in result.output
        assert "by Ada Lovelace" in result.output

    def test__defaults_to_home_and_config_server(
        self, tmp_path: Path, calls: list[tuple]
    ) -> None:
        config_file = tmp_path / "reted.toml"
        config_file.write_text('[server]\nhost = "0.0.0.0"\nport = 9090\n')

        runner = CliRunner()
        result = runner.invoke(cli, ["browse", "--random", "-c", str(config_file)])

        assert result.exit_code == 0
        assert calls == [("http://0.0.0.0:9090", ["/"], True)]


class TestServeCommand:
    """Tests for the serve command."""

    def test__runs_server_with_overrides(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        started = []
        monkeypatch.setattr("reted.server.run_server", started.append)
        monkeypatch.delenv("RETED_API_KEY", raising=False)
        config_file = tmp_path / "reted.toml"
        config_file.write_text("")

        runner = CliRunner()
        result = runner.invoke(
            cli, ["serve", "-c", str(config_file), "-p", "9999", "--no-cache"]
        )

        assert result.exit_code == 0
        assert "Starting server on 127.0.0.1:9999" in result.output
        assert "Warning: no upstream API key configured" in result.output
        assert "Cache: disabled" in result.output
        assert started[0].server.port == 9999
        assert started[0].cache.enabled is False
