"""Unit tests for config CLI commands.

Tests for the spm config show, path and init commands.
"""

from pathlib import Path

from spm.cli.main import app
from spm.core.config import load_config
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigPath:
    """Tests for spm config path command."""

    def test_prints_path(self, xdg_home: Path) -> None:
        """Config path prints the XDG config file location."""
        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert result.stdout.strip() == str(xdg_home / "config" / "spm" / "config.toml")


class TestConfigShow:
    """Tests for spm config show command."""

    def test_show_defaults(self, xdg_home: Path) -> None:
        """Without a config file the defaults are shown."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0, result.output
        assert "defaults (no config file)" in result.output
        assert 'destination = "/"' in result.output
        assert "[colors]" in result.output

    def test_show_invalid_config(self, xdg_home: Path) -> None:
        """An invalid config file is reported."""
        config = xdg_home / "config" / "spm" / "config.toml"
        config.parent.mkdir(parents=True)
        config.write_text('prefix = "relative"\n')

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "Invalid config content" in " ".join(result.output.split())


class TestConfigInit:
    """Tests for spm config init command."""

    def test_init_creates_file(self, xdg_home: Path) -> None:
        """Config init writes a loadable default config."""
        result = runner.invoke(app, ["config", "init"])

        path = xdg_home / "config" / "spm" / "config.toml"
        assert result.exit_code == 0, result.output
        assert path.exists()
        assert load_config(path).output == "package.spk"

    def test_init_refuses_overwrite(self, xdg_home: Path) -> None:
        """Config init does not replace an existing file without --force."""
        path = xdg_home / "config" / "spm" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text('output = "mine.spk"\n')

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "Config already exists" in result.output
        assert load_config(path).output == "mine.spk"

    def test_init_force(self, xdg_home: Path) -> None:
        """Config init --force replaces an existing file."""
        path = xdg_home / "config" / "spm" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text('output = "mine.spk"\n')

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0, result.output
        assert load_config(path).output == "package.spk"
