"""Tests for the command-line entry point."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from sysdash import config as config_module
from sysdash.cli import build_config, main
from sysdash.config import MAX_REFRESH_MS
from sysdash.models import TemperatureUnit


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_user_config(tmp_path: Path, monkeypatch):
    """Keep a real ~/.config/sysdash/config.toml out of the tests."""
    monkeypatch.setattr(config_module, "_DEFAULT_PATH", tmp_path / "absent.toml")


class TestArguments:
    """Tests for flag validation before anything starts."""

    def test_rate_below_minimum_is_usage_error(self, runner: CliRunner):
        with patch("sysdash.app.SysdashApp") as app_cls:
            result = runner.invoke(main, ["--rate", "100"])

        assert result.exit_code == 2
        assert "at least 250 milliseconds" in result.output
        app_cls.assert_not_called()

    def test_rate_above_maximum_is_usage_error(self, runner: CliRunner):
        result = runner.invoke(main, ["-r", str(2**64)])

        assert result.exit_code == 2
        assert "at most" in result.output

    def test_rate_beyond_platform_wait_is_usage_error(self, runner: CliRunner):
        with patch("sysdash.app.SysdashApp") as app_cls:
            result = runner.invoke(main, ["-r", str(MAX_REFRESH_MS + 1)])

        assert result.exit_code == 2
        assert "at most" in result.output
        app_cls.assert_not_called()

    def test_rate_at_maximum_is_accepted(self):
        assert build_config(MAX_REFRESH_MS, False, None, None, None).refresh_ms == MAX_REFRESH_MS

    def test_non_integer_rate(self, runner: CliRunner):
        result = runner.invoke(main, ["-r", "soon"])
        assert result.exit_code == 2

    def test_missing_config_file(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["--config", str(tmp_path / "nope.toml")])

        assert result.exit_code == 2
        assert "config file not found" in result.output

    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "sysdash" in result.output


class TestBuildConfig:
    """Tests for merging flags over file settings."""

    def test_defaults(self):
        config = build_config(None, False, None, None, None)
        assert config.refresh_ms == 1000
        assert config.temperature_unit is TemperatureUnit.CELSIUS
        assert config.show_average_cpu is False

    def test_flags_override_file(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text('refresh_ms = 3000\ntemperature_unit = "kelvin"\n', encoding="utf-8")

        config = build_config(500, True, "fahrenheit", path, tmp_path / "x.log")

        assert config.refresh_ms == 500
        assert config.show_average_cpu is True
        assert config.temperature_unit is TemperatureUnit.FAHRENHEIT
        assert config.log_path == tmp_path / "x.log"

    def test_file_value_kept_without_flag(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text('temperature_unit = "kelvin"\nshow_average_cpu = true\n', encoding="utf-8")

        config = build_config(None, False, None, path, None)

        assert config.temperature_unit is TemperatureUnit.KELVIN
        assert config.show_average_cpu is True


class TestRun:
    """Tests for launching the dashboard."""

    def _invoke(self, runner: CliRunner, tmp_path: Path, args: list[str], return_code: int | None):
        app = MagicMock()
        app.return_code = return_code
        with (
            patch("sysdash.app.SysdashApp", return_value=app) as app_cls,
            patch("sysdash.logging.configure") as configure,
        ):
            result = runner.invoke(main, [*args, "--log-file", str(tmp_path / "sysdash.log")])
        return result, app_cls, app, configure

    def test_runs_app_with_config(self, runner: CliRunner, tmp_path: Path):
        result, app_cls, app, configure = self._invoke(runner, tmp_path, ["-f", "-a", "-r", "500"], 0)

        assert result.exit_code == 0
        config = app_cls.call_args.args[0]
        assert config.temperature_unit is TemperatureUnit.FAHRENHEIT
        assert config.show_average_cpu is True
        assert config.refresh_ms == 500
        app.run.assert_called_once()
        configure.assert_called_once_with(tmp_path / "sysdash.log", debug=False)

    def test_kelvin_flag(self, runner: CliRunner, tmp_path: Path):
        result, app_cls, _, _ = self._invoke(runner, tmp_path, ["-k"], 0)

        assert result.exit_code == 0
        assert app_cls.call_args.args[0].temperature_unit is TemperatureUnit.KELVIN

    def test_render_failure_exit_code(self, runner: CliRunner, tmp_path: Path):
        result, _, _, _ = self._invoke(runner, tmp_path, [], 1)
        assert result.exit_code == 1

    def test_debug_flag(self, runner: CliRunner, tmp_path: Path):
        _, _, _, configure = self._invoke(runner, tmp_path, ["--debug"], 0)
        configure.assert_called_once_with(tmp_path / "sysdash.log", debug=True)
