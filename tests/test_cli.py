"""
Tests for the Typer command-line interface.
"""

from typer.testing import CliRunner

from calendaroverlay.cli.app import app

runner = CliRunner()

CONFIG_YAML = """
timezone_offset_minutes: 60
time_type: "24h"
events:
  - name: teamweek
    type: specific_dates
    duration: 8
    dates:
      - "2024-11-25T09:00:00+01:00"
      - "2024-11-26T09:00:00+01:00"
      - "2024-11-27T09:00:00+01:00"
"""


def _write_config(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(CONFIG_YAML, encoding="utf-8")
    return config_path


def test_overlay_with_mock_data(tmp_path):
    """The overlay command renders one table per calendar account."""
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["overlay", "teamweek", "--mock", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert "alex@example.com_google" in result.output
    assert "sam@example.com_google" in result.output


def test_overlay_unknown_event_fails(tmp_path):
    """Unknown events exit with an error."""
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["overlay", "nope", "--mock", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "Unknown event" in result.output


def test_missing_config_fails(tmp_path):
    """A missing config file exits with an error."""
    result = runner.invoke(app, ["list-events", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


def test_list_events(tmp_path):
    """Configured events are listed."""
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["list-events", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "teamweek" in result.output


def test_fetch_range(tmp_path):
    """The fetch range of a specific-date event is printed."""
    config_path = _write_config(tmp_path)

    result = runner.invoke(app, ["fetch-range", "teamweek", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "2024-11-25T09:00:00+01:00" in result.output
    assert "2024-11-29T09:00:00+01:00" in result.output


def test_version():
    """The version command prints the package version."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "calendaroverlay" in result.output
