"""
Tests for the command line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from meetpoll.cli.app import app

PASSWORD = "correct-horse"

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "data_file: data.json\n"
        "timezone: Europe/Berlin\n"
        "bcrypt_rounds: 4\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_file, *args):
    return runner.invoke(app, [*args, "--config", str(config_file)])


def _create_team(config_file):
    result = _invoke(config_file, "create", "team", "--password", PASSWORD)
    assert result.exit_code == 0, result.output


class TestCli:
    """Tests for the typer commands."""

    def test_create_writes_snapshot(self, config_file):
        _create_team(config_file)

        document = json.loads((config_file.parent / "data.json").read_text(encoding="utf-8"))
        assert [room["code"] for room in document["rooms"]] == ["team"]
        assert document["rooms"][0]["credential"] != PASSWORD

    def test_create_twice_fails(self, config_file):
        _create_team(config_file)

        result = _invoke(config_file, "create", "team", "--password", PASSWORD)

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_create_short_password(self, config_file):
        result = _invoke(config_file, "create", "team", "--password", "short")

        assert result.exit_code == 1
        assert "at least 8" in result.output

    def test_join(self, config_file):
        _create_team(config_file)

        assert _invoke(config_file, "join", "team").exit_code == 0
        assert _invoke(config_file, "join", "nobody").exit_code == 1

    def test_submit_and_view(self, config_file):
        _create_team(config_file)
        for name, event in [
            ("Ann", "2024-11-25T09:00/2024-11-25T10:00"),
            ("Ben", "2024-11-25T09:30/2024-11-25T10:30"),
            ("", "2024-11-25T09:45/2024-11-25T10:15"),
        ]:
            result = _invoke(
                config_file, "submit", "team", "--password", PASSWORD, "--name", name, "-e", event
            )
            assert result.exit_code == 0, result.output

        result = _invoke(config_file, "view", "team", "--password", PASSWORD)

        assert result.exit_code == 0, result.output
        assert "Optimal time" in result.output
        assert "09:45 - 10:00" in result.output
        assert "Ann's Submission" in result.output
        assert "Anonymous Submission" in result.output

    def test_submit_wrong_password(self, config_file):
        _create_team(config_file)

        result = _invoke(
            config_file, "submit", "team", "--password", "wrong-password",
            "-e", "2024-11-25T09:00/2024-11-25T10:00",
        )

        assert result.exit_code == 1
        assert "Invalid password" in result.output

    def test_submit_reversed_event(self, config_file):
        _create_team(config_file)

        result = _invoke(
            config_file, "submit", "team", "--password", PASSWORD,
            "-e", "2024-11-25T10:00/2024-11-25T09:00",
        )

        assert result.exit_code == 1

    def test_submit_malformed_event(self, config_file):
        _create_team(config_file)

        result = _invoke(
            config_file, "submit", "team", "--password", PASSWORD, "-e", "2024-11-25T10:00",
        )

        assert result.exit_code == 2

    def test_view_missing_room(self, config_file):
        result = _invoke(config_file, "view", "nobody", "--password", PASSWORD)

        assert result.exit_code == 1
        assert "doesn't exist" in result.output

    def test_view_empty_room(self, config_file):
        _create_team(config_file)

        result = _invoke(config_file, "view", "team", "--password", PASSWORD)

        assert result.exit_code == 0
        assert "No availability submitted yet" in result.output

    def test_rooms(self, config_file):
        _create_team(config_file)

        result = _invoke(config_file, "rooms")

        assert result.exit_code == 0
        assert "team" in result.output

    def test_corrupt_snapshot(self, config_file):
        (config_file.parent / "data.json").write_text("{broken", encoding="utf-8")

        result = _invoke(config_file, "rooms")

        assert result.exit_code == 1

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["rooms", "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "meetpoll" in result.output
