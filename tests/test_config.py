"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from meetpoll.config import AppConfig, LimitsConfig


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()

        assert config.data_file == Path("data.json")
        assert config.timezone == "UTC"
        assert config.session_ttl().in_minutes() == 60
        assert config.limits.code_max_length == 32
        assert config.admin_password is None

    def test_load_from_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "data_file: rooms.json\n"
            "timezone: Europe/Berlin\n"
            "bcrypt_rounds: 4\n"
            "log_level: debug\n"
            "limits:\n"
            "  name_max_length: 10\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_path)

        assert config.timezone == "Europe/Berlin"
        assert config.bcrypt_rounds == 4
        assert config.log_level == "DEBUG"
        assert config.limits.name_max_length == 10
        assert config.resolve_data_file(tmp_path) == tmp_path / "rooms.json"

    def test_absolute_data_file_is_kept(self, tmp_path):
        config = AppConfig(data_file=tmp_path / "abs.json")

        assert config.resolve_data_file(Path("/elsewhere")) == tmp_path / "abs.json"

    def test_empty_yaml_gives_defaults(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("", encoding="utf-8")

        assert AppConfig.load_from_yaml(config_path) == AppConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("limits: [unclosed", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_path)

    def test_root_must_be_mapping(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)

    @pytest.mark.parametrize(
        "field, value",
        [
            ("timezone", "Mars/Olympus_Mons"),
            ("session_ttl_minutes", 0),
            ("bcrypt_rounds", 3),
            ("log_level", "LOUD"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValueError):
            AppConfig(**{field: value})

    def test_admin_password_from_environment(self, monkeypatch):
        monkeypatch.setenv("MEETPOLL_ADMIN_PASSWORD", "from-env")

        assert AppConfig(admin_password="from-file").admin_password == "from-env"


class TestLimitsConfig:
    """Tests for LimitsConfig."""

    def test_limits_must_be_positive(self):
        with pytest.raises(ValueError):
            LimitsConfig(name_max_length=0)

    def test_password_window_must_not_be_empty(self):
        with pytest.raises(ValueError):
            LimitsConfig(password_min_length=20, password_max_length=10)
