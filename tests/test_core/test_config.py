"""
Тесты загрузчика конфигурации.
"""

import pytest

from component_inventory.config import Config, ConfigSection, load_config
from component_inventory.core.exceptions import ConfigError


@pytest.fixture
def clean_env(monkeypatch):
    """Убирает переменные окружения, влияющие на конфиг."""
    for name in ("FLEETDB_URL", "FLEETDB_TOKEN", "CIS_FLEETDB_BIOS_CONFIG_NS"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
class TestConfigSection:
    """Доступ через точку."""

    def test_nested_access(self):
        section = ConfigSection({"fleetdb": {"url": "http://x/"}})
        assert section.fleetdb.url == "http://x/"

    def test_missing_is_none(self):
        assert ConfigSection({}).missing is None

    def test_get_default(self):
        assert ConfigSection({}).get("timeout", 30) == 30


@pytest.mark.unit
class TestConfig:
    """Порядок: defaults → YAML → env."""

    def test_yaml_overrides_defaults(self, tmp_path, clean_env):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "fleetdb:\n  url: https://fleetdb.example.com/\n"
            "inventory:\n  app_kind: inband\n",
            encoding="utf-8",
        )
        config = Config()
        config.reload(str(config_file))

        assert config.fleetdb.url == "https://fleetdb.example.com/"
        assert config.inventory.app_kind == "inband"
        # Значения не из файла остаются по умолчанию
        assert config.fleetdb.timeout == 30

    def test_env_overrides_yaml(self, tmp_path, clean_env, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("fleetdb:\n  url: https://from-yaml/\n", encoding="utf-8")
        monkeypatch.setenv("FLEETDB_URL", "https://from-env/")
        monkeypatch.setenv("CIS_FLEETDB_BIOS_CONFIG_NS", "custom.ns")

        config = Config()
        config.reload(str(config_file))

        assert config.fleetdb.url == "https://from-env/"
        assert config.fleetdb.bios_config_ns == "custom.ns"

    def test_broken_yaml_ignored(self, tmp_path, clean_env):
        """Битый YAML не ломает загрузку: остаются значения по умолчанию."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("fleetdb: [unclosed\n", encoding="utf-8")

        config = Config()
        config.reload(str(config_file))

        assert config.inventory.app_kind == "outofband"

    def test_validate(self, tmp_path, clean_env):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("inventory:\n  component_slugs: [Drive]\n", encoding="utf-8")

        app_config = load_config(str(config_file)).validate()
        assert app_config.inventory.component_slugs == ["drive"]

    def test_validate_error(self, tmp_path, clean_env):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("inventory:\n  app_kind: sideband\n", encoding="utf-8")

        config = Config()
        config.reload(str(config_file))
        with pytest.raises(ConfigError):
            config.validate()
