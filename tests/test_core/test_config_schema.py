"""
Тесты Pydantic схем конфигурации.
"""

import pytest

from component_inventory.core.config_schema import (
    AppConfig,
    get_default_config,
    validate_config,
)
from component_inventory.core.constants import DEFAULT_COMPONENT_SLUGS
from component_inventory.core.exceptions import ConfigError


@pytest.mark.unit
class TestValidateConfig:
    """Валидация config.yaml."""

    def test_defaults(self):
        config = get_default_config()
        assert isinstance(config, AppConfig)
        assert config.inventory.app_kind == "outofband"
        assert config.inventory.component_slugs == DEFAULT_COMPONENT_SLUGS
        assert config.fleetdb.timeout == 30

    def test_url_trailing_slash(self):
        config = validate_config({"fleetdb": {"url": "https://fleetdb.example.com"}})
        assert config.fleetdb.url == "https://fleetdb.example.com/"

    def test_invalid_url(self):
        with pytest.raises(ConfigError) as exc_info:
            validate_config({"fleetdb": {"url": "fleetdb.example.com"}})
        assert "fleetdb.url" in str(exc_info.value)

    def test_invalid_app_kind(self):
        with pytest.raises(ConfigError):
            validate_config({"inventory": {"app_kind": "sideband"}})

    def test_slugs_normalized(self):
        """Display-имена и регистр приводятся к slug, пустые убираются."""
        config = validate_config({"inventory": {"component_slugs": ["Drive", "PhysicalMemory", " ", "CPU"]}})
        assert config.inventory.component_slugs == ["drive", "physicalmemory", "cpu"]

    def test_timeout_bounds(self):
        with pytest.raises(ConfigError):
            validate_config({"fleetdb": {"timeout": 0}})

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError):
            validate_config({"logging": {"level": "VERBOSE"}})
