"""
Загрузчик конфигурации из config.yaml.

Порядок: значения по умолчанию → YAML → переменные окружения.

Предоставляет доступ к настройкам через точку:
    config.fleetdb.url
    config.inventory.component_slugs
    config.logging.level
"""

import os
import logging
from typing import Any, Optional

import yaml

from .core.config_schema import AppConfig, validate_config
from .core.constants import BIOS_CONFIG_NS_ENV, DEFAULT_COMPONENT_SLUGS

logger = logging.getLogger(__name__)

# Путь к файлу конфигурации
CONFIG_FILE = os.path.join(os.path.dirname(__file__), "config.yaml")


class ConfigSection:
    """Секция конфигурации с доступом через точку."""

    def __init__(self, data: Optional[dict] = None):
        self._data = data or {}

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
        else:
            self._data[name] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Получить значение с дефолтом."""
        return self._data.get(key, default)

    def __repr__(self) -> str:
        return f"ConfigSection({self._data})"


class Config:
    """
    Главный класс конфигурации.

    Пример:
        config.fleetdb.url                  # "http://localhost:8000/"
        config.inventory.app_kind           # "outofband"
        config.inventory.component_slugs    # ["bios", "bmc", ...]
    """

    def __init__(self):
        self._data = self._get_defaults()
        self._load_yaml()
        self._load_env()

    def _get_defaults(self) -> dict:
        """Значения по умолчанию."""
        return {
            "fleetdb": {
                "url": os.getenv("FLEETDB_URL", "http://localhost:8000/"),
                "token": os.getenv("FLEETDB_TOKEN", ""),
                "verify_ssl": True,
                "timeout": 30,
                "max_retries": 2,
                "retry_delay": 5,
                "bios_config_ns": None,
            },
            "inventory": {
                "app_kind": "outofband",
                "component_slugs": list(DEFAULT_COMPONENT_SLUGS),
                "load_component_types": False,
                "dry_run": False,
            },
            "logging": {
                "level": "INFO",
                "json_format": False,
                "console": True,
                "file_path": None,
            },
            "debug": False,
        }

    def _load_yaml(self, config_file: Optional[str] = None) -> None:
        """Загружает настройки из YAML файла."""
        if not config_file:
            search_paths = [
                CONFIG_FILE,
                "config.yaml",
                "config.yml",
                ".component_inventory.yaml",
            ]
            for path in search_paths:
                if os.path.exists(path):
                    config_file = path
                    break

        if not config_file or not os.path.exists(config_file):
            return

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ошибка чтения {config_file}: {e}")
            return

        self._merge_dict(self._data, yaml_data)
        logger.debug(f"Конфигурация загружена из {config_file}")

    def _load_env(self) -> None:
        """Загружает настройки из переменных окружения."""
        if os.getenv("FLEETDB_URL"):
            self._data["fleetdb"]["url"] = os.getenv("FLEETDB_URL")
        if os.getenv("FLEETDB_TOKEN"):
            self._data["fleetdb"]["token"] = os.getenv("FLEETDB_TOKEN")
        if os.getenv(BIOS_CONFIG_NS_ENV):
            self._data["fleetdb"]["bios_config_ns"] = os.getenv(BIOS_CONFIG_NS_ENV)

    def _merge_dict(self, base: dict, override: dict) -> None:
        """Рекурсивно мержит словари."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_dict(base[key], value)
            else:
                base[key] = value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def validate(self) -> AppConfig:
        """
        Валидирует текущие настройки.

        Returns:
            AppConfig: Валидированная конфигурация

        Raises:
            ConfigError: При ошибке валидации
        """
        return validate_config(self._data)

    def reload(self, config_file: Optional[str] = None) -> None:
        """Перезагружает конфигурацию."""
        self._data = self._get_defaults()
        self._load_yaml(config_file)
        self._load_env()


# Глобальный экземпляр
config = Config()


def load_config(config_file: Optional[str] = None) -> Config:
    """
    Загружает конфигурацию из файла.

    Args:
        config_file: Путь к YAML файлу (опционально)

    Returns:
        Config: Объект конфигурации
    """
    config.reload(config_file)
    return config
