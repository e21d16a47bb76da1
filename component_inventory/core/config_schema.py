"""
Pydantic схемы для валидации config.yaml.

Валидация происходит при загрузке конфигурации.
Ошибки валидации выбрасывают ConfigError.

Пример использования:
    from component_inventory.core.config_schema import validate_config

    config_dict = yaml.safe_load(open("config.yaml"))
    validated = validate_config(config_dict)  # raises ConfigError on failure
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from .constants import DEFAULT_COMPONENT_SLUGS, normalize_slug
from .exceptions import ConfigError


class FleetDBConfig(BaseModel):
    """Настройки FleetDB."""
    url: str = "http://localhost:8000/"
    token: str = ""
    verify_ssl: bool = True
    timeout: int = Field(default=30, ge=1, le=300)
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_delay: int = Field(default=5, ge=0, le=60)
    bios_config_ns: Optional[str] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Проверяет что URL валидный."""
        if v and not v.startswith(("http://", "https://")):
            raise PydanticCustomError(
                "invalid_url",
                "FleetDB URL должен начинаться с http:// или https://",
            )
        return v.rstrip("/") + "/"


class InventoryConfig(BaseModel):
    """Настройки конвертации инвентаризации."""
    app_kind: str = Field(default="outofband", pattern="^(inband|outofband)$")
    component_slugs: List[str] = Field(default_factory=lambda: list(DEFAULT_COMPONENT_SLUGS))
    load_component_types: bool = False
    dry_run: bool = False

    @field_validator("component_slugs")
    @classmethod
    def validate_slugs(cls, v: List[str]) -> List[str]:
        """Приводит slug-и к нижнему регистру, убирает пустые."""
        return [normalize_slug(s) for s in v if s and s.strip()]


class LoggingConfig(BaseModel):
    """Настройки логирования."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: str = Field(default="size", pattern="^(size|time)$")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)  # min 1KB
    backup_count: int = Field(default=5, ge=1, le=100)
    when: str = "midnight"
    interval: int = Field(default=1, ge=1)


class AppConfig(BaseModel):
    """Полная конфигурация приложения."""
    fleetdb: FleetDBConfig = Field(default_factory=FleetDBConfig)
    inventory: InventoryConfig = Field(default_factory=InventoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = False


def validate_config(config_dict: dict) -> AppConfig:
    """
    Валидирует словарь конфигурации.

    Args:
        config_dict: Словарь из YAML

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: При ошибке валидации
    """
    try:
        return AppConfig(**config_dict)
    except Exception as e:
        # Форматируем ошибку Pydantic в читаемый вид
        error_msg = str(e)
        if hasattr(e, "errors"):
            errors = e.errors()
            if errors:
                first_error = errors[0]
                loc = ".".join(str(x) for x in first_error.get("loc", []))
                msg = first_error.get("msg", "Unknown error")
                error_msg = f"{loc}: {msg}"

        raise ConfigError(
            message=f"Ошибка валидации конфигурации: {error_msg}",
            config_file="config.yaml",
        )


def get_default_config() -> AppConfig:
    """Возвращает конфигурацию по умолчанию."""
    return AppConfig()
