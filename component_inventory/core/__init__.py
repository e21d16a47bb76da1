"""
Core модули Component Inventory.

- models: Component, ServerRecord и вложенные данные
- domain: нормализация, атрибуты, сверка, конвертация
- Structured Logging: JSON/Human-readable логирование
- exceptions: иерархия ошибок
- constants: namespace-ы FleetDB и slug-и типов компонентов
"""

from .logging import (
    get_logger,
    setup_logging_from_config,
    StructuredLogger,
    JSONFormatter,
    HumanFormatter,
    OperationLog,
    LogConfig,
    RotationType,
)
from .exceptions import (
    ComponentInventoryError,
    ConfigError,
    ComponentSlugsEmptyError,
    FleetDBError,
    FleetDBConnectionError,
    FleetDBAPIError,
    format_error_for_log,
    is_retryable,
)
from .models import (
    Component,
    ComponentStatus,
    Firmware,
    ServerRecord,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging_from_config",
    "StructuredLogger",
    "JSONFormatter",
    "HumanFormatter",
    "OperationLog",
    "LogConfig",
    "RotationType",
    # Exceptions
    "ComponentInventoryError",
    "ConfigError",
    "ComponentSlugsEmptyError",
    "FleetDBError",
    "FleetDBConnectionError",
    "FleetDBAPIError",
    "format_error_for_log",
    "is_retryable",
    # Models
    "Component",
    "ComponentStatus",
    "Firmware",
    "ServerRecord",
]
