"""
Типизированные исключения для Component Inventory.

Иерархия:
    ComponentInventoryError (базовый)
    ├── ConfigError (конфигурация)
    │   └── ComponentSlugsEmptyError (пустой справочник типов компонентов)
    └── FleetDBError (FleetDB API)
        ├── FleetDBConnectionError (подключение к API)
        └── FleetDBAPIError (ошибка API)

Аномалии данных (пустые поля, неизвестные типы, битые атрибуты)
исключениями не являются: они обрабатываются fallback-ами и логируются.

Пример использования:
    from component_inventory.core.exceptions import ComponentSlugsEmptyError

    try:
        record = converter.to_server_record(server_id, facility, device)
    except ComponentSlugsEmptyError as e:
        logger.error(f"Справочник типов не загружен: {e}")
"""

from typing import Optional


class ComponentInventoryError(Exception):
    """
    Базовое исключение для всех ошибок Component Inventory.

    Attributes:
        message: Описание ошибки
        details: Дополнительные детали (dict)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Сериализация для логов/отчётов."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# === Config Errors ===

class ConfigError(ComponentInventoryError):
    """
    Ошибка конфигурации.

    Attributes:
        config_file: Путь к файлу конфигурации
        key: Ключ конфигурации с ошибкой

    Пример:
        raise ConfigError("Missing required field", config_file="config.yaml", key="fleetdb.url")
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.config_file = config_file
        self.key = key
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)


class ComponentSlugsEmptyError(ConfigError):
    """
    Справочник типов компонентов пуст.

    Единственная фатальная ошибка конвертации: без справочника
    нельзя отличить известный тип компонента от неизвестного.
    """

    def __init__(self, message: str = "Справочник типов компонентов пуст"):
        super().__init__(message, key="inventory.component_slugs")


# === FleetDB Errors ===

class FleetDBError(ComponentInventoryError):
    """
    Базовая ошибка FleetDB API.

    Attributes:
        url: URL FleetDB
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.url = url
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)


class FleetDBConnectionError(FleetDBError):
    """
    Ошибка подключения к FleetDB API.

    Пример:
        raise FleetDBConnectionError("Connection refused", url="https://fleetdb.local")
    """
    pass


class FleetDBAPIError(FleetDBError):
    """
    Ошибка при вызове FleetDB API.

    Attributes:
        status_code: HTTP код ответа
        endpoint: API endpoint

    Пример:
        raise FleetDBAPIError("Bad request", status_code=400, endpoint="/api/v1/servers/x/attributes")
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.endpoint = endpoint
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(message, url, details)


# === Utility Functions ===

def format_error_for_log(error: Exception) -> str:
    """
    Форматирует ошибку для вывода в лог.

    Args:
        error: Исключение

    Returns:
        str: Отформатированная строка ошибки
    """
    if isinstance(error, ComponentInventoryError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"


def is_retryable(error: Exception) -> bool:
    """
    Проверяет, можно ли повторить операцию после ошибки.

    Args:
        error: Исключение

    Returns:
        bool: True если можно retry
    """
    if isinstance(error, FleetDBConnectionError):
        return True
    if isinstance(error, FleetDBAPIError) and error.status_code:
        return error.status_code >= 500
    return False


__all__ = [
    "ComponentInventoryError",
    "ConfigError",
    "ComponentSlugsEmptyError",
    "FleetDBError",
    "FleetDBConnectionError",
    "FleetDBAPIError",
    "format_error_for_log",
    "is_retryable",
]
