"""
Structured Logging для Component Inventory.

Находки сверки и итоги синхронизации пишутся как структурированные
записи с полями server, component, operation, finding. Консоль
всегда human-readable, файл (с ротацией) в JSON или текстом.

Пример использования:
    from component_inventory.core.logging import LogConfig, get_logger, setup_logging_from_config

    setup_logging_from_config(LogConfig.from_dict({"level": "DEBUG"}))

    logger = get_logger(__name__).bind(server="a1b2")
    logger.warning("Drift прошивки", component="bios", finding="drift")

Строка JSON файла:
    {"timestamp": "2025-12-27T10:30:15.123456", "level": "WARNING",
     "message": "Drift прошивки", "logger": "component_inventory.core.domain.diff",
     "server": "a1b2", "component": "bios", "finding": "drift"}
"""

import json
import logging
import logging.handlers
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

# Атрибуты LogRecord: extra с такими ключами logging отвергает (KeyError)
LOG_RECORD_ATTRS = frozenset({
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "message", "module",
    "msecs", "msg", "name", "pathname", "process", "processName",
    "relativeCreated", "stack_info", "taskName", "thread", "threadName",
})

# Поля, которые форматтеры выводят первыми
KNOWN_FIELDS = ("server", "component", "finding", "operation")


class RotationType(str, Enum):
    """Тип ротации файла логов."""
    SIZE = "size"
    TIME = "time"
    NONE = "none"


@dataclass
class LogConfig:
    """
    Настройки логирования (секция logging в config.yaml).

    Attributes:
        level: Уровень (logging.INFO, ...)
        json_format: Формат файла: JSON (True) или текст
        console: Вывод в stderr
        file_path: Файл логов (None - без файла)
        rotation: size / time / none
        max_bytes: Размер файла для size-ротации
        backup_count: Сколько старых файлов хранить
        when: Интервал time-ротации (S, M, H, D, midnight)
        interval: Множитель интервала
    """
    level: int = logging.INFO
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: RotationType = RotationType.SIZE
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    when: str = "midnight"
    interval: int = 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogConfig":
        """Создаёт конфигурацию из словаря (уровень строкой или числом)."""
        level = data.get("level", "INFO")
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)

        defaults = cls()
        return cls(
            level=level,
            json_format=data.get("json_format", defaults.json_format),
            console=data.get("console", defaults.console),
            file_path=data.get("file_path"),
            rotation=RotationType(data.get("rotation") or RotationType.SIZE.value),
            max_bytes=data.get("max_bytes", defaults.max_bytes),
            backup_count=data.get("backup_count", defaults.backup_count),
            when=data.get("when", defaults.when),
            interval=data.get("interval", defaults.interval),
        )


def _record_extra(record: logging.LogRecord) -> Dict[str, Any]:
    """Поля extra записи: известные первыми, служебные (_*) пропускаются."""
    extra = {
        key: getattr(record, key)
        for key in KNOWN_FIELDS
        if getattr(record, key, None) is not None
    }
    for key, value in record.__dict__.items():
        if key in LOG_RECORD_ATTRS or key in extra or key.startswith("_"):
            continue
        extra[key] = value
    return extra


class JSONFormatter(logging.Formatter):
    """Одна запись - одна JSON строка: timestamp, level, message, logger + extra."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        log_data.update(_record_extra(record))
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """
    Текстовый формат для консоли.

    Формат: TIMESTAMP - LEVEL - MESSAGE (server=X, finding=Y)
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        extras = [
            f"{key}={getattr(record, key)}"
            for key in KNOWN_FIELDS
            if getattr(record, key, None)
        ]
        extra_str = f" ({', '.join(extras)})" if extras else ""
        result = f"{timestamp} - {record.levelname.ljust(8)} - {record.getMessage()}{extra_str}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


class StructuredLogger:
    """
    Логгер с именованными полями.

    Поля совпадающие с атрибутами LogRecord (created, name, ...)
    записываются с префиксом "field_".

    Example:
        logger.info("Сервер обновлён", server="a1b2", created=3)
        # record.server == "a1b2", record.field_created == 3
    """

    def __init__(self, name: str, default_extra: Optional[Dict[str, Any]] = None):
        """
        Args:
            name: Имя логгера
            default_extra: Поля добавляемые ко всем сообщениям
        """
        self._logger = logging.getLogger(name)
        self._default_extra = default_extra or {}

    @staticmethod
    def _safe_extra(fields: Dict[str, Any]) -> Dict[str, Any]:
        return {
            (f"field_{key}" if key in LOG_RECORD_ATTRS else key): value
            for key, value in fields.items()
        }

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        extra = self._safe_extra({**self._default_extra, **kwargs})
        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """
        Новый логгер с дополнительными полями по умолчанию.

        Example:
            server_logger = logger.bind(server="a1b2")
            server_logger.info("Сверка завершена")  # с полем server
        """
        return StructuredLogger(self._logger.name, default_extra={**self._default_extra, **kwargs})

    @property
    def name(self) -> str:
        return self._logger.name


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """
    Получает или создаёт StructuredLogger (кэшируется по имени).

    Args:
        name: Имя логгера (обычно __name__)
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def _file_handler(config: LogConfig) -> logging.Handler:
    """File handler с ротацией из конфигурации."""
    Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)

    if config.rotation == RotationType.SIZE:
        return logging.handlers.RotatingFileHandler(
            filename=config.file_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    if config.rotation == RotationType.TIME:
        return logging.handlers.TimedRotatingFileHandler(
            filename=config.file_path,
            when=config.when,
            interval=config.interval,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(config.file_path, encoding="utf-8")


def setup_logging_from_config(config: LogConfig) -> None:
    """
    Настраивает root логгер: заменяет все его handlers.

    Консоль всегда human-readable, файл в формате config.json_format.

    Args:
        config: LogConfig с настройками
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: List[logging.Handler] = []
    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(HumanFormatter())
        handlers.append(console_handler)
    if config.file_path:
        file_handler = _file_handler(config)
        file_handler.setFormatter(JSONFormatter() if config.json_format else HumanFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(config.level)
        root_logger.addHandler(handler)
    root_logger.setLevel(config.level)


@dataclass
class OperationLog:
    """
    Timing и итог одной операции (например, прохода синхронизации).

    Использование:
        op = OperationLog(operation="sync_inventory", server="a1b2").start()
        ...
        op.success(created=2, components=12).log()

    Итог пишется в лог одним полем result.
    """
    operation: str
    server: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: str = "pending"
    result: Dict[str, Any] = field(default_factory=dict)
    error: str = ""

    def start(self) -> "OperationLog":
        self.started_at = datetime.now()
        self.status = "running"
        return self

    def success(self, **result: Any) -> "OperationLog":
        self.completed_at = datetime.now()
        self.status = "success"
        self.result = result
        return self

    def failure(self, error: str) -> "OperationLog":
        self.completed_at = datetime.now()
        self.status = "failure"
        self.error = error
        return self

    @property
    def duration_ms(self) -> Optional[float]:
        """Длительность в миллисекундах (None пока операция не завершена)."""
        if self.started_at and self.completed_at:
            return round((self.completed_at - self.started_at).total_seconds() * 1000, 2)
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Словарь без пустых полей."""
        data: Dict[str, Any] = {"operation": self.operation, "status": self.status}
        optional = {
            "server": self.server,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "result": self.result,
            "error": self.error,
        }
        data.update({k: v for k, v in optional.items() if v not in (None, "", {})})
        return data

    def log(self, logger: Optional[StructuredLogger] = None) -> None:
        """
        Пишет итог операции: INFO при успехе, ERROR при ошибке.

        Args:
            logger: Логгер (по умолчанию component_inventory)
        """
        logger = logger or get_logger("component_inventory")
        level = logging.INFO if self.status == "success" else logging.ERROR

        fields = self.to_dict()
        fields.pop("started_at", None)
        fields.pop("completed_at", None)
        logger._log(level, f"Operation {self.operation} {self.status}", **fields)
