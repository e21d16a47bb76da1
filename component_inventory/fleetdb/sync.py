"""
Синхронизация инвентаризации сервера с FleetDB.

Последовательность одного прохода:
    1. Конвертация снимка в ServerRecord
    2. Загрузка сохранённой записи и сверка (находки только логируются)
    3. Vendor-атрибуты, метаданные, BIOS конфигурация
    4. Запись ServerRecord

Ошибка записи одного атрибута логируется и учитывается в failed,
проход продолжается.
"""

import logging
import os
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..core.constants import (
    BIOS_CONFIG_NS_ENV,
    FLEETDB_NS_PREFIX,
    METADATA_FOUND_MARKER,
    SERVER_METADATA_ATTRIBUTE_NS,
    SERVER_VENDOR_ATTRIBUTE_NS,
)
from ..core.domain.attributes import (
    WriteAction,
    merge_vendor_attributes,
    metadata_payload,
    metadata_write_action,
)
from ..core.domain.converter import InventoryConverter
from ..core.exceptions import FleetDBError, format_error_for_log
from ..core.logging import OperationLog, get_logger
from .client import InventoryStore

logger = logging.getLogger(__name__)


class AppKind(str, Enum):
    """Источник инвентаризации."""
    INBAND = "inband"
    OUTOFBAND = "outofband"


def bios_config_namespace(app_kind: str, override: Optional[str] = None) -> str:
    """
    Namespace versioned атрибута BIOS конфигурации.

    Порядок: override → env CIS_FLEETDB_BIOS_CONFIG_NS →
    sh.hollow.alloy.<app_kind>.bios_configuration
    """
    namespace = override or os.getenv(BIOS_CONFIG_NS_ENV)
    if namespace:
        return namespace
    return f"{FLEETDB_NS_PREFIX}.{AppKind(app_kind).value}.bios_configuration"


class SyncStats:
    """
    Счётчики и детали sync-операций.

    Example:
        s = SyncStats("created", "updated", "skipped", "failed")
        s.count("created", name="sh.hollow.alloy.server_vendor_attributes")
        return s.result()
    """

    _DETAIL_KEY_MAP = {
        "created": "create",
        "updated": "update",
        "skipped": "skip",
        "failed": "fail",
    }

    def __init__(self, *operations: str):
        self.stats: Dict[str, int] = {op: 0 for op in operations}
        self.details: Dict[str, list] = {}
        for op in operations:
            detail_key = self._DETAIL_KEY_MAP.get(op)
            if detail_key:
                self.details[detail_key] = []

    def count(self, operation: str, **detail: Any) -> None:
        """Увеличивает счётчик и добавляет деталь (если передана)."""
        self.stats[operation] = self.stats.get(operation, 0) + 1
        detail_key = self._DETAIL_KEY_MAP.get(operation)
        if detail and detail_key:
            self.details.setdefault(detail_key, []).append(detail)

    def merge(self, other: Dict[str, Any]) -> None:
        """Добавляет результат другой операции (результат result())."""
        for key, value in other.items():
            if key == "details":
                for detail_key, items in value.items():
                    self.details.setdefault(detail_key, []).extend(items)
            elif isinstance(value, int):
                self.stats[key] = self.stats.get(key, 0) + value

    def result(self) -> Dict[str, Any]:
        """Возвращает stats с вложенным details."""
        result: Dict[str, Any] = dict(self.stats)
        if self.details:
            result["details"] = {k: list(v) for k, v in self.details.items()}
        return result


def _new_stats() -> SyncStats:
    return SyncStats("created", "updated", "skipped", "failed")


class InventorySync:
    """
    Синхронизация инвентаризации с FleetDB.

    Example:
        sync = InventorySync(client, converter, app_kind="outofband", dry_run=True)
        stats = sync.sync_inventory(server_id, "sandbox", raw_device, bios_config)
    """

    def __init__(
        self,
        client: InventoryStore,
        converter: InventoryConverter,
        app_kind: str = AppKind.OUTOFBAND.value,
        dry_run: bool = False,
        bios_config_ns: Optional[str] = None,
    ):
        """
        Args:
            client: Хранилище (FleetDBClient или совместимый объект)
            converter: Конвертер снимков
            app_kind: inband / outofband
            dry_run: Режим симуляции (ничего не пишет)
            bios_config_ns: Явный namespace BIOS конфигурации
        """
        self.client = client
        self.converter = converter
        self.app_kind = AppKind(app_kind)
        self.dry_run = dry_run
        self.bios_config_ns = bios_config_namespace(self.app_kind.value, bios_config_ns)

    def _log_prefix(self) -> str:
        return "[DRY-RUN] " if self.dry_run else ""

    def _store_write(
        self,
        stats: SyncStats,
        operation: str,
        description: str,
        fn: Callable,
        *args: Any,
        name: str = "",
    ) -> None:
        """
        Выполняет запись в хранилище с обработкой ошибок.

        Args:
            stats: Статистика (modified in-place)
            operation: Ключ stats при успехе (created/updated)
            description: Описание операции для лога
            fn: Метод хранилища
            name: Имя объекта для details
        """
        if self.dry_run:
            logger.info(f"{self._log_prefix()}{description}: {name}")
            stats.count(operation, name=name)
            return
        try:
            fn(*args)
        except FleetDBError as e:
            logger.error(f"Ошибка {description} {name}: {format_error_for_log(e)}")
            stats.count("failed", name=name, error=str(e))
            return
        logger.info(f"{description}: {name}")
        stats.count(operation, name=name)

    def _write_attributes(
        self,
        stats: SyncStats,
        action: WriteAction,
        server_id: str,
        namespace: str,
        data: Dict[str, Any],
    ) -> None:
        if action == WriteAction.CREATE:
            self._store_write(
                stats, "created", "Создание атрибута",
                self.client.create_attributes, server_id, namespace, data,
                name=namespace,
            )
        elif action == WriteAction.UPDATE:
            self._store_write(
                stats, "updated", "Обновление атрибута",
                self.client.update_attributes, server_id, namespace, data,
                name=namespace,
            )
        else:
            logger.debug(f"Атрибут {namespace} не изменился")
            stats.count("skipped", name=namespace)

    def _read_attributes(self, stats: SyncStats, server_id: str, namespace: str) -> Any:
        """
        Читает атрибут. При ошибке чтения учитывает failed.

        Raises:
            FleetDBError: Ошибка чтения (после учёта в stats)
        """
        try:
            return self.client.get_attributes(server_id, namespace)
        except FleetDBError as e:
            logger.error(f"Ошибка чтения атрибута {namespace}: {format_error_for_log(e)}")
            stats.count("failed", name=namespace, error=str(e))
            raise

    def sync_vendor_attributes(self, server_id: str, device: Dict[str, Any]) -> Dict[str, Any]:
        """
        Синхронизирует vendor-атрибуты сервера (serial, vendor, model).

        Args:
            server_id: ID сервера
            device: Снимок инвентаризации

        Returns:
            Dict: Статистика {created, updated, skipped, failed}
        """
        stats = _new_stats()
        namespace = SERVER_VENDOR_ATTRIBUTE_NS

        try:
            stored = self._read_attributes(stats, server_id, namespace)
        except FleetDBError:
            return stats.result()

        result = merge_vendor_attributes(self.converter.vendor_attributes(device), stored)
        if result.anomaly:
            logger.warning(f"Сервер {server_id}: {result.anomaly}")

        self._write_attributes(stats, result.action, server_id, namespace, result.merged)
        return stats.result()

    def sync_metadata(self, server_id: str, device: Dict[str, Any]) -> Dict[str, Any]:
        """
        Синхронизирует метаданные сервера.

        Если снимок не содержит маркер __ss_found, наличие сохранённого
        атрибута проверяется в хранилище.

        Args:
            server_id: ID сервера
            device: Снимок инвентаризации

        Returns:
            Dict: Статистика {created, updated, skipped, failed}
        """
        stats = _new_stats()
        namespace = SERVER_METADATA_ATTRIBUTE_NS
        metadata = dict((device or {}).get("metadata") or {})

        if not metadata_payload(metadata):
            logger.debug(f"Нет метаданных для {server_id}")
            stats.count("skipped", name=namespace)
            return stats.result()

        if METADATA_FOUND_MARKER not in metadata:
            try:
                stored = self._read_attributes(stats, server_id, namespace)
            except FleetDBError:
                return stats.result()
            if stored is not None:
                metadata[METADATA_FOUND_MARKER] = "true"

        self._write_attributes(
            stats,
            metadata_write_action(metadata),
            server_id,
            namespace,
            metadata_payload(metadata),
        )
        return stats.result()

    def sync_bios_configuration(
        self,
        server_id: str,
        bios_config: Optional[Dict[str, str]],
    ) -> Dict[str, Any]:
        """
        Записывает BIOS конфигурацию новой версией versioned атрибута.

        Args:
            server_id: ID сервера
            bios_config: Настройки BIOS (пустые - пропуск)

        Returns:
            Dict: Статистика {created, updated, skipped, failed}
        """
        stats = _new_stats()
        if not bios_config:
            logger.debug(f"Нет BIOS конфигурации для {server_id}")
            stats.count("skipped", name=self.bios_config_ns)
            return stats.result()

        self._store_write(
            stats, "created", "Запись BIOS конфигурации",
            self.client.create_versioned_attributes, server_id, self.bios_config_ns, dict(bios_config),
            name=self.bios_config_ns,
        )
        return stats.result()

    def sync_inventory(
        self,
        server_id: str,
        facility: str,
        device: Dict[str, Any],
        bios_config: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Полный проход синхронизации сервера.

        Args:
            server_id: ID сервера
            facility: Код площадки
            device: Снимок инвентаризации
            bios_config: Настройки BIOS

        Returns:
            Dict: Статистика {created, updated, skipped, failed, details, diff}

        Raises:
            ComponentSlugsEmptyError: Справочник типов пуст
        """
        op = OperationLog(operation="sync_inventory", server=server_id).start()
        stats = _new_stats()

        observed = self.converter.to_server_record(server_id, facility, device, bios_config)
        logger.info(
            f"{self._log_prefix()}Синхронизация инвентаризации {server_id}: "
            f"{len(observed.components)} компонентов"
        )

        try:
            stored = self.client.get_server_record(server_id)
        except FleetDBError as e:
            logger.error(f"Ошибка загрузки сервера {server_id}: {format_error_for_log(e)}")
            stats.count("failed", name=server_id, error=str(e))
            op.failure(str(e)).log(get_logger(__name__))
            result = stats.result()
            result["diff"] = None
            return result

        report = self.converter.compare(stored, observed)

        stats.merge(self.sync_vendor_attributes(server_id, device))
        stats.merge(self.sync_metadata(server_id, device))
        stats.merge(self.sync_bios_configuration(server_id, bios_config))

        if stored is None:
            self._store_write(
                stats, "created", "Создание сервера",
                self.client.put_server_record, observed,
                name=server_id,
            )
        else:
            self._store_write(
                stats, "updated", "Обновление сервера",
                self.client.put_server_record, observed,
                name=server_id,
            )

        result = stats.result()
        result["diff"] = report.to_dict()

        op.success(
            created=result["created"],
            updated=result["updated"],
            failed=result["failed"],
            components=len(observed.components),
        ).log(get_logger(__name__))
        return result
