"""
Клиент FleetDB (serverservice) API.

InventoryStore - узкий интерфейс хранилища, от которого зависит
InventorySync. FleetDBClient реализует его поверх requests.Session.

Компоненты в FleetDB хранятся записями server-component, у которых
атрибуты разложены по namespace-ам:
    attributes:           sh.hollow.alloy.<app_kind>.metadata
    versioned_attributes: sh.hollow.alloy.<app_kind>.firmware / .status

Пример использования:
    client = FleetDBClient(url="https://fleetdb.example.com", token="...")
    record = client.get_server_record(server_id)  # None если сервера нет
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional, Protocol, Tuple

import requests

from ..core.constants import (
    COMPONENT_FIRMWARE_NS_SUFFIX,
    COMPONENT_METADATA_NS_SUFFIX,
    COMPONENT_STATUS_NS_SUFFIX,
    FLEETDB_NS_PREFIX,
)
from ..core.exceptions import FleetDBAPIError, FleetDBConnectionError, FleetDBError, is_retryable
from ..core.models import Component, ServerRecord

logger = logging.getLogger(__name__)

API_PREFIX = "api/v1"


class InventoryStore(Protocol):
    """Операции хранилища, нужные для синхронизации инвентаризации."""

    def get_server_record(self, server_id: str) -> Optional[ServerRecord]:
        ...

    def put_server_record(self, record: ServerRecord) -> None:
        ...

    def get_attributes(self, server_id: str, namespace: str) -> Optional[Any]:
        ...

    def create_attributes(self, server_id: str, namespace: str, data: Dict[str, Any]) -> None:
        ...

    def update_attributes(self, server_id: str, namespace: str, data: Dict[str, Any]) -> None:
        ...

    def create_versioned_attributes(self, server_id: str, namespace: str, data: Dict[str, Any]) -> None:
        ...

    def get_component_types(self) -> List[Dict[str, Any]]:
        ...


def component_namespace(app_kind: str, suffix: str) -> str:
    """Namespace атрибута компонента: sh.hollow.alloy.<app_kind>.<suffix>."""
    return f"{FLEETDB_NS_PREFIX}.{app_kind}.{suffix}"


def _namespaced_data(item: Any) -> Tuple[str, Dict[str, Any]]:
    """
    Разбирает запись {namespace, data, ...}.

    Raises:
        ValueError: Запись или data не объект
    """
    if not isinstance(item, dict):
        raise ValueError(f"запись атрибута не объект: {type(item).__name__}")
    namespace = str(item.get("namespace") or "")
    data = item.get("data")
    if isinstance(data, (str, bytes)):
        data = json.loads(data)
    if not isinstance(data, dict):
        raise ValueError(f"data атрибута {namespace} не объект")
    return namespace, data


def component_from_record(record: Any) -> Component:
    """
    Конвертирует запись server-component FleetDB в Component.

    Атрибуты берутся из namespace-а metadata, прошивка и статус из
    последних (по created_at) versioned атрибутов. Запись в плоском
    формате Component.to_dict() тоже принимается.

    Args:
        record: Запись компонента из ответа FleetDB

    Returns:
        Component

    Raises:
        ValueError: Запись нельзя конвертировать
    """
    if not isinstance(record, dict):
        raise ValueError(f"запись компонента не объект: {type(record).__name__}")

    flat = {k: v for k, v in record.items() if k not in ("attributes", "versioned_attributes")}

    attributes = record.get("attributes")
    if isinstance(attributes, list):
        merged: Dict[str, Any] = {}
        for item in attributes:
            namespace, data = _namespaced_data(item)
            if namespace.rsplit(".", 1)[-1] == COMPONENT_METADATA_NS_SUFFIX:
                merged.update(data)
        flat["attributes"] = merged
    else:
        flat["attributes"] = attributes

    versioned = record.get("versioned_attributes") or []
    if not isinstance(versioned, list):
        raise ValueError(f"versioned_attributes не список: {type(versioned).__name__}")

    # sorted стабилен: при равном created_at выигрывает первая запись
    latest_first = sorted(
        versioned,
        key=lambda v: str(v.get("created_at") or "") if isinstance(v, dict) else "",
        reverse=True,
    )
    seen = set()
    for item in latest_first:
        namespace, data = _namespaced_data(item)
        suffix = namespace.rsplit(".", 1)[-1]
        if suffix in (COMPONENT_FIRMWARE_NS_SUFFIX, COMPONENT_STATUS_NS_SUFFIX) and suffix not in seen:
            flat[suffix] = data
            seen.add(suffix)

    return Component.from_dict(flat)


def component_to_record(component: Component, app_kind: str) -> Dict[str, Any]:
    """
    Конвертирует Component в запись server-component FleetDB.

    Args:
        component: Нормализованный компонент
        app_kind: inband / outofband (часть namespace-ов)

    Returns:
        Dict: Запись с attributes / versioned_attributes по namespace-ам
    """
    record: Dict[str, Any] = {
        "name": component.kind,
        "component_type_slug": component.kind,
        "vendor": component.vendor,
        "model": component.model,
        "serial": component.serial,
    }
    if component.attributes:
        record["attributes"] = [{
            "namespace": component_namespace(app_kind, COMPONENT_METADATA_NS_SUFFIX),
            "data": dict(component.attributes),
        }]

    versioned = []
    if component.firmware:
        versioned.append({
            "namespace": component_namespace(app_kind, COMPONENT_FIRMWARE_NS_SUFFIX),
            "data": component.firmware.to_dict(),
        })
    if component.status:
        versioned.append({
            "namespace": component_namespace(app_kind, COMPONENT_STATUS_NS_SUFFIX),
            "data": component.status.to_dict(),
        })
    if versioned:
        record["versioned_attributes"] = versioned
    return record


class FleetDBClient:
    """
    HTTP клиент FleetDB.

    Ответ 404 на чтение - не ошибка: возвращается None.
    Остальные ошибки HTTP → FleetDBAPIError, сетевые → FleetDBConnectionError.
    Сетевые ошибки и 5xx повторяются max_retries раз.
    """

    def __init__(
        self,
        url: str,
        token: str = "",
        verify_ssl: bool = True,
        timeout: int = 30,
        app_kind: str = "outofband",
        max_retries: int = 0,
        retry_delay: float = 0,
    ):
        """
        Args:
            url: Базовый URL FleetDB
            token: Bearer токен (пустой - без авторизации)
            verify_ssl: Проверять SSL сертификат
            timeout: Таймаут запроса в секундах
            app_kind: inband / outofband (namespace-ы атрибутов компонентов)
            max_retries: Количество повторов при сетевой ошибке или 5xx
            retry_delay: Пауза между повторами в секундах
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.app_kind = app_kind
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if token:
            self._session.headers["Authorization"] = f"bearer {token}"
        self._session.verify = verify_ssl

        logger.info(f"FleetDB клиент инициализирован: {self.url}")

    @classmethod
    def from_config(cls, fleetdb_config: Any, app_kind: str = "outofband") -> "FleetDBClient":
        """Создаёт клиент из секции fleetdb (FleetDBConfig или ConfigSection)."""
        return cls(
            url=fleetdb_config.url,
            token=fleetdb_config.token or "",
            verify_ssl=fleetdb_config.verify_ssl,
            timeout=fleetdb_config.timeout,
            app_kind=app_kind,
            max_retries=fleetdb_config.max_retries,
            retry_delay=fleetdb_config.retry_delay,
        )

    def _api_url(self, path: str) -> str:
        """Формирует полный URL для API-запроса."""
        return f"{self.url}/{API_PREFIX}/{path}"

    def _request(
        self,
        method: str,
        path: str,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> Optional[Any]:
        """
        Выполняет запрос с повторами и возвращает JSON тела.

        Args:
            method: HTTP метод
            path: Путь после /api/v1/
            allow_not_found: 404 → None вместо ошибки

        Returns:
            Распарсенный JSON, None для пустого тела или 404

        Raises:
            FleetDBConnectionError: Сетевая ошибка
            FleetDBAPIError: Ответ с ошибкой
        """
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return self._send(method, path, allow_not_found, **kwargs)
            except FleetDBError as e:
                if attempt == attempts or not is_retryable(e):
                    raise
                logger.warning(
                    f"Попытка {attempt}/{attempts} {method} /{API_PREFIX}/{path} не удалась: {e}. "
                    f"Повтор через {self.retry_delay}с"
                )
                time.sleep(self.retry_delay)
        return None

    def _send(
        self,
        method: str,
        path: str,
        allow_not_found: bool,
        **kwargs: Any,
    ) -> Optional[Any]:
        url = self._api_url(path)
        try:
            resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Ошибка подключения к FleetDB {method} {url}: {e}")
            raise FleetDBConnectionError(
                message=f"Не удалось подключиться к FleetDB: {e}",
                url=url,
            ) from e

        if resp.status_code == 404 and allow_not_found:
            return None

        if resp.status_code >= 400:
            raise FleetDBAPIError(
                message=f"FleetDB вернул {resp.status_code}: {resp.text[:200]}",
                url=url,
                status_code=resp.status_code,
                endpoint=f"{method} /{API_PREFIX}/{path}",
            )

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise FleetDBAPIError(
                message=f"Некорректный JSON в ответе FleetDB: {e}",
                url=url,
                status_code=resp.status_code,
                endpoint=f"{method} /{API_PREFIX}/{path}",
            ) from e

    @staticmethod
    def _unwrap(body: Optional[Any]) -> Optional[Any]:
        """Ответы serverservice обёрнуты в {"record": ...} / {"records": [...]}."""
        if isinstance(body, dict):
            if "record" in body:
                return body["record"]
            if "records" in body:
                return body["records"]
        return body

    # ==================== СЕРВЕРЫ ====================

    def get_server_record(self, server_id: str) -> Optional[ServerRecord]:
        """
        Получает сервер вместе с компонентами.

        Записи компонентов, которые нельзя конвертировать, пропускаются
        с предупреждением.

        Returns:
            ServerRecord или None если сервер не найден
        """
        server = self._unwrap(self._request("GET", f"servers/{server_id}", allow_not_found=True))
        if server is None:
            return None

        records = self._unwrap(
            self._request("GET", f"servers/{server_id}/components", allow_not_found=True)
        )
        components = []
        for item in records or []:
            try:
                components.append(component_from_record(item))
            except ValueError as e:
                slug = item.get("component_type_slug") if isinstance(item, dict) else None
                logger.warning(f"Сервер {server_id}: пропущен компонент {slug}: {e}")

        data = dict(server)
        data.setdefault("id", server_id)
        data["components"] = components
        return ServerRecord.from_dict(data)

    def put_server_record(self, record: ServerRecord) -> None:
        """Создаёт или обновляет сервер и заменяет список его компонентов."""
        data = record.to_dict()
        data.pop("components")
        components = [component_to_record(c, self.app_kind) for c in record.components]

        existing = self._request("GET", f"servers/{record.id}", allow_not_found=True)
        if existing is None:
            logger.debug(f"Сервер {record.id} не найден, создаём")
            self._request("POST", "servers", json=data)
        else:
            self._request("PUT", f"servers/{record.id}", json=data)

        self._request("PUT", f"servers/{record.id}/components", json=components)

    # ==================== АТРИБУТЫ ====================

    def get_attributes(self, server_id: str, namespace: str) -> Optional[Any]:
        """
        Получает данные атрибута сервера.

        Returns:
            Сохранённые данные как есть (dict или JSON строка) или None
        """
        record = self._unwrap(
            self._request("GET", f"servers/{server_id}/attributes/{namespace}", allow_not_found=True)
        )
        if record is None:
            return None
        if isinstance(record, dict) and "data" in record:
            return record["data"]
        return record

    def create_attributes(self, server_id: str, namespace: str, data: Dict[str, Any]) -> None:
        """Создаёт атрибут сервера."""
        self._request(
            "POST",
            f"servers/{server_id}/attributes",
            json={"namespace": namespace, "data": data},
        )

    def update_attributes(self, server_id: str, namespace: str, data: Dict[str, Any]) -> None:
        """Обновляет атрибут сервера."""
        self._request(
            "PUT",
            f"servers/{server_id}/attributes/{namespace}",
            json={"namespace": namespace, "data": data},
        )

    def create_versioned_attributes(self, server_id: str, namespace: str, data: Dict[str, Any]) -> None:
        """Добавляет новую версию versioned атрибута."""
        self._request(
            "POST",
            f"servers/{server_id}/versioned-attributes",
            json={"namespace": namespace, "data": data},
        )

    # ==================== ТИПЫ КОМПОНЕНТОВ ====================

    def get_component_types(self) -> List[Dict[str, Any]]:
        """Справочник типов компонентов (server-component-types)."""
        return self._unwrap(self._request("GET", "server-component-types")) or []
