"""
Domain logic для vendor-атрибутов и метаданных сервера.

Vendor-атрибуты (serial, vendor, model) хранятся в FleetDB отдельным
атрибутом. Новое наблюдение сливается с сохранённым так, чтобы
известное значение никогда не затиралось "unknown".

Маркер __ss_found в метаданных только выбирает create или update.
В FleetDB он не записывается, а метаданные из одного маркера (и
исключённых ключей) не пишутся вовсе. Прежний формат хранил маркер
вместе с метаданными и обновлял атрибут даже без других ключей.

Пример использования:
    observed = device_vendor_attributes(raw_device)
    result = merge_vendor_attributes(observed, stored_data)

    if result.action == WriteAction.CREATE:
        client.create_attributes(server_id, ns, result.merged)
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..constants import (
    EXCLUDED_METADATA_KEYS,
    METADATA_FOUND_MARKER,
    UNKNOWN_VALUE,
    VENDOR_ATTRIBUTE_KEYS,
)

logger = logging.getLogger(__name__)

StoredAttributes = Union[None, Dict[str, Any], str, bytes]


class WriteAction(str, Enum):
    """Какую запись сделать в хранилище."""
    NONE = "none"
    CREATE = "create"
    UPDATE = "update"


@dataclass
class VendorMergeResult:
    """
    Результат слияния vendor-атрибутов.

    Attributes:
        merged: Итоговый набор атрибутов
        changed: Набор отличается от сохранённого (нужна запись)
        action: create / update / none
        anomaly: Описание проблемы с сохранёнными данными (битый JSON)
    """
    merged: Dict[str, str] = field(default_factory=dict)
    changed: bool = False
    action: WriteAction = WriteAction.NONE
    anomaly: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь."""
        return {
            "merged": dict(self.merged),
            "changed": self.changed,
            "action": self.action.value,
            "anomaly": self.anomaly,
        }


def _is_unset(value: Any) -> bool:
    return value is None or value == "" or value == UNKNOWN_VALUE


def device_vendor_attributes(device: Dict[str, Any]) -> Dict[str, str]:
    """
    Собирает наблюдаемые vendor-атрибуты из снимка.

    Args:
        device: Снимок инвентаризации

    Returns:
        Dict: serial/vendor/model, пустые значения → "unknown"
    """
    device = device or {}
    attributes = {}
    for key in VENDOR_ATTRIBUTE_KEYS:
        value = device.get(key)
        if value is None or not str(value).strip():
            attributes[key] = UNKNOWN_VALUE
        else:
            attributes[key] = str(value)
    return attributes


def _parse_stored(stored: StoredAttributes) -> Dict[str, Any]:
    """
    Разбирает сохранённые атрибуты.

    Raises:
        ValueError: Данные не JSON-объект
    """
    if isinstance(stored, dict):
        return stored
    if isinstance(stored, bytes):
        stored = stored.decode("utf-8")
    if not isinstance(stored, str):
        raise ValueError(f"ожидался JSON объект, получен {type(stored).__name__}")
    data = json.loads(stored)
    if not isinstance(data, dict):
        raise ValueError(f"ожидался JSON объект, получен {type(data).__name__}")
    return data


def merge_vendor_attributes(
    observed: Dict[str, str],
    stored: StoredAttributes,
) -> VendorMergeResult:
    """
    Сливает наблюдаемые vendor-атрибуты с сохранёнными.

    Для каждого ключа: если сохранено пустое или "unknown", а наблюдается
    реальное значение, берётся наблюдаемое. Известное значение не
    затирается ни "unknown", ни новым значением.

    Args:
        observed: Наблюдаемые атрибуты (device_vendor_attributes)
        stored: Сохранённые атрибуты: None (нет), dict или JSON

    Returns:
        VendorMergeResult
    """
    observed = dict(observed or {})

    if stored is None:
        return VendorMergeResult(
            merged=observed,
            changed=True,
            action=WriteAction.CREATE,
        )

    try:
        stored_data = _parse_stored(stored)
    except (ValueError, UnicodeDecodeError) as e:
        anomaly = f"Некорректные сохранённые vendor-атрибуты: {e}"
        logger.warning(f"{anomaly}, будут перезаписаны наблюдаемыми")
        return VendorMergeResult(
            merged=observed,
            changed=True,
            action=WriteAction.UPDATE,
            anomaly=anomaly,
        )

    merged = dict(stored_data)
    changed = False
    for key, value in observed.items():
        if _is_unset(merged.get(key)) and value != UNKNOWN_VALUE:
            merged[key] = value
            changed = True

    return VendorMergeResult(
        merged=merged,
        changed=changed,
        action=WriteAction.UPDATE if changed else WriteAction.NONE,
    )


def filter_metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Убирает из метаданных ключи, которые хранятся отдельно.

    Исходный словарь не изменяется.

    Args:
        metadata: Метаданные из снимка

    Returns:
        Dict: Метаданные без исключённых ключей
    """
    return {
        k: v for k, v in (metadata or {}).items()
        if k not in EXCLUDED_METADATA_KEYS
    }


def metadata_payload(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Метаданные для записи: без исключённых ключей и служебного маркера."""
    payload = filter_metadata(metadata)
    payload.pop(METADATA_FOUND_MARKER, None)
    return payload


def metadata_write_action(metadata: Optional[Dict[str, Any]]) -> WriteAction:
    """
    Определяет как записать метаданные.

    Args:
        metadata: Метаданные из снимка (могут содержать маркер __ss_found)

    Returns:
        WriteAction: NONE если писать нечего, CREATE если маркера нет,
        иначе UPDATE
    """
    if not metadata_payload(metadata):
        return WriteAction.NONE
    if METADATA_FOUND_MARKER in metadata:
        return WriteAction.UPDATE
    return WriteAction.CREATE
