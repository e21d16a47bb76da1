"""
Data Models для Component Inventory.

Типизированные dataclasses вместо Dict[str, Any]:
- Component: нормализованный компонент сервера (CPU, DIMM, диск, ...)
- ServerRecord: каноническая запись сервера для FleetDB
- Firmware, ComponentStatus: вложенные данные компонента

Использование:
    from component_inventory.core.models import Component, ServerRecord

    # Создание из dict (например, из ответа FleetDB)
    component = Component.from_dict(stored_data)

    # Сериализация обратно в dict
    data = component.to_dict()
"""

from dataclasses import dataclass, field
from typing import Optional, List, Any, Dict, Union

from .constants import normalize_slug


@dataclass(frozen=True)
class Firmware:
    """
    Прошивка компонента.

    Attributes:
        installed: Установленная версия
        available: Доступная версия (если сообщает BMC)
        previous: Предыдущие версии
        software_id: ID прошивки у вендора
    """
    installed: str = ""
    available: str = ""
    previous: List[str] = field(default_factory=list)
    software_id: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Firmware"]:
        """Создаёт Firmware из словаря. None если данных нет или это не объект."""
        if not data or not isinstance(data, dict):
            return None
        previous = []
        raw_previous = data.get("previous") or []
        for item in raw_previous if isinstance(raw_previous, list) else []:
            # bmc-toolbox отдаёт previous как список объектов Firmware
            if isinstance(item, dict):
                version = str(item.get("installed") or "")
            else:
                version = str(item or "")
            if version:
                previous.append(version)
        return cls(
            installed=str(data.get("installed") or ""),
            available=str(data.get("available") or ""),
            previous=previous,
            software_id=str(data.get("software_id") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь (без пустых полей)."""
        result: Dict[str, Any] = {"installed": self.installed}
        if self.available:
            result["available"] = self.available
        if self.previous:
            result["previous"] = list(self.previous)
        if self.software_id:
            result["software_id"] = self.software_id
        return result


@dataclass(frozen=True)
class ComponentStatus:
    """Состояние компонента (state: Enabled/Absent, health: OK/Critical)."""
    state: str = ""
    health: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ComponentStatus"]:
        """Создаёт ComponentStatus из словаря. None если данных нет или это не объект."""
        if not data or not isinstance(data, dict):
            return None
        state = data.get("state") or data.get("State") or ""
        health = data.get("health") or data.get("Health") or ""
        if not state and not health:
            return None
        return cls(state=str(state), health=str(health))

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return {"state": self.state, "health": self.health}


@dataclass(frozen=True)
class Component:
    """
    Нормализованный компонент сервера.

    Создаётся заново при каждой нормализации и не изменяется.

    Attributes:
        kind: Slug типа компонента (cpu, drive, physicalmemory, ...)
        vendor: Производитель
        model: Модель (fallback: product_name, description)
        serial: Серийный номер (всегда не пустой)
        attributes: Атрибуты, специфичные для типа (slot, capacity_bytes, ...)
        status: Состояние компонента
        firmware: Прошивка
    """
    kind: str
    vendor: str = ""
    model: str = ""
    serial: str = ""
    attributes: Dict[str, Any] = field(default_factory=dict)
    status: Optional[ComponentStatus] = None
    firmware: Optional[Firmware] = None

    @property
    def vendor_model(self) -> str:
        """Ключ сопоставления компонентов: конкатенация vendor + model."""
        return f"{self.vendor}{self.model}"

    @property
    def installed_firmware(self) -> str:
        """Установленная версия прошивки или пустая строка."""
        return self.firmware.installed if self.firmware else ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Component":
        """
        Создаёт Component из словаря (to_dict() или плоская запись).

        Raises:
            ValueError: attributes не объект
        """
        kind = data.get("component_type_slug") or data.get("name") or data.get("kind") or ""
        attributes = data.get("attributes") or {}
        if not isinstance(attributes, dict):
            raise ValueError(f"attributes должен быть объектом, получен {type(attributes).__name__}")
        return cls(
            kind=normalize_slug(str(kind)),
            vendor=str(data.get("vendor") or ""),
            model=str(data.get("model") or ""),
            serial=str(data.get("serial") or ""),
            attributes=dict(attributes),
            status=ComponentStatus.from_dict(data.get("status")),
            firmware=Firmware.from_dict(data.get("firmware")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь (плоский формат, атрибуты без namespace-ов)."""
        result: Dict[str, Any] = {
            "name": self.kind,
            "vendor": self.vendor,
            "model": self.model,
            "serial": self.serial,
        }
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.status:
            result["status"] = self.status.to_dict()
        if self.firmware:
            result["firmware"] = self.firmware.to_dict()
        return result

    @classmethod
    def ensure_list(cls, data: Union[List[Dict[str, Any]], List["Component"]]) -> List["Component"]:
        """Конвертирует List[Dict] в List[Component] если нужно."""
        if not data:
            return []
        if isinstance(data[0], dict):
            return [cls.from_dict(d) for d in data]
        return data


@dataclass
class ServerRecord:
    """
    Каноническая запись сервера.

    Attributes:
        id: ID сервера (UUID в FleetDB)
        facility: Код площадки
        name: Имя сервера (совпадает с id)
        vendor: Производитель сервера
        model: Модель сервера
        serial: Серийный номер сервера
        status: Состояние из снимка инвентаризации
        components: Компоненты в детерминированном порядке
        bios_config: Настройки BIOS (ключ → значение)
    """
    id: str
    facility: str = ""
    name: str = ""
    vendor: str = ""
    model: str = ""
    serial: str = ""
    status: str = ""
    components: List[Component] = field(default_factory=list)
    bios_config: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerRecord":
        """Создаёт ServerRecord из словаря."""
        server_id = str(data.get("id") or data.get("uuid") or "")
        return cls(
            id=server_id,
            facility=data.get("facility") or data.get("facility_code") or "",
            name=data.get("name") or server_id,
            vendor=data.get("vendor") or "",
            model=data.get("model") or "",
            serial=data.get("serial") or "",
            status=str(data.get("status") or ""),
            components=Component.ensure_list(data.get("components") or []),
            bios_config=dict(data.get("bios_cfg") or data.get("bios_config") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        return {
            "id": self.id,
            "facility": self.facility,
            "name": self.name,
            "vendor": self.vendor,
            "model": self.model,
            "serial": self.serial,
            "status": self.status,
            "components": [c.to_dict() for c in self.components],
            "bios_cfg": dict(self.bios_config),
        }
