"""
Конвертер снимка инвентаризации в каноническую запись сервера.

Связывает нормализацию компонентов, vendor-атрибуты, метаданные
и сверку с сохранённой записью. Не обращается к FleetDB:
загрузка и запись выполняются в fleetdb/sync.py.

Пример использования:
    converter = InventoryConverter(config.inventory.component_slugs)
    record = converter.to_server_record(server_id, "sandbox", raw_device)
    report = converter.compare(stored_record, record)
"""

from typing import Any, Dict, Iterable, List, Optional

from ..constants import normalize_slug
from ..models import ServerRecord
from .attributes import device_vendor_attributes, filter_metadata
from .component import ComponentNormalizer
from .diff import ComponentDiffer, DiffReport


class InventoryConverter:
    """
    Конвертация снимков инвентаризации.

    Справочник типов неизменяем после создания, один конвертер
    можно использовать из нескольких потоков.
    """

    def __init__(self, component_slugs: Iterable[str]):
        """
        Args:
            component_slugs: Справочник известных типов компонентов
        """
        self.normalizer = ComponentNormalizer(component_slugs)
        self.differ = ComponentDiffer()

    @property
    def component_slugs(self) -> frozenset:
        return self.normalizer.component_slugs

    @classmethod
    def from_component_types(cls, component_types: List[Dict[str, Any]]) -> "InventoryConverter":
        """
        Создаёт конвертер по записям server-component-types из FleetDB.

        Args:
            component_types: Записи с полями slug или name

        Returns:
            InventoryConverter
        """
        slugs = []
        for item in component_types or []:
            slug = normalize_slug(item.get("slug") or item.get("name") or "")
            if slug:
                slugs.append(slug)
        return cls(slugs)

    def to_server_record(
        self,
        server_id: str,
        facility: str,
        device: Dict[str, Any],
        bios_config: Optional[Dict[str, str]] = None,
    ) -> ServerRecord:
        """
        Строит каноническую запись сервера из снимка.

        Args:
            server_id: ID сервера
            facility: Код площадки
            device: Снимок инвентаризации
            bios_config: Настройки BIOS

        Returns:
            ServerRecord

        Raises:
            ComponentSlugsEmptyError: Справочник типов пуст
        """
        device = device or {}
        status = device.get("status") or {}

        return ServerRecord(
            id=server_id,
            facility=facility,
            name=server_id,
            vendor=device.get("vendor") or "",
            model=device.get("model") or "",
            serial=device.get("serial") or "",
            status=(status.get("state") or "") if isinstance(status, dict) else "",
            components=self.normalizer.normalize_device(device),
            bios_config=dict(bios_config or {}),
        )

    def compare(
        self,
        stored: Optional[ServerRecord],
        observed: ServerRecord,
    ) -> DiffReport:
        """
        Сверяет наблюдаемую запись с сохранённой.

        Args:
            stored: Запись из FleetDB (None - сервер ещё не сохранён)
            observed: Запись из to_server_record()

        Returns:
            DiffReport (пустой если stored is None)
        """
        if stored is None:
            return DiffReport(server_id=observed.id)
        return self.differ.diff(stored.components, observed.components, server_id=observed.id)

    def vendor_attributes(self, device: Dict[str, Any]) -> Dict[str, str]:
        """Наблюдаемые vendor-атрибуты сервера."""
        return device_vendor_attributes(device)

    def metadata(self, device: Dict[str, Any]) -> Dict[str, Any]:
        """Метаданные сервера без исключённых ключей."""
        return filter_metadata((device or {}).get("metadata"))
