"""
Domain Layer для Component Inventory.

Бизнес-логика отделена от хранилища (fleetdb).
Domain не ходит в сеть: только нормализация, слияние и сверка.

- assign_serial: серийник по позиции, если устройство его не отдало
- ComponentNormalizer: нормализация компонентов
- merge_vendor_attributes / filter_metadata: атрибуты сервера
- ComponentDiffer: сверка с сохранённой записью
- InventoryConverter: снимок → ServerRecord

Использование:
    from component_inventory.core.domain import InventoryConverter

    converter = InventoryConverter(["drive", "physicalmemory"])
    record = converter.to_server_record(server_id, facility, raw_device)
"""

from .serial import assign_serial
from .component import ComponentNormalizer, KindRule, KIND_RULES
from .attributes import (
    WriteAction,
    VendorMergeResult,
    device_vendor_attributes,
    merge_vendor_attributes,
    filter_metadata,
    metadata_payload,
    metadata_write_action,
)
from .diff import (
    FindingType,
    DiffFinding,
    DiffReport,
    ComponentDiffer,
    build_component_index,
)
from .converter import InventoryConverter

__all__ = [
    "assign_serial",
    "ComponentNormalizer",
    "KindRule",
    "KIND_RULES",
    "WriteAction",
    "VendorMergeResult",
    "device_vendor_attributes",
    "merge_vendor_attributes",
    "filter_metadata",
    "metadata_payload",
    "metadata_write_action",
    "FindingType",
    "DiffFinding",
    "DiffReport",
    "ComponentDiffer",
    "build_component_index",
    "InventoryConverter",
]
