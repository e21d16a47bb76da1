"""
Component Inventory - нормализация и сверка инвентаризации серверов.

Модуль предоставляет:
- Нормализацию снимков инвентаризации (BMC / in-band) в канонические компоненты
- Слияние vendor-атрибутов и метаданных с сохранёнными в FleetDB
- Сверку наблюдаемых компонентов с сохранённой записью (drift, stored-only)
- Синхронизацию с FleetDB (serverservice) API

Примеры использования:
    from component_inventory import InventoryConverter, FleetDBClient, InventorySync

    converter = InventoryConverter(config.inventory.component_slugs)
    record = converter.to_server_record(server_id, "sandbox", raw_device)

    client = FleetDBClient(url="https://fleetdb.example.com", token="...")
    stats = InventorySync(client, converter).sync_inventory(
        server_id, "sandbox", raw_device, bios_config,
    )

Версия: 1.0.0
"""

__version__ = "1.0.0"

from .core.models import Component, ComponentStatus, Firmware, ServerRecord
from .core.domain import (
    ComponentNormalizer,
    ComponentDiffer,
    DiffReport,
    InventoryConverter,
    assign_serial,
    merge_vendor_attributes,
    filter_metadata,
)
from .fleetdb import FleetDBClient, InventoryStore, InventorySync, AppKind

__all__ = [
    "__version__",
    "Component",
    "ComponentStatus",
    "Firmware",
    "ServerRecord",
    "ComponentNormalizer",
    "ComponentDiffer",
    "DiffReport",
    "InventoryConverter",
    "assign_serial",
    "merge_vendor_attributes",
    "filter_metadata",
    "FleetDBClient",
    "InventoryStore",
    "InventorySync",
    "AppKind",
]
