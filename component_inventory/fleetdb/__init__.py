"""
Интеграция с FleetDB (serverservice).

- FleetDBClient: HTTP клиент
- InventoryStore: интерфейс хранилища для синхронизации
- InventorySync: синхронизация инвентаризации сервера
"""

from .client import FleetDBClient, InventoryStore
from .sync import AppKind, InventorySync, SyncStats, bios_config_namespace

__all__ = [
    "FleetDBClient",
    "InventoryStore",
    "InventorySync",
    "AppKind",
    "SyncStats",
    "bios_config_namespace",
]
