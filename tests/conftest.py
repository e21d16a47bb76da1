"""
Pytest configuration и общие fixtures для тестов.

Предоставляет переиспользуемые fixtures:
- component_slugs: Полный справочник типов компонентов
- sample_device: Снимок инвентаризации (bmc-toolbox common.Device)
- mock_store: Mock хранилища FleetDB
"""

import copy
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from component_inventory.core.constants import DEFAULT_COMPONENT_SLUGS


SAMPLE_DEVICE: Dict[str, Any] = {
    "vendor": "Dell Inc.",
    "model": "PowerEdge R6515",
    "serial": "FL1ABC2",
    "status": {"state": "Enabled", "health": "OK"},
    "metadata": {
        "node_name": "fl1abc2",
        "uefi-variables": "{\"BootOrder\": \"0001\"}",
    },
    "bios": {
        "vendor": "Dell Inc.",
        "description": "BIOS Configuration",
        "size_bytes": 65536,
        "firmware": {"installed": "2.6.6"},
    },
    "bmc": {
        "vendor": "Dell",
        "description": "iDRAC",
        "firmware": {"installed": "5.10.00.00"},
    },
    "mainboard": {
        "vendor": "Dell Inc.",
        "model": "0HG0X5",
        "serial": "CN0HG0X5",
        "physid": "0",
    },
    "memory": [
        {
            "vendor": "Hynix",
            "model": "HMA84GR7CJR4N-XN",
            "slot": "DIMM.Socket.A1",
            "size_bytes": 34359738368,
            "clock_speed_hz": 3200000000,
            "serial": "",
            "firmware": {"installed": "1"},
        },
        {
            "vendor": "Hynix",
            "model": "HMA84GR7CJR4N-XN",
            "slot": "DIMM.Socket.A2",
            "size_bytes": 34359738368,
            "clock_speed_hz": 3200000000,
            "serial": "",
            "firmware": {"installed": "1"},
        },
    ],
    "nics": [
        {
            "vendor": "Broadcom",
            "model": "BCM57414",
            "serial": "nic-1",
            "description": "NetXtreme-E",
            "firmware": {"installed": "21.80.16.95"},
        },
    ],
    "drives": [
        {
            "vendor": "Micron",
            "model": "",
            "product_name": "",
            "description": "cool-drive",
            "serial": "drv-1",
            "type": "SSD",
            "capacity_bytes": 960197124096,
            "firmware": {"installed": "D3MU001"},
        },
    ],
    "power_supplies": [
        {"vendor": "Dell", "model": "PWR SPLY,550W", "serial": "", "power_capacity_watts": 550},
        {"vendor": "Dell", "model": "PWR SPLY,550W", "serial": "", "power_capacity_watts": 550},
    ],
    "cpus": [
        {
            "vendor": "AMD",
            "model": "AMD EPYC 7402P 24-Core Processor",
            "slot": "CPU.Socket.1",
            "cores": 24,
            "threads": 48,
            "clock_speed_hz": 2800000000,
            "firmware": {"installed": "0x8301038"},
        },
    ],
    "storage_controller": [
        {
            "vendor": "Dell",
            "model": "",
            "description": "PERC H755 Front",
            "serial": "sc-1",
            "supported_raid_types": "RAID0, RAID1",
        },
    ],
}


@pytest.fixture
def component_slugs() -> List[str]:
    """Полный справочник типов компонентов."""
    return list(DEFAULT_COMPONENT_SLUGS)


@pytest.fixture
def sample_device() -> Dict[str, Any]:
    """
    Снимок инвентаризации для тестов.

    Returns:
        Dict: Копия SAMPLE_DEVICE (можно менять в тесте)
    """
    return copy.deepcopy(SAMPLE_DEVICE)


@pytest.fixture
def mock_store():
    """
    Mock хранилища FleetDB для тестирования синхронизации.

    По умолчанию: сервера нет, атрибутов нет.

    Returns:
        MagicMock: Мок с методами InventoryStore
    """
    store = MagicMock()
    store.get_server_record.return_value = None
    store.get_attributes.return_value = None
    store.get_component_types.return_value = [
        {"name": "Drive", "slug": "drive"},
        {"name": "PhysicalMemory", "slug": "physicalmemory"},
    ]
    return store
