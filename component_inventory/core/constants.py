"""
Константы Component Inventory.

Namespace-ы атрибутов FleetDB, ключи vendor-атрибутов,
slug-и типов компонентов и служебные значения нормализации.
"""

from typing import Dict, FrozenSet, List

# =============================================================================
# NAMESPACE-Ы FLEETDB
# =============================================================================

# Префикс namespace-ов, в которых хранятся данные инвентаризации
FLEETDB_NS_PREFIX = "sh.hollow.alloy"

# Serial, vendor, model сервера
SERVER_VENDOR_ATTRIBUTE_NS = f"{FLEETDB_NS_PREFIX}.server_vendor_attributes"

# Дополнительные метаданные сервера
SERVER_METADATA_ATTRIBUTE_NS = f"{FLEETDB_NS_PREFIX}.server_metadata_attributes"

# Атрибуты компонентов: sh.hollow.alloy.<app_kind>.<suffix>
COMPONENT_METADATA_NS_SUFFIX = "metadata"
COMPONENT_FIRMWARE_NS_SUFFIX = "firmware"
COMPONENT_STATUS_NS_SUFFIX = "status"

# Env переменная для переопределения namespace BIOS конфигурации
BIOS_CONFIG_NS_ENV = "CIS_FLEETDB_BIOS_CONFIG_NS"

# =============================================================================
# VENDOR АТРИБУТЫ
# =============================================================================

SERVER_SERIAL_ATTRIBUTE_KEY = "serial"
SERVER_VENDOR_ATTRIBUTE_KEY = "vendor"
SERVER_MODEL_ATTRIBUTE_KEY = "model"

VENDOR_ATTRIBUTE_KEYS: List[str] = [
    SERVER_SERIAL_ATTRIBUTE_KEY,
    SERVER_VENDOR_ATTRIBUTE_KEY,
    SERVER_MODEL_ATTRIBUTE_KEY,
]

# Значение "ещё не наблюдали"
UNKNOWN_VALUE = "unknown"

# =============================================================================
# МЕТАДАННЫЕ
# =============================================================================

# Хранится отдельно как versioned атрибут
UEFI_VARIABLES_KEY = "uefi-variables"

EXCLUDED_METADATA_KEYS: FrozenSet[str] = frozenset({UEFI_VARIABLES_KEY})

# Маркер: у сервера уже есть атрибут метаданных (update вместо create)
METADATA_FOUND_MARKER = "__ss_found"

# =============================================================================
# ТИПЫ КОМПОНЕНТОВ
# =============================================================================
# Slug-и в нижнем регистре, как они хранятся в FleetDB
# (bmc-toolbox common: "BIOS", "PhysicalMemory", "Power-Supply", ...)

SLUG_BIOS = "bios"
SLUG_BMC = "bmc"
SLUG_MAINBOARD = "mainboard"
SLUG_PHYSICAL_MEMORY = "physicalmemory"
SLUG_NIC = "nic"
SLUG_DRIVE = "drive"
SLUG_PSU = "power-supply"
SLUG_CPU = "cpu"
SLUG_TPM = "tpm"
SLUG_CPLD = "cpld"
SLUG_GPU = "gpu"
SLUG_STORAGE_CONTROLLER = "storagecontroller"
SLUG_ENCLOSURE = "enclosure"

# Статический каталог типов (когда FleetDB недоступен для загрузки типов)
DEFAULT_COMPONENT_SLUGS: List[str] = [
    SLUG_BIOS,
    SLUG_BMC,
    SLUG_MAINBOARD,
    SLUG_PHYSICAL_MEMORY,
    SLUG_NIC,
    SLUG_DRIVE,
    SLUG_PSU,
    SLUG_CPU,
    SLUG_TPM,
    SLUG_CPLD,
    SLUG_GPU,
    SLUG_STORAGE_CONTROLLER,
    SLUG_ENCLOSURE,
]

# Префикс слота DIMM у некоторых вендоров ("DIMM.Socket.A1" → "A1")
DIMM_SLOT_PREFIX = "DIMM.Socket."

# Маппинг display-имени типа → slug (для записей server-component-types)
COMPONENT_TYPE_NAME_MAP: Dict[str, str] = {
    "BIOS": SLUG_BIOS,
    "BMC": SLUG_BMC,
    "Mainboard": SLUG_MAINBOARD,
    "PhysicalMemory": SLUG_PHYSICAL_MEMORY,
    "NIC": SLUG_NIC,
    "Drive": SLUG_DRIVE,
    "Power-Supply": SLUG_PSU,
    "CPU": SLUG_CPU,
    "TPM": SLUG_TPM,
    "CPLD": SLUG_CPLD,
    "GPU": SLUG_GPU,
    "StorageController": SLUG_STORAGE_CONTROLLER,
    "Enclosure": SLUG_ENCLOSURE,
}


def normalize_slug(value: str) -> str:
    """
    Приводит имя или slug типа компонента к slug.

    Args:
        value: "PhysicalMemory", "physicalmemory", " Drive "

    Returns:
        str: Slug в нижнем регистре
    """
    if not value:
        return ""
    value = value.strip()
    return COMPONENT_TYPE_NAME_MAP.get(value, value).lower()
