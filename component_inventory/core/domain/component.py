"""
Domain logic для нормализации компонентов.

Преобразует секции снимка инвентаризации (bmc-toolbox common.Device)
в канонические Component. Правила для каждого типа описаны таблицей
KIND_RULES: ключ секции, slug, поля атрибутов, fallback-и модели.

Порядок KIND_RULES фиксирован: одинаковый снимок всегда даёт
одинаковый порядок компонентов.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..constants import (
    DIMM_SLOT_PREFIX,
    SLUG_BIOS,
    SLUG_BMC,
    SLUG_CPLD,
    SLUG_CPU,
    SLUG_DRIVE,
    SLUG_ENCLOSURE,
    SLUG_GPU,
    SLUG_MAINBOARD,
    SLUG_NIC,
    SLUG_PHYSICAL_MEMORY,
    SLUG_PSU,
    SLUG_STORAGE_CONTROLLER,
    SLUG_TPM,
    normalize_slug,
)
from ..exceptions import ComponentSlugsEmptyError
from ..models import Component, ComponentStatus, Firmware
from .serial import assign_serial

logger = logging.getLogger(__name__)

# Пары (ключ в снимке, ключ в атрибутах)
FieldMap = Tuple[Tuple[str, str], ...]

COMMON_FIELDS: FieldMap = (
    ("description", "description"),
    ("product_name", "product_name"),
    ("metadata", "metadata"),
    ("capabilities", "capabilities"),
)


def _same(*names: str) -> FieldMap:
    return tuple((name, name) for name in names)


@dataclass(frozen=True)
class KindRule:
    """
    Правила нормализации одного типа компонентов.

    Attributes:
        section: Ключ секции в снимке (memory, drives, ...)
        slug: Slug типа компонента
        many: Секция - список (False: одиночный объект)
        fields: Поля атрибутов сверх COMMON_FIELDS
        with_attributes: Заполнять attributes (NIC - без атрибутов)
        model_from_description: Fallback модели на description
        slot_prefix: Вендорский префикс слота, который отрезается
        placeholder_fields: Запись пропускается, если все эти поля пустые
    """
    section: str
    slug: str
    many: bool = True
    fields: FieldMap = ()
    with_attributes: bool = True
    model_from_description: bool = False
    slot_prefix: str = ""
    placeholder_fields: Tuple[str, ...] = ()


KIND_RULES: Tuple[KindRule, ...] = (
    KindRule(
        section="bios",
        slug=SLUG_BIOS,
        many=False,
        fields=_same("oem", "size_bytes", "capacity_bytes"),
    ),
    KindRule(section="bmc", slug=SLUG_BMC, many=False, fields=_same("oem")),
    KindRule(
        section="mainboard",
        slug=SLUG_MAINBOARD,
        many=False,
        fields=_same("oem", "physid"),
    ),
    KindRule(
        section="memory",
        slug=SLUG_PHYSICAL_MEMORY,
        fields=_same(
            "oem", "slot", "clock_speed_hz", "form_factor", "part_number", "size_bytes",
        ),
        slot_prefix=DIMM_SLOT_PREFIX,
        # Пустые слоты: BMC отдаёт их как записи без данных
        placeholder_fields=("vendor", "product_name", "size_bytes", "clock_speed_hz"),
    ),
    KindRule(section="nics", slug=SLUG_NIC, with_attributes=False),
    KindRule(
        section="drives",
        slug=SLUG_DRIVE,
        fields=_same(
            "oem", "bus_info", "oem_id", "storage_controller", "protocol",
            "smart_errors", "smart_status", "wwn", "capacity_bytes",
            "block_size_bytes", "capable_speed_gbps", "negotiated_speed_gbps",
        ) + (("type", "drive_type"),),
        model_from_description=True,
    ),
    KindRule(
        section="power_supplies",
        slug=SLUG_PSU,
        fields=_same("id", "oem", "power_capacity_watts"),
    ),
    KindRule(
        section="cpus",
        slug=SLUG_CPU,
        fields=_same("id", "slot", "architecture", "clock_speed_hz", "cores", "threads"),
    ),
    KindRule(section="tpms", slug=SLUG_TPM, fields=_same("interface_type")),
    KindRule(section="cplds", slug=SLUG_CPLD),
    KindRule(section="gpus", slug=SLUG_GPU),
    KindRule(
        section="storage_controller",
        slug=SLUG_STORAGE_CONTROLLER,
        fields=_same(
            "id", "oem", "supported_controller_protocol", "supported_device_protocol",
            "supported_raid_types", "physid", "bus_info", "speed_gbps",
        ),
        model_from_description=True,
    ),
    KindRule(
        section="enclosures",
        slug=SLUG_ENCLOSURE,
        fields=_same("id", "oem", "chassis_type"),
    ),
)

# Для типов из справочника, которых нет в KIND_RULES
GENERIC_RULE = KindRule(section="", slug="")


def _is_blank(value: Any) -> bool:
    """Пустое значение в смысле omitempty: None, "", 0, False, [], {}."""
    if isinstance(value, str):
        return not value.strip()
    return not value


def _text(value: Any) -> str:
    """Строковое поле записи: None → "", числа и прочее через str()."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class ComponentNormalizer:
    """
    Нормализация компонентов сервера.

    Компоненты неизвестных типов (нет в справочнике) молча пропускаются:
    новое железо не должно ломать приём инвентаризации.

    Example:
        normalizer = ComponentNormalizer({"drive", "physicalmemory"})
        components = normalizer.normalize_device(raw_device)
    """

    def __init__(self, component_slugs: Iterable[str]):
        """
        Args:
            component_slugs: Справочник известных типов компонентов
        """
        self.component_slugs = frozenset(
            normalize_slug(s) for s in component_slugs or () if s
        )
        self._rules_by_slug: Dict[str, KindRule] = {r.slug: r for r in KIND_RULES}
        self._rules_by_section: Dict[str, KindRule] = {r.section: r for r in KIND_RULES}

    def _ensure_slugs(self) -> None:
        if not self.component_slugs:
            raise ComponentSlugsEmptyError()

    def is_known(self, kind: str) -> bool:
        """Проверяет что тип есть в справочнике."""
        return normalize_slug(kind) in self.component_slugs

    def normalize(
        self,
        kind: str,
        raw: Dict[str, Any],
        index: int = 0,
    ) -> Optional[Component]:
        """
        Нормализует одну запись компонента.

        Args:
            kind: Slug или имя типа (Drive, physicalmemory)
            raw: Запись компонента из снимка
            index: Позиция в списке своего типа (для серийника)

        Returns:
            Component или None если тип неизвестен

        Raises:
            ComponentSlugsEmptyError: Справочник типов пуст
        """
        self._ensure_slugs()

        slug = normalize_slug(kind)
        if slug not in self.component_slugs:
            logger.debug(f"Пропущен компонент неизвестного типа: {kind}")
            return None

        rule = self._rules_by_slug.get(slug, GENERIC_RULE)
        raw = raw or {}

        model = _text(raw.get("model"))
        product_name = _text(raw.get("product_name"))
        description = _text(raw.get("description"))

        if not model.strip() and product_name.strip():
            model = product_name
        # Часть прошивок пишет модель только в description
        if rule.model_from_description and not model.strip() and description.strip():
            model = description

        return Component(
            kind=slug,
            vendor=_text(raw.get("vendor")),
            model=model,
            serial=assign_serial(raw.get("serial"), index),
            attributes=self._build_attributes(rule, raw),
            status=ComponentStatus.from_dict(raw.get("status")),
            firmware=Firmware.from_dict(raw.get("firmware")),
        )

    def _build_attributes(self, rule: KindRule, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Собирает атрибуты компонента, пустые значения пропускаются."""
        if not rule.with_attributes:
            return {}

        attributes: Dict[str, Any] = {}
        for raw_key, attr_key in COMMON_FIELDS + rule.fields:
            value = raw.get(raw_key)
            if _is_blank(value):
                continue
            if attr_key == "slot" and rule.slot_prefix and isinstance(value, str):
                value = value[len(rule.slot_prefix):] if value.startswith(rule.slot_prefix) else value
            attributes[attr_key] = value
        return attributes

    def _is_placeholder(self, rule: KindRule, raw: Dict[str, Any]) -> bool:
        if not rule.placeholder_fields:
            return False
        return all(_is_blank(raw.get(f)) for f in rule.placeholder_fields)

    def normalize_section(self, section: str, data: Any) -> List[Component]:
        """
        Нормализует секцию снимка (одиночный объект или список).

        Args:
            section: Ключ секции (memory, drives, bios, ...)
            data: Содержимое секции

        Returns:
            List[Component]: Компоненты секции (пустой если тип неизвестен)
        """
        self._ensure_slugs()

        rule = self._rules_by_section.get(section)
        if rule is None or not data:
            return []

        if isinstance(data, dict):
            entries = [data]
        elif rule.many and isinstance(data, list):
            entries = data
        else:
            logger.debug(f"Неожиданный формат секции {section}: {type(data).__name__}")
            return []

        components = []
        # index считается по исходному списку, включая пропущенные записи
        for index, raw in enumerate(entries):
            if not isinstance(raw, dict):
                continue
            if self._is_placeholder(rule, raw):
                continue
            component = self.normalize(rule.slug, raw, index)
            if component is not None:
                components.append(component)
        return components

    def normalize_device(self, device: Dict[str, Any]) -> List[Component]:
        """
        Нормализует все секции снимка в порядке KIND_RULES.

        Args:
            device: Снимок инвентаризации

        Returns:
            List[Component]: Компоненты в детерминированном порядке

        Raises:
            ComponentSlugsEmptyError: Справочник типов пуст
        """
        self._ensure_slugs()

        components: List[Component] = []
        for rule in KIND_RULES:
            components.extend(self.normalize_section(rule.section, (device or {}).get(rule.section)))
        return components
