"""
Назначение серийных номеров компонентам.

Многие BMC не отдают серийник для DIMM, NIC, PSU и т.п.
Пустой серийник заменяется позицией компонента в списке его типа.

Ограничение: позиционный серийник уникален в пределах одного снимка,
но не стабилен между снимками, если устройство поменяло порядок
компонентов. Поэтому сверка с FleetDB сопоставляет компоненты по
vendor + model, а не по serial (см. core/domain/diff.py).
"""

from typing import Optional


def assign_serial(serial: Optional[str], index: int) -> str:
    """
    Возвращает не пустой серийный номер компонента.

    Args:
        serial: Серийник от устройства (может быть пустым или из пробелов)
        index: Позиция компонента в списке его типа (с нуля)

    Returns:
        str: Исходный серийник или str(index)

    Example:
        assign_serial("", 2)         # "2"
        assign_serial("  ", 0)       # "0"
        assign_serial("abc123", 5)   # "abc123"
    """
    if serial is None or not str(serial).strip():
        return str(index)
    return str(serial)
