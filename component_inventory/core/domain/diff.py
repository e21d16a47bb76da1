"""
Domain Layer для сверки компонентов.

Сравнивает сохранённый в FleetDB список компонентов с наблюдаемым.
Ничего не пишет и не меняет входные данные - только отчёт.

Сопоставление идёт по типу и конкатенации vendor + model,
а не по serial: позиционные серийники нестабильны (см. serial.py).

Пример использования:
    from component_inventory.core.domain.diff import ComponentDiffer

    report = ComponentDiffer().diff(stored.components, observed.components, server_id)
    if report.has_findings:
        print(report.format_detailed())
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..logging import get_logger
from ..models import Component

logger = get_logger(__name__)

REASON_KIND_NOT_REPORTED = "kind not reported"
REASON_UNIT_NOT_REPORTED = "unit not reported"


class FindingType(str, Enum):
    """Тип расхождения."""
    DRIFT = "drift"
    STORED_ONLY = "stored-only"


@dataclass
class DiffFinding:
    """
    Одно расхождение между сохранённым и наблюдаемым.

    Attributes:
        finding_type: drift или stored-only
        kind: Slug типа компонента
        vendor: Производитель сохранённого компонента
        model: Модель сохранённого компонента
        serial: Серийник сохранённого компонента
        old_firmware: Сохранённая версия прошивки (drift)
        new_firmware: Наблюдаемая версия прошивки (drift)
        reason: Причина (stored-only)
    """
    finding_type: FindingType
    kind: str
    vendor: str = ""
    model: str = ""
    serial: str = ""
    old_firmware: str = ""
    new_firmware: str = ""
    reason: str = ""

    @property
    def name(self) -> str:
        return " ".join(p for p in (self.kind, self.vendor, self.model) if p)

    def __str__(self) -> str:
        if self.finding_type == FindingType.DRIFT:
            return f"~ {self.name}: firmware {self.old_firmware!r} → {self.new_firmware!r}"
        return f"- {self.name} ({self.reason})"

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь."""
        return {
            "finding": self.finding_type.value,
            "kind": self.kind,
            "vendor": self.vendor,
            "model": self.model,
            "serial": self.serial,
            "old_firmware": self.old_firmware,
            "new_firmware": self.new_firmware,
            "reason": self.reason,
        }


@dataclass
class DiffReport:
    """
    Результат сверки компонентов сервера.

    Attributes:
        server_id: ID сервера
        drift: Компоненты с изменившейся прошивкой
        stored_only: Сохранённые компоненты, которых нет в наблюдении
        matched: Совпавшие компоненты
    """
    server_id: str = ""
    drift: List[DiffFinding] = field(default_factory=list)
    stored_only: List[DiffFinding] = field(default_factory=list)
    matched: List[Component] = field(default_factory=list)

    @property
    def findings(self) -> List[DiffFinding]:
        """Все расхождения (drift, затем stored-only)."""
        return self.drift + self.stored_only

    @property
    def has_findings(self) -> bool:
        """Есть ли расхождения."""
        return bool(self.drift or self.stored_only)

    @property
    def is_match(self) -> bool:
        """Сохранённое совпадает с наблюдаемым."""
        return not self.has_findings

    def summary(self) -> str:
        """Краткая сводка."""
        target = self.server_id or "server"
        parts = []
        if self.drift:
            parts.append(f"~{len(self.drift)} drift")
        if self.stored_only:
            parts.append(f"-{len(self.stored_only)} stored-only")
        if self.matched:
            parts.append(f"={len(self.matched)} matched")

        if not self.has_findings:
            return f"{target}: no findings"

        return f"{target}: {', '.join(parts)}"

    def format_detailed(self) -> str:
        """Детальный вывод расхождений."""
        lines = [self.summary(), ""]

        if self.drift:
            lines.append("DRIFT:")
            for item in self.drift:
                lines.append(f"  {item}")

        if self.stored_only:
            lines.append("STORED-ONLY:")
            for item in self.stored_only:
                lines.append(f"  {item}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь."""
        return {
            "server_id": self.server_id,
            "summary": {
                "drift": len(self.drift),
                "stored_only": len(self.stored_only),
                "matched": len(self.matched),
            },
            "drift": [f.to_dict() for f in self.drift],
            "stored_only": [f.to_dict() for f in self.stored_only],
        }


def build_component_index(components: Iterable[Component]) -> Dict[str, List[Component]]:
    """
    Группирует компоненты по типу.

    Args:
        components: Компоненты в любом порядке

    Returns:
        Dict: kind → компоненты этого типа (порядок входа сохраняется)
    """
    index: Dict[str, List[Component]] = {}
    for component in components or []:
        index.setdefault(component.kind, []).append(component)
    return index


class ComponentDiffer:
    """
    Сверка сохранённых компонентов с наблюдаемыми.

    Проход идёт по сохранённой стороне: наблюдаемые компоненты,
    которых нет в FleetDB, расхождением не считаются (их добавит
    запись нового списка).
    """

    def diff(
        self,
        stored: Iterable[Component],
        observed: Iterable[Component],
        server_id: str = "",
    ) -> DiffReport:
        """
        Сравнивает два списка компонентов.

        Args:
            stored: Компоненты из FleetDB
            observed: Нормализованные компоненты из снимка
            server_id: ID сервера (для лога и отчёта)

        Returns:
            DiffReport
        """
        report = DiffReport(server_id=server_id)
        observed_index = build_component_index(observed)
        log = logger.bind(server=server_id)

        for component in stored or []:
            bucket = observed_index.get(component.kind)
            if not bucket:
                finding = self._stored_only(component, REASON_KIND_NOT_REPORTED)
                report.stored_only.append(finding)
                log.warning(
                    f"Тип компонента не найден в наблюдении: {component.kind}",
                    component=component.kind,
                    finding=finding.finding_type.value,
                )
                continue

            match = self._find_match(component, bucket)
            if match is None:
                finding = self._stored_only(component, REASON_UNIT_NOT_REPORTED)
                report.stored_only.append(finding)
                log.warning(
                    f"Компонент не найден в наблюдении: {finding.name}",
                    component=component.kind,
                    finding=finding.finding_type.value,
                )
                continue

            if component.installed_firmware != match.installed_firmware:
                finding = DiffFinding(
                    finding_type=FindingType.DRIFT,
                    kind=component.kind,
                    vendor=component.vendor,
                    model=component.model,
                    serial=component.serial,
                    old_firmware=component.installed_firmware,
                    new_firmware=match.installed_firmware,
                )
                report.drift.append(finding)
                log.warning(
                    f"Прошивка изменилась: {finding}",
                    component=component.kind,
                    finding=finding.finding_type.value,
                )
                continue

            report.matched.append(component)

        if report.has_findings:
            log.info(f"Сверка компонентов: {report.summary()}")
        return report

    @staticmethod
    def _find_match(component: Component, bucket: List[Component]) -> Optional[Component]:
        """Первый наблюдаемый компонент с тем же vendor + model."""
        key = component.vendor_model
        for candidate in bucket:
            if candidate.vendor_model == key:
                return candidate
        return None

    @staticmethod
    def _stored_only(component: Component, reason: str) -> DiffFinding:
        return DiffFinding(
            finding_type=FindingType.STORED_ONLY,
            kind=component.kind,
            vendor=component.vendor,
            model=component.model,
            serial=component.serial,
            reason=reason,
        )
