"""
Тесты Data Models.
"""

import pytest

from component_inventory.core.models import (
    Component,
    ComponentStatus,
    Firmware,
    ServerRecord,
)


@pytest.mark.unit
class TestFirmware:
    """Тесты Firmware."""

    def test_from_dict_none(self):
        assert Firmware.from_dict(None) is None
        assert Firmware.from_dict({}) is None

    @pytest.mark.parametrize("data", ["1.2.3", 5, ["1"]])
    def test_from_dict_not_object(self, data):
        """Прошивка не объектом → None."""
        assert Firmware.from_dict(data) is None

    def test_numeric_version_as_string(self):
        assert Firmware.from_dict({"installed": 2}).installed == "2"

    def test_previous_as_objects(self):
        """bmc-toolbox отдаёт previous как список объектов."""
        fw = Firmware.from_dict({"installed": "2", "previous": [{"installed": "1"}, {"installed": ""}]})
        assert fw.previous == ["1"]

    def test_previous_as_strings(self):
        fw = Firmware.from_dict({"installed": "2", "previous": ["1", "0"]})
        assert fw.previous == ["1", "0"]

    def test_to_dict_omits_empty(self):
        assert Firmware(installed="1").to_dict() == {"installed": "1"}


@pytest.mark.unit
class TestComponentStatus:
    """Тесты ComponentStatus."""

    def test_empty_is_none(self):
        assert ComponentStatus.from_dict({"state": "", "health": ""}) is None

    def test_from_dict_not_object(self):
        assert ComponentStatus.from_dict("OK") is None

    def test_capitalized_keys(self):
        """Redfish-стиль State/Health."""
        status = ComponentStatus.from_dict({"State": "Enabled", "Health": "OK"})
        assert status == ComponentStatus(state="Enabled", health="OK")


@pytest.mark.unit
class TestComponent:
    """Тесты Component."""

    def test_vendor_model(self):
        assert Component(kind="drive", vendor="Micron", model="5300").vendor_model == "Micron5300"

    def test_from_dict_kind_lowercased(self):
        """Имя типа из FleetDB приводится к slug."""
        component = Component.from_dict({"name": "Drive", "vendor": "Micron", "serial": "1"})
        assert component.kind == "drive"

    def test_from_dict_component_type_slug(self):
        component = Component.from_dict({"component_type_slug": "physicalmemory"})
        assert component.kind == "physicalmemory"

    def test_from_dict_display_name(self):
        """Имя типа "PhysicalMemory" → slug."""
        assert Component.from_dict({"name": "PhysicalMemory"}).kind == "physicalmemory"

    def test_from_dict_attributes_not_object(self):
        """attributes не объект → ValueError (запись нельзя конвертировать)."""
        with pytest.raises(ValueError):
            Component.from_dict({"name": "drive", "attributes": [{"namespace": "n", "data": {}, "created_at": "t"}]})

    def test_to_dict(self):
        component = Component(
            kind="drive",
            vendor="Micron",
            model="5300",
            serial="1",
            attributes={"drive_type": "SSD"},
            firmware=Firmware(installed="D3MU001"),
        )
        assert component.to_dict() == {
            "name": "drive",
            "vendor": "Micron",
            "model": "5300",
            "serial": "1",
            "attributes": {"drive_type": "SSD"},
            "firmware": {"installed": "D3MU001"},
        }

    def test_frozen(self):
        component = Component(kind="drive")
        with pytest.raises(AttributeError):
            component.model = "X"

    def test_ensure_list(self):
        components = Component.ensure_list([{"name": "cpu"}])
        assert components == [Component(kind="cpu")]
        assert Component.ensure_list(components) is components
        assert Component.ensure_list([]) == []


@pytest.mark.unit
class TestServerRecord:
    """Тесты ServerRecord."""

    def test_from_dict_aliases(self):
        record = ServerRecord.from_dict({
            "uuid": "srv-1",
            "facility_code": "sandbox",
            "bios_cfg": {"boot_mode": "UEFI"},
        })
        assert record.id == "srv-1"
        assert record.name == "srv-1"
        assert record.facility == "sandbox"
        assert record.bios_config == {"boot_mode": "UEFI"}

    def test_to_dict_uses_bios_cfg(self):
        data = ServerRecord(id="srv-1", bios_config={"a": "b"}).to_dict()
        assert data["bios_cfg"] == {"a": "b"}
        assert data["components"] == []

