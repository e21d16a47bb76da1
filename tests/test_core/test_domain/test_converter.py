"""
Тесты для InventoryConverter.
"""

import pytest

from component_inventory.core.domain.converter import InventoryConverter
from component_inventory.core.exceptions import ComponentSlugsEmptyError
from component_inventory.core.models import ServerRecord


@pytest.mark.unit
class TestToServerRecord:
    """Построение канонической записи."""

    def setup_method(self):
        self.server_id = "fc167440-18d3-4455-b5ee-1c8e347b3f36"

    def test_record_fields(self, sample_device, component_slugs):
        converter = InventoryConverter(component_slugs)
        bios_config = {"boot_mode": "UEFI"}
        record = converter.to_server_record(self.server_id, "sandbox", sample_device, bios_config)

        assert isinstance(record, ServerRecord)
        assert record.id == self.server_id
        assert record.name == self.server_id
        assert record.facility == "sandbox"
        assert record.vendor == "Dell Inc."
        assert record.model == "PowerEdge R6515"
        assert record.serial == "FL1ABC2"
        assert record.status == "Enabled"
        assert record.bios_config == bios_config
        assert len(record.components) == 11

    def test_bios_config_copied(self, sample_device, component_slugs):
        bios_config = {"boot_mode": "UEFI"}
        record = InventoryConverter(component_slugs).to_server_record(
            self.server_id, "sandbox", sample_device, bios_config,
        )
        bios_config["boot_mode"] = "BIOS"
        assert record.bios_config == {"boot_mode": "UEFI"}

    def test_empty_device(self, component_slugs):
        record = InventoryConverter(component_slugs).to_server_record(self.server_id, "sandbox", {})
        assert record.components == []
        assert record.status == ""
        assert record.bios_config == {}

    def test_empty_vocabulary_raises(self, sample_device):
        with pytest.raises(ComponentSlugsEmptyError):
            InventoryConverter([]).to_server_record(self.server_id, "sandbox", sample_device)

    def test_vendor_attributes_and_metadata(self, sample_device, component_slugs):
        converter = InventoryConverter(component_slugs)
        assert converter.vendor_attributes(sample_device)["serial"] == "FL1ABC2"
        assert converter.metadata(sample_device) == {"node_name": "fl1abc2"}


@pytest.mark.unit
class TestCompare:
    """Сверка с сохранённой записью."""

    def test_stored_none_empty_report(self, sample_device, component_slugs):
        converter = InventoryConverter(component_slugs)
        observed = converter.to_server_record("srv-1", "sandbox", sample_device)
        report = converter.compare(None, observed)

        assert report.is_match
        assert report.server_id == "srv-1"

    def test_same_snapshot_matches(self, sample_device, component_slugs):
        converter = InventoryConverter(component_slugs)
        stored = converter.to_server_record("srv-1", "sandbox", sample_device)
        observed = converter.to_server_record("srv-1", "sandbox", sample_device)

        assert converter.compare(stored, observed).is_match

    def test_stored_roundtrip_through_dict(self, sample_device, component_slugs):
        """Запись из FleetDB (dict) сверяется с новой без находок."""
        converter = InventoryConverter(component_slugs)
        observed = converter.to_server_record("srv-1", "sandbox", sample_device)
        stored = ServerRecord.from_dict(observed.to_dict())

        assert converter.compare(stored, observed).is_match

    def test_bios_upgrade_drift(self, sample_device, component_slugs):
        converter = InventoryConverter(component_slugs)
        stored = converter.to_server_record("srv-1", "sandbox", sample_device)
        sample_device["bios"]["firmware"]["installed"] = "2.7.0"
        observed = converter.to_server_record("srv-1", "sandbox", sample_device)

        report = converter.compare(stored, observed)
        assert len(report.drift) == 1
        assert report.drift[0].kind == "bios"
        assert report.drift[0].new_firmware == "2.7.0"

    def test_removed_gpu_stored_only(self, sample_device, component_slugs):
        converter = InventoryConverter(component_slugs)
        sample_device["gpus"] = [{"vendor": "NVIDIA", "model": "A100"}]
        stored = converter.to_server_record("srv-1", "sandbox", sample_device)
        del sample_device["gpus"]
        observed = converter.to_server_record("srv-1", "sandbox", sample_device)

        report = converter.compare(stored, observed)
        assert [f.kind for f in report.stored_only] == ["gpu"]


@pytest.mark.unit
class TestFromComponentTypes:
    """Справочник из записей server-component-types."""

    def test_slug_and_name(self):
        converter = InventoryConverter.from_component_types([
            {"slug": "drive"},
            {"name": "PhysicalMemory"},
            {"name": ""},
        ])
        assert converter.component_slugs == frozenset({"drive", "physicalmemory"})

    def test_empty_types(self, sample_device):
        converter = InventoryConverter.from_component_types([])
        with pytest.raises(ComponentSlugsEmptyError):
            converter.to_server_record("srv-1", "sandbox", sample_device)
