"""Tests for the JSON configuration store."""

import json
from pathlib import Path
from typing import Any

import pytest

from printer_hub.config_store import JsonConfigStore
from printer_hub.exceptions import PrinterError, PrinterErrorCode
from printer_hub.models import PaperSize, PrinterConnectionType, PrinterType


@pytest.fixture
async def store(tmp_path: Path) -> JsonConfigStore:
    config_store = JsonConfigStore(tmp_path / "configs")
    await config_store.initialize()
    return config_store


def _read(store: JsonConfigStore) -> dict[str, Any]:
    return json.loads(store.config_file.read_text(encoding="utf-8"))


class TestPersistence:
    """Saving, loading and deleting configurations."""

    async def test_initialize_creates_directory(self, tmp_path: Path) -> None:
        config_store = JsonConfigStore(tmp_path / "nested" / "configs")
        await config_store.initialize()
        assert (tmp_path / "nested" / "configs").is_dir()
        assert await config_store.load_all_configs() == []

    async def test_save_writes_camel_case_document(self, store: JsonConfigStore, make_config: Any) -> None:
        await store.save_config(make_config())
        document = _read(store)
        assert document["version"] == "1.0"
        assert "lastUpdated" in document
        assert document["defaultConfigId"] == "p1"
        assert document["configurations"][0] == {
            "id": "p1",
            "name": "Front Counter",
            "type": "cbx_pos_89e",
            "connectionType": "usb",
            "connectionString": "0416:5011",
            "paperSize": "80mm",
            "characterSet": "UTF-8",
            "timeout": 3000,
            "retryAttempts": 2,
            "isDefault": True,
            "profile": None,
        }

    async def test_reload_from_disk(self, store: JsonConfigStore, make_config: Any, tmp_path: Path) -> None:
        await store.save_config(make_config(id="p1"))
        await store.save_config(make_config(id="p2", connection_type=PrinterConnectionType.NETWORK,
                                            connection_string="10.0.0.5:9100"))

        reloaded = JsonConfigStore(tmp_path / "configs")
        await reloaded.initialize()
        configs = await reloaded.load_all_configs()
        assert [c.id for c in configs] == ["p1", "p2"]
        assert configs[1].connection_type is PrinterConnectionType.NETWORK
        assert (await reloaded.get_default_config()).id == "p1"  # type: ignore[union-attr]

    async def test_invalid_config_is_rejected(self, store: JsonConfigStore, make_config: Any) -> None:
        with pytest.raises(PrinterError) as err:
            await store.save_config(make_config(retry_attempts=99))
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG
        assert await store.load_all_configs() == []

    async def test_load_returns_copies(self, store: JsonConfigStore, make_config: Any) -> None:
        await store.save_config(make_config())
        loaded = await store.load_config("p1")
        assert loaded is not None
        loaded.name = "Changed"
        assert (await store.load_config("p1")).name == "Front Counter"  # type: ignore[union-attr]
        assert await store.load_config("missing") is None

    async def test_delete_reassigns_default(self, store: JsonConfigStore, make_config: Any) -> None:
        await store.save_config(make_config(id="p1"))
        await store.save_config(make_config(id="p2"))
        await store.delete_config("p1")
        assert (await store.get_default_config()).id == "p2"  # type: ignore[union-attr]
        assert _read(store)["defaultConfigId"] == "p2"

        await store.delete_config("p2")
        assert await store.get_default_config() is None

    async def test_delete_unknown(self, store: JsonConfigStore) -> None:
        with pytest.raises(PrinterError) as err:
            await store.delete_config("missing")
        assert err.value.code is PrinterErrorCode.PRINTER_NOT_FOUND

    async def test_set_default(self, store: JsonConfigStore, make_config: Any) -> None:
        await store.save_config(make_config(id="p1"))
        await store.save_config(make_config(id="p2"))
        await store.set_default_config("p2")
        flags = {c.id: c.is_default for c in await store.load_all_configs()}
        assert flags == {"p1": False, "p2": True}

        with pytest.raises(PrinterError) as err:
            await store.set_default_config("missing")
        assert err.value.code is PrinterErrorCode.PRINTER_NOT_FOUND

    async def test_saving_flagged_config_moves_default(self, store: JsonConfigStore, make_config: Any) -> None:
        await store.save_config(make_config(id="p1"))
        await store.save_config(make_config(id="p2", is_default=True))
        assert (await store.get_default_config()).id == "p2"  # type: ignore[union-attr]

    async def test_corrupt_file_starts_empty(self, tmp_path: Path) -> None:
        config_dir = tmp_path / "configs"
        config_dir.mkdir()
        (config_dir / "printers.json").write_text("{not json", encoding="utf-8")
        config_store = JsonConfigStore(config_dir)
        await config_store.initialize()
        assert await config_store.load_all_configs() == []

    async def test_invalid_records_are_skipped_on_load(self, tmp_path: Path, make_config: Any) -> None:
        config_dir = tmp_path / "configs"
        config_dir.mkdir()
        document = {
            "version": "1.0",
            "defaultConfigId": "bad",
            "configurations": [
                {**make_config(id="bad").to_dict(), "timeout": -5},
                make_config(id="good").to_dict(),
            ],
        }
        (config_dir / "printers.json").write_text(json.dumps(document), encoding="utf-8")
        config_store = JsonConfigStore(config_dir)
        await config_store.initialize()
        configs = await config_store.load_all_configs()
        assert [c.id for c in configs] == ["good"]
        assert configs[0].is_default is True

    async def test_dispose_saves_and_clears(self, store: JsonConfigStore, make_config: Any) -> None:
        await store.save_config(make_config())
        store.config_file.unlink()
        await store.dispose()
        assert _read(store)["configurations"][0]["id"] == "p1"
        assert await store.load_all_configs() == []


class TestImportExport:
    """Interchange documents."""

    async def test_export_then_import_is_idempotent(
        self, store: JsonConfigStore, make_config: Any
    ) -> None:
        await store.save_config(make_config(id="p1"))
        await store.save_config(make_config(id="p2", paper_size=PaperSize.MM_58))
        await store.set_default_config("p2")
        before = await store.load_all_configs()

        exported = await store.export_configs()
        document = json.loads(exported)
        assert "exportDate" in document
        assert document["defaultConfigId"] == "p2"

        await store.import_configs(exported)
        assert await store.load_all_configs() == before
        assert (await store.get_default_config()).id == "p2"  # type: ignore[union-attr]

    async def test_import_is_all_or_nothing(self, store: JsonConfigStore, make_config: Any) -> None:
        await store.save_config(make_config(id="existing"))
        document = {
            "version": "1.0",
            "configurations": [
                make_config(id="new1").to_dict(),
                {**make_config(id="new2").to_dict(), "connectionType": "carrier_pigeon"},
            ],
        }
        with pytest.raises(PrinterError) as err:
            await store.import_configs(json.dumps(document))
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG
        assert [c.id for c in await store.load_all_configs()] == ["existing"]

    async def test_import_rejects_duplicate_ids(self, store: JsonConfigStore, make_config: Any) -> None:
        document = {"configurations": [make_config().to_dict(), make_config().to_dict()]}
        with pytest.raises(PrinterError):
            await store.import_configs(document)

    async def test_import_rederives_missing_default(self, store: JsonConfigStore, make_config: Any) -> None:
        document = {
            "defaultConfigId": "gone",
            "configurations": [make_config(id="a").to_dict(), make_config(id="b").to_dict()],
        }
        await store.import_configs(document)
        flags = {c.id: c.is_default for c in await store.load_all_configs()}
        assert flags == {"a": True, "b": False}

    @pytest.mark.parametrize("data", ["not json", json.dumps({"configs": []}), json.dumps([1, 2])])
    async def test_import_rejects_malformed_documents(self, store: JsonConfigStore, data: str) -> None:
        with pytest.raises(PrinterError) as err:
            await store.import_configs(data)
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG


class TestTemplates:
    """Config and connection templates."""

    def test_config_template(self, tmp_path: Path) -> None:
        template = JsonConfigStore(tmp_path).get_config_template(PrinterType.CBX_POS_89E)
        assert template.id.startswith("template_cbx_pos_89e_")
        assert template.name == "CBX POS 89E Thermal Printer"
        assert template.timeout == 3000
        assert template.connection_string == ""

    def test_unknown_template_type(self, tmp_path: Path) -> None:
        with pytest.raises(PrinterError) as err:
            JsonConfigStore(tmp_path).get_config_template("laser")
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG

    def test_connection_templates(self, tmp_path: Path) -> None:
        templates = JsonConfigStore(tmp_path).get_connection_templates()
        assert [t["type"] for t in templates] == ["usb", "serial", "network", "bluetooth"]
        assert "192.168.1.100:9100" in templates[2]["examples"]
