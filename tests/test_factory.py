"""Tests for the printer factory and its validation."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from printer_hub.exceptions import PrinterError, PrinterErrorCode
from printer_hub.factory import PrinterFactory
from printer_hub.models import PaperSize, PrinterConfig, PrinterConnectionType, PrinterType
from printer_hub.printer.driver import EscposPrinterDriver
from printer_hub.printer.interface import PrinterDriver
from printer_hub.validation import is_valid_config


class TestValidateConfig:
    """Two-phase config validation."""

    def test_valid_configs(self, factory: PrinterFactory, make_config: Any) -> None:
        valid = [
            make_config(),
            make_config(connection_type=PrinterConnectionType.SERIAL, connection_string="COM3"),
            make_config(connection_type=PrinterConnectionType.SERIAL, connection_string="/dev/ttyUSB0"),
            make_config(connection_type=PrinterConnectionType.NETWORK, connection_string="192.168.1.50:9100"),
            make_config(type=PrinterType.GENERIC, connection_type=PrinterConnectionType.BLUETOOTH,
                        connection_string="bt:/dev/rfcomm0"),
            make_config(timeout=0, retry_attempts=0),
            make_config(timeout=60000, retry_attempts=10),
        ]
        for config in valid:
            assert factory.validate_config(config), config
            assert isinstance(factory.create_printer(config), EscposPrinterDriver)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"id": ""},
            {"name": "   "},
            {"connection_string": ""},
            {"timeout": -1},
            {"timeout": 60001},
            {"retry_attempts": -1},
            {"retry_attempts": 11},
            {"type": "laser"},
            {"connection_type": "infrared"},
            {"paper_size": "210mm"},
        ],
    )
    def test_invalid_fields(self, factory: PrinterFactory, make_config: Any, overrides: dict[str, Any]) -> None:
        config = make_config(**overrides)
        assert factory.validate_config(config) is False
        with pytest.raises(PrinterError) as err:
            factory.create_printer(config)
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG

    @pytest.mark.parametrize(
        ("connection_type", "connection_string"),
        [
            (PrinterConnectionType.SERIAL, "ttyUSB0"),
            (PrinterConnectionType.SERIAL, "/dev/lp0"),
            (PrinterConnectionType.NETWORK, "192.168.1.50"),
            (PrinterConnectionType.NETWORK, "192.168.1.50:0"),
            (PrinterConnectionType.NETWORK, "192.168.1.50:70000"),
            (PrinterConnectionType.USB, "x" * 256),
        ],
    )
    def test_connection_string_shape(
        self,
        factory: PrinterFactory,
        make_config: Any,
        connection_type: PrinterConnectionType,
        connection_string: str,
    ) -> None:
        config = make_config(connection_type=connection_type, connection_string=connection_string)
        assert factory.validate_config(config) is False

    def test_vendor_paper_sizes(self, factory: PrinterFactory, make_config: Any) -> None:
        assert factory.validate_config(make_config(type=PrinterType.EPSON, paper_size=PaperSize.MM_58))
        assert not factory.validate_config(make_config(type=PrinterType.EPSON, paper_size=PaperSize.MM_44))
        assert factory.validate_config(make_config(type=PrinterType.GENERIC, paper_size=PaperSize.MM_44))

    def test_bluetooth_only_for_generic(self, factory: PrinterFactory, make_config: Any) -> None:
        config = make_config(connection_type=PrinterConnectionType.BLUETOOTH, connection_string="bt:/dev/rfcomm0")
        assert factory.validate_config(config) is False

    def test_unknown_character_set(self, factory: PrinterFactory, make_config: Any) -> None:
        assert not factory.validate_config(make_config(character_set="KLINGON-1"))
        assert factory.validate_config(make_config(character_set="CP437"))

    def test_validate_never_raises(self, factory: PrinterFactory) -> None:
        broken = MagicMock(spec=PrinterConfig)
        broken.id = None
        assert factory.validate_config(broken) is False


class TestCreatePrinter:
    """Driver construction and the registration table."""

    def test_created_driver_satisfies_protocol(self, factory: PrinterFactory, make_config: Any) -> None:
        driver = factory.create_printer(make_config())
        assert isinstance(driver, PrinterDriver)
        assert driver.id == "p1"

    def test_supported_types(self, factory: PrinterFactory) -> None:
        assert set(factory.get_supported_types()) == set(PrinterType)
        assert factory.is_type_supported(PrinterType.STAR)

    def test_unregistered_type_is_unsupported(self, make_config: Any) -> None:
        factory = PrinterFactory(register_builtin_types=False)
        assert factory.get_supported_types() == []
        with pytest.raises(PrinterError) as err:
            factory.create_printer(make_config())
        assert err.value.code is PrinterErrorCode.UNSUPPORTED_OPERATION

    def test_register_custom_constructor(self, make_config: Any) -> None:
        factory = PrinterFactory(register_builtin_types=False)
        sentinel = MagicMock()
        factory.register_printer_type(PrinterType.STAR, lambda config: sentinel, description="Star test")
        assert factory.create_printer(make_config(type=PrinterType.STAR)) is sentinel
        info = factory.get_type_info(PrinterType.STAR)
        assert info is not None
        assert info["description"] == "Star test"
        assert info["has_validator"] is False

    def test_custom_validator_rejects(self, make_config: Any) -> None:
        factory = PrinterFactory(register_builtin_types=False)
        factory.register_printer_type(PrinterType.GENERIC, MagicMock(), lambda config: False)
        config = make_config(type=PrinterType.GENERIC)
        assert factory.validate_config(config) is False
        with pytest.raises(PrinterError) as err:
            factory.create_printer(config)
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG

    def test_constructor_failure_is_wrapped(self, make_config: Any) -> None:
        factory = PrinterFactory(register_builtin_types=False)

        def _explode(config: PrinterConfig) -> PrinterDriver:
            raise RuntimeError("bad driver")

        factory.register_printer_type(PrinterType.GENERIC, _explode)
        with pytest.raises(PrinterError) as err:
            factory.create_printer(make_config(type=PrinterType.GENERIC))
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG
        assert isinstance(err.value.cause, RuntimeError)

    def test_new_type_tag_builds_drivers(self, factory: PrinterFactory, connector: Any, make_config: Any) -> None:
        factory.register_printer_type(
            "acme_thermal",
            lambda config: EscposPrinterDriver(config, connector),
            description="Acme thermal printer",
            paper_sizes=[PaperSize.MM_58],
        )
        config = make_config(type="acme_thermal", paper_size=PaperSize.MM_58)

        assert "acme_thermal" in factory.get_supported_types()
        assert factory.validate_config(config)
        driver = factory.create_printer(config)
        assert isinstance(driver, EscposPrinterDriver)
        assert driver.info.type == "acme_thermal"
        assert not factory.validate_config(make_config(type="acme_thermal", paper_size=PaperSize.MM_80))

    def test_unregistered_type_tag_is_invalid(self, factory: PrinterFactory, make_config: Any) -> None:
        with pytest.raises(PrinterError) as err:
            factory.create_printer(make_config(type="acme_thermal"))
        assert err.value.code is PrinterErrorCode.INVALID_CONFIG
        assert "acme_thermal is not registered" in str(err.value)
        assert is_valid_config(make_config(type="acme_thermal"))

    def test_get_type_info_unknown(self) -> None:
        assert PrinterFactory(register_builtin_types=False).get_type_info(PrinterType.EPSON) is None


class TestHelpers:
    """Default configs and type detection."""

    def test_create_default_config(self, factory: PrinterFactory) -> None:
        config = factory.create_default_config(PrinterType.EPSON, connection_string="04b8:0202")
        assert config.type is PrinterType.EPSON
        assert config.name == "Epson Thermal Printer"
        assert config.timeout == 4000
        assert config.connection_type is PrinterConnectionType.USB
        assert config.id.startswith("printer_")
        assert factory.validate_config(config)

    def test_create_default_config_without_connection_is_invalid(self, factory: PrinterFactory) -> None:
        assert factory.validate_config(factory.create_default_config(PrinterType.GENERIC)) is False

    @pytest.mark.parametrize(
        ("connection_string", "expected"),
        [
            ("CBX POS 89E", [PrinterType.CBX_POS_89E, PrinterType.GENERIC]),
            ("EPSON TM-T20", [PrinterType.EPSON, PrinterType.GENERIC]),
            ("Star TSP100", [PrinterType.STAR, PrinterType.GENERIC]),
            ("192.168.1.50:9100", [PrinterType.GENERIC]),
        ],
    )
    def test_detect_printer_type(
        self, factory: PrinterFactory, connection_string: str, expected: list[PrinterType]
    ) -> None:
        assert factory.detect_printer_type(connection_string) == expected
