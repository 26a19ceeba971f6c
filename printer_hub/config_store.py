"""Persistence of printer configurations."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
import json
import logging
import os
from pathlib import Path
import time
from typing import Any, Protocol, TypeVar

import voluptuous as vol

from .const import CONFIG_FILE_NAME, CONFIG_FORMAT_VERSION
from .exceptions import PrinterError, PrinterErrorCode
from .models import PrinterConfig, PrinterConnectionType, PrinterType, utcnow
from .schemas import CONFIG_DOCUMENT_SCHEMA
from .security import sanitize_log_message
from .templates import CONNECTION_EXAMPLES, get_config_template
from .validation import is_valid_config

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


def parse_config_document(data: str | Mapping[str, Any]) -> tuple[list[PrinterConfig], str | None]:
    """Parse an exported configuration document.

    Returns the records and the ``defaultConfigId``. Raises INVALID_CONFIG
    for a malformed document, a record failing the generic field checks or
    a repeated id.
    """
    try:
        document = CONFIG_DOCUMENT_SCHEMA(json.loads(data) if isinstance(data, str) else dict(data))
    except (ValueError, vol.Invalid) as err:
        raise PrinterError(
            f"Failed to import configurations: invalid document ({err})",
            PrinterErrorCode.INVALID_CONFIG,
            cause=err,
        ) from err

    configs: dict[str, PrinterConfig] = {}
    for record in document["configurations"]:
        config = PrinterConfig.from_dict(record)
        if not is_valid_config(config) or config.id in configs:
            raise PrinterError(
                f"Failed to import configurations: invalid configuration "
                f"{sanitize_log_message(str(record.get('id') or 'unknown'))}",
                PrinterErrorCode.INVALID_CONFIG,
                config.id or None,
            )
        configs[config.id] = config
    return list(configs.values()), document.get("defaultConfigId")


class ConfigStore(Protocol):
    """Storage the printer service loads and saves configurations through."""

    async def initialize(self) -> None: ...

    async def save_config(self, config: PrinterConfig) -> None: ...

    async def load_config(self, config_id: str) -> PrinterConfig | None: ...

    async def load_all_configs(self) -> list[PrinterConfig]: ...

    async def delete_config(self, config_id: str) -> None: ...

    async def get_default_config(self) -> PrinterConfig | None: ...

    async def set_default_config(self, config_id: str) -> None: ...

    async def validate_config(self, config: PrinterConfig) -> bool: ...

    def get_config_template(self, printer_type: PrinterType | str) -> PrinterConfig: ...

    async def export_configs(self) -> str: ...

    async def import_configs(self, data: str | Mapping[str, Any]) -> None: ...

    def get_connection_templates(self) -> list[dict[str, Any]]: ...

    async def dispose(self) -> None: ...


class JsonConfigStore:
    """Keeps configurations in memory and mirrors them to ``printers.json``.

    Every change is written through to the file. A missing or unreadable
    file starts an empty store.
    """

    def __init__(self, config_dir: str | os.PathLike[str]) -> None:
        self._config_dir = Path(config_dir)
        self._config_file = self._config_dir / CONFIG_FILE_NAME
        self._configs: dict[str, PrinterConfig] = {}
        self._default_id: str | None = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    async def _in_executor(self, func: Callable[..., _T], *args: Any) -> _T:
        return await asyncio.get_running_loop().run_in_executor(None, func, *args)

    async def initialize(self) -> None:
        try:
            await self._in_executor(lambda: self._config_dir.mkdir(parents=True, exist_ok=True))
        except OSError as err:
            raise PrinterError(
                f"Failed to create configuration directory {self._config_dir}: {err}",
                PrinterErrorCode.INVALID_CONFIG,
                cause=err,
            ) from err
        await self._load()

    def _read_document(self) -> dict[str, Any] | None:
        try:
            raw = self._config_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return CONFIG_DOCUMENT_SCHEMA(json.loads(raw))

    async def _load(self) -> None:
        self._configs.clear()
        self._default_id = None
        try:
            document = await self._in_executor(self._read_document)
        except (OSError, ValueError, vol.Invalid) as err:
            _LOGGER.warning(
                "Ignoring unreadable printer configuration file %s: %s", self._config_file, err
            )
            return
        if document is None:
            _LOGGER.debug("No printer configuration file at %s", self._config_file)
            return

        for record in document["configurations"]:
            config = PrinterConfig.from_dict(record)
            if not is_valid_config(config) or config.id in self._configs:
                _LOGGER.warning(
                    "Skipping invalid stored printer configuration %s",
                    sanitize_log_message(str(record.get("id", "unknown"))),
                )
                continue
            self._configs[config.id] = config
        self._select_default(document.get("defaultConfigId"))
        _LOGGER.debug("Loaded %s printer configurations", len(self._configs))

    def _select_default(self, preferred: str | None) -> None:
        """Make ``preferred`` the default, or the first config if it is unknown."""
        if preferred not in self._configs:
            preferred = next(iter(self._configs), None)
        self._default_id = preferred
        for config_id, config in self._configs.items():
            config.is_default = config_id == preferred

    def _document(self, date_key: str) -> dict[str, Any]:
        return {
            "version": CONFIG_FORMAT_VERSION,
            date_key: utcnow().isoformat(),
            "defaultConfigId": self._default_id,
            "configurations": [config.to_dict() for config in self._configs.values()],
        }

    def _write_document(self, document: dict[str, Any]) -> None:
        tmp_file = self._config_file.with_suffix(".tmp")
        tmp_file.write_text(json.dumps(document, indent=2), encoding="utf-8")
        os.replace(tmp_file, self._config_file)

    async def _save(self) -> None:
        await self._in_executor(self._write_document, self._document("lastUpdated"))

    def _require(self, config_id: str) -> PrinterConfig:
        config = self._configs.get(config_id)
        if config is None:
            raise PrinterError(
                f"Configuration '{sanitize_log_message(str(config_id))}' not found",
                PrinterErrorCode.PRINTER_NOT_FOUND,
                config_id,
            )
        return config

    async def validate_config(self, config: PrinterConfig) -> bool:
        return is_valid_config(config)

    async def save_config(self, config: PrinterConfig) -> None:
        """Insert or replace a configuration.

        The first stored config and any config flagged ``is_default``
        become the default.
        """
        if not is_valid_config(config):
            raise PrinterError("Invalid printer configuration", PrinterErrorCode.INVALID_CONFIG, config.id)
        self._configs[config.id] = config.copy()
        if config.is_default or self._default_id not in self._configs:
            self._select_default(config.id)
        else:
            self._configs[config.id].is_default = config.id == self._default_id
        try:
            await self._save()
        except OSError as err:
            raise PrinterError(
                f"Failed to save printer configuration: {err}",
                PrinterErrorCode.INVALID_CONFIG,
                config.id,
                err,
            ) from err

    async def load_config(self, config_id: str) -> PrinterConfig | None:
        config = self._configs.get(config_id)
        return config.copy() if config is not None else None

    async def load_all_configs(self) -> list[PrinterConfig]:
        return [config.copy() for config in self._configs.values()]

    async def delete_config(self, config_id: str) -> None:
        self._require(config_id)
        del self._configs[config_id]
        if self._default_id == config_id:
            self._select_default(None)
        await self._save()

    async def get_default_config(self) -> PrinterConfig | None:
        if self._default_id is None:
            return None
        return self._configs[self._default_id].copy()

    async def set_default_config(self, config_id: str) -> None:
        self._require(config_id)
        self._select_default(config_id)
        await self._save()

    def get_config_template(self, printer_type: PrinterType | str) -> PrinterConfig:
        try:
            values = get_config_template(printer_type)
        except ValueError as err:
            raise PrinterError(
                f"Unknown printer type: {sanitize_log_message(str(printer_type))}",
                PrinterErrorCode.INVALID_CONFIG,
                cause=err,
            ) from err
        return PrinterConfig(
            id=f"template_{values['type'].value}_{time.time_ns() // 1_000_000}",
            connection_type=PrinterConnectionType.USB,
            connection_string="",
            **values,
        )

    async def export_configs(self) -> str:
        return json.dumps(self._document("exportDate"), indent=2)

    async def import_configs(self, data: str | Mapping[str, Any]) -> None:
        """Replace every configuration with the contents of an export.

        All records are validated before anything is replaced. If
        ``defaultConfigId`` is not one of the imported ids, the first record
        becomes the default.
        """
        configs, default_id = parse_config_document(data)
        self._configs = {config.id: config for config in configs}
        self._select_default(default_id)
        await self._save()
        _LOGGER.info("Imported %s printer configurations", len(configs))

    def get_connection_templates(self) -> list[dict[str, Any]]:
        return [
            {"type": connection_type.value, "examples": list(examples)}
            for connection_type, examples in CONNECTION_EXAMPLES.items()
        ]

    async def dispose(self) -> None:
        """Write the configurations out one last time and empty the store."""
        try:
            await self._save()
        except OSError as err:
            _LOGGER.warning("Failed to save printer configurations during disposal: %s", err)
        self._configs.clear()
        self._default_id = None
