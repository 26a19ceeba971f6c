"""Data model shared by drivers, the registry, discovery and the service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from .const import (
    DEFAULT_CHARACTER_SET,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_MS,
    PAPER_WIDTH_CHARS,
)

if TYPE_CHECKING:
    from .content import PrintContent


class PrinterConnectionType(str, Enum):
    """Transport used to reach a printer."""

    USB = "usb"
    SERIAL = "serial"
    NETWORK = "network"
    BLUETOOTH = "bluetooth"


class PrinterStatus(str, Enum):
    """Status of a single printer."""

    OFFLINE = "offline"
    IDLE = "idle"
    PRINTING = "printing"
    ERROR = "error"
    OUT_OF_PAPER = "out_of_paper"
    COVER_OPEN = "cover_open"


class PaperSize(str, Enum):
    """Paper width class."""

    MM_80 = "80mm"
    MM_78 = "78mm"
    MM_76 = "76mm"
    MM_58 = "58mm"
    MM_57 = "57mm"
    MM_44 = "44mm"

    @property
    def chars_per_line(self) -> int:
        """Return the number of font A characters that fit on one line."""
        return PAPER_WIDTH_CHARS[self.value]


class PrinterType(str, Enum):
    """Vendor/model family tag."""

    CBX_POS_89E = "cbx_pos_89e"
    EPSON = "epson"
    STAR = "star"
    GENERIC = "generic_esc_pos"


class TextAlignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontStyle(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


class FontSize(str, Enum):
    SMALL = "small"
    NORMAL = "normal"
    LARGE = "large"
    EXTRA_LARGE = "extra_large"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class PrinterEventType(str, Enum):
    """Events emitted by printer drivers."""

    STATUS_CHANGED = "status_changed"
    JOB_STARTED = "job_started"
    JOB_COMPLETED = "job_completed"
    JOB_FAILED = "job_failed"
    CONNECTION_LOST = "connection_lost"
    CONNECTION_RESTORED = "connection_restored"
    ERROR = "error"


def _coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    """Return the enum member for ``value``, or ``value`` unchanged if unknown."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# camelCase interchange keys for PrinterConfig fields
_CONFIG_KEYS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "type": "type",
    "connection_type": "connectionType",
    "connection_string": "connectionString",
    "paper_size": "paperSize",
    "character_set": "characterSet",
    "timeout": "timeout",
    "retry_attempts": "retryAttempts",
    "is_default": "isDefault",
    "profile": "profile",
}


def normalize_config_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase interchange keys to ``PrinterConfig`` field names."""
    reverse = {key: attr for attr, key in _CONFIG_KEYS.items()}
    return {reverse.get(key, key): value for key, value in data.items()}


@dataclass
class PrinterConfig:
    """Configuration record of one printer.

    ``timeout`` is in milliseconds. ``profile`` optionally names a
    python-escpos capability profile (e.g. ``TM-T88V``).
    """

    id: str
    name: str
    type: PrinterType | str
    connection_type: PrinterConnectionType | str
    connection_string: str
    paper_size: PaperSize | str = PaperSize.MM_80
    character_set: str | None = DEFAULT_CHARACTER_SET
    timeout: int | None = DEFAULT_TIMEOUT_MS
    retry_attempts: int | None = DEFAULT_RETRY_ATTEMPTS
    is_default: bool = False
    profile: str | None = None

    def __post_init__(self) -> None:
        self.type = _coerce_enum(PrinterType, self.type)
        self.connection_type = _coerce_enum(PrinterConnectionType, self.connection_type)
        self.paper_size = _coerce_enum(PaperSize, self.paper_size)

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase interchange form."""
        data: dict[str, Any] = {}
        for attr, key in _CONFIG_KEYS.items():
            value = getattr(self, attr)
            data[key] = value.value if isinstance(value, Enum) else value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PrinterConfig:
        """Build a config from camelCase or snake_case keys.

        Missing required fields become empty strings and unknown enum values
        are kept verbatim, so that validation can report them.
        """
        kwargs: dict[str, Any] = {}
        for attr, key in _CONFIG_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]
        for required in ("id", "name", "type", "connection_type", "connection_string"):
            kwargs.setdefault(required, "")
        return cls(**kwargs)

    def copy(self, **changes: Any) -> PrinterConfig:
        """Return a copy with ``changes`` applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return type(self)(**values)


@dataclass
class PrintJobConfig:
    """Per-job options. ``timeout`` is in milliseconds."""

    copies: int = 1
    timeout: int | None = None
    priority: JobPriority = JobPriority.NORMAL
    retry_on_error: bool = False
    paper_cut: bool = True
    open_cash_drawer: bool = False


@dataclass
class PrintJob:
    """One submitted print job."""

    id: str
    printer_id: str
    content: list[PrintContent]
    config: PrintJobConfig
    timestamp: datetime = field(default_factory=utcnow)
    status: JobStatus = JobStatus.PENDING
    error: str | None = None
    attempts: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "printerId": self.printer_id,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "error": self.error,
            "attempts": self.attempts,
            "copies": self.config.copies,
        }


@dataclass
class PrinterInfo:
    """Point-in-time snapshot of a printer for display."""

    id: str
    name: str
    type: PrinterType | str
    status: PrinterStatus
    is_connected: bool
    connection_info: str = ""
    last_error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value if isinstance(self.type, Enum) else self.type,
            "status": self.status.value,
            "isConnected": self.is_connected,
            "connectionInfo": self.connection_info,
            "lastError": self.last_error,
        }


@dataclass
class PrinterDiscoveryResult:
    """A printer found by a discovery probe."""

    id: str
    name: str
    type: PrinterType
    connection_type: PrinterConnectionType
    connection_string: str
    is_available: bool = True

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "connectionType": self.connection_type.value,
            "connectionString": self.connection_string,
            "isAvailable": self.is_available,
        }


@dataclass
class PrinterEvent:
    """An event delivered to subscribers of a driver, registry or service."""

    type: str
    printer_id: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    data: dict[str, Any] = field(default_factory=dict)
