"""Constants for the printer hub."""

from __future__ import annotations

# Configuration defaults
DEFAULT_CHARACTER_SET = "UTF-8"
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_RETRY_ATTEMPTS = 3
MAX_TIMEOUT_MS = 60000
MAX_RETRY_ATTEMPTS = 10
MAX_CONNECTION_STRING_LENGTH = 256

# Transport defaults
DEFAULT_NETWORK_PORT = 9100
DEFAULT_BAUDRATE = 9600
DEFAULT_IN_EP = 0x82
DEFAULT_OUT_EP = 0x01
CASH_DRAWER_PIN = 2

# Content defaults
DEFAULT_ALIGN = "left"
DEFAULT_LINE_CHARACTER = "-"
DEFAULT_BARCODE_WIDTH = 2
DEFAULT_BARCODE_HEIGHT = 60
DEFAULT_QR_SIZE = 6
DEFAULT_QR_ERROR_LEVEL = "M"

# Driver bookkeeping
MAX_JOB_HISTORY = 50

# Characters per line for each paper width class
PAPER_WIDTH_CHARS: dict[str, int] = {
    "80mm": 48,
    "78mm": 46,
    "76mm": 45,
    "58mm": 32,
    "57mm": 32,
    "44mm": 24,
}

# Discovery
DISCOVERY_NETWORK_CANDIDATES: tuple[str, ...] = (
    "192.168.1.100",
    "192.168.1.101",
    "192.168.0.100",
    "192.168.0.101",
)
DISCOVERY_PROBE_TIMEOUT_S = 1.0
DISCOVERY_COMMAND_TIMEOUT_S = 10.0

THERMAL_PRINTER_KEYWORDS: tuple[str, ...] = (
    "thermal",
    "receipt",
    "pos",
    "epson",
    "star",
    "citizen",
    "zebra",
    "esc/pos",
    "tm-",
    "tsp",
    "rp",
    "ct-",
    "zd",
    "gk",
    "gx",
    "cbx",
    "89e",
)

# Known thermal printer vendor IDs for USB discovery
# Source: http://www.linux-usb.org/usb.ids
THERMAL_PRINTER_VIDS: set[int] = {
    0x0404,  # NCR Corp (7167/7197 Receipt Printers)
    0x04B8,  # Seiko Epson Corp (TM-T88, TM-T20, TM-T70, TM-L100)
    0x04C5,  # Fujitsu, Ltd (KD02906 Line Thermal Printer)
    0x0519,  # Star Micronics Co., Ltd (TSP100, TSP600, TSP700)
    0x06BC,  # Oki Data Corp (OKIPOS 411/412 POS Printer)
    0x0A5F,  # Zebra Technologies (GK420d, ZD410, ZD500, ZM400)
    0x0AA7,  # Wincor Nixdorf (TH210, TH220, TH320, TH420 POS Printers)
    0x0DD4,  # Custom Engineering SPA (K80 80mm Thermal Printer)
    0x0FE6,  # Generic POS Printers (USB Receipt Printer)
    0x1504,  # Bixolon CO LTD (SRP series)
    0x154F,  # SNBC CO., Ltd (BTP series)
    0x1D90,  # Citizen (CT-E351, PPU-700, CL-S631)
    0x2730,  # Citizen (CT-S2000/4000/310)
    0x0416,  # Winbond Electronics (generic POS-58/80 and CBX printers)
}

# Configuration document
CONFIG_FILE_NAME = "printers.json"
CONFIG_FORMAT_VERSION = "1.0"

# Registry events
EVENT_PRINTER_REGISTERED = "printer_registered"
EVENT_PRINTER_UNREGISTERED = "printer_unregistered"
EVENT_DEFAULT_PRINTER_CHANGED = "default_printer_changed"
EVENT_PRINTER_CONFIG_UPDATED = "printer_config_updated"

# Service events
EVENT_SERVICE_INITIALIZED = "service_initialized"
EVENT_SERVICE_SHUTDOWN = "service_shutdown"
EVENT_PRINTER_ADDED = "printer_added"
EVENT_PRINTER_REMOVED = "printer_removed"
