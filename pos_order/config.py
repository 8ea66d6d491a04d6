"""Runtime configuration defaults for the backend, checkout and printing."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: str = "", *fallbacks: str) -> str:
    for key in (name, *fallbacks):
        value = os.environ.get(key, "").strip()
        if value:
            return value
    return default


def _env_flag(name: str, default: bool = False) -> bool:
    raw = _env(name)
    if not raw:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


SUPABASE_URL = _env("SUPABASE_URL", "", "VITE_SUPABASE_URL")
SUPABASE_ANON_KEY = _env("SUPABASE_ANON_KEY", "", "VITE_SUPABASE_ANON_KEY")
STORAGE_BUCKET = _env("POS_STORAGE_BUCKET", "POS")
HTTP_TIMEOUT_SECONDS = float(_env("POS_HTTP_TIMEOUT_SECONDS", "10"))

# Single-branch, single-cashier deployment.
BRANCH_ID = _env("POS_BRANCH_ID", "branch1")
CASHIER_ID = _env("POS_CASHIER_ID", "cashier1")

CURRENCY_SYMBOL = _env("POS_CURRENCY_SYMBOL", "฿")
ROLLBACK_ON_PARTIAL_FAILURE = _env_flag("POS_ROLLBACK_ON_PARTIAL_FAILURE")

LOG_PATH = _env("POS_LOG_PATH", "/tmp/pos-order.log")
LOG_LEVEL = _env("POS_LOG_LEVEL", "INFO")

RECEIPT_PRINTING_ENABLED = _env_flag("POS_RECEIPT_PRINTING")
PRINTER_SERIAL_PORT = _env("POS_PRINTER_PORT", "/dev/ttyUSB0")
PRINTER_BAUDRATE = int(_env("POS_PRINTER_BAUDRATE", "19200"))
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 28
PRINTER_FONT_PATH = _env("POS_PRINTER_FONT_PATH", "/usr/share/fonts/TTF/DejaVuSans.ttf")
PRINTER_LEFT_INDENT_PX = 8
PRINTER_TAIL_SPACER_PX = 70
