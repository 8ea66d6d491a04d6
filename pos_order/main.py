"""Entry point for the pos-order Textual app."""

from __future__ import annotations

from pos_order.config import SUPABASE_ANON_KEY, SUPABASE_URL
from pos_order.controller import PosController
from pos_order.errors import ConfigError
from pos_order.gateway import SupabaseGateway
from pos_order.logging_config import setup_logging
from pos_order.pos_app import PosApp


def build_gateway(url: str = SUPABASE_URL, api_key: str = SUPABASE_ANON_KEY) -> SupabaseGateway:
    if not url:
        raise ConfigError("Missing SUPABASE_URL in environment or .env")
    if not api_key:
        raise ConfigError("Missing SUPABASE_ANON_KEY in environment or .env")
    return SupabaseGateway(url, api_key)


def main() -> None:
    """Run the Textual application."""
    setup_logging()
    gateway = build_gateway()
    try:
        PosApp(PosController(gateway)).run()
    finally:
        gateway.close()


if __name__ == "__main__":
    main()
