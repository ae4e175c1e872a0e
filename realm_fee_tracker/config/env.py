"""
Environment variable loading for the tracker.

- SOLANA_RPC_URL / RPC_URL: RPC endpoint (read from .env)
- HELIUS_API_KEY: Helius API key (fallback when no RPC URL is set)
- Loads .env from the working directory, then the project root.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"


def load_tracker_env() -> None:
    """Load .env (cwd first, then project root). Existing variables win. Safe to call repeatedly."""
    load_dotenv(Path.cwd() / ".env")
    load_dotenv(_ENV_PATH)


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > RPC_URL > HELIUS_API_KEY > public mainnet endpoint.
    """
    load_tracker_env()
    for name in ("SOLANA_RPC_URL", "RPC_URL"):
        url = (os.getenv(name) or "").strip()
        if url:
            return url
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return MAINNET_RPC_URL


def mask_rpc_url(url: str) -> str:
    """Hide the API key in a Helius-style URL for logging."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url
