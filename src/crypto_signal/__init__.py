"""Crypto market sentiment and technical signal report."""

import os


def get_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("CRYPTO_SIGNAL_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("crypto-signal")
    except Exception:
        return "dev"


VERSION = get_version()
