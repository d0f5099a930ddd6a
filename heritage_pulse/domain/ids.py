"""Identifier generation for itineraries and conversations."""

from __future__ import annotations

import secrets
import time


def generate_id(prefix: str = "") -> str:
    """Return a short, time-ordered id such as ``itin_lx3k9a2f9c1e0b7d``."""
    stamp = _base36(int(time.time() * 1000))
    token = f"{stamp}{secrets.token_hex(5)}"
    return f"{prefix}_{token}" if prefix else token


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while value:
        value, rem = divmod(value, 36)
        out = digits[rem] + out
    return out or "0"
