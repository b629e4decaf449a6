"""Relay of QR payloads from one uploader to many viewers, by polling or push."""

from __future__ import annotations

__version__ = "0.1.0"
