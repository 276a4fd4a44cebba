"""Invoica webhooks — registration, signed delivery and receiver verification."""

from __future__ import annotations

__version__ = "0.1.0"
