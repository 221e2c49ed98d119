"""
cxsession Device Module

Switch connection lifecycle:
- Connection: negotiated session record
- SessionNegotiator: login + capability probe
- ConnectionRegistry: process-wide default connection
- SessionTerminator: confirmed logout
- ConnectionManager: connect/disconnect facade

Usage:
    from cxsession.devices import ConnectionManager

    manager = ConnectionManager()
    conn = manager.connect("switch.example.com", username="admin", password="...")
    manager.invoke("GET", conn.api_path("system"))
    manager.disconnect(conn, force_no_confirm=True)
"""

from .connection import Connection
from .registry import ConnectionRegistry, default_registry
from .negotiator import SessionNegotiator
from .terminator import DisconnectAck, SessionTerminator, console_confirm
from .connection_manager import ConnectionManager

__all__ = [
    "Connection",
    "ConnectionManager",
    "ConnectionRegistry",
    "DisconnectAck",
    "SessionNegotiator",
    "SessionTerminator",
    "console_confirm",
    "default_registry",
]
