"""
cxsession — REST session management for switch administration APIs

Connects to a switch's REST API, keeps the negotiated session and hands it
to whatever issues requests next.
"""

from .__version__ import __version__
from .devices import Connection, ConnectionManager, default_registry

__all__ = [
    '__version__',
    'Connection',
    'ConnectionManager',
    'default_registry',
    'communication',
    'devices',
    'exceptions',
    'logging',
    'monitoring',
    'security',
    'utils'
]
