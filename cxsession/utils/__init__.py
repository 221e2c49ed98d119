"""
cxsession Utilities
"""

from .config_loader import ConfigLoader, ConnectionSettings

__all__ = ['ConfigLoader', 'ConnectionSettings']
