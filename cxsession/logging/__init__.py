"""
cxsession Logging Module

Provides structured JSON logging keyed by switch.
"""

from .logger import configure_logging, device_fields, StructuredFormatter

__all__ = ['configure_logging', 'device_fields', 'StructuredFormatter']
