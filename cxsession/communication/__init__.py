"""
cxsession Communication Module

Authenticated REST requests against a connected switch.
"""

from .http_client import RequestDispatcher, build_query, metric_path

__all__ = ['RequestDispatcher', 'build_query', 'metric_path']
