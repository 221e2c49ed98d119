"""
cxsession Monitoring Module

Prometheus counters for logins and REST requests.
"""

from .metrics import (
    start_metrics_server,
    track_login,
    track_rest_error,
    track_rest_latency,
    track_rest_request
)

__all__ = [
    'start_metrics_server',
    'track_login',
    'track_rest_error',
    'track_rest_latency',
    'track_rest_request'
]
