"""
REST Request Dispatcher

Sends authenticated requests over a Connection's session. Every resource
operation (and logout) goes through RequestDispatcher.invoke().
"""

from typing import Any, Dict, Iterable, Optional
import logging
import re
import time

import requests

from cxsession.devices.connection import Connection
from cxsession.devices.registry import ConnectionRegistry, default_registry
from cxsession.exceptions import RequestFailureError
from cxsession.logging.logger import device_fields
from cxsession.monitoring.metrics import (
    track_rest_error,
    track_rest_latency,
    track_rest_request
)
from cxsession.security.transport import raise_for_non_2xx

_BODY_METHODS = {'POST', 'PUT', 'PATCH'}
_VERSION_SEGMENT = re.compile(r"^v?\d+(\.\d+)*$")

# Resource depth kept in metric labels; deeper segments are instance keys
METRIC_PATH_DEPTH = 2


def build_query(
    depth: Optional[int] = None,
    selector: Optional[str] = None,
    attributes: Optional[Iterable[str]] = None
) -> Dict[str, str]:
    """
    Build REST query parameters.
    
    Example:
        >>> build_query(depth=2, attributes=['name', 'admin'])
        {'depth': '2', 'attributes': 'name,admin'}
    """
    params = {}
    if depth is not None:
        params['depth'] = str(depth)
    if selector:
        params['selector'] = selector
    if attributes:
        params['attributes'] = ','.join(attributes)
    return params


def metric_path(path: str) -> str:
    """
    Bounded metrics label for a request path.
    
    The 'rest/<version>' prefix is dropped and only the first
    METRIC_PATH_DEPTH resource segments are kept.
    
    Example:
        >>> metric_path('rest/v10.09/system/interfaces/1%2F1%2F1')
        'system/interfaces'
    """
    segments = [segment for segment in path.split('?', 1)[0].split('/') if segment]
    if segments[:1] == ['rest']:
        segments = segments[1:]
        if segments and _VERSION_SEGMENT.match(segments[0]):
            segments = segments[1:]
    return '/'.join(segments[:METRIC_PATH_DEPTH]) or 'rest'


class RequestDispatcher:
    """
    Generic authenticated request dispatcher.
    
    Uses the given Connection, or the registry's default one. No retries.
    """
    
    def __init__(self, registry: Optional[ConnectionRegistry] = None):
        self.registry = registry or default_registry
        self.logger = logging.getLogger(__name__)
    
    def invoke(
        self,
        method: str,
        uri: str,
        connection: Optional[Connection] = None,
        body: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Send one request.
        
        Args:
            method: HTTP method
            uri: Path relative to https://{server}:{port}/, e.g. 'rest/v1/logout'
            connection: Connection to use (registry default when None)
            body: JSON body for POST/PUT/PATCH
            params: Query parameters
        
        Returns:
            Decoded JSON body, or None for an empty body
        
        Raises:
            NoDefaultConnectionError: No connection given and none registered
            RequestFailureError: Network error, non-2xx status or undecodable body
        """
        if connection is None:
            connection = self.registry.get_default()
        
        method = method.upper()
        path = uri.lstrip('/')
        url = f"{connection.base_url}/{path}"
        label = metric_path(path)
        transport = connection.transport
        context = device_fields(connection.server, connection.port, method=method, path=path)
        
        kwargs = transport.request_kwargs()
        if params:
            kwargs['params'] = params
        if body is not None and method in _BODY_METHODS:
            kwargs['json'] = body
        
        self.logger.debug(f"HTTP {method} {url}", extra=context)
        started = time.monotonic()
        
        try:
            with transport.scoped_warnings():
                response = connection.session.request(method, url, **kwargs)
            
            track_rest_latency(method, label, time.monotonic() - started)
            track_rest_request(method, label, str(response.status_code))
            raise_for_non_2xx(response)
        
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code
            track_rest_error(method, label, 'http')
            self.logger.error(
                f"HTTP error from {connection.server}: {method} {path} -> {status}",
                extra=context
            )
            raise RequestFailureError(
                f"{method} {path} failed with HTTP {status}",
                cause=e,
                status_code=status
            ) from e
        
        except requests.exceptions.Timeout as e:
            track_rest_error(method, label, 'timeout')
            self.logger.error(
                f"{method} {path} on {connection.server} timed out after {transport.timeout}s",
                extra=context
            )
            raise RequestFailureError(f"{method} {path} timed out", cause=e) from e
        
        except requests.exceptions.RequestException as e:
            track_rest_error(method, label, 'connection')
            self.logger.error(f"Connection error to {connection.server}: {e}", extra=context)
            raise RequestFailureError(f"{method} {path} failed: {e}", cause=e) from e
        
        try:
            return transport.decode(response)
        except ValueError as e:
            track_rest_error(method, label, 'decode')
            self.logger.error(f"Undecodable response for {method} {path}: {e}", extra=context)
            raise RequestFailureError(
                f"{method} {path} returned an invalid body",
                cause=e,
                status_code=response.status_code
            ) from e
