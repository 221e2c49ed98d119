"""
Session Negotiator

Performs the login handshake and the capability probe that together
produce a Connection.

    POST https://{server}:{port}/rest/v1/login   (form: username, password)
    GET  https://{server}:{port}/rest            (reads latest.version)
"""

from typing import Callable, Optional
import logging

import requests

from cxsession.devices.connection import Connection
from cxsession.exceptions import AuthFailureError, UnsupportedVersionError
from cxsession.logging.logger import device_fields
from cxsession.monitoring.metrics import track_login
from cxsession.security.credentials import Credential
from cxsession.security.transport import (
    TransportOptions,
    build_session,
    raise_for_non_2xx
)

LOGIN_PATH = "rest/v1/login"
PROBE_PATH = "rest"

SessionFactory = Callable[[TransportOptions], requests.Session]


class SessionNegotiator:
    """
    Log in to a switch and confirm it speaks a supported REST API.
    
    No retries: a failed login or probe is reported once. A Connection is
    returned only when both steps succeeded; otherwise the HTTP session is
    closed and nothing escapes.
    """
    
    def __init__(self, session_factory: Optional[SessionFactory] = None):
        """
        Args:
            session_factory: Builds the HTTP session for a connection attempt
        """
        self.session_factory = session_factory or build_session
        self.logger = logging.getLogger(__name__)
    
    def negotiate(
        self,
        server: str,
        port: int,
        credential: Credential,
        transport: TransportOptions
    ) -> Connection:
        """
        Negotiate a session.
        
        Args:
            server: Switch address or hostname
            port: HTTPS port
            credential: Login credential
            transport: Resolved transport options
        
        Returns:
            Fully populated Connection
        
        Raises:
            AuthFailureError: Login failed
            UnsupportedVersionError: Probe failed after login
        """
        base_url = f"https://{server}:{port}"
        context = device_fields(server, port)
        session = self.session_factory(transport)
        
        try:
            self._login(session, base_url, credential, transport, context)
        except AuthFailureError:
            session.close()
            track_login("auth_failure")
            raise
        
        try:
            api_version = self._probe(session, base_url, transport, context)
        except UnsupportedVersionError:
            session.close()
            track_login("unsupported_version")
            raise
        
        connection = Connection(
            server=server,
            port=port,
            session=session,
            transport=transport,
            api_version=api_version
        )
        
        track_login("success")
        self.logger.info(
            f"Connected to {server}:{port} (REST API {api_version})",
            extra=device_fields(server, port, api_version=api_version)
        )
        
        return connection
    
    def _login(
        self,
        session: requests.Session,
        base_url: str,
        credential: Credential,
        transport: TransportOptions,
        context: dict
    ):
        """POST the credential; the session keeps the returned cookie"""
        url = f"{base_url}/{LOGIN_PATH}"
        self.logger.debug(f"Login as {credential.username} at {url}", extra=context)
        
        try:
            with transport.scoped_warnings():
                response = session.post(
                    url,
                    data={
                        'username': credential.username,
                        'password': credential.password
                    },
                    **transport.request_kwargs()
                )
            raise_for_non_2xx(response)
        
        except requests.exceptions.HTTPError as e:
            self.logger.error(
                f"Login to {base_url} rejected: HTTP {e.response.status_code}",
                extra=context
            )
            raise AuthFailureError("Unable to connect", cause=e) from e
        
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Login to {base_url} failed: {e}", extra=context)
            raise AuthFailureError("Unable to connect", cause=e) from e
        
        if not session.cookies:
            self.logger.error(f"Login to {base_url} returned no session cookie", extra=context)
            raise AuthFailureError("Unable to connect: no session established")
    
    def _probe(
        self,
        session: requests.Session,
        base_url: str,
        transport: TransportOptions,
        context: dict
    ) -> str:
        """GET /rest and return latest.version"""
        url = f"{base_url}/{PROBE_PATH}"
        
        try:
            with transport.scoped_warnings():
                response = session.get(url, **transport.request_kwargs())
            raise_for_non_2xx(response)
            
            payload = transport.decode(response)
            version = payload['latest']['version']
            
            if not isinstance(version, str) or not version:
                raise ValueError(f"Invalid latest.version: {version!r}")
        
        # Every probe failure is reported as an unsupported release
        except Exception as e:
            self.logger.error(f"Capability probe on {base_url} failed: {e}", extra=context)
            raise UnsupportedVersionError(
                "Unsupported release: the switch did not report a usable REST API version",
                cause=e
            ) from e
        
        return version
