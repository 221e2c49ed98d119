"""
Connection Manager

Connect/disconnect entry points wiring credential resolution, transport
policy, negotiation, the default registry and logout together.
"""

from typing import Any, Dict, Optional
import logging

from cxsession.communication.http_client import RequestDispatcher
from cxsession.devices.connection import Connection
from cxsession.devices.negotiator import SessionNegotiator
from cxsession.devices.registry import ConnectionRegistry, default_registry
from cxsession.devices.terminator import DisconnectAck, SessionTerminator
from cxsession.exceptions import CXSessionError
from cxsession.logging.logger import device_fields
from cxsession.security.credentials import Credential, CredentialResolver
from cxsession.security.transport import (
    DEFAULT_TIMEOUT,
    RuntimeCapability,
    TransportPolicy
)
from cxsession.utils.config_loader import ConnectionSettings


class ConnectionManager:
    """
    Manage switch connections.
    
    Each connect() produces an independent Connection; registering it as
    the process default is optional. Collaborators are injectable so
    tests (or embedding applications) can replace prompts, the HTTP
    session factory and the registry.
    """
    
    def __init__(
        self,
        registry: Optional[ConnectionRegistry] = None,
        resolver: Optional[CredentialResolver] = None,
        policy: Optional[TransportPolicy] = None,
        negotiator: Optional[SessionNegotiator] = None,
        dispatcher: Optional[RequestDispatcher] = None,
        terminator: Optional[SessionTerminator] = None
    ):
        self.registry = registry or default_registry
        self.resolver = resolver or CredentialResolver()
        self.policy = policy or TransportPolicy()
        self.negotiator = negotiator or SessionNegotiator()
        self.dispatcher = dispatcher or RequestDispatcher(self.registry)
        self.terminator = terminator or SessionTerminator(self.dispatcher, self.registry)
        
        self.logger = logging.getLogger(__name__)
        
        self.stats = {
            'total_connections': 0,
            'failed_connections': 0,
            'disconnections': 0
        }
    
    def connect(
        self,
        server: str,
        port: int = 443,
        username: Optional[str] = None,
        password: Optional[str] = None,
        credential: Optional[Credential] = None,
        skip_certificate_check: bool = False,
        default_connection: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        keep_alive: bool = True,
        capability: Optional[RuntimeCapability] = None
    ) -> Connection:
        """
        Connect to a switch.
        
        Args:
            server: Switch address or hostname
            port: HTTPS port (1-65535)
            username: Login username
            password: Login password (used together with username)
            credential: Credential object, used when no username/password pair
            skip_certificate_check: Accept any server certificate
            default_connection: Register the result as the process default
            timeout: Per-request timeout in seconds
            keep_alive: Reuse TCP connections
            capability: Force legacy/modern HTTP stack handling
        
        Returns:
            Negotiated Connection
        
        Raises:
            ValueError: Invalid server or port
            NoCredentialError, AuthFailureError, UnsupportedVersionError
        """
        if not server:
            raise ValueError("server is required")
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ValueError(f"port must be in 1-65535, got {port}")
        
        self.logger.info(f"Connecting to {server}:{port}", extra=device_fields(server, port))
        
        try:
            resolved = self.resolver.resolve(
                username=username,
                password=password,
                credential=credential,
                target=server
            )
            transport = self.policy.resolve(
                skip_certificate_check=skip_certificate_check,
                capability=capability,
                timeout=timeout,
                keep_alive=keep_alive
            )
            connection = self.negotiator.negotiate(server, port, resolved, transport)
        
        except CXSessionError as e:
            self.stats['failed_connections'] += 1
            self.logger.error(
                f"Connection to {server}:{port} failed: {e}",
                extra=device_fields(server, port)
            )
            raise
        
        self.stats['total_connections'] += 1
        
        if default_connection:
            self.registry.set_default(connection)
        
        return connection
    
    def connect_from_settings(
        self,
        settings: ConnectionSettings,
        credential: Optional[Credential] = None
    ) -> Connection:
        """Connect using loaded ConnectionSettings"""
        return self.connect(
            settings.server,
            port=settings.port,
            username=settings.username,
            password=settings.password,
            credential=credential,
            skip_certificate_check=settings.skip_certificate_check,
            default_connection=settings.default_connection,
            timeout=settings.timeout,
            keep_alive=settings.keep_alive
        )
    
    def disconnect(
        self,
        connection: Optional[Connection] = None,
        force_no_confirm: bool = False
    ) -> DisconnectAck:
        """
        Disconnect from a switch (the default connection when none is given).
        
        Raises:
            NoDefaultConnectionError, UserAbortedError, LogoutFailureError
        """
        if connection is None:
            connection = self.registry.get_default()
        
        ack = self.terminator.disconnect(connection, force_no_confirm=force_no_confirm)
        self.stats['disconnections'] += 1
        
        return ack
    
    def invoke(
        self,
        method: str,
        uri: str,
        connection: Optional[Connection] = None,
        **kwargs
    ) -> Any:
        """Send an authenticated request (see RequestDispatcher.invoke)"""
        return self.dispatcher.invoke(method, uri, connection=connection, **kwargs)
    
    def get_stats(self) -> Dict:
        """Get connection statistics"""
        return {
            **self.stats,
            'has_default': self.registry.has_default()
        }
