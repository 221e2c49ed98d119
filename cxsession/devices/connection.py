"""
Switch Connection

The negotiated, immutable record of one authenticated REST session.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict

import requests

from cxsession.security.transport import TransportOptions


@dataclass(frozen=True)
class Connection:
    """
    Authenticated session to a switch.
    
    Only the SessionNegotiator builds these, after login and the version
    probe have both succeeded. The session's cookie jar is the session
    handle and must accompany every authenticated request.
    """
    server: str
    port: int
    session: requests.Session = field(repr=False)
    transport: TransportOptions
    api_version: str
    connected_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False
    )
    
    def __post_init__(self):
        if not self.server:
            raise ValueError("server is required")
        if not isinstance(self.port, int) or not 1 <= self.port <= 65535:
            raise ValueError(f"port must be in 1-65535, got {self.port}")
    
    @property
    def base_url(self) -> str:
        return f"https://{self.server}:{self.port}"
    
    @property
    def api_prefix(self) -> str:
        """Versioned REST prefix, e.g. 'rest/v10.09'"""
        version = self.api_version
        if not version.startswith('v'):
            version = f"v{version}"
        return f"rest/{version}"
    
    def api_path(self, resource: str) -> str:
        """Path of a resource under the negotiated API version"""
        return f"{self.api_prefix}/{resource.lstrip('/')}"
    
    def to_dict(self) -> Dict:
        """Display form. Cookies and credentials are never included."""
        return {
            'server': self.server,
            'port': self.port,
            'api_version': self.api_version,
            'verify': self.transport.verify,
            'capability': self.transport.capability.value,
            'connected_at': self.connected_at.isoformat()
        }
