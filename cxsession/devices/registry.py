"""
Connection Registry

Holds the optional process-wide default Connection.
"""

from typing import Optional
import logging
import threading

from cxsession.devices.connection import Connection
from cxsession.exceptions import NoDefaultConnectionError


class ConnectionRegistry:
    """
    Single optional reference to the default Connection.
    
    Setting a new default replaces the previous one. All access goes
    through one lock so concurrent callers never see a torn read/replace.
    """
    
    def __init__(self):
        self._lock = threading.Lock()
        self._default: Optional[Connection] = None
        self.logger = logging.getLogger(__name__)
    
    def set_default(self, connection: Connection):
        """Register connection as the process default"""
        with self._lock:
            previous = self._default
            self._default = connection
        
        if previous is not None and previous is not connection:
            self.logger.info(
                f"Default connection {previous.server}:{previous.port} replaced "
                f"by {connection.server}:{connection.port}"
            )
        else:
            self.logger.debug(f"Default connection set to {connection.server}:{connection.port}")
    
    def get_default(self) -> Connection:
        """
        Returns:
            The default Connection
        
        Raises:
            NoDefaultConnectionError: If no default is registered
        """
        with self._lock:
            connection = self._default
        
        if connection is None:
            raise NoDefaultConnectionError("Not connected. Connect to a switch first")
        
        return connection
    
    def has_default(self) -> bool:
        with self._lock:
            return self._default is not None
    
    def clear_default(self):
        """Remove the default reference (no-op if absent)"""
        with self._lock:
            self._default = None
    
    def clear_if(self, connection: Connection) -> bool:
        """
        Clear the default only if it is this very connection.
        
        Returns:
            True if the default was cleared
        """
        with self._lock:
            if self._default is not connection:
                return False
            self._default = None
        
        self.logger.debug(f"Default connection {connection.server}:{connection.port} cleared")
        return True


default_registry = ConnectionRegistry()
