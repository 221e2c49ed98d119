"""
Session Terminator

Confirms, logs out through the request dispatcher and clears the
process default when it pointed at the terminated connection.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import sys

from cxsession.devices.connection import Connection
from cxsession.devices.registry import ConnectionRegistry, default_registry
from cxsession.exceptions import (
    LogoutFailureError,
    RequestFailureError,
    UserAbortedError
)
from cxsession.logging.logger import device_fields

LOGOUT_PATH = "rest/v1/logout"
CONFIRM_MESSAGE = "Proceed with removal of connection?"

# message -> proceed?
Confirm = Callable[[str], bool]


def console_confirm(message: str) -> bool:
    """Ask yes/no on the terminal. Anything but an explicit yes means no."""
    if not sys.stdin or not sys.stdin.isatty():
        return False
    
    try:
        answer = input(f"{message} [y/N] ")
    except (EOFError, KeyboardInterrupt):
        return False
    
    return answer.strip().lower() in ('y', 'yes')


@dataclass(frozen=True)
class DisconnectAck:
    """Acknowledgment of a completed logout"""
    server: str
    port: int
    cleared_default: bool


class SessionTerminator:
    """
    Log out of a switch.
    
    The Connection itself is not modified; callers drop it once
    disconnect() returns.
    """
    
    def __init__(
        self,
        dispatcher,
        registry: Optional[ConnectionRegistry] = None,
        confirm: Optional[Confirm] = None
    ):
        """
        Args:
            dispatcher: Object exposing invoke(method, uri, connection=...)
            registry: Registry holding the process default
            confirm: Interactive confirmation, default-deny
        """
        self.dispatcher = dispatcher
        self.registry = registry or default_registry
        self.confirm = confirm or console_confirm
        self.logger = logging.getLogger(__name__)
    
    def disconnect(
        self,
        connection: Connection,
        force_no_confirm: bool = False
    ) -> DisconnectAck:
        """
        Disconnect from a switch.
        
        Args:
            connection: Connection to terminate
            force_no_confirm: Skip the confirmation prompt
        
        Returns:
            DisconnectAck
        
        Raises:
            UserAbortedError: Confirmation declined (nothing was sent)
            LogoutFailureError: Logout call failed (registry untouched)
        """
        target = f"{connection.server}:{connection.port}"
        context = device_fields(connection.server, connection.port)
        
        if not force_no_confirm and not self.confirm(CONFIRM_MESSAGE):
            self.logger.info(f"Disconnect from {target} aborted by user", extra=context)
            raise UserAbortedError(f"Disconnect from {target} aborted")
        
        try:
            self.dispatcher.invoke('POST', LOGOUT_PATH, connection=connection)
        except RequestFailureError as e:
            self.logger.error(f"Logout from {target} failed: {e}", extra=context)
            raise LogoutFailureError(f"Logout from {target} failed", cause=e) from e
        
        cleared = self.registry.clear_if(connection)
        connection.session.close()
        
        self.logger.info(
            f"Disconnected from {target}",
            extra=device_fields(connection.server, connection.port, cleared_default=cleared)
        )
        
        return DisconnectAck(
            server=connection.server,
            port=connection.port,
            cleared_default=cleared
        )
