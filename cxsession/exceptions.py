"""
cxsession Exceptions

Typed failures raised by the connection lifecycle. Each carries the
underlying exception (if any) in ``cause`` as well as ``__cause__``.
"""

from typing import Optional


class CXSessionError(Exception):
    """Base class for all cxsession failures"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NoCredentialError(CXSessionError):
    """No credential could be resolved (no pair, no object, no prompt)"""


class AuthFailureError(CXSessionError, ConnectionError):
    """Login request failed (network, TLS, non-2xx or malformed response)"""


class UnsupportedVersionError(CXSessionError):
    """Capability probe failed after a successful login"""


class UserAbortedError(CXSessionError):
    """User declined the disconnect confirmation"""


class LogoutFailureError(CXSessionError):
    """Remote logout call failed; local state was not changed"""


class NoDefaultConnectionError(CXSessionError, LookupError):
    """No connection is registered as the process default"""


class RequestFailureError(CXSessionError):
    """An authenticated REST request failed"""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, cause)
        self.status_code = status_code
