"""
cxsession Security Module

Credential resolution and transport (TLS) policy:
- CredentialResolver: explicit pair > credential object > interactive prompt
- TransportPolicy: certificate checking and HTTP client flags
- SecurityPosture: one-time process-wide TLS adjustments for legacy stacks
"""

from cxsession.security.credentials import (
    Credential,
    CredentialResolver,
    console_prompt
)

from cxsession.security.transport import (
    RuntimeCapability,
    SecurityPosture,
    TLSContextAdapter,
    TransportOptions,
    TransportPolicy,
    build_session,
    raise_for_non_2xx,
    default_posture,
    detect_capability
)

__all__ = [
    'Credential',
    'CredentialResolver',
    'console_prompt',
    'RuntimeCapability',
    'SecurityPosture',
    'TLSContextAdapter',
    'TransportOptions',
    'TransportPolicy',
    'build_session',
    'raise_for_non_2xx',
    'default_posture',
    'detect_capability'
]
