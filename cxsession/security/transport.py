"""
Transport Policy

Decides how HTTP requests to a switch are made: certificate checking,
keep-alive, response parsing and, on legacy HTTP stacks, the process-wide
TLS adjustments owned by SecurityPosture.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import json
import logging
import ssl
import threading
import warnings

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.exceptions import InsecureRequestWarning
from urllib3.util.ssl_ import create_urllib3_context

from cxsession.__version__ import __version__

DEFAULT_TIMEOUT = 30


class RuntimeCapability(Enum):
    """HTTP stack generation"""
    LEGACY = "legacy"
    MODERN = "modern"


def detect_capability() -> RuntimeCapability:
    """urllib3 1.x is treated as the legacy stack, 2.x and later as modern."""
    major = int(urllib3.__version__.split('.')[0])
    return RuntimeCapability.LEGACY if major < 2 else RuntimeCapability.MODERN


class SecurityPosture:
    """
    Process-wide TLS adjustments for legacy HTTP stacks.
    
    Both adjustments are applied at most once per process and are guarded
    by a lock. Each method returns True only on the call that applied it.
    
    - enable_protocols(): builds the shared SSL context allowing TLS 1.1
      and TLS 1.2, mounted on every legacy session.
    - relax_chain_trust(): GLOBAL SIDE EFFECT. Replaces the ssl module's
      default HTTPS context factory with the unverified one, so every
      stdlib HTTPS client in this process (urllib.request, http.client)
      stops validating certificate chains, and silences urllib3's
      insecure-request warnings. Only the legacy path may call it; modern
      stacks use the per-request verify=False override instead.
    """
    
    def __init__(self):
        self._lock = threading.Lock()
        self._ssl_context: Optional[ssl.SSLContext] = None
        self._chain_trust_relaxed = False
        self.logger = logging.getLogger(__name__)
    
    @property
    def ssl_context(self) -> Optional[ssl.SSLContext]:
        return self._ssl_context
    
    @property
    def protocols_enabled(self) -> bool:
        return self._ssl_context is not None
    
    @property
    def chain_trust_relaxed(self) -> bool:
        return self._chain_trust_relaxed
    
    def enable_protocols(self) -> bool:
        """Enable TLS 1.1 and TLS 1.2 for legacy sessions"""
        with self._lock:
            if self._ssl_context is not None:
                return False
            
            context = create_urllib3_context()
            context.minimum_version = ssl.TLSVersion.TLSv1_1
            context.maximum_version = ssl.TLSVersion.TLSv1_2
            self._ssl_context = context
            
            self.logger.info("Enabled TLS 1.1 and TLS 1.2 for legacy HTTP stack")
            return True
    
    def relax_chain_trust(self) -> bool:
        """Accept any server certificate process-wide (legacy stacks only)"""
        with self._lock:
            if self._chain_trust_relaxed:
                return False
            
            ssl._create_default_https_context = ssl._create_unverified_context
            urllib3.disable_warnings(InsecureRequestWarning)
            self._chain_trust_relaxed = True
            
            self.logger.warning(
                "Certificate chain validation disabled for the whole process"
            )
            return True


default_posture = SecurityPosture()


@dataclass(frozen=True)
class TransportOptions:
    """Resolved HTTP/TLS behaviour for one connection"""
    verify: bool = True
    keep_alive: bool = True
    basic_parsing: bool = False
    timeout: float = DEFAULT_TIMEOUT
    capability: RuntimeCapability = RuntimeCapability.MODERN
    ssl_context: Optional[ssl.SSLContext] = field(default=None, repr=False, compare=False)
    
    def request_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments passed to every requests call"""
        return {'timeout': self.timeout, 'verify': self.verify}
    
    @contextmanager
    def scoped_warnings(self):
        """Silence the insecure-request warning for requests made inside the block"""
        if self.verify:
            yield
            return
        
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', InsecureRequestWarning)
            yield
    
    def decode(self, response: requests.Response) -> Any:
        """
        Decode a JSON response body. Empty bodies decode to None.
        
        With basic_parsing the raw text is parsed whatever the
        content-type says.
        
        Raises:
            ValueError: Body is not JSON
        """
        if not response.content:
            return None
        if self.basic_parsing:
            return json.loads(response.text)
        return response.json()


class TLSContextAdapter(HTTPAdapter):
    """HTTPAdapter that connects with a given SSL context"""
    
    def __init__(self, ssl_context: ssl.SSLContext, **kwargs):
        self.ssl_context = ssl_context
        super().__init__(**kwargs)
    
    def init_poolmanager(self, *args, **kwargs):
        kwargs['ssl_context'] = self.ssl_context
        return super().init_poolmanager(*args, **kwargs)


class TransportPolicy:
    """
    Resolve TransportOptions from the caller's request and the HTTP stack.
    
    Apart from the SecurityPosture calls on the legacy path this is a
    pure function of its inputs.
    """
    
    def __init__(self, posture: Optional[SecurityPosture] = None):
        self.posture = posture or default_posture
        self.logger = logging.getLogger(__name__)
    
    def resolve(
        self,
        skip_certificate_check: bool = False,
        capability: Optional[RuntimeCapability] = None,
        timeout: float = DEFAULT_TIMEOUT,
        keep_alive: bool = True
    ) -> TransportOptions:
        """
        Args:
            skip_certificate_check: Accept any server certificate
            capability: HTTP stack generation (detected when None)
            timeout: Per-request timeout in seconds
            keep_alive: Reuse TCP connections between requests
        
        Returns:
            TransportOptions for the connection attempt
        """
        if capability is None:
            capability = detect_capability()
        
        ssl_context = None
        basic_parsing = False
        
        if capability is RuntimeCapability.LEGACY:
            self.posture.enable_protocols()
            ssl_context = self.posture.ssl_context
            basic_parsing = True
            
            if skip_certificate_check:
                self.posture.relax_chain_trust()
        
        options = TransportOptions(
            verify=not skip_certificate_check,
            keep_alive=keep_alive,
            basic_parsing=basic_parsing,
            timeout=timeout,
            capability=capability,
            ssl_context=ssl_context
        )
        
        self.logger.debug(f"Resolved transport options: {options}")
        return options


def build_session(options: TransportOptions) -> requests.Session:
    """Create the requests.Session that will carry a switch's cookies"""
    session = requests.Session()
    session.verify = options.verify
    session.headers.update({
        'Accept': 'application/json',
        'User-Agent': f'cxsession/{__version__}'
    })
    
    if not options.keep_alive:
        session.headers['Connection'] = 'close'
    
    if options.ssl_context is not None:
        session.mount('https://', TLSContextAdapter(options.ssl_context))
    
    return session


def raise_for_non_2xx(response: requests.Response):
    """
    Like Response.raise_for_status(), but a final 1xx/3xx is a failure too.
    
    Raises:
        requests.exceptions.HTTPError: Status outside 200-299
    """
    response.raise_for_status()
    if not 200 <= response.status_code < 300:
        raise requests.exceptions.HTTPError(
            f"{response.status_code} Unexpected status for url: {response.url}",
            response=response
        )
