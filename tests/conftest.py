"""
Shared fixtures: a simulated switch behind mock HTTP sessions.

No test opens a socket. Sessions are MagicMocks with real cookie jars and
every response is a real requests.Response.
"""

import json
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests
from requests.cookies import RequestsCookieJar

import cxsession.security.transport as transport_module
from cxsession.communication.http_client import RequestDispatcher
from cxsession.devices.connection import Connection
from cxsession.devices.connection_manager import ConnectionManager
from cxsession.devices.negotiator import SessionNegotiator
from cxsession.devices.registry import ConnectionRegistry
from cxsession.devices.terminator import SessionTerminator
from cxsession.security.credentials import Credential, CredentialResolver
from cxsession.security.transport import (
    RuntimeCapability,
    SecurityPosture,
    TransportOptions,
    TransportPolicy
)


def make_response(
    status_code: int = 200,
    body: Optional[Any] = None,
    url: str = "https://switch.example.com:443/rest"
) -> requests.Response:
    """Build a real requests.Response with an optional JSON body"""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if body is None:
        response._content = b""
    elif isinstance(body, (bytes, str)):
        response._content = body if isinstance(body, bytes) else body.encode()
    else:
        response._content = json.dumps(body).encode()
        response.headers['Content-Type'] = 'application/json'
    return response


class SimulatedSwitch:
    """
    Simulated switch REST API.
    
    Hands out mock sessions through session_factory() and records every
    call as (method, url, kwargs).
    """
    
    def __init__(
        self,
        version: str = "10.09",
        login_status: int = 200,
        probe_status: int = 200,
        logout_status: int = 200,
        probe_body: Optional[Any] = None,
        set_cookie: bool = True,
        login_error: Optional[Exception] = None,
        probe_error: Optional[Exception] = None,
        logout_error: Optional[Exception] = None,
        resources: Optional[Dict[str, Any]] = None
    ):
        self.version = version
        self.login_status = login_status
        self.probe_status = probe_status
        self.logout_status = logout_status
        self.probe_body = probe_body
        self.set_cookie = set_cookie
        self.login_error = login_error
        self.probe_error = probe_error
        self.logout_error = logout_error
        self.resources = resources or {}
        
        self.sessions = []
        self.calls = []
    
    def session_factory(self, transport: TransportOptions):
        session = MagicMock(spec=requests.Session)
        session.cookies = RequestsCookieJar()
        session.post.side_effect = lambda url, **kw: self._login(session, url, kw)
        session.get.side_effect = lambda url, **kw: self._probe(url, kw)
        session.request.side_effect = lambda method, url, **kw: self._request(method, url, kw)
        self.sessions.append(session)
        return session
    
    def calls_to(self, suffix: str):
        return [call for call in self.calls if call[1].endswith(suffix)]
    
    def _login(self, session, url, kwargs):
        self.calls.append(('POST', url, kwargs))
        if self.login_error is not None:
            raise self.login_error
        if self.set_cookie and self.login_status < 400:
            session.cookies.set('id', 'c2Vzc2lvbi10b2tlbg==')
        return make_response(self.login_status, url=url)
    
    def _probe(self, url, kwargs):
        self.calls.append(('GET', url, kwargs))
        if self.probe_error is not None:
            raise self.probe_error
        body = self.probe_body
        if body is None:
            body = {'latest': {'version': self.version, 'prefix': f'/rest/v{self.version}'}}
        return make_response(self.probe_status, body, url=url)
    
    def _request(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        if url.endswith('/rest/v1/logout'):
            if self.logout_error is not None:
                raise self.logout_error
            return make_response(self.logout_status, url=url)
        
        path = url.split('/', 3)[3]
        if path not in self.resources:
            return make_response(404, {'message': 'not found'}, url=url)
        return make_response(200, self.resources[path], url=url)


@pytest.fixture(autouse=True)
def modern_stack(monkeypatch):
    """Detect the modern HTTP stack unless a test asks for legacy explicitly"""
    monkeypatch.setattr(
        transport_module, 'detect_capability', lambda: RuntimeCapability.MODERN
    )


@pytest.fixture
def switch():
    return SimulatedSwitch()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def credential():
    return Credential(username='admin', password='secret')


@pytest.fixture
def transport():
    return TransportOptions()


@pytest.fixture
def connection(switch, transport):
    """A negotiated connection to the simulated switch"""
    return SessionNegotiator(session_factory=switch.session_factory).negotiate(
        'switch.example.com', 443, Credential('admin', 'secret'), transport
    )


@pytest.fixture
def dispatcher(registry):
    return RequestDispatcher(registry)


@pytest.fixture
def prompt():
    """Interactive prompt stand-in that must not be reached unless configured"""
    return MagicMock(side_effect=AssertionError("prompt should not be called"))


@pytest.fixture
def confirm():
    return MagicMock(return_value=False)


@pytest.fixture
def manager(switch, registry, prompt, confirm):
    dispatcher = RequestDispatcher(registry)
    return ConnectionManager(
        registry=registry,
        resolver=CredentialResolver(prompt=prompt),
        policy=TransportPolicy(posture=SecurityPosture()),
        negotiator=SessionNegotiator(session_factory=switch.session_factory),
        dispatcher=dispatcher,
        terminator=SessionTerminator(dispatcher, registry, confirm=confirm)
    )


def build_connection(server='switch.example.com', port=443, version='10.09', session=None):
    """Connection built directly, for registry tests"""
    return Connection(
        server=server,
        port=port,
        session=session or MagicMock(spec=requests.Session),
        transport=TransportOptions(),
        api_version=version
    )


@pytest.fixture
def make_connection():
    return build_connection
