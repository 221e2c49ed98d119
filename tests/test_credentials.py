"""
Test credential resolution priority and the console prompt
"""

from unittest.mock import MagicMock

import pytest

import cxsession.security.credentials as credentials_module
from cxsession.exceptions import NoCredentialError
from cxsession.security.credentials import (
    Credential,
    CredentialResolver,
    console_prompt
)


class _Stdin:
    def __init__(self, tty):
        self.tty = tty
    
    def isatty(self):
        return self.tty


@pytest.fixture
def prompted():
    return Credential(username='prompted', password='from-prompt')


@pytest.fixture
def resolver(prompted):
    return CredentialResolver(prompt=MagicMock(return_value=prompted))


class TestCredentialResolver:
    """Explicit pair > credential object > prompt"""
    
    def test_explicit_pair_wins(self, resolver):
        explicit = Credential(username='object', password='from-object')
        
        resolved = resolver.resolve(username='admin', password='secret', credential=explicit)
        
        assert resolved == Credential('admin', 'secret')
        resolver.prompt.assert_not_called()
    
    def test_credential_object_used_as_is(self, resolver):
        explicit = Credential(username='object', password='from-object')
        
        resolved = resolver.resolve(credential=explicit)
        
        assert resolved is explicit
        resolver.prompt.assert_not_called()
    
    def test_username_without_password_falls_back_to_object(self, resolver):
        explicit = Credential(username='object', password='from-object')
        
        assert resolver.resolve(username='admin', credential=explicit) is explicit
    
    def test_empty_password_is_still_a_pair(self, resolver):
        resolved = resolver.resolve(username='admin', password='')
        
        assert resolved == Credential('admin', '')
    
    def test_prompt_used_last(self, resolver, prompted):
        resolved = resolver.resolve(target='switch.example.com')
        
        assert resolved is prompted
        label, username = resolver.prompt.call_args[0]
        assert 'switch.example.com' in label
        assert username is None
    
    def test_prompt_receives_partial_username(self, resolver):
        resolver.resolve(username='admin', target='sw1')
        
        assert resolver.prompt.call_args[0][1] == 'admin'
    
    def test_prompt_failure_propagates(self):
        resolver = CredentialResolver(prompt=MagicMock(side_effect=NoCredentialError("no tty")))
        
        with pytest.raises(NoCredentialError):
            resolver.resolve()
    
    def test_prompt_returning_none_raises(self):
        resolver = CredentialResolver(prompt=MagicMock(return_value=None))
        
        with pytest.raises(NoCredentialError):
            resolver.resolve()
    
    def test_password_hidden_from_repr(self):
        assert 'secret' not in repr(Credential('admin', 'secret'))


class TestConsolePrompt:
    """Terminal prompt behaviour"""
    
    def test_non_interactive_raises(self, monkeypatch):
        monkeypatch.setattr(credentials_module.sys, 'stdin', _Stdin(False))
        
        with pytest.raises(NoCredentialError):
            console_prompt("label")
    
    def test_reads_username_and_password(self, monkeypatch):
        monkeypatch.setattr(credentials_module.sys, 'stdin', _Stdin(True))
        monkeypatch.setattr('builtins.input', lambda _: ' admin ')
        monkeypatch.setattr(credentials_module, 'getpass', lambda _: 'secret')
        
        assert console_prompt("label") == Credential('admin', 'secret')
    
    def test_default_username_not_asked_again(self, monkeypatch):
        monkeypatch.setattr(credentials_module.sys, 'stdin', _Stdin(True))
        monkeypatch.setattr('builtins.input', MagicMock(side_effect=AssertionError))
        monkeypatch.setattr(credentials_module, 'getpass', lambda _: 'secret')
        
        assert console_prompt("label", 'operator') == Credential('operator', 'secret')
    
    def test_cancelled_prompt_raises(self, monkeypatch):
        monkeypatch.setattr(credentials_module.sys, 'stdin', _Stdin(True))
        monkeypatch.setattr('builtins.input', MagicMock(side_effect=EOFError))
        
        with pytest.raises(NoCredentialError) as excinfo:
            console_prompt("label")
        
        assert isinstance(excinfo.value.cause, EOFError)
    
    def test_empty_username_raises(self, monkeypatch):
        monkeypatch.setattr(credentials_module.sys, 'stdin', _Stdin(True))
        monkeypatch.setattr('builtins.input', lambda _: '')
        monkeypatch.setattr(credentials_module, 'getpass', lambda _: 'secret')
        
        with pytest.raises(NoCredentialError):
            console_prompt("label")
