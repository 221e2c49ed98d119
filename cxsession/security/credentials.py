"""
Credential Resolver

Obtains the username/password pair used to log in to a switch.

Priority:
1. Explicit username + password
2. Explicit Credential object
3. Interactive prompt labeled for the target switch
"""

from dataclasses import dataclass, field
from getpass import getpass
from typing import Callable, Optional
import logging
import sys

from cxsession.exceptions import NoCredentialError


@dataclass(frozen=True)
class Credential:
    """Username/password pair. The password is kept out of repr()."""
    username: str
    password: str = field(repr=False)


# (label, default_username) -> Credential
CredentialPrompt = Callable[[str, Optional[str]], Credential]


def console_prompt(label: str, username: Optional[str] = None) -> Credential:
    """
    Ask for a credential on the terminal.
    
    Raises:
        NoCredentialError: stdin is not interactive, input was interrupted,
            or no username was entered
    """
    if not sys.stdin or not sys.stdin.isatty():
        raise NoCredentialError("No credential supplied and no interactive terminal available")
    
    print(label, file=sys.stderr)
    try:
        if username is None:
            username = input("Username: ").strip()
        password = getpass("Password: ")
    except (EOFError, KeyboardInterrupt) as e:
        raise NoCredentialError("Credential prompt was cancelled", cause=e) from e
    
    if not username:
        raise NoCredentialError("No username entered")
    
    return Credential(username=username, password=password)


class CredentialResolver:
    """
    Resolve a credential once per connection attempt. Nothing is cached.
    """
    
    def __init__(self, prompt: Optional[CredentialPrompt] = None):
        """
        Args:
            prompt: Interactive fallback, called as prompt(label, username)
        """
        self.prompt = prompt or console_prompt
        self.logger = logging.getLogger(__name__)
    
    def resolve(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        credential: Optional[Credential] = None,
        target: Optional[str] = None
    ) -> Credential:
        """
        Resolve a credential.
        
        Args:
            username: Explicit username
            password: Explicit password (used only together with username)
            credential: Explicit credential object
            target: Switch the credential is for (used in the prompt label)
        
        Returns:
            Resolved Credential
        
        Raises:
            NoCredentialError: If nothing could be resolved
        """
        if username and password is not None:
            self.logger.debug(f"Using explicit credential for user {username}")
            return Credential(username=username, password=password)
        
        if credential is not None:
            self.logger.debug(f"Using supplied credential for user {credential.username}")
            return credential
        
        label = f"Please enter administrative credential for {target or 'your switch'}"
        self.logger.debug("Prompting for credential")
        resolved = self.prompt(label, username)
        
        if resolved is None:
            raise NoCredentialError("No credential could be resolved")
        
        return resolved
