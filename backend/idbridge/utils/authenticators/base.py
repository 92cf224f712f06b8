# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Authenticator bound to one identity source

An Authenticator pairs a source name with an attribute strategy. The
strategy turns federated attributes into a MemberProfile; find-or-create of
the local member is shared by every source.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..errors import AuthenticationContractViolation, FederationSessionExpired
from ..identity_provider import FederatedAttributeSet, IdentityProvider
from ..members import Member, MemberProfile, MemberStore
from ..session import BINDING_KEY, SessionState

logger = logging.getLogger(__name__)

AttributeStrategy = Callable[[FederatedAttributeSet], MemberProfile]

AFTER_LOGIN = 'after_login'
AFTER_LOGOUT = 'after_logout'


@dataclass(frozen=True)
class AuthenticatorBinding:
    """Minimal session snapshot of an authenticator"""
    source_name: str
    implementation: str

    def to_dict(self) -> Dict[str, str]:
        return {'source': self.source_name, 'implementation': self.implementation}

    @classmethod
    def from_dict(cls, data: Any) -> Optional['AuthenticatorBinding']:
        """Rebuild from session data; None if the data is not a binding"""
        if not isinstance(data, dict):
            return None
        source = data.get('source')
        implementation = data.get('implementation')
        if not isinstance(source, str) or not isinstance(implementation, str):
            return None
        return cls(source, implementation)


class AuthenticatorHooks:
    """Collaborator callbacks fired after login and logout"""

    def __init__(self):
        self._hooks: Dict[str, List[Callable]] = {AFTER_LOGIN: [], AFTER_LOGOUT: []}

    def register(self, event: str, hook: Callable) -> None:
        """
        Register a hook

        Args:
            event: 'after_login' (called with authenticator, member) or
                'after_logout' (called with authenticator)
            hook: Callable
        """
        if event not in self._hooks:
            raise ValueError(f"Unknown hook event: {event}. Available: {list(self._hooks)}")
        self._hooks[event].append(hook)

    def run(self, event: str, *args) -> None:
        for hook in self._hooks[event]:
            hook(*args)


class Authenticator:
    """Drives one identity source and reconciles its users"""

    def __init__(self, source_name: str, implementation: str, strategy: AttributeStrategy,
                 provider: IdentityProvider, members: MemberStore, session: SessionState,
                 hooks: Optional[AuthenticatorHooks] = None):
        self.source_name = source_name
        self.implementation = implementation
        self.strategy = strategy
        self.provider = provider
        self.members = members
        self.session = session
        self.hooks = hooks or AuthenticatorHooks()

    @property
    def binding(self) -> AuthenticatorBinding:
        return AuthenticatorBinding(self.source_name, self.implementation)

    def authenticate(self) -> Member:
        """
        Find or create the member for the current federated identity

        Raises:
            AuthenticationContractViolation: If the strategy or the store
                produce something other than a profile / member
            FederatedAttributeError: If a required attribute is missing
        """
        profile = self.strategy(self.get_attributes())
        if not isinstance(profile, MemberProfile):
            raise AuthenticationContractViolation(
                f"{self.implementation} does not return a valid MemberProfile"
            )

        member = self.members.find_or_create(profile)
        if not isinstance(member, Member):
            raise AuthenticationContractViolation(
                f"{self.implementation} does not return a valid Member"
            )
        return member

    def require_auth(self, return_to: str, error_url: Optional[str] = None) -> None:
        self.provider.require_auth(self.source_name, return_to, error_url=error_url)

    def login(self, return_to: str, passive: bool = False, force_authn: bool = False,
              error_url: Optional[str] = None) -> None:
        self.provider.login(self.source_name, return_to, passive=passive,
                            force_authn=force_authn, error_url=error_url)

    def logout(self, return_to: str) -> None:
        self.provider.logout(self.source_name, return_to)

    def is_authenticated(self) -> bool:
        return self.provider.is_authenticated(self.source_name)

    def get_attributes(self) -> FederatedAttributeSet:
        return self.provider.get_attributes(self.source_name)

    def assert_live(self) -> None:
        if not self.is_authenticated():
            raise FederationSessionExpired(f"Federated session for '{self.source_name}' expired")

    def login_complete(self) -> None:
        """
        Share the provider's session lifetime and remember this authenticator
        so later requests skip source resolution
        """
        provider_sid = self.provider.session_id()
        if provider_sid:
            self.session.rebind(provider_sid)
        self.session.set(BINDING_KEY, self.binding.to_dict())
        logger.debug(f"Bound authenticator {self.source_name} ({self.implementation}) to session")

    def on_after_login(self, member: Member) -> None:
        self.hooks.run(AFTER_LOGIN, self, member)

    def on_after_logout(self) -> None:
        self.hooks.run(AFTER_LOGOUT, self)
