# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Session binding of the active authenticator

Once a user has authenticated against a source, the (source, implementation)
pair is kept in the session and reused on later requests. A binding whose
federated session has expired is dropped here, so callers only ever see a
live authenticator or none.
"""
import logging
from typing import Optional

from .authenticators import Authenticator, AuthenticatorBinding, AuthenticatorFactory, AuthenticatorHooks
from .config_types import SecurityConfig
from .errors import ConfigurationError, FederationSessionExpired
from .identity_provider import IdentityProvider
from .members import MemberStore
from .session import BINDING_KEY, SessionState

logger = logging.getLogger(__name__)


class SessionBinder:
    """Store, load and clear the session's authenticator"""

    def __init__(self, session: SessionState, provider: IdentityProvider, members: MemberStore,
                 security: SecurityConfig, environment: str,
                 hooks: Optional[AuthenticatorHooks] = None):
        self.session = session
        self.provider = provider
        self.members = members
        self.security = security
        self.environment = environment
        self.hooks = hooks

    def create(self, source_name: str, implementation: str) -> Authenticator:
        return AuthenticatorFactory.create(
            source_name, implementation, self.provider, self.members, self.session, self.hooks
        )

    def is_bound(self) -> bool:
        return BINDING_KEY in self.session

    def store(self, authenticator: Authenticator) -> None:
        self.session.set(BINDING_KEY, authenticator.binding.to_dict())

    def load(self, require_live: bool = True) -> Optional[Authenticator]:
        """
        Rebuild the bound authenticator

        Args:
            require_live: Drop the binding if its federated session has
                expired. Logout passes False so it can still finish.

        Returns:
            The authenticator if its federated session is still valid,
            otherwise None (and the stale binding is cleared)
        """
        data = self.session.get(BINDING_KEY)
        if data is None:
            return None

        binding = AuthenticatorBinding.from_dict(data)
        if binding is None:
            logger.warning("Discarding malformed authenticator binding")
            self.clear()
            return None

        try:
            authenticator = self.create(binding.source_name, binding.implementation)
        except ConfigurationError as e:
            logger.warning(f"Discarding binding to {binding.source_name}: {e}")
            self.clear()
            return None

        if not require_live:
            return authenticator

        try:
            authenticator.assert_live()
        except FederationSessionExpired as e:
            logger.info(f"{e}; restarting source resolution")
            if self.session.session_id is not None:
                # Local login was tied to this federated session
                self.session.end_federated_login()
            self.clear()
            return None

        return authenticator

    def clear(self) -> None:
        self.session.clear(BINDING_KEY)
        self.provider.clear_session()

    def get_authenticator(self, source_override: Optional[str] = None) -> Authenticator:
        """Bound authenticator if still valid, otherwise a freshly resolved one"""
        authenticator = self.load()
        if authenticator is not None:
            return authenticator

        source_name, implementation = AuthenticatorFactory.resolve(
            self.security, self.environment, source_override
        )
        logger.debug(f"Resolved authentication source {source_name} ({implementation})")
        return self.create(source_name, implementation)
