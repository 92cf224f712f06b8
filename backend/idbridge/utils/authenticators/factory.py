# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Authenticator factory

Resolves which identity source governs a request and builds the matching
Authenticator. Implementations are looked up in a strategy table; custom
strategies can be registered or referenced as "package.module:attr".
"""
import importlib
import logging
from typing import Dict, Optional, Tuple

from ..config_types import SecurityConfig
from ..errors import ConfigurationError
from ..identity_provider import IdentityProvider
from ..members import MemberStore
from ..session import SessionState
from .base import AttributeStrategy, Authenticator, AuthenticatorHooks
from .variants import claims_profile, directory_profile

logger = logging.getLogger(__name__)


class AuthenticatorFactory:
    """Factory for resolving and creating authenticators"""

    _implementations: Dict[str, AttributeStrategy] = {
        'claims': claims_profile,
        'adfs': claims_profile,
        'directory': directory_profile,
        'ldap': directory_profile,
    }

    @classmethod
    def resolve(cls, security: SecurityConfig, environment: str,
                source_override: Optional[str] = None) -> Tuple[str, str]:
        """
        Pick the authentication source for a request

        Priority:
        1. Explicit source from the request (?as=)
        2. default_authenticator (string, or mapping keyed by environment)
        3. First configured source

        Returns:
            (source_name, implementation)

        Raises:
            ConfigurationError: If the source is unknown or its
                implementation cannot be loaded
        """
        authenticators = security.authenticators
        if not authenticators or not isinstance(authenticators, dict):
            raise ConfigurationError("Expected mapping of authentication sources in security.authenticators")

        source_name = ''
        if source_override is not None:
            source_name = source_override
        else:
            default = security.default_authenticator
            if isinstance(default, str):
                source_name = default
            elif isinstance(default, dict):
                source_name = default.get(environment, '')

        if not source_name:
            source_name = next(iter(authenticators))

        if source_name not in authenticators:
            raise ConfigurationError(
                f"'{source_name}' does not exist in security.authenticators. "
                f"Available: {list(authenticators.keys())}"
            )

        implementation = authenticators[source_name]
        cls.load_implementation(implementation)
        return source_name, implementation

    @classmethod
    def load_implementation(cls, implementation: str) -> AttributeStrategy:
        """
        Look up an attribute strategy

        Raises:
            ConfigurationError: If it does not exist or is not callable
        """
        strategy = cls._implementations.get(implementation)
        if strategy is None:
            if ':' not in implementation:
                raise ConfigurationError(
                    f"Unknown authenticator implementation: {implementation}. "
                    f"Available: {list(cls._implementations.keys())}"
                )
            module_name, _, attr = implementation.partition(':')
            try:
                strategy = getattr(importlib.import_module(module_name), attr)
            except (ImportError, AttributeError) as e:
                raise ConfigurationError(f"{implementation} does not exist: {e}") from e

        if not callable(strategy):
            raise ConfigurationError(f"{implementation} is not an authenticator strategy")
        return strategy

    @classmethod
    def validate(cls, security: SecurityConfig) -> None:
        """Load every configured implementation once, at startup"""
        for source_name, implementation in security.authenticators.items():
            cls.load_implementation(implementation)
            logger.debug(f"Authentication source {source_name} -> {implementation}")

    @classmethod
    def create(cls, source_name: str, implementation: str, provider: IdentityProvider,
               members: MemberStore, session: SessionState,
               hooks: Optional[AuthenticatorHooks] = None) -> Authenticator:
        """Create an authenticator bound to one source"""
        return Authenticator(
            source_name=source_name,
            implementation=implementation,
            strategy=cls.load_implementation(implementation),
            provider=provider,
            members=members,
            session=session,
            hooks=hooks,
        )

    @classmethod
    def register_implementation(cls, name: str, strategy: AttributeStrategy):
        """
        Register a custom attribute strategy (for extensibility)

        Args:
            name: Implementation id referenced from security.authenticators
            strategy: Callable taking federated attributes, returning a MemberProfile
        """
        cls._implementations[name] = strategy
