# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Identity provider adapters

The federation protocol itself (SAML, WS-Fed, LDAP binds) runs in a hosted
service provider. The bridge only drives its login/logout endpoints and
consumes the signed assertion it returns. Adapters keep their federation
record in the browser session so a later request can resume the flow.
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence
from urllib.parse import urlencode

import jwt

from .config_types import ProviderConfig
from .errors import FederationSessionExpired, InvalidAssertion, ProviderRedirect
from .session import FEDERATION_KEY, SessionState

logger = logging.getLogger(__name__)

# attribute name (LDAP field or claim URI) -> ordered values
FederatedAttributeSet = Mapping[str, Sequence[str]]


class CompletedLogin(NamedTuple):
    """Outcome of a provider callback"""
    source_name: str
    return_to: Optional[str]


class IdentityProvider(ABC):
    """Base class for identity provider adapters"""

    def require_auth(self, source_name: str, return_to: str,
                     error_url: Optional[str] = None) -> None:
        """Redirect to the provider unless already authenticated"""
        if not self.is_authenticated(source_name):
            self.login(source_name, return_to, error_url=error_url)

    @abstractmethod
    def login(self, source_name: str, return_to: str, passive: bool = False,
              force_authn: bool = False, error_url: Optional[str] = None) -> None:
        """
        Start a login at the provider (always raises ProviderRedirect)

        Args:
            passive: Only succeed silently, never prompt the user
            force_authn: Re-prompt even if the provider session is valid
            error_url: Where the provider sends the user if login fails
        """
        pass

    @abstractmethod
    def logout(self, source_name: str, return_to: str) -> None:
        """Start a logout at the provider (always raises ProviderRedirect)"""
        pass

    @abstractmethod
    def is_authenticated(self, source_name: str) -> bool:
        pass

    @abstractmethod
    def get_attributes(self, source_name: str) -> Dict[str, List[str]]:
        pass

    @abstractmethod
    def session_id(self) -> Optional[str]:
        """Provider-side session identifier"""
        pass

    @abstractmethod
    def complete_login(self, assertion: str) -> CompletedLogin:
        """Verify a provider callback and record the federated session"""
        pass

    @abstractmethod
    def clear_session(self) -> None:
        """Forget the federated session held for this browser"""
        pass

    def front_page_url(self) -> Optional[str]:
        """Provider landing page, if it has one"""
        return None


def _normalize_attributes(raw) -> Dict[str, List[str]]:
    """Coerce provider output to name -> list of strings"""
    attributes = {}
    for name, values in (raw or {}).items():
        if isinstance(values, str):
            values = [values]
        attributes[str(name)] = [str(v) for v in values]
    return attributes


class HostedSPProvider(IdentityProvider):
    """
    Adapter for a hosted service provider (SimpleSAMLphp-style)

    Login and logout are redirects to the provider's as_login/as_logout
    endpoints. After authenticating, the provider redirects the browser to
    the bridge's assertion consumer with an HS256 token carrying:

    - source: authentication source the user logged in with
    - sid: provider session identifier
    - attributes: released federated attributes
    - return_to: where to continue the flow
    - exp: end of the federated session
    """

    def __init__(self, config: ProviderConfig, session: SessionState):
        self.config = config
        self.session = session

    def _endpoint(self, path: str, params: Dict[str, str]) -> str:
        base = self.config.sp_base_url.rstrip('/')
        return f"{base}/{path}?{urlencode(params)}"

    def login(self, source_name: str, return_to: str, passive: bool = False,
              force_authn: bool = False, error_url: Optional[str] = None) -> None:
        params = {
            'AuthId': source_name,
            'ReturnTo': return_to,
            'AssertionConsumerService': self.config.acs_url,
        }
        if passive:
            params['isPassive'] = 'true'
        if force_authn:
            params['ForceAuthn'] = 'true'
        if error_url:
            params['ErrorURL'] = error_url

        logger.info(f"Redirecting to identity provider: source={source_name}, "
                    f"passive={passive}, force_authn={force_authn}")
        raise ProviderRedirect(self._endpoint('module.php/core/as_login.php', params))

    def logout(self, source_name: str, return_to: str) -> None:
        logger.info(f"Redirecting to identity provider logout: source={source_name}")
        raise ProviderRedirect(self._endpoint(
            'module.php/core/as_logout.php',
            {'AuthId': source_name, 'ReturnTo': return_to},
        ))

    def _record(self) -> Optional[Dict]:
        return self.session.get(FEDERATION_KEY)

    def is_authenticated(self, source_name: str) -> bool:
        record = self._record()
        if not record or record.get('source') != source_name:
            return False
        return record.get('expires', 0) > time.time()

    def get_attributes(self, source_name: str) -> Dict[str, List[str]]:
        if not self.is_authenticated(source_name):
            raise FederationSessionExpired(f"No valid federated session for '{source_name}'")
        return _normalize_attributes(self._record().get('attributes'))

    def session_id(self) -> Optional[str]:
        record = self._record()
        return record.get('sid') if record else None

    def complete_login(self, assertion: str) -> CompletedLogin:
        try:
            claims = jwt.decode(
                assertion,
                self.config.assertion_secret,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                leeway=self.config.leeway,
                options={
                    "require": ["exp", "sid", "source"],
                    "verify_iss": bool(self.config.issuer),
                },
            )
        except jwt.ExpiredSignatureError:
            raise InvalidAssertion("Assertion expired")
        except jwt.InvalidTokenError as e:
            raise InvalidAssertion(f"Invalid assertion: {e}")

        self.session.set(FEDERATION_KEY, {
            'source': claims['source'],
            'sid': claims['sid'],
            'attributes': _normalize_attributes(claims.get('attributes')),
            'expires': claims['exp'],
        })
        logger.info(f"Federated session established: source={claims['source']}")
        return CompletedLogin(claims['source'], claims.get('return_to'))

    def clear_session(self) -> None:
        self.session.clear(FEDERATION_KEY)

    def front_page_url(self) -> Optional[str]:
        return f"{self.config.sp_base_url.rstrip('/')}/module.php/core/frontpage_welcome.php"
