# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Shared pytest fixtures for all tests
"""
import time
from typing import Dict, List, Optional

import jwt
import pytest

from idbridge.utils.config_types import BridgeConfig
from idbridge.utils.database import create_session_factory
from idbridge.utils.errors import FederationSessionExpired, ProviderRedirect
from idbridge.utils.identity_provider import CompletedLogin, IdentityProvider
from idbridge.utils.members import MemberStore
from idbridge.utils.session import SessionState

ASSERTION_SECRET = 'test-assertion-secret'

DIRECTORY_ATTRIBUTES = {
    'mail': ['a@x.com'],
    'sAMAccountName': ['auser'],
    'givenName': ['A'],
    'sn': ['User'],
}


class FakeProvider(IdentityProvider):
    """In-memory identity provider for unit tests"""

    def __init__(self, attributes: Optional[Dict[str, List[str]]] = None, sid: str = 'fake-sid'):
        self.authenticated = set()
        self.attributes = attributes if attributes is not None else dict(DIRECTORY_ATTRIBUTES)
        self.sid = sid
        self.logins = []
        self.logouts = []
        self.cleared = 0

    def login(self, source_name, return_to, passive=False, force_authn=False, error_url=None):
        self.logins.append({
            'source': source_name,
            'return_to': return_to,
            'passive': passive,
            'force_authn': force_authn,
            'error_url': error_url,
        })
        raise ProviderRedirect(f"https://idp.test/login?AuthId={source_name}")

    def logout(self, source_name, return_to):
        self.logouts.append({'source': source_name, 'return_to': return_to})
        raise ProviderRedirect(f"https://idp.test/logout?AuthId={source_name}")

    def is_authenticated(self, source_name):
        return source_name in self.authenticated

    def get_attributes(self, source_name):
        if source_name not in self.authenticated:
            raise FederationSessionExpired(source_name)
        return self.attributes

    def session_id(self):
        return self.sid if self.authenticated else None

    def complete_login(self, assertion):
        self.authenticated.add(assertion)
        return CompletedLogin(assertion, None)

    def clear_session(self):
        self.cleared += 1
        self.authenticated.clear()


@pytest.fixture
def config_dict():
    """Raw configuration as it would appear in config.json"""
    return {
        'security': {
            'authenticators': {
                'default-sp': 'adfs',
                'directory': 'ldap',
            },
            'default_logged_in_url': '/admin',
            'default_logged_out_url': '/',
            'enable_auth': True,
            'force_ssl': False,
        },
        'provider': {
            'sp_base_url': 'https://sso.test/simplesaml',
            'acs_url': '/Security/acs',
            'assertion_secret': ASSERTION_SECRET,
        },
        'session': {
            'secret_key': 'test-session-secret',
        },
        'database': {
            'url': 'sqlite://',
        },
    }


@pytest.fixture
def bridge_config(config_dict):
    return BridgeConfig.from_dict(config_dict)


@pytest.fixture
def session_state():
    return SessionState({})


@pytest.fixture
def db():
    session_factory = create_session_factory('sqlite://')
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def members(db):
    return MemberStore(db)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def issue_assertion():
    """Mint an assertion the way the hosted service provider does"""
    def _issue(source='directory', attributes=None, return_to='/Security/login',
               sid='sp-session-1', ttl=3600, secret=ASSERTION_SECRET, **claims):
        payload = {
            'source': source,
            'sid': sid,
            'attributes': attributes if attributes is not None else DIRECTORY_ATTRIBUTES,
            'return_to': return_to,
            'exp': int(time.time()) + ttl,
            'iat': int(time.time()),
        }
        payload.update(claims)
        return jwt.encode(payload, secret, algorithm='HS256')
    return _issue
