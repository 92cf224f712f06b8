# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Tests for authentication source resolution
"""
import pytest
from unittest.mock import patch

from idbridge.utils.authenticators import (
    Authenticator,
    AuthenticatorFactory,
    claims_profile,
    directory_profile,
)
from idbridge.utils.config_types import BridgeConfig, SecurityConfig
from idbridge.utils.errors import ConfigurationError
from idbridge.utils.members import MemberProfile


def make_security(**overrides):
    data = {
        'authenticators': {
            'default-sp': 'adfs',
            'directory': 'ldap',
            'partner': 'claims',
        },
    }
    data.update(overrides)
    return SecurityConfig(**data)


class TestResolve:
    """Test source resolution priority"""

    @pytest.mark.parametrize('source', ['default-sp', 'directory', 'partner'])
    def test_override_always_wins(self, source):
        """An explicit ?as= source is used regardless of the default"""
        for default in (None, 'directory', {'test': 'partner'}):
            security = make_security(default_authenticator=default)

            assert AuthenticatorFactory.resolve(security, 'test', source)[0] == source

    def test_string_default(self):
        security = make_security(default_authenticator='directory')

        assert AuthenticatorFactory.resolve(security, 'prod') == ('directory', 'ldap')

    def test_environment_keyed_default(self):
        security = make_security(default_authenticator={'dev': 'directory', 'prod': 'partner'})

        assert AuthenticatorFactory.resolve(security, 'dev')[0] == 'directory'
        assert AuthenticatorFactory.resolve(security, 'prod')[0] == 'partner'

    def test_environment_missing_from_default_falls_back_to_first(self):
        security = make_security(default_authenticator={'prod': 'partner'})

        assert AuthenticatorFactory.resolve(security, 'dev')[0] == 'default-sp'

    def test_no_default_uses_first_registered(self):
        """Fallback follows configuration order, not alphabetical order"""
        security = SecurityConfig(authenticators={'zeta': 'ldap', 'alpha': 'adfs'})

        assert AuthenticatorFactory.resolve(security, 'test') == ('zeta', 'ldap')

    def test_empty_override_falls_back_to_first(self):
        security = make_security(default_authenticator='directory')

        assert AuthenticatorFactory.resolve(security, 'test', '')[0] == 'default-sp'

    def test_unknown_override_raises(self):
        with pytest.raises(ConfigurationError, match="'nope' does not exist"):
            AuthenticatorFactory.resolve(make_security(), 'test', 'nope')

    def test_unknown_default_raises(self):
        security = make_security(default_authenticator='missing')

        with pytest.raises(ConfigurationError, match="'missing' does not exist"):
            AuthenticatorFactory.resolve(security, 'test')

    def test_unknown_implementation_raises(self):
        security = SecurityConfig(authenticators={'sso': 'kerberos'})

        with pytest.raises(ConfigurationError, match='Unknown authenticator implementation: kerberos'):
            AuthenticatorFactory.resolve(security, 'test')

    def test_resolution_is_pure(self):
        security = make_security(default_authenticator='directory')
        before = security.model_dump()

        AuthenticatorFactory.resolve(security, 'test', 'partner')

        assert security.model_dump() == before

    def test_empty_authenticators_rejected_at_load(self):
        with pytest.raises(ConfigurationError):
            BridgeConfig.from_dict({'security': {'authenticators': {}}})


class TestLoadImplementation:
    """Test implementation lookup"""

    def test_builtin_aliases(self):
        assert AuthenticatorFactory.load_implementation('adfs') is claims_profile
        assert AuthenticatorFactory.load_implementation('claims') is claims_profile
        assert AuthenticatorFactory.load_implementation('ldap') is directory_profile
        assert AuthenticatorFactory.load_implementation('directory') is directory_profile

    def test_import_path(self):
        strategy = AuthenticatorFactory.load_implementation(
            'idbridge.utils.authenticators.variants:directory_profile'
        )

        assert strategy is directory_profile

    def test_missing_module_raises(self):
        with pytest.raises(ConfigurationError, match='does not exist'):
            AuthenticatorFactory.load_implementation('nowhere.module:strategy')

    def test_missing_attribute_raises(self):
        with pytest.raises(ConfigurationError, match='does not exist'):
            AuthenticatorFactory.load_implementation('idbridge.utils.authenticators.variants:nothing')

    def test_non_callable_raises(self):
        with pytest.raises(ConfigurationError, match='is not an authenticator strategy'):
            AuthenticatorFactory.load_implementation(
                'idbridge.utils.authenticators.variants:DIRECTORY_ATTRIBUTES'
            )

    def test_register_implementation(self):
        def email_only(attributes):
            return MemberProfile(email=attributes['email'][0])

        with patch.dict(AuthenticatorFactory._implementations):
            AuthenticatorFactory.register_implementation('email-only', email_only)
            security = SecurityConfig(authenticators={'custom': 'email-only'})

            assert AuthenticatorFactory.resolve(security, 'test') == ('custom', 'email-only')

        assert 'email-only' not in AuthenticatorFactory._implementations

    def test_validate_checks_every_source(self):
        security = SecurityConfig(authenticators={'ok': 'ldap', 'broken': 'kerberos'})

        with pytest.raises(ConfigurationError, match='kerberos'):
            AuthenticatorFactory.validate(security)


class TestCreate:
    """Test authenticator construction"""

    def test_create_binds_source(self, provider, members, session_state):
        authenticator = AuthenticatorFactory.create('directory', 'ldap', provider, members, session_state)

        assert isinstance(authenticator, Authenticator)
        assert authenticator.source_name == 'directory'
        assert authenticator.implementation == 'ldap'
        assert authenticator.strategy is directory_profile
