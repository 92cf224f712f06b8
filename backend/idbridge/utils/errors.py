# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Exception classes for the identity bridge

Deployment problems (ConfigurationError) are fatal and surface at startup or
first use. Per-request authentication failures derive from AuthError.
Redirects to the identity provider are modelled as exceptions so that any
layer can hand control to the provider; the application turns them into
302 responses.
"""


class BridgeError(Exception):
    """Base identity bridge exception"""
    pass


class ConfigurationError(BridgeError):
    """Deployment misconfiguration (fatal, never retried)"""
    pass


class AuthenticationContractViolation(BridgeError):
    """An authenticator strategy did not produce a valid member"""
    pass


class AuthError(BridgeError):
    """Per-request authentication failure"""
    pass


class FederatedAttributeError(AuthError):
    """A required federated attribute was not released by the provider"""
    pass


class FederationSessionExpired(AuthError):
    """The provider no longer considers the federated session valid"""
    pass


class InvalidAssertion(AuthError):
    """The provider callback carried an assertion that failed verification"""
    pass


class RedirectRequired(Exception):
    """Control must leave this request through a redirect"""

    def __init__(self, url: str):
        super().__init__(url)
        self.url = url


class ProviderRedirect(RedirectRequired):
    """Hand control to the external identity provider"""
    pass


class TransportSecurityRequired(RedirectRequired):
    """Upgrade a plain HTTP request to HTTPS"""
    pass
