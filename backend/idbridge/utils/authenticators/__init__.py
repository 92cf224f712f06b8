# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Authenticator abstraction

One Authenticator per identity source shape (claims-based ADFS, directory
based LDAP, ...). Sources are configured by name and resolved per request.
"""
from .base import Authenticator, AuthenticatorBinding, AuthenticatorHooks, AFTER_LOGIN, AFTER_LOGOUT
from .factory import AuthenticatorFactory
from .variants import AttributeMap, ADFS_CLAIMS, DIRECTORY_ATTRIBUTES, claims_profile, directory_profile

__all__ = [
    'Authenticator',
    'AuthenticatorBinding',
    'AuthenticatorHooks',
    'AuthenticatorFactory',
    'AttributeMap',
    'ADFS_CLAIMS',
    'DIRECTORY_ATTRIBUTES',
    'AFTER_LOGIN',
    'AFTER_LOGOUT',
    'claims_profile',
    'directory_profile',
]
