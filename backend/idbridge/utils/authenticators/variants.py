# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Attribute strategies for the supported identity source shapes

Each source differs only in which attribute names carry the member fields,
so a strategy is an AttributeMap plus the shared extraction below. The
first value of each attribute is used.

The email attribute is required: without it there is no identity to match
on, so its absence fails the login. Other attributes default to ''.
"""
from typing import NamedTuple

from ..errors import FederatedAttributeError
from ..identity_provider import FederatedAttributeSet
from ..members import MemberProfile


class AttributeMap(NamedTuple):
    """Attribute names holding each member field"""
    email: str
    username: str
    first_name: str
    surname: str


# ADFS 2.0/3.0 claims: E-Mail Address, Windows account name, Given Name, Surname
ADFS_CLAIMS = AttributeMap(
    email='http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress',
    username='http://schemas.microsoft.com/ws/2008/06/identity/claims/windowsaccountname',
    first_name='http://schemas.xmlsoap.org/ws/2005/05/identity/claims/givenname',
    surname='http://schemas.xmlsoap.org/ws/2005/05/identity/claims/surname',
)

DIRECTORY_ATTRIBUTES = AttributeMap(
    email='mail',
    username='sAMAccountName',
    first_name='givenName',
    surname='sn',
)


def first_value(attributes: FederatedAttributeSet, name: str, required: bool = False) -> str:
    """First value released for an attribute"""
    values = attributes.get(name) or []
    if values and values[0]:
        return values[0]
    if required:
        raise FederatedAttributeError(f"Identity provider did not release required attribute '{name}'")
    return ''


def profile_from_attributes(attributes: FederatedAttributeSet, attribute_map: AttributeMap) -> MemberProfile:
    return MemberProfile(
        email=first_value(attributes, attribute_map.email, required=True),
        username=first_value(attributes, attribute_map.username),
        first_name=first_value(attributes, attribute_map.first_name),
        surname=first_value(attributes, attribute_map.surname),
    )


def claims_profile(attributes: FederatedAttributeSet) -> MemberProfile:
    """Claims-based sources (ADFS)"""
    return profile_from_attributes(attributes, ADFS_CLAIMS)


def directory_profile(attributes: FederatedAttributeSet) -> MemberProfile:
    """Directory-based sources (LDAP / Active Directory)"""
    return profile_from_attributes(attributes, DIRECTORY_ATTRIBUTES)
