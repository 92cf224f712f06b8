# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Request-scoped authentication context

Wires the session, identity provider adapter, member store and session
binder for one request from the objects held in app.state.
"""
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .authenticators import AuthenticatorHooks
from .config_types import BridgeConfig
from .database import get_db
from .identity_provider import HostedSPProvider, IdentityProvider
from .members import MemberStore
from .session import SessionState, get_session_state
from .session_binder import SessionBinder

ProviderFactory = Callable[[BridgeConfig, SessionState], IdentityProvider]


def hosted_sp_provider(config: BridgeConfig, session: SessionState) -> IdentityProvider:
    """Default provider factory"""
    return HostedSPProvider(config.provider, session)


class AuthContext:
    """Collaborators used by the security routes"""

    def __init__(self, config: BridgeConfig, environment: str, session: SessionState,
                 provider: IdentityProvider, members: MemberStore, hooks: AuthenticatorHooks):
        self.config = config
        self.security = config.security
        self.environment = environment
        self.session = session
        self.provider = provider
        self.members = members
        self.hooks = hooks
        self.binder = SessionBinder(session, provider, members, config.security, environment, hooks)


def get_auth_context(
    request: Request,
    session: SessionState = Depends(get_session_state),
    db: Session = Depends(get_db),
) -> AuthContext:
    state = request.app.state
    provider = state.provider_factory(state.config, session)
    return AuthContext(
        config=state.config,
        environment=state.environment,
        session=session,
        provider=provider,
        members=MemberStore(db),
        hooks=state.hooks,
    )
