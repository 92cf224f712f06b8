# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Security Routes
Federated login/logout handshake with the identity provider

A login spans two request/response cycles linked only by the session:
/Security/login hands control to the provider, the provider calls back on
/Security/acs, which resumes at /Security/login. Logout goes out through
the provider and comes back on /Security/loggedout.
"""
import logging
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from idbridge.utils.auth import AuthContext, get_auth_context
from idbridge.utils.authenticators import AuthenticatorFactory
from idbridge.utils.config_types import SecurityConfig
from idbridge.utils.errors import FederatedAttributeError, InvalidAssertion, TransportSecurityRequired

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/Security", tags=["security"])

LOGIN_PATH = '/Security/login'
LOGGED_OUT_PATH = '/Security/loggedout'


def force_ssl(request: Request, security: SecurityConfig) -> None:
    """Upgrade to HTTPS if configured"""
    if security.force_ssl and request.url.scheme != 'https':
        raise TransportSecurityRequired(str(request.url.replace(scheme='https')))


def site_url(url: Optional[str], request: Request) -> Optional[str]:
    """Return url as a local path if it points at this site, else None"""
    if not url or '\\' in url:
        return None
    parsed = urlsplit(url)
    if parsed.scheme or parsed.netloc:
        if parsed.netloc != request.url.netloc:
            logger.warning(f"Ignoring off-site BackURL: {url}")
            return None
        return urlunsplit(('', '', parsed.path or '/', parsed.query, parsed.fragment))
    if not url.startswith('/'):
        return None
    return url


def remember_back_url(url: Optional[str], request: Request, ctx: AuthContext) -> None:
    back_url = site_url(url, request)
    if back_url:
        ctx.session.back_url = back_url


@router.get("/")
def index(request: Request, ctx: AuthContext = Depends(get_auth_context)):
    """Send the user to the identity provider's front page"""
    force_ssl(request, ctx.security)
    url = ctx.provider.front_page_url()
    if not url:
        raise HTTPException(status_code=404, detail="Identity provider has no front page")
    return RedirectResponse(url, status_code=302)


@router.get("/ping", response_class=PlainTextResponse)
def ping():
    """Keep-alive so sessions don't time out (used by admin pages)"""
    return "1"


@router.get("/login")
def login(
    request: Request,
    back_url: Optional[str] = Query(None, alias="BackURL"),
    source: Optional[str] = Query(None, alias="as"),
    ctx: AuthContext = Depends(get_auth_context),
):
    """
    Log the user into the identity provider, then locally

    Redirects out to the provider when there is no federated session yet;
    the provider's callback resumes here.
    """
    force_ssl(request, ctx.security)
    remember_back_url(back_url, request, ctx)

    auth = ctx.binder.get_authenticator(source)
    auth.require_auth(return_to=LOGIN_PATH)

    if not ctx.binder.is_bound():
        auth.login_complete()

    try:
        member = auth.authenticate()
    except FederatedAttributeError as e:
        logger.warning(f"Login via {auth.source_name} rejected: {e}")
        raise HTTPException(status_code=403, detail=str(e))

    member.login(ctx.session)

    # Use the BackURL if available, or the default logged in URL
    dest = ctx.session.pop_back_url() or ctx.security.default_logged_in_url

    auth.on_after_login(member)
    return RedirectResponse(dest, status_code=302)


@router.get("/acs")
def assertion_consumer(
    request: Request,
    assertion: str = Query(...),
    ctx: AuthContext = Depends(get_auth_context),
):
    """Identity provider callback after a successful login"""
    force_ssl(request, ctx.security)

    try:
        completed = ctx.provider.complete_login(assertion)
    except InvalidAssertion as e:
        logger.warning(f"Rejected provider callback: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if completed.source_name not in ctx.security.authenticators:
        ctx.provider.clear_session()
        logger.warning(f"Provider asserted unknown source: {completed.source_name}")
        raise HTTPException(status_code=400, detail=f"Unknown authentication source: {completed.source_name}")

    source_name, implementation = AuthenticatorFactory.resolve(
        ctx.security, ctx.environment, completed.source_name
    )
    ctx.binder.create(source_name, implementation).login_complete()

    return RedirectResponse(site_url(completed.return_to, request) or LOGIN_PATH, status_code=302)


@router.get("/logout")
def logout(
    request: Request,
    back_url: Optional[str] = Query(None, alias="BackURL"),
    ctx: AuthContext = Depends(get_auth_context),
):
    """Log the user out of the identity provider"""
    force_ssl(request, ctx.security)
    remember_back_url(back_url, request, ctx)

    auth = ctx.binder.get_authenticator()
    auth.logout(return_to=LOGGED_OUT_PATH)


@router.get("/loggedout")
def loggedout(request: Request, ctx: AuthContext = Depends(get_auth_context)):
    """
    Log the user out locally

    Only called after logging out of the identity provider.
    """
    force_ssl(request, ctx.security)

    # The provider session may already have expired; hooks still fire
    auth = ctx.binder.load(require_live=False)

    member = ctx.members.current_member(ctx.session)
    if member is not None:
        if auth is None:
            auth = ctx.binder.get_authenticator()
        member.logout(ctx.session)

    ctx.provider.clear_session()

    if auth is not None:
        auth.on_after_logout()

    # Use the BackURL if available, or the default logged out URL
    dest = ctx.session.back_url or ctx.security.default_logged_out_url
    ctx.session.clear_all()

    return RedirectResponse(dest, status_code=302)


@router.get("/LoginForm")
def login_form(request: Request, ctx: AuthContext = Depends(get_auth_context)):
    """Force re-authentication at the identity provider"""
    force_ssl(request, ctx.security)
    remember_back_url(request.headers.get('referer'), request, ctx)

    auth = ctx.binder.get_authenticator()
    auth.login(return_to=LOGIN_PATH, force_authn=True)


def passive_login(request: Request, ctx: AuthContext = Depends(get_auth_context)) -> None:
    """
    Attempt to passively authenticate the user with the identity provider

    Opt-in dependency for collaborator routes:

        @app.get("/", dependencies=[Depends(passive_login)])

    If the user is not logged in locally and has no federated session, this
    tries a silent provider login once per session and brings the user
    back to the current page through /Security/login. Nothing is left in
    the session if the provider declines. It only uses the default
    authentication source.
    """
    force_ssl(request, ctx.security)

    # Also ends a local login whose federated session has expired
    auth = ctx.binder.get_authenticator()

    if ctx.members.current_member(ctx.session) is not None:
        return
    if auth.is_authenticated() or ctx.session.passive_attempted:
        return

    ctx.session.mark_passive_attempted()
    page = site_url(str(request.url), request) or '/'
    return_to = f"{LOGIN_PATH}?{urlencode({'BackURL': page})}"
    auth.login(return_to=return_to, passive=True, error_url=str(request.url))
