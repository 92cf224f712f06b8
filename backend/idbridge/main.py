# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
idbridge - FastAPI Application Entry Point

Run locally with:
    uvicorn idbridge.main:create_app --factory
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from idbridge.routes import security
from idbridge.utils.auth import ProviderFactory, hosted_sp_provider
from idbridge.utils.authenticators import AuthenticatorFactory, AuthenticatorHooks
from idbridge.utils.config_loader import config_loader
from idbridge.utils.config_types import BridgeConfig, LoggingConfig
from idbridge.utils.database import create_session_factory
from idbridge.utils.errors import RedirectRequired

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'error': logging.ERROR,
}


def configure_logging(logging_config: LoggingConfig) -> None:
    logging.basicConfig(level=LOG_LEVELS[logging_config.level])


async def redirect_handler(request: Request, exc: RedirectRequired):
    """Turn provider/transport redirects raised anywhere into 302 responses"""
    logger.debug(f"{type(exc).__name__}: {request.url.path} -> {exc.url}")
    return RedirectResponse(exc.url, status_code=302)


def create_app(
    config: Optional[BridgeConfig] = None,
    environment: Optional[str] = None,
    provider_factory: Optional[ProviderFactory] = None,
    hooks: Optional[AuthenticatorHooks] = None,
) -> FastAPI:
    """
    Build the application

    Args:
        config: Validated configuration (loaded from config.json if omitted)
        environment: dev|test|stage|prod (read from ENV if omitted)
        provider_factory: Builds the identity provider adapter per request
        hooks: after_login / after_logout collaborator hooks

    Raises:
        ConfigurationError: On any deployment misconfiguration
    """
    if config is None:
        config = config_loader.get_bridge_config()
    if environment is None:
        environment = config_loader.get_environment()

    configure_logging(config.logging)
    logger.info(f"Starting idbridge (environment={environment})")

    config.check_secrets(environment)
    AuthenticatorFactory.validate(config.security)

    app = FastAPI(
        title="idbridge",
        description="Federated authentication bridge",
        version="1.0.0",
    )
    app.state.config = config
    app.state.environment = environment
    app.state.provider_factory = provider_factory or hosted_sp_provider
    app.state.hooks = hooks or AuthenticatorHooks()
    app.state.session_factory = create_session_factory(config.database.url)

    app.add_middleware(
        SessionMiddleware,
        secret_key=config.session.secret_key,
        session_cookie=config.session.cookie_name,
        max_age=config.session.max_age,
        https_only=config.session.https_only,
    )
    app.add_exception_handler(RedirectRequired, redirect_handler)

    @app.get("/health")
    async def health_check():
        """Detailed health check"""
        return {
            "status": "healthy",
            "service": "idbridge",
            "version": "1.0.0",
            "environment": app.state.environment,
            "auth_enabled": config.security.enable_auth,
        }

    if config.security.enable_auth:
        app.include_router(security.router)
        logger.info(f"Authentication sources: {list(config.security.authenticators.keys())}")
    else:
        logger.warning("⚠️ Federated authentication disabled (security.enable_auth=false)")

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host='0.0.0.0', port=8000)
