# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Configuration types and validation for the identity bridge

Pydantic models for the JSON configuration file. Validation failures are
re-raised as ConfigurationError so a bad deployment fails before serving
requests.
"""

from typing import Any, Dict, Optional, Union, Literal
from enum import Enum

from pydantic import BaseModel, Field, StrictBool, ValidationError, field_validator

from .errors import ConfigurationError


class Environment(str, Enum):
    """Environment enumeration"""
    DEV = "dev"
    TEST = "test"
    STAGE = "stage"
    PROD = "prod"


DEV_SECRETS = ('', 'dev-secret', 'dev-secret-replace-with-strong-secret')


class SecurityConfig(BaseModel):
    """Authenticator registry and login/logout behaviour"""
    # source name -> implementation id or "package.module:attr"; order matters
    authenticators: Dict[str, str]
    default_authenticator: Optional[Union[str, Dict[str, str]]] = None
    default_logged_in_url: str = '/'
    default_logged_out_url: str = '/'
    enable_auth: StrictBool = True
    force_ssl: StrictBool = True

    @field_validator('authenticators')
    @classmethod
    def validate_authenticators(cls, v):
        """At least one authentication source must be configured"""
        if not v:
            raise ValueError("Expected a non-empty mapping of authentication sources")
        return v


class ProviderConfig(BaseModel):
    """Hosted service provider that performs the federation handshake"""
    sp_base_url: str = '/simplesaml'
    acs_url: str = '/Security/acs'
    assertion_secret: str = 'dev-secret'
    algorithm: str = 'HS256'
    issuer: Optional[str] = None
    leeway: int = Field(default=30, ge=0)  # seconds of clock skew tolerated


class SessionConfig(BaseModel):
    """Browser session cookie settings"""
    secret_key: str = 'dev-secret'
    cookie_name: str = 'idbridge_session'
    max_age: int = Field(default=14 * 24 * 60 * 60, ge=60)
    https_only: bool = False


class DatabaseConfig(BaseModel):
    """Member database configuration"""
    url: str = 'sqlite:///./idbridge.db'


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: Literal['debug', 'info', 'warn', 'error'] = 'info'


class BridgeConfig(BaseModel):
    """Complete bridge configuration"""
    security: SecurityConfig
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BridgeConfig':
        """
        Validate a raw configuration mapping

        Raises:
            ConfigurationError: If any section is missing or malformed
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Expected configuration to be a JSON object")
        if 'security' not in data:
            raise ConfigurationError("Invalid config: missing security section")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def check_secrets(self, environment: str) -> None:
        """Refuse development secrets outside dev/test"""
        if environment not in (Environment.STAGE.value, Environment.PROD.value):
            return
        if self.session.secret_key in DEV_SECRETS:
            raise ConfigurationError(
                f"{environment} requires a secure session.secret_key. "
                "Generate: openssl rand -base64 32"
            )
        if self.provider.assertion_secret in DEV_SECRETS:
            raise ConfigurationError(
                f"{environment} requires a secure provider.assertion_secret"
            )
