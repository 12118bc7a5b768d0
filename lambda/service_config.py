"""
Service configuration

Reads the environment once per process. The API handler cannot run without an
upload bucket, so a missing S3_BUCKET_NAME is a startup failure rather than a
per-request error.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_REGION = 'eu-west-2'
DEFAULT_DATABASE_NAME = 'postgres'
DEFAULT_UPLOAD_EXPIRES_IN = 900


class ConfigurationError(RuntimeError):
    """Raised when a required environment variable is missing or malformed."""


@dataclass(frozen=True)
class DatabaseSettings:
    database_name: str = DEFAULT_DATABASE_NAME
    database_url: Optional[str] = None
    parameter_prefix: str = '/rds'
    region: str = DEFAULT_REGION


@dataclass(frozen=True)
class Settings:
    bucket_name: str
    region: str = DEFAULT_REGION
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    upload_expires_in: int = DEFAULT_UPLOAD_EXPIRES_IN
    upload_content_type: str = 'image/*'
    admin_group: str = 'admin'
    cors_allow_origin: str = '*'
    cdn_domain: Optional[str] = None
    log_level: str = 'INFO'


def _int_from_env(environ, name, default):
    raw = environ.get(name)
    if raw in (None, ''):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f'{name} must be an integer, got {raw!r}')


def load_database_settings(environ=None):
    """Database settings shared by the API and the post-confirmation trigger.

    The deployment stacks historically export the name as
    CDK_POSTRGRESS_DATABASE_NAME, so both spellings are accepted.
    """
    environ = os.environ if environ is None else environ
    database_name = (
        environ.get('POSTGRES_DATABASE_NAME')
        or environ.get('CDK_POSTRGRESS_DATABASE_NAME')
        or DEFAULT_DATABASE_NAME
    )
    return DatabaseSettings(
        database_name=database_name,
        database_url=environ.get('DATABASE_URL') or None,
        parameter_prefix=environ.get('RDS_PARAMETER_PREFIX', '/rds').rstrip('/') or '/rds',
        region=environ.get('AWS_REGION', DEFAULT_REGION),
    )


def load_log_level(environ=None):
    environ = os.environ if environ is None else environ
    log_level = environ.get('LOG_LEVEL', 'INFO').upper()
    # getLevelName maps known names to ints and anything else to a string
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f'LOG_LEVEL must be a logging level name, got {log_level!r}')
    return log_level


def load_settings(environ=None):
    """Build API settings from the environment.

    Raises:
        ConfigurationError: if S3_BUCKET_NAME is unset, a numeric value is invalid
            or LOG_LEVEL names no logging level
    """
    environ = os.environ if environ is None else environ

    bucket_name = environ.get('S3_BUCKET_NAME')
    if not bucket_name:
        raise ConfigurationError('S3_BUCKET_NAME environment variable is required')

    expires_in = _int_from_env(environ, 'UPLOAD_URL_EXPIRES_IN', DEFAULT_UPLOAD_EXPIRES_IN)
    if expires_in <= 0:
        raise ConfigurationError('UPLOAD_URL_EXPIRES_IN must be positive')

    return Settings(
        bucket_name=bucket_name,
        region=environ.get('AWS_REGION', DEFAULT_REGION),
        database=load_database_settings(environ),
        upload_expires_in=expires_in,
        admin_group=environ.get('ADMIN_GROUP', 'admin'),
        cors_allow_origin=environ.get('CORS_ALLOW_ORIGIN', '*'),
        cdn_domain=environ.get('CLOUDFRONT_DOMAIN') or None,
        log_level=load_log_level(environ),
    )
