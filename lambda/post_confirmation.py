"""
Cognito post-confirmation trigger

Registers a confirmed user in the registered_user table. Cognito expects the
event to be returned unchanged; raising makes the sign-up confirmation fail.
"""

import logging

import db_client
import user_repository
from service_config import load_database_settings, load_log_level

logger = logging.getLogger()
logger.setLevel(load_log_level())

CONFIRM_SIGN_UP = 'PostConfirmation_ConfirmSignUp'

_engine = None


def get_engine():
    global _engine
    if _engine is None:
        url = db_client.get_database_url(load_database_settings())
        _engine = db_client.create_db_engine(url)
    return _engine


def handler(event, context, engine=None):
    """Lambda entry point for the Cognito PostConfirmation trigger."""
    trigger_source = event.get('triggerSource')
    if trigger_source != CONFIRM_SIGN_UP:
        logger.info("Ignoring trigger source %s", trigger_source)
        return event

    attributes = (event.get('request') or {}).get('userAttributes') or {}
    sub = attributes.get('sub') or event.get('userName')
    email = attributes.get('email')

    if not sub or not email:
        raise ValueError('Confirmed user is missing sub or email attribute')

    created = user_repository.create_user(
        engine or get_engine(),
        sub=sub,
        email=email,
        nickname=attributes.get('nickname'),
    )
    logger.info("Post-confirmation for %s: %s", sub, 'registered' if created else 'already registered')
    return event
