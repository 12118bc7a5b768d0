"""
Registered user queries

Rows are created by the Cognito post-confirmation trigger; the API only reads
them and updates the nickname.
"""

import logging

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from db_client import registered_user, row_to_dict

logger = logging.getLogger(__name__)

USER_COLUMNS = (registered_user.c.sub, registered_user.c.email, registered_user.c.nickname)


class UserNotFoundError(LookupError):
    """Raised when an update targets a subject with no registered_user row."""


def get_user_by_sub(engine, sub):
    """Return the user row for a subject, or None if they never registered."""
    stmt = select(*USER_COLUMNS).where(registered_user.c.sub == sub)
    with engine.connect() as conn:
        row = conn.execute(stmt).first()
    return row_to_dict(row)


def update_user_nickname(engine, sub, nickname):
    """Set (or clear, with None) a user's nickname.

    Raises:
        UserNotFoundError: if no row matched the subject
    """
    stmt = (
        update(registered_user)
        .where(registered_user.c.sub == sub)
        .values(nickname=nickname)
        .returning(*USER_COLUMNS)
    )
    with engine.begin() as conn:
        row = conn.execute(stmt).first()
    if row is None:
        raise UserNotFoundError('User not found')
    return row_to_dict(row)


def create_user(engine, sub, email, nickname=None):
    """Insert a registered user.

    Returns:
        bool: True if a row was created, False if the subject already existed
    """
    stmt = insert(registered_user).values(sub=sub, email=email, nickname=nickname)
    try:
        with engine.begin() as conn:
            conn.execute(stmt)
    except IntegrityError:
        logger.info("User %s already registered, skipping insert", sub)
        return False
    return True
