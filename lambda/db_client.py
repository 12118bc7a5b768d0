"""
Database Access Module

Table definitions and engine construction for the gallery's PostgreSQL
database. Every repository call is a single statement executed in its own
connection checkout; there are no multi-statement transactions and no retries.
"""

import json
import logging

import boto3
from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    func,
)
from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)

IMAGE_NAME_MAX_LENGTH = 40

metadata = MetaData()

images = Table(
    'images',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('sub', String(255), nullable=False, index=True),
    Column('uuid_filename', String(64), nullable=False, unique=True),
    Column('image_name', String(IMAGE_NAME_MAX_LENGTH), nullable=False),
    Column('image_description', Text, nullable=True),
    Column('created_at', DateTime(timezone=True), nullable=False, server_default=func.now()),
)

registered_user = Table(
    'registered_user',
    metadata,
    Column('sub', String(255), primary_key=True),
    Column('email', String(320), nullable=False),
    Column('nickname', String(255), nullable=True),
)


def get_database_url(db_settings, ssm_client=None, secrets_client=None):
    """Resolve the connection URL for the configured database.

    DATABASE_URL wins when set. Otherwise the RDS endpoint, port and the
    credentials secret ARN are read from SSM under the configured prefix, and
    the username/password come from that Secrets Manager secret.

    Args:
        db_settings: DatabaseSettings
        ssm_client: optional boto3 SSM client
        secrets_client: optional boto3 Secrets Manager client

    Returns:
        str or URL accepted by sqlalchemy.create_engine
    """
    if db_settings.database_url:
        return db_settings.database_url

    ssm = ssm_client or boto3.client('ssm', region_name=db_settings.region)
    secrets = secrets_client or boto3.client('secretsmanager', region_name=db_settings.region)

    prefix = db_settings.parameter_prefix
    response = ssm.get_parameters(
        Names=[f'{prefix}/endpoint', f'{prefix}/port', f'{prefix}/secret-arn'],
        WithDecryption=True,
    )
    params = {p['Name'].rsplit('/', 1)[-1]: p['Value'] for p in response.get('Parameters', [])}

    missing = [name for name in ('endpoint', 'secret-arn') if name not in params]
    if missing:
        raise RuntimeError(
            f"Missing RDS parameters under {prefix}: {', '.join(missing)}"
        )

    secret = secrets.get_secret_value(SecretId=params['secret-arn'])
    credentials = json.loads(secret['SecretString'])

    logger.info("Resolved database endpoint %s for %s", params['endpoint'], db_settings.database_name)

    return URL.create(
        'postgresql+psycopg2',
        username=credentials['username'],
        password=credentials['password'],
        host=params['endpoint'],
        port=int(params.get('port') or credentials.get('port') or 5432),
        database=db_settings.database_name,
    )


def create_db_engine(url, **kwargs):
    """Create an engine suitable for reuse across warm Lambda invocations."""
    options = {'pool_pre_ping': True}
    options.update(kwargs)
    return create_engine(url, **options)


def create_tables(engine):
    """Create the images and registered_user tables if they don't exist."""
    metadata.create_all(engine)


def row_to_dict(row):
    return dict(row._mapping) if row is not None else None
