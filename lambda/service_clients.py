"""
Shared AWS and database clients

One ServiceClients instance lives for the lifetime of a Lambda execution
environment. Clients are created on first use so a cold start that only
serves the gallery page never opens a database connection.
"""

import logging

import boto3
from botocore.config import Config

import db_client

logger = logging.getLogger(__name__)


class ServiceClients:
    """Lazily constructed S3 client and SQLAlchemy engine.

    Args:
        settings: Settings for the API process
        s3_client: prebuilt S3 client (tests pass a MagicMock here)
        engine: prebuilt SQLAlchemy engine
        engine_factory: callable(url) -> engine, defaults to db_client.create_db_engine
    """

    def __init__(self, settings, s3_client=None, engine=None, engine_factory=None):
        self.settings = settings
        self._s3 = s3_client
        self._engine = engine
        self._engine_factory = engine_factory or db_client.create_db_engine

    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = boto3.client(
                's3',
                region_name=self.settings.region,
                config=Config(signature_version='s3v4'),
            )
        return self._s3

    @property
    def engine(self):
        if self._engine is None:
            url = db_client.get_database_url(self.settings.database)
            self._engine = self._engine_factory(url)
            logger.info("Database engine created for %s", self.settings.database.database_name)
        return self._engine

    def close(self):
        """Dispose pooled connections; the S3 client holds nothing to release."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
