#!/usr/bin/env python3
"""
Create the gallery tables (images, registered_user).

Uses DATABASE_URL when set, otherwise resolves the RDS endpoint and
credentials from SSM and Secrets Manager exactly like the Lambda does.

Usage:
    python create_tables.py
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / 'lambda'))

import db_client  # noqa: E402
from service_config import load_database_settings  # noqa: E402

env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def main():
    settings = load_database_settings()
    engine = db_client.create_db_engine(db_client.get_database_url(settings))
    try:
        db_client.create_tables(engine)
    finally:
        engine.dispose()
    print(f"Tables ready in database {settings.database_name}")


if __name__ == '__main__':
    main()
