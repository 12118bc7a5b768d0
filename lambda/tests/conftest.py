"""
Pytest fixtures and configuration for Lambda unit tests
"""

import base64
import json
import os
import sys

import pytest
from unittest.mock import MagicMock
from sqlalchemy.pool import StaticPool

# Add lambda directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set environment variables before importing modules
# index.py reads its settings at import time
os.environ['AWS_DEFAULT_REGION'] = 'eu-west-2'
os.environ['AWS_REGION'] = 'eu-west-2'
os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
os.environ['S3_BUCKET_NAME'] = 'test-gallery-bucket'
os.environ['POSTGRES_DATABASE_NAME'] = 'gallery_test'
os.environ['ADMIN_GROUP'] = 'admin'
os.environ.pop('DATABASE_URL', None)

import db_client  # noqa: E402
from service_clients import ServiceClients  # noqa: E402
from service_config import load_settings  # noqa: E402


def make_token(payload, header=None):
    """Build an unsigned JWT-shaped token around payload"""
    header = header or {'alg': 'RS256', 'typ': 'JWT'}
    header_b64 = base64.urlsafe_b64encode(json.dumps(header).encode()).decode().rstrip('=')
    payload_b64 = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip('=')
    return f"{header_b64}.{payload_b64}.fake_signature"


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def engine():
    """In-memory SQLite database with the gallery tables"""
    eng = db_client.create_db_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    db_client.create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def mock_s3():
    """Mock S3 client whose presigned URLs echo the key"""
    s3 = MagicMock()
    s3.generate_presigned_url.side_effect = (
        lambda op, Params, ExpiresIn: f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?X-Amz-Expires={ExpiresIn}"
    )
    return s3


@pytest.fixture
def clients(settings, mock_s3, engine):
    return ServiceClients(settings, s3_client=mock_s3, engine=engine)


@pytest.fixture
def handler_clients(clients):
    """Install test clients into the Lambda handler module"""
    import index

    index.set_clients(clients)
    yield clients
    index.set_clients(None)


@pytest.fixture
def sample_jwt_token():
    """Generate a sample JWT token for testing"""
    return make_token({
        'sub': 'test-user-123',
        'email': 'test@example.com',
        'cognito:groups': ['viewers'],
        'iat': 1700000000,
        'exp': 1700086400
    })


@pytest.fixture
def sample_event():
    """Base API Gateway event structure"""
    return {
        'httpMethod': 'GET',
        'path': '/gallery',
        'queryStringParameters': {},
        'headers': {},
        'body': None,
        'requestContext': {}
    }


@pytest.fixture
def authenticated_event(sample_event):
    """API Gateway event carrying Cognito authorizer claims"""
    event = dict(sample_event)
    event['requestContext'] = {
        'authorizer': {
            'claims': {
                'sub': 'test-user-123',
                'email': 'test@example.com',
                'cognito:groups': 'viewers'
            }
        }
    }
    return event


@pytest.fixture
def admin_event(sample_event):
    event = dict(sample_event)
    event['requestContext'] = {
        'authorizer': {
            'claims': {
                'sub': 'admin-user-1',
                'email': 'admin@example.com',
                'cognito:groups': 'viewers, admin'
            }
        }
    }
    return event


@pytest.fixture
def registered_user(engine):
    import user_repository

    user_repository.create_user(engine, 'test-user-123', 'test@example.com')
    return {'sub': 'test-user-123', 'email': 'test@example.com', 'nickname': None}
