import base64
import json
import logging
from datetime import date, datetime
from decimal import Decimal

import image_controller
import image_repository
import user_repository
from auth_middleware import attach_auth, require_auth, require_group
from gallery_page import PHOTOS, find_photo, render_gallery
from service_clients import ServiceClients
from service_config import load_settings

# Fails the cold start when S3_BUCKET_NAME is missing
SETTINGS = load_settings()

logger = logging.getLogger()
logger.setLevel(SETTINGS.log_level)

NICKNAME_MAX_LENGTH = 50

_clients = None


def get_clients():
    """Clients shared by every invocation in this execution environment."""
    global _clients
    if _clients is None:
        _clients = ServiceClients(SETTINGS)
    return _clients


def set_clients(clients):
    """Replace the shared clients, closing the previous ones. Returns the old handle."""
    global _clients
    previous = _clients
    if previous is not None and previous is not clients:
        previous.close()
    _clients = clients
    return previous


class JSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return int(obj) if obj % 1 == 0 else float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super(JSONEncoder, self).default(obj)


def _cors_headers():
    return {
        'Access-Control-Allow-Origin': SETTINGS.cors_allow_origin,
        'Access-Control-Allow-Headers': 'Content-Type, Authorization',
        'Access-Control-Allow-Methods': 'GET, POST, PUT, DELETE, OPTIONS'
    }


def cors_response(status_code, body):
    """Return response with CORS headers"""
    headers = {'Content-Type': 'application/json'}
    headers.update(_cors_headers())
    return {
        'statusCode': status_code,
        'headers': headers,
        'body': json.dumps(body, cls=JSONEncoder)
    }


def html_response(status_code, html):
    headers = {'Content-Type': 'text/html; charset=utf-8'}
    headers.update(_cors_headers())
    return {
        'statusCode': status_code,
        'headers': headers,
        'body': html
    }


def get_http_method(event):
    return (
        event.get('httpMethod')
        or event.get('requestContext', {}).get('http', {}).get('method')
        or 'GET'
    ).upper()


def get_path(event):
    """Request path without the API Gateway stage prefix (e.g. /prod)."""
    path = event.get('path') or event.get('rawPath') or '/'
    stage = (event.get('requestContext') or {}).get('stage')
    if stage and stage != '$default':
        prefix = f'/{stage}'
        if path == prefix:
            path = '/'
        elif path.startswith(prefix + '/'):
            path = path[len(prefix):]
    if len(path) > 1:
        path = path.rstrip('/')
    return path


class InvalidBodyError(ValueError):
    pass


def parse_json_body(event):
    raw = event.get('body')
    if not raw:
        return {}
    try:
        if event.get('isBase64Encoded'):
            raw = base64.b64decode(raw).decode('utf-8')
        return json.loads(raw)
    except ValueError:
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
        raise InvalidBodyError('Invalid JSON body')


def with_cdn_urls(images, cdn_domain):
    """Add the CloudFront URL of each uploaded object when a CDN is configured"""
    if not cdn_domain:
        return images
    return [dict(image, cdnUrl=f"https://{cdn_domain}/{image['uuid_filename']}") for image in images]


def handle_get_profile(identity, clients):
    user = user_repository.get_user_by_sub(clients.engine, identity.sub)
    if user is None:
        return 404, {'error': 'User not found'}
    return 200, user


def handle_update_profile(identity, body, clients):
    if not isinstance(body, dict) or 'nickname' not in body:
        return 400, {'error': 'Missing nickname'}

    nickname = body['nickname']
    if nickname is not None:
        if not isinstance(nickname, str):
            return 400, {'error': 'Nickname must be a string'}
        nickname = nickname.strip() or None
    if nickname and len(nickname) > NICKNAME_MAX_LENGTH:
        return 400, {'error': f'Nickname must be {NICKNAME_MAX_LENGTH} characters or less'}

    try:
        user = user_repository.update_user_nickname(clients.engine, identity.sub, nickname)
    except user_repository.UserNotFoundError as e:
        return 404, {'error': str(e)}
    return 200, user


def handle_gallery(query_params):
    query = query_params.get('q', '')
    selected = find_photo(query_params.get('photo')) if query_params.get('photo') else None
    return html_response(200, render_gallery(PHOTOS, query, selected))


def lambda_handler(event, context):
    """Main Lambda handler"""

    http_method = get_http_method(event)
    if http_method == 'OPTIONS':
        return cors_response(200, {})

    path = get_path(event)
    query_params = event.get('queryStringParameters') or {}

    identity = attach_auth(event)

    try:
        # Route: GET /gallery - public HTML page
        if path in ('/', '/gallery') and http_method == 'GET':
            return handle_gallery(query_params)

        # Route: POST /images/presigned-url
        if path == '/images/presigned-url' and http_method == 'POST':
            # Anonymous callers get 401 whatever they sent
            body = parse_json_body(event) if identity else {}
            status, result = image_controller.get_presigned_url(identity, body, get_clients())
            return cors_response(status, result)

        # Route: GET /images - caller's own images
        if path == '/images' and http_method == 'GET':
            rejection = require_auth(identity)
            if rejection:
                return cors_response(*rejection)
            images = image_repository.list_images_for_user(get_clients().engine, identity.sub)
            return cors_response(200, {'images': with_cdn_urls(images, SETTINGS.cdn_domain)})

        # Route: GET /admin/images - every image, admin group only
        if path == '/admin/images' and http_method == 'GET':
            rejection = require_group(identity, SETTINGS.admin_group)
            if rejection:
                return cors_response(*rejection)
            images = image_repository.list_all_images(get_clients().engine)
            return cors_response(200, {'images': with_cdn_urls(images, SETTINGS.cdn_domain)})

        # Route: GET/PUT /profile
        if path == '/profile' and http_method in ('GET', 'PUT'):
            rejection = require_auth(identity)
            if rejection:
                return cors_response(*rejection)
            if http_method == 'GET':
                return cors_response(*handle_get_profile(identity, get_clients()))
            body = parse_json_body(event)
            return cors_response(*handle_update_profile(identity, body, get_clients()))

        # Default: return 404
        return cors_response(404, {'error': 'Not found', 'path': path})

    except InvalidBodyError as e:
        return cors_response(400, {'error': str(e)})
    except Exception:
        logger.exception("Unhandled error on %s %s", http_method, path)
        return cors_response(500, {'error': 'Internal server error'})
