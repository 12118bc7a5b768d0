"""
Request identity extraction

Trust boundary: nothing in this module verifies a JWT signature. Production
traffic reaches the Lambda only through API Gateway, whose Cognito authorizer
validates the token and injects the decoded claims into requestContext. The
bearer-token fallback merely reads the payload of a token that has already
been validated upstream (or, when invoked outside API Gateway, trusts the
caller). Do not expose this handler without such an authorizer in front of it.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

import jwt

logger = logging.getLogger(__name__)

GROUPS_CLAIM = 'cognito:groups'

# Compact JWS: three base64url segments, signature may be empty
COMPACT_TOKEN = re.compile(r'^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*$')


@dataclass(frozen=True)
class AuthUser:
    sub: str
    email: Optional[str] = None
    groups: Tuple[str, ...] = field(default_factory=tuple)

    def in_group(self, group_name):
        return group_name in self.groups


def parse_groups(raw):
    """Normalize the cognito:groups claim to a tuple of group names.

    Cognito sends a list in ID tokens, but API Gateway flattens it to a
    comma-separated string (sometimes bracketed) in authorizer claims.
    """
    if not raw:
        return ()
    if isinstance(raw, (list, tuple)):
        return tuple(g for g in raw if isinstance(g, str) and g)
    if isinstance(raw, str):
        raw = raw.strip()
        if raw.startswith('[') and raw.endswith(']'):
            raw = raw[1:-1]
        return tuple(g.strip() for g in raw.split(',') if g.strip())
    return ()


def _identity_from_claims(claims):
    if not isinstance(claims, dict) or not claims.get('sub'):
        return None
    return AuthUser(
        sub=claims['sub'],
        email=claims.get('email'),
        groups=parse_groups(claims.get(GROUPS_CLAIM)),
    )


def get_platform_claims(event):
    """Claims injected by an API Gateway authorizer (REST or HTTP API)."""
    authorizer = (event.get('requestContext') or {}).get('authorizer') or {}
    claims = authorizer.get('claims')
    if claims:
        return claims
    return (authorizer.get('jwt') or {}).get('claims')


def get_bearer_token(event):
    headers = event.get('headers') or {}
    auth_header = headers.get('Authorization') or headers.get('authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None
    return auth_header[len('Bearer '):].strip()


def decode_token_payload(token):
    """Decode a JWT payload without verifying it.

    Raises:
        jwt.DecodeError: if the token is not a compact JWS with a JSON object payload
    """
    # PyJWT's base64 step skips stray characters, so check the alphabet first
    if not COMPACT_TOKEN.match(token):
        raise jwt.DecodeError('Token is not a compact JWS')
    return jwt.decode(token, options={'verify_signature': False})


def attach_auth(event):
    """Resolve the caller's identity for an API Gateway proxy event.

    Platform claims take precedence; the Authorization header is only consulted
    when they are absent or carry no subject.

    Returns:
        AuthUser or None when the request is unauthenticated
    """
    identity = _identity_from_claims(get_platform_claims(event))
    if identity:
        return identity

    token = get_bearer_token(event)
    if not token:
        return None

    try:
        return _identity_from_claims(decode_token_payload(token))
    except jwt.PyJWTError as e:
        logger.debug("Ignoring undecodable bearer token: %s", e)
        return None


def require_auth(identity):
    """Return a (status, body) rejection for anonymous callers, else None."""
    if identity is None or not identity.sub:
        return 401, {'error': 'Authentication required'}
    return None


def require_group(identity, group_name):
    """Return a (status, body) rejection unless the caller is in group_name."""
    rejection = require_auth(identity)
    if rejection:
        return rejection
    if not identity.in_group(group_name):
        return 403, {'error': 'Insufficient permissions'}
    return None
