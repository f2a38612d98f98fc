"""Shared authentication utilities.

Sign-in itself is handled by an external OAuth/session provider. The API only
verifies the signed bearer token that provider issues and extracts the caller's
user id from it (``user_id`` claim, falling back to the standard ``sub``).
"""

from functools import wraps
from flask import request, current_app
import jwt

from skillpact.errors import Unauthorized


def _extract_token(auth_header):
    # Support both "Bearer <token>" and raw token formats
    if ' ' in auth_header:
        scheme, _, token = auth_header.partition(' ')
        if scheme.lower() != 'bearer':
            return None
        return token.strip()
    return auth_header.strip()


def decode_user_id(token):
    """Decode a bearer token and return the caller's user id.

    Raises jwt.InvalidTokenError (including ExpiredSignatureError) when the
    token cannot be trusted.
    """
    payload = jwt.decode(
        token,
        current_app.config['JWT_SECRET_KEY'],
        algorithms=[current_app.config['JWT_ALGORITHM']]
    )
    user_id = payload.get('user_id', payload.get('sub'))
    if user_id is None:
        raise jwt.InvalidTokenError('Token carries no user id')
    return int(user_id)


def token_required(f):
    """
    Decorator to require valid JWT token.

    Extracts user_id from JWT token and passes it as the first argument
    to the decorated function.

    Usage:
        @bp.route('/protected')
        @token_required
        def protected_route(current_user_id):
            return jsonify({'user_id': current_user_id})
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization')

        if not auth_header:
            raise Unauthorized('Token is missing')

        token = _extract_token(auth_header)
        if not token:
            raise Unauthorized('Token is invalid')

        try:
            current_user_id = decode_user_id(token)
        except jwt.ExpiredSignatureError:
            raise Unauthorized('Token has expired')
        except (jwt.InvalidTokenError, ValueError, TypeError):
            raise Unauthorized('Token is invalid')

        return f(current_user_id, *args, **kwargs)
    return decorated


def token_optional(f):
    """
    Decorator that optionally validates JWT token.

    If a valid token is provided, extracts user_id. Otherwise, passes None.
    Used by public listings that hide the caller's own items when signed in.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization')
        current_user_id = None

        if auth_header:
            token = _extract_token(auth_header)
            if token:
                try:
                    current_user_id = decode_user_id(token)
                except (jwt.InvalidTokenError, ValueError, TypeError):
                    current_user_id = None

        return f(current_user_id, *args, **kwargs)
    return decorated
