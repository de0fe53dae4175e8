"""
Decorators

Contains decorators for HTTP authentication and for retrying repository
calls after a session token expires.
"""

from functools import wraps
from flask import request, jsonify, g

from .game_logger import game_logger


def require_auth(f):
    """
    Decorator to require authentication for protected HTTP endpoints.

    The verified ``PlayerSession`` is placed on ``flask.g.player``; handlers
    pass its ``did`` explicitly into game operations.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from ..services.auth_service import get_auth_service

        auth_service = get_auth_service()
        if not auth_service:
            return jsonify({
                'success': False,
                'error': 'Authentication service unavailable'
            }), 500

        # Get token from Authorization header
        auth_header = request.headers.get('Authorization')
        if not auth_header or not auth_header.startswith('Bearer '):
            return jsonify({
                'success': False,
                'error': 'Authorization token required'
            }), 401

        token = auth_header.split(' ', 1)[1]

        # Verify token
        result = auth_service.verify_token(token)
        if not result['success']:
            return jsonify({
                'success': False,
                'error': result['error']
            }), 401

        g.player = result['player']
        return f(*args, **kwargs)

    return decorated_function


def retry_on_expired_session(f):
    """
    Retry an authenticated repository call once after renewing the session.

    On ``ExpiredToken`` the session is refreshed, falling back to a fresh
    login when the refresh itself fails. On ``AuthenticationRequired`` the
    client logs in again. Any other error propagates untouched.
    """
    @wraps(f)
    def decorated_function(client, *args, **kwargs):
        from ..services.atproto_client import AtprotoError, AuthenticationRequired, ExpiredToken

        try:
            return f(client, *args, **kwargs)
        except ExpiredToken:
            game_logger.logger.info("Repository token expired, refreshing session")
            try:
                client.refresh()
            except AtprotoError as refresh_error:
                game_logger.logger.warning(f"Session refresh failed ({refresh_error}), logging in again")
                client.login()
        except AuthenticationRequired:
            game_logger.logger.info("Repository session rejected, logging in again")
            client.login()

        return f(client, *args, **kwargs)

    return decorated_function
