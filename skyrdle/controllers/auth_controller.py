"""
Authentication Controller

Handles all authentication-related HTTP endpoints.
"""

from flask import Blueprint, g, jsonify, request

from ..models.requests import LoginRequest
from ..services.auth_service import get_auth_service
from ..utils.decorators import require_auth
from ..utils.errors import SkyrdleError
from ..utils.game_logger import game_logger

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Login with a handle and app password and return a session token."""
    try:
        auth_service = get_auth_service()
        if not auth_service:
            return jsonify({
                'success': False,
                'error': 'Authentication service unavailable'
            }), 500

        login_request = LoginRequest.from_json(request.get_json(silent=True))

        # Log user action
        game_logger.log_user_action(request, 'login', identifier=login_request.identifier)

        result = auth_service.login_with_app_password(login_request.identifier, login_request.password)

        if result['success']:
            game_logger.log_server_response(request, 'login', True, {
                'success': True,
                'player': result['player']  # Don't log the token
            }, result['player']['did'])
            return jsonify(result)
        else:
            game_logger.log_server_response(request, 'login', False, result)
            return jsonify(result), 401

    except SkyrdleError as e:
        game_logger.log_server_response(request, 'login', False, e.to_dict())
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        game_logger.log_error(request, e, 'login')
        error_response = {
            'success': False,
            'error': 'Internal server error'
        }
        game_logger.log_server_response(request, 'login', False, error_response)
        return jsonify(error_response), 500


@auth_bp.route('/verify', methods=['GET'])
@require_auth
def verify_token():
    """Verify the session token and return the player identity."""
    response_data = {
        'success': True,
        'player': {'did': g.player.did, 'handle': g.player.handle}
    }
    game_logger.log_server_response(request, 'verify_token', True, response_data, g.player.did)
    return jsonify(response_data)
