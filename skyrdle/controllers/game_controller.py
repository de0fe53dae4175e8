"""
Game Controller

Handles all game-related HTTP endpoints: daily puzzles, custom puzzles,
sharing, stats and health.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..models.requests import CustomPuzzleRequest, GuessRequest, parse_puzzle_number
from ..services.auth_service import get_auth_service
from ..services.evaluator import custom_summary_text, keyboard_status, summary_text
from ..services.game_service import get_game_service
from ..services.stats_service import get_stats_service
from ..utils.decorators import require_auth
from ..utils.errors import SkyrdleError
from ..utils.game_logger import game_logger

game_bp = Blueprint('game', __name__)


def _service_unavailable(name):
    return jsonify({
        'success': False,
        'error': f'{name} service unavailable'
    }), 500


def _error_response(action, error, puzzle_ref=None):
    """Translate an exception into the JSON error envelope and log it."""
    player_id = g.player.did if getattr(g, 'player', None) else None

    if isinstance(error, SkyrdleError):
        error_response = error.to_dict()
        status_code = error.status_code
    else:
        game_logger.log_error(request, error, action, player_id, puzzle_ref)
        error_response = {'success': False, 'error': 'Internal server error'}
        status_code = 500

    game_logger.log_server_response(request, action, False, error_response, player_id, puzzle_ref)
    return jsonify(error_response), status_code


def _game_payload(attempt):
    payload = attempt.to_public_dict()
    payload['keyboard'] = {letter: verdict.value for letter, verdict in keyboard_status(attempt.guesses).items()}
    return payload


def _share_url(custom_puzzle_id):
    origin = current_app.config.get('PUBLIC_ORIGIN', '').rstrip('/')
    return f"{origin}/custom/{custom_puzzle_id}"


@game_bp.route('/game', methods=['GET'])
@require_auth
def get_today():
    """Get (or start) today's game for the authenticated player."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        game_logger.log_user_action(request, 'get_game', g.player.did)

        attempt = game_service.get_today_attempt(g.player.did)
        response_data = {
            'success': True,
            'game': _game_payload(attempt),
            'currentGameNumber': attempt.puzzle_number
        }
        game_logger.log_server_response(request, 'get_game', True, response_data,
                                        g.player.did, attempt.puzzle_number)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('get_game', e)


@game_bp.route('/game/<game_number>', methods=['GET'])
@require_auth
def get_game(game_number):
    """Get (or start) a past or current game."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        puzzle_number = parse_puzzle_number(game_number)
        game_logger.log_user_action(request, 'get_game', g.player.did, puzzle_number)

        attempt = game_service.get_or_create_attempt(g.player.did, puzzle_number)
        response_data = {
            'success': True,
            'game': _game_payload(attempt),
            'currentGameNumber': game_service.current_puzzle_number()
        }
        game_logger.log_server_response(request, 'get_game', True, response_data,
                                        g.player.did, puzzle_number)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('get_game', e, game_number)


@game_bp.route('/guess', methods=['POST'])
@require_auth
def submit_guess():
    """Submit a guess for a daily puzzle."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        guess_request = GuessRequest.from_json(request.get_json(silent=True))
        game_logger.log_user_action(request, 'submit_guess', g.player.did,
                                    guess_request.puzzle_number, guess=guess_request.guess)

        attempt = game_service.play(g.player.did, guess_request.puzzle_number, guess_request.guess)
        response_data = {
            'success': True,
            'game': _game_payload(attempt)
        }
        game_logger.log_server_response(request, 'submit_guess', True, response_data,
                                        g.player.did, attempt.puzzle_number,
                                        round=len(attempt.guesses), status=attempt.status.value)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('submit_guess', e)


@game_bp.route('/game/<game_number>/share', methods=['GET'])
@require_auth
def share_game(game_number):
    """Plain-text summary of a finished daily game."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        puzzle_number = parse_puzzle_number(game_number)
        attempt = game_service.get_attempt(g.player.did, puzzle_number)
        text = summary_text(puzzle_number, attempt.guesses, attempt.status, game_service.max_guesses)
        return jsonify({'success': True, 'text': text, 'scoreHash': attempt.score_commitment})

    except Exception as e:
        return _error_response('share_game', e, game_number)


@game_bp.route('/game/<game_number>/stats', methods=['GET'])
def game_stats(game_number):
    """Win/loss rollup for one puzzle."""
    try:
        stats_service = get_stats_service()
        if not stats_service:
            return _service_unavailable('Stats')

        puzzle_number = parse_puzzle_number(game_number)
        return jsonify({'success': True, **stats_service.puzzle_stats(puzzle_number)})

    except Exception as e:
        return _error_response('game_stats', e, game_number)


@game_bp.route('/stats', methods=['GET'])
@require_auth
def player_stats():
    """Stats for the authenticated player."""
    try:
        stats_service = get_stats_service()
        if not stats_service:
            return _service_unavailable('Stats')

        stats = stats_service.player_stats(g.player.did)
        return jsonify({'success': True, **stats.to_dict()})

    except Exception as e:
        return _error_response('player_stats', e)


@game_bp.route('/leaderboard', methods=['GET'])
def leaderboard():
    try:
        stats_service = get_stats_service()
        if not stats_service:
            return _service_unavailable('Stats')

        return jsonify({'success': True, 'players': stats_service.leaderboard()})

    except Exception as e:
        return _error_response('leaderboard', e)


@game_bp.route('/custom-game', methods=['POST'])
@require_auth
def create_custom_game():
    """Create a player-authored puzzle and return its share link."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        custom_request = CustomPuzzleRequest.from_json(request.get_json(silent=True))
        game_logger.log_user_action(request, 'create_custom_game', g.player.did)

        puzzle = game_service.create_custom_puzzle(g.player.did, custom_request.word)
        response_data = {
            'success': True,
            'customGameId': puzzle.custom_puzzle_id,
            'shareUrl': _share_url(puzzle.custom_puzzle_id)
        }
        game_logger.log_server_response(request, 'create_custom_game', True, response_data,
                                        g.player.did, puzzle.custom_puzzle_id)
        return jsonify(response_data), 201

    except Exception as e:
        return _error_response('create_custom_game', e)


@game_bp.route('/custom-game/<custom_game_id>', methods=['GET'])
@require_auth
def get_custom_game(custom_game_id):
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        attempt = game_service.get_or_create_custom_attempt(custom_game_id, g.player.did)
        return jsonify({'success': True, 'game': _game_payload(attempt)})

    except Exception as e:
        return _error_response('get_custom_game', e, custom_game_id)


@game_bp.route('/custom-game/<custom_game_id>/guess', methods=['POST'])
@require_auth
def submit_custom_guess(custom_game_id):
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        guess_request = GuessRequest.from_json(request.get_json(silent=True), require_puzzle_number=False)
        game_logger.log_user_action(request, 'submit_custom_guess', g.player.did,
                                    custom_game_id, guess=guess_request.guess)

        attempt = game_service.play_custom(custom_game_id, g.player.did, guess_request.guess)
        response_data = {'success': True, 'game': _game_payload(attempt)}
        game_logger.log_server_response(request, 'submit_custom_guess', True, response_data,
                                        g.player.did, custom_game_id, status=attempt.status.value)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('submit_custom_guess', e, custom_game_id)


@game_bp.route('/custom-game/<custom_game_id>/share', methods=['GET'])
@require_auth
def share_custom_game(custom_game_id):
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable('Game')

        attempt = game_service.get_custom_attempt(custom_game_id, g.player.did)
        text = custom_summary_text(attempt.guesses, attempt.status, _share_url(custom_game_id),
                                   game_service.max_guesses)
        return jsonify({'success': True, 'text': text})

    except Exception as e:
        return _error_response('share_custom_game', e, custom_game_id)


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        game_service = get_game_service()
        puzzles_loaded = len(game_service.indexer.puzzles) if game_service else 0

        response_data = {
            'status': 'healthy' if puzzles_loaded else 'degraded',
            'puzzles_loaded': puzzles_loaded,
            'current_game_number': game_service.current_puzzle_number() if game_service else None,
            'auth_available': get_auth_service() is not None,
            'log_stats': game_logger.get_log_stats()
        }
        return jsonify(response_data), 200 if puzzles_loaded else 503

    except Exception as e:
        return _error_response('health_check', e)
