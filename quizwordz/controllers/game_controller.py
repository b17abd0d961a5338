"""
Game Controller

Handles all game-related HTTP endpoints.
"""

from flask import Blueprint, request, jsonify
from ..errors import GameError, UnknownPlayer
from ..models.game import SessionStatus
from ..services.game_service import get_game_service
from ..utils.game_logger import game_logger
from ..utils.presentation import build_board, keyboard_letter_states
from ..websocket.handlers import release_game_subscription

game_bp = Blueprint('game', __name__)


def _service_unavailable():
    return jsonify({
        'success': False,
        'error': 'Game service unavailable'
    }), 500


def _game_error(action, error, game_id=None):
    """Report a rejected operation with the error's status code."""
    error_response = error.to_dict()
    game_logger.log_server_response(request, action, False, error_response, game_id)
    return jsonify(error_response), error.status


def _server_error(action, error, game_id=None):
    game_logger.log_error(request, error, action, game_id)
    error_response = {
        'success': False,
        'error': str(error)
    }
    game_logger.log_server_response(request, action, False, error_response, game_id)
    return jsonify(error_response), 500


def _missing_fields(action, fields, game_id=None):
    error_response = {
        'success': False,
        'error': f"{' and '.join(fields)} required"
    }
    game_logger.log_server_response(request, action, False, error_response, game_id)
    return jsonify(error_response), 400


@game_bp.route('/games', methods=['POST'])
def create_game():
    """
    Create a new game session in the waiting state.

    The response carries the host key, the only credential that reveals the
    word before the game ends. It is never returned again.
    """
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        data = request.get_json(silent=True) or {}
        host_id = data.get('host_id')
        if not host_id:
            return _missing_fields('create_game', ['host_id'])

        game_logger.log_user_action(request, 'create_game', host_id=host_id,
                                    custom_word='word' in data)

        game_id = game_service.create_session(host_id, data.get('word'))
        session = game_service.fetch_session(game_id)

        response_data = {
            'success': True,
            'game_id': game_id,
            'host_key': session.host_key,
            'state': session.to_dict(host_key=session.host_key)
        }
        game_logger.log_server_response(
            request, 'create_game', True, response_data, game_id,
            word_length=session.word_length, max_attempts=session.max_attempts
        )
        return jsonify(response_data), 201

    except GameError as e:
        return _game_error('create_game', e)
    except Exception as e:
        return _server_error('create_game', e)


@game_bp.route('/games', methods=['GET'])
def list_games():
    """List all sessions without revealing secret words."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        sessions = game_service.list_sessions()
        return jsonify({
            'success': True,
            'games': [session.to_dict() for session in sessions]
        })

    except Exception as e:
        return _server_error('list_games', e)


@game_bp.route('/games/<game_id>', methods=['GET'])
def get_game(game_id):
    """Get the current game snapshot."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        host_key = request.args.get('host_key')
        game_logger.log_user_action(request, 'get_game', game_id, with_host_key=bool(host_key))

        session = game_service.fetch_session(game_id)
        response_data = {
            'success': True,
            'state': session.to_dict(host_key=host_key)
        }
        game_logger.log_server_response(request, 'get_game', True, response_data, game_id,
                                        status=session.status.value)
        return jsonify(response_data)

    except GameError as e:
        return _game_error('get_game', e, game_id)
    except Exception as e:
        return _server_error('get_game', e, game_id)


@game_bp.route('/games/<game_id>/join', methods=['POST'])
def join_game(game_id):
    """Join a waiting game."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        data = request.get_json(silent=True) or {}
        player_id = data.get('player_id')
        if not player_id:
            return _missing_fields('join_game', ['player_id'], game_id)

        game_logger.log_user_action(request, 'join_game', game_id, player_id=player_id)

        session = game_service.join_session(game_id, player_id, data.get('name', ''))
        response_data = {
            'success': True,
            'state': session.to_dict()
        }
        game_logger.log_server_response(request, 'join_game', True, response_data, game_id)
        return jsonify(response_data)

    except GameError as e:
        return _game_error('join_game', e, game_id)
    except Exception as e:
        return _server_error('join_game', e, game_id)


def _change_status(action, game_id, status, started_at=None, ended_at=None):
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        game_logger.log_user_action(request, action, game_id, status=status)

        session = game_service.update_session_status(game_id, status, started_at, ended_at)
        response_data = {
            'success': True,
            'state': session.to_dict()
        }
        game_logger.log_server_response(request, action, True, response_data, game_id,
                                        status=session.status.value)
        return jsonify(response_data)

    except GameError as e:
        return _game_error(action, e, game_id)
    except Exception as e:
        return _server_error(action, e, game_id)


@game_bp.route('/games/<game_id>/start', methods=['POST'])
def start_game(game_id):
    """Move a waiting game to playing."""
    return _change_status('start_game', game_id, 'playing')


@game_bp.route('/games/<game_id>/finish', methods=['POST'])
def finish_game(game_id):
    """End a game that is being played."""
    return _change_status('finish_game', game_id, 'finished')


@game_bp.route('/games/<game_id>/status', methods=['PATCH'])
def update_status(game_id):
    """Set the game status with optional explicit timestamps."""
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        return _missing_fields('update_status', ['status'], game_id)
    return _change_status('update_status', game_id, data['status'],
                          data.get('started_at'), data.get('ended_at'))


@game_bp.route('/games/<game_id>/guess', methods=['POST'])
def submit_guess(game_id):
    """Submit a guess for evaluation."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        data = request.get_json(silent=True) or {}
        player_id = data.get('player_id')
        guess = data.get('guess')
        if not player_id or not isinstance(guess, str):
            return _missing_fields('submit_guess', ['player_id', 'guess'], game_id)

        game_logger.log_user_action(
            request, 'submit_guess', game_id,
            player_id=player_id, guess_length=len(guess)
        )

        result, session = game_service.submit_guess_with_state(game_id, player_id, guess)

        response_data = {
            'success': True,
            'result': [r.value for r in result],
            'state': session.to_dict()
        }
        game_logger.log_server_response(
            request, 'submit_guess', True, response_data, game_id,
            status=session.status.value
        )
        return jsonify(response_data)

    except GameError as e:
        return _game_error('submit_guess', e, game_id)
    except Exception as e:
        return _server_error('submit_guess', e, game_id)


@game_bp.route('/games/<game_id>/board/<player_id>', methods=['GET'])
def get_board(game_id, player_id):
    """
    Board and keyboard state for one player.

    Letters are hidden unless the viewer is that player or the game is over.
    """
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        session = game_service.fetch_session(game_id)
        player = session.get_player(player_id)
        if player is None:
            raise UnknownPlayer(game_id, player_id)

        viewer_id = request.args.get('viewer_id')
        show_letters = viewer_id == player_id or session.status is SessionStatus.FINISHED

        return jsonify({
            'success': True,
            'player_id': player_id,
            'solved': player.solved,
            'board': build_board(player, session.word_length, session.max_attempts,
                                 show_letters=show_letters),
            'keyboard': keyboard_letter_states(player.guesses, player.results) if show_letters else {}
        })

    except GameError as e:
        return _game_error('get_board', e, game_id)
    except Exception as e:
        return _server_error('get_board', e, game_id)


@game_bp.route('/games/<game_id>', methods=['DELETE'])
def delete_game(game_id):
    """Delete a game session."""
    try:
        game_service = get_game_service()
        if not game_service:
            return _service_unavailable()

        game_logger.log_user_action(request, 'delete_game', game_id)

        success = game_service.delete_session(game_id)
        response_data = {
            'success': success
        }
        game_logger.log_server_response(request, 'delete_game', success, response_data, game_id)

        if success:
            release_game_subscription(game_id)
            game_logger.log_game_event(game_id, 'game_deleted', 'system',
                                       user_ip=request.remote_addr)
            return jsonify(response_data)

        response_data['error'] = 'Game not found'
        return jsonify(response_data), 404

    except Exception as e:
        return _server_error('delete_game', e, game_id)


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        game_service = get_game_service()

        response_data = {
            'status': 'healthy',
            'active_games': len(game_service.store.list_ids()) if game_service else 0,
            'log_stats': game_logger.get_log_stats(),
        }
        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        return jsonify({'status': 'error', 'error': str(e)}), 500
