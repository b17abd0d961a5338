"""
WebSocket Event Handlers

Pushes game snapshots to subscribed clients and accepts guesses in real time.
"""

import threading

from flask import request
from flask_socketio import emit, join_room, leave_room
from ..errors import GameError
from ..services.game_service import get_game_service
from ..utils.game_logger import game_logger

# One service subscription per game, fanned out to the game's socket room
room_subscriptions = {}  # game_id -> Subscription
room_subscriptions_lock = threading.Lock()


def game_room(game_id):
    return f"game_{game_id}"


def ensure_game_subscription(game_service, game_id, on_update):
    """Subscribe the game's room once, replacing a subscription that went inactive."""
    with room_subscriptions_lock:
        for stale_id in [gid for gid, sub in room_subscriptions.items() if not sub.active]:
            del room_subscriptions[stale_id]
        if game_id not in room_subscriptions:
            room_subscriptions[game_id] = game_service.subscribe_to_session(game_id, on_update)
        return room_subscriptions[game_id]


def release_game_subscription(game_id):
    """Drop the room subscription of a deleted game."""
    with room_subscriptions_lock:
        subscription = room_subscriptions.pop(game_id, None)
    if subscription is not None:
        subscription.unsubscribe()


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    def broadcast_game_update(session):
        socketio.emit('game_update', {
            'success': True,
            'state': session.to_dict()
        }, room=game_room(session.id))

    @socketio.on('connect')
    def handle_connect():
        """Handle WebSocket connection."""
        pass

    @socketio.on('subscribe_game')
    def handle_subscribe_game(data):
        """Join a game room and receive a snapshot on every change."""
        game_service = get_game_service()
        if not game_service:
            emit('error', {'error': 'Game service unavailable'})
            return

        data = data or {}
        game_id = data.get('game_id')
        if not game_id:
            emit('error', {'error': 'Game ID is required'})
            return

        try:
            session = game_service.fetch_session(game_id)
            ensure_game_subscription(game_service, game_id, broadcast_game_update)
        except GameError as e:
            emit('error', e.to_dict())
            return

        join_room(game_room(game_id))
        game_logger.logger.info(f"WebSocket: {request.sid} subscribed to game {game_id}")

        # Initial snapshot for this client only
        emit('game_update', {
            'success': True,
            'state': session.to_dict(host_key=data.get('host_key'))
        })

    @socketio.on('unsubscribe_game')
    def handle_unsubscribe_game(data):
        """Leave a game room."""
        game_id = (data or {}).get('game_id')
        if not game_id:
            emit('error', {'error': 'Game ID is required'})
            return

        leave_room(game_room(game_id))
        game_logger.logger.info(f"WebSocket: {request.sid} unsubscribed from game {game_id}")

    @socketio.on('submit_guess')
    def handle_submit_guess(data):
        """Submit a guess via WebSocket."""
        game_service = get_game_service()
        if not game_service:
            emit('error', {'error': 'Game service unavailable'})
            return

        data = data or {}
        game_id = data.get('game_id')
        player_id = data.get('player_id')
        guess = data.get('guess')

        if not game_id or not player_id or not isinstance(guess, str):
            emit('error', {'error': 'Game ID, player ID and guess required'})
            return

        try:
            result = game_service.submit_guess(game_id, player_id, guess)
        except GameError as e:
            emit('guess_result', e.to_dict())
            return

        # Room members get the new snapshot through the subscription
        emit('guess_result', {'success': True, 'result': [r.value for r in result]})
