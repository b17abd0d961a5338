"""
Tests for the HTTP and WebSocket layers.

Tests:
- Game endpoints and their JSON shapes
- Error responses for rejected operations
- Real-time snapshots over Socket.IO
"""

import pytest

from quizwordz import create_app
from quizwordz.config import TestingConfig
from quizwordz.services import game_service as game_service_module
from quizwordz.utils.game_logger import game_logger
from quizwordz.websocket.handlers import room_subscriptions


def create_game(client, word="crane", host_id="host"):
    resp = client.post('/api/games', json={'host_id': host_id, 'word': word})
    assert resp.status_code == 201
    return resp.get_json()['game_id']


class TestGameEndpoints:

    def test_create_game(self, client):
        resp = client.post('/api/games', json={'host_id': 'host', 'word': 'crane'})
        data = resp.get_json()

        assert resp.status_code == 201
        assert data['success']
        assert data['state']['status'] == 'waiting'
        # The host sees the word they chose, through the key only they receive
        assert data['host_key']
        assert data['host_key'] != 'host'
        assert data['state']['word'] == 'CRANE'
        assert 'hostKey' not in data['state']
        assert data['state']['wordLength'] == 5

    def test_create_game_requires_host(self, client):
        resp = client.post('/api/games', json={})
        assert resp.status_code == 400
        assert not resp.get_json()['success']

    def test_create_game_bad_word(self, client):
        resp = client.post('/api/games', json={'host_id': 'host', 'word': 'abc'})
        data = resp.get_json()

        assert resp.status_code == 400
        assert data['code'] == 'INVALID_WORD'

    def test_get_game_hides_word(self, client):
        game_id = create_game(client)

        resp = client.get(f'/api/games/{game_id}')
        assert resp.status_code == 200
        assert resp.get_json()['state']['word'] is None

        resp = client.get(f'/api/games/{game_id}?viewer_id=host')
        assert resp.get_json()['state']['word'] is None

    def test_host_key_reveals_word(self, client):
        created = client.post('/api/games', json={'host_id': 'host', 'word': 'crane'}).get_json()
        game_id, host_key = created['game_id'], created['host_key']

        resp = client.get(f'/api/games/{game_id}?host_key={host_key}')
        assert resp.get_json()['state']['word'] == 'CRANE'

    def test_public_host_id_does_not_reveal_word(self, client):
        game_id = create_game(client, host_id='host-7')
        client.post(f'/api/games/{game_id}/join', json={'player_id': 'mallory'})

        # Any client can read the host id from a public snapshot
        host_id = client.get(f'/api/games/{game_id}').get_json()['state']['hostId']
        assert host_id == 'host-7'

        for query in (f'viewer_id={host_id}', f'host_key={host_id}', 'host_key='):
            state = client.get(f'/api/games/{game_id}?{query}').get_json()['state']
            assert state['word'] is None
        for game in client.get('/api/games').get_json()['games']:
            assert game['word'] is None
            assert 'hostKey' not in game

    def test_get_unknown_game(self, client):
        resp = client.get('/api/games/nonexistent-id')
        assert resp.status_code == 404
        assert resp.get_json()['code'] == 'SESSION_NOT_FOUND'

    def test_list_games(self, client):
        create_game(client)
        create_game(client, "slate")

        resp = client.get('/api/games')
        games = resp.get_json()['games']
        assert len(games) == 2
        assert all(game['word'] is None for game in games)

    def test_full_game_flow(self, client):
        game_id = create_game(client)
        resp = client.post(f'/api/games/{game_id}/join', json={'player_id': 'alice', 'name': 'Alice'})
        assert resp.status_code == 200
        assert resp.get_json()['state']['players'][0]['name'] == 'Alice'

        resp = client.post(f'/api/games/{game_id}/start')
        assert resp.get_json()['state']['status'] == 'playing'
        assert resp.get_json()['state']['startedAt'] is not None

        resp = client.post(f'/api/games/{game_id}/guess', json={'player_id': 'alice', 'guess': 'crate'})
        data = resp.get_json()
        assert resp.status_code == 200
        assert data['result'] == ['correct', 'correct', 'correct', 'absent', 'correct']

        resp = client.post(f'/api/games/{game_id}/guess', json={'player_id': 'alice', 'guess': 'crane'})
        data = resp.get_json()
        assert data['result'] == ['correct'] * 5
        assert data['state']['players'][0]['solved']
        # Only player solved, so the game is over and the word revealed
        assert data['state']['status'] == 'finished'
        assert data['state']['word'] == 'CRANE'
        assert data['state']['winner']['id'] == 'alice'

    def test_guess_errors(self, client):
        game_id = create_game(client)
        client.post(f'/api/games/{game_id}/join', json={'player_id': 'alice'})

        resp = client.post(f'/api/games/{game_id}/guess', json={'player_id': 'alice', 'guess': 'crane'})
        assert resp.status_code == 409
        assert resp.get_json()['code'] == 'INVALID_SESSION_STATE'

        client.post(f'/api/games/{game_id}/start')

        resp = client.post(f'/api/games/{game_id}/guess', json={'player_id': 'alice', 'guess': 'cran'})
        assert resp.status_code == 400
        assert resp.get_json()['code'] == 'INVALID_GUESS_LENGTH'

        resp = client.post(f'/api/games/{game_id}/guess', json={'player_id': 'eve', 'guess': 'crane'})
        assert resp.status_code == 404
        assert resp.get_json()['code'] == 'UNKNOWN_PLAYER'

        resp = client.post(f'/api/games/{game_id}/guess', json={'player_id': 'alice'})
        assert resp.status_code == 400

        state = client.get(f'/api/games/{game_id}').get_json()['state']
        assert state['players'][0]['guesses'] == []

    def test_update_status(self, client):
        game_id = create_game(client)

        resp = client.patch(f'/api/games/{game_id}/status', json={'status': 'playing', 'started_at': 1234})
        assert resp.get_json()['state']['startedAt'] == 1234

        resp = client.patch(f'/api/games/{game_id}/status', json={'status': 'waiting'})
        assert resp.status_code == 409

        resp = client.patch(f'/api/games/{game_id}/status', json={})
        assert resp.status_code == 400

        resp = client.post(f'/api/games/{game_id}/finish')
        assert resp.get_json()['state']['status'] == 'finished'

    def test_board(self, client):
        game_id = create_game(client)
        client.post(f'/api/games/{game_id}/join', json={'player_id': 'alice'})
        client.post(f'/api/games/{game_id}/join', json={'player_id': 'bob'})
        client.post(f'/api/games/{game_id}/start')
        client.post(f'/api/games/{game_id}/guess', json={'player_id': 'alice', 'guess': 'slate'})

        own = client.get(f'/api/games/{game_id}/board/alice?viewer_id=alice').get_json()
        assert [cell['letter'] for cell in own['board'][0]] == list('SLATE')
        assert own['keyboard']['A'] == 'correct'

        other = client.get(f'/api/games/{game_id}/board/alice?viewer_id=bob').get_json()
        assert [cell['letter'] for cell in other['board'][0]] == ['?'] * 5
        assert other['keyboard'] == {}

        resp = client.get(f'/api/games/{game_id}/board/carol')
        assert resp.status_code == 404

    def test_delete_game(self, client):
        game_id = create_game(client)

        assert client.delete(f'/api/games/{game_id}').status_code == 200
        assert client.delete(f'/api/games/{game_id}').status_code == 404

    def test_delete_game_logs_system_actor(self, client, monkeypatch):
        game_id = create_game(client)
        events = []
        monkeypatch.setattr(game_logger, 'log_game_event',
                            lambda *args, **kwargs: events.append((args, kwargs)))

        client.delete(f'/api/games/{game_id}', environ_base={'REMOTE_ADDR': '203.0.113.9'})

        assert events == [((game_id, 'game_deleted', 'system'), {'user_ip': '203.0.113.9'})]

    def test_guess_returns_its_own_snapshot(self, client, service):
        game_id = create_game(client)
        for player_id in ('alice', 'bob'):
            client.post(f'/api/games/{game_id}/join', json={'player_id': player_id})
        client.post(f'/api/games/{game_id}/start')

        def guess_for_alice(session):
            # alice's guess is committed right after bob's
            if session.get_player('bob').guesses and not session.get_player('alice').guesses:
                service.submit_guess(game_id, 'alice', 'slate')

        service.subscribe_to_session(game_id, guess_for_alice)

        state = client.post(f'/api/games/{game_id}/guess',
                            json={'player_id': 'bob', 'guess': 'crate'}).get_json()['state']

        players = {p['id']: p for p in state['players']}
        assert players['bob']['guesses'] == ['CRATE']
        assert players['alice']['guesses'] == []
        assert state['version'] < service.fetch_session(game_id).version

    def test_health(self, client):
        resp = client.get('/api/health')
        assert resp.status_code == 200
        assert resp.get_json()['status'] == 'healthy'

    def test_service_unavailable(self, monkeypatch):
        monkeypatch.setattr(game_service_module, '_game_service', None)
        app, _ = create_app(TestingConfig)

        resp = app.test_client().post('/api/games', json={'host_id': 'host'})
        assert resp.status_code == 500


class TestWebSocket:

    @pytest.fixture
    def socket_client(self, app):
        return app.socketio.test_client(app)

    def _events(self, socket_client, name):
        return [event['args'][0] for event in socket_client.get_received() if event['name'] == name]

    def test_subscribe_receives_updates(self, client, socket_client, service):
        game_id = create_game(client)
        socket_client.emit('subscribe_game', {'game_id': game_id})

        initial = self._events(socket_client, 'game_update')
        assert len(initial) == 1
        assert initial[0]['state']['status'] == 'waiting'

        service.join_session(game_id, 'alice')
        service.start_session(game_id)

        updates = self._events(socket_client, 'game_update')
        assert [u['state']['status'] for u in updates] == ['waiting', 'playing']
        assert updates[-1]['state']['word'] is None

    def test_submit_guess_over_socket(self, client, socket_client, service):
        game_id = create_game(client)
        service.join_session(game_id, 'alice')
        service.start_session(game_id)
        socket_client.emit('subscribe_game', {'game_id': game_id})
        socket_client.get_received()

        socket_client.emit('submit_guess', {'game_id': game_id, 'player_id': 'alice', 'guess': 'crate'})
        received = socket_client.get_received()

        results = [e['args'][0] for e in received if e['name'] == 'guess_result']
        assert results == [{'success': True, 'result': ['correct', 'correct', 'correct', 'absent', 'correct']}]
        updates = [e['args'][0] for e in received if e['name'] == 'game_update']
        assert updates[-1]['state']['players'][0]['guesses'] == ['CRATE']

    def test_submit_invalid_guess_over_socket(self, client, socket_client, service):
        game_id = create_game(client)
        service.join_session(game_id, 'alice')

        socket_client.emit('submit_guess', {'game_id': game_id, 'player_id': 'alice', 'guess': 'crane'})
        results = self._events(socket_client, 'guess_result')

        assert results[0]['success'] is False
        assert results[0]['code'] == 'INVALID_SESSION_STATE'

    def test_subscribe_unknown_game(self, socket_client):
        socket_client.emit('subscribe_game', {'game_id': 'nonexistent-id'})
        errors = self._events(socket_client, 'error')

        assert errors[0]['code'] == 'SESSION_NOT_FOUND'

    def test_unsubscribe_stops_updates(self, client, socket_client, service):
        game_id = create_game(client)
        socket_client.emit('subscribe_game', {'game_id': game_id})
        socket_client.emit('unsubscribe_game', {'game_id': game_id})
        socket_client.get_received()

        service.join_session(game_id, 'alice')

        assert self._events(socket_client, 'game_update') == []

    def test_initial_snapshot_with_host_key(self, client, socket_client):
        created = client.post('/api/games', json={'host_id': 'host', 'word': 'crane'}).get_json()
        game_id = created['game_id']

        socket_client.emit('subscribe_game', {'game_id': game_id, 'viewer_id': 'host'})
        assert self._events(socket_client, 'game_update')[0]['state']['word'] is None

        socket_client.emit('subscribe_game', {'game_id': game_id, 'host_key': created['host_key']})
        assert self._events(socket_client, 'game_update')[0]['state']['word'] == 'CRANE'

    def test_one_room_subscription_per_game(self, client, app, service):
        game_id = create_game(client)
        first = app.socketio.test_client(app)
        second = app.socketio.test_client(app)

        first.emit('subscribe_game', {'game_id': game_id})
        second.emit('subscribe_game', {'game_id': game_id})

        assert len(service._subscriptions[game_id]) == 1

    def test_delete_prunes_room_subscription(self, client, socket_client, service):
        game_id = create_game(client)
        socket_client.emit('subscribe_game', {'game_id': game_id})
        subscription = room_subscriptions[game_id]

        client.delete(f'/api/games/{game_id}')

        assert game_id not in room_subscriptions
        assert not subscription.active
        assert game_id not in service._subscriptions
        assert game_id not in service._locks
