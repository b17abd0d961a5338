"""
Game Service

Manages multiplayer game sessions: creation, joining, status transitions,
guess submission and change notifications.
"""

import random
import threading
import time
import uuid
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..config.game_settings import (
    WORD_LENGTH, MAX_ATTEMPTS, is_letters, normalize_word, words_of_length
)
from ..errors import (
    AttemptsExhausted, InvalidGuessCharacters, InvalidGuessLength, InvalidSessionState,
    InvalidWord, PlayerAlreadySolved, SessionNotFound, UnknownPlayer
)
from ..models.game import GameSession, LetterResult, Player, SessionStatus, TRANSITIONS
from ..utils.game_logger import game_logger
from .evaluator import evaluate, is_solved
from .store import InMemorySessionStore, SessionStore


def current_millis() -> int:
    return int(time.time() * 1000)


class Subscription:
    """
    Handle returned by subscribe_to_session.

    Delivers full snapshots to a callback, skipping any snapshot that is not
    newer than the last one delivered.
    """

    def __init__(self, service: 'GameService', session_id: str,
                 callback: Callable[[GameSession], None], version: int = 0):
        self.service = service
        self.session_id = session_id
        self.callback = callback
        self.last_version = version
        self.active = True

    def deliver(self, session: GameSession) -> bool:
        if not self.active or session.version <= self.last_version:
            return False
        self.last_version = session.version
        self.callback(session.copy())
        return True

    def unsubscribe(self) -> None:
        self.active = False
        self.service._remove_subscription(self)


class GameService:
    """
    Core game service managing multiple game sessions.

    This class handles:
    - Session lifecycle (waiting -> playing -> finished)
    - Secret word selection and validation
    - Guess validation and evaluation
    - Snapshot delivery to subscribers

    Mutations of one session are serialized by a per-session lock. Each
    mutation works on a copy loaded from the store and is only published
    once the store has saved it.
    """

    def __init__(self,
                 store: Optional[SessionStore] = None,
                 word_length: int = WORD_LENGTH,
                 max_attempts: int = MAX_ATTEMPTS,
                 clock: Callable[[], int] = current_millis):
        self.store = store if store is not None else InMemorySessionStore()
        self.word_length = word_length
        self.max_attempts = max_attempts
        self.clock = clock
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def _lock_for(self, session_id: str) -> threading.RLock:
        """
        Lock serializing mutations of one session.

        Locks only exist for stored sessions, so unknown ids raise
        SessionNotFound without leaving an entry behind.
        """
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None:
                if self.store.get(session_id) is None:
                    raise SessionNotFound(session_id)
                lock = self._locks[session_id] = threading.RLock()
            return lock

    def _load(self, session_id: str) -> GameSession:
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def _commit(self, session: GameSession) -> GameSession:
        """Persist a mutated working copy, then notify subscribers."""
        session.version += 1
        self.store.save(session)
        self._notify(session)
        return session

    def _notify(self, session: GameSession) -> None:
        for subscription in list(self._subscriptions.get(session.id, [])):
            try:
                subscription.deliver(session)
            except Exception as e:
                game_logger.logger.error(f"Subscriber callback failed for game {session.id}: {e}")

    def _remove_subscription(self, subscription: Subscription) -> None:
        try:
            lock = self._lock_for(subscription.session_id)
        except SessionNotFound:
            # deleted sessions drop their subscriptions with them
            return
        with lock:
            subscriptions = self._subscriptions.get(subscription.session_id, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)

    def _validate_secret(self, word: str) -> str:
        if not is_letters(word.strip()):
            raise InvalidWord("Word must contain only letters A-Z")
        normalized = normalize_word(word)
        if len(normalized) != self.word_length:
            raise InvalidWord(f"Word must be exactly {self.word_length} letters")
        return normalized

    def _finish(self, session: GameSession, ended_at: int) -> None:
        session.status = SessionStatus.FINISHED
        session.ended_at = ended_at
        session.winner_id = session.pick_winner()

    def create_session(self, host_id: str, secret_word: Optional[str] = None) -> str:
        """
        Creates a new game session in the waiting state.

        Args:
            host_id: Identity of the hosting player
            secret_word: Word to guess; picked from the word list when omitted

        Returns:
            str: Unique game ID for this session
        """
        if secret_word is None:
            candidates = words_of_length(self.word_length)
            if not candidates:
                raise InvalidWord(f"No {self.word_length}-letter words available")
            secret_word = random.choice(candidates)

        word = self._validate_secret(secret_word)
        session = GameSession(
            id=str(uuid.uuid4()),
            host_id=host_id,
            word=word,
            word_length=self.word_length,
            max_attempts=self.max_attempts,
            created_at=self.clock(),
            version=1,
            host_key=uuid.uuid4().hex,
        )
        self.store.insert(session)

        game_logger.log_game_event(session.id, 'session_created', host_id,
                                   word_length=self.word_length, max_attempts=self.max_attempts)
        return session.id

    def fetch_session(self, session_id: str) -> GameSession:
        """Returns a detached snapshot of the session."""
        return self._load(session_id)

    def list_sessions(self) -> List[GameSession]:
        sessions = []
        for session_id in self.store.list_ids():
            session = self.store.get(session_id)
            if session is not None:
                sessions.append(session)
        return sessions

    def join_session(self, session_id: str, player_id: str, name: str = '') -> GameSession:
        """
        Adds a player to a waiting session.

        Joining twice with the same id leaves the session unchanged.
        """
        with self._lock_for(session_id):
            session = self._load(session_id)
            if session.get_player(player_id) is not None:
                return session

            if session.status is not SessionStatus.WAITING:
                raise InvalidSessionState(f"Cannot join a game that is {session.status.value}")

            session.players.append(Player(id=player_id, name=name or player_id))
            self._commit(session)

        game_logger.log_game_event(session_id, 'player_joined', player_id,
                                   name=name, players_count=len(session.players))
        return session.copy()

    def subscribe_to_session(self, session_id: str,
                             on_update: Callable[[GameSession], None]) -> Subscription:
        """
        Registers a callback receiving a full snapshot after every change.

        Returns:
            Subscription handle; call unsubscribe() to stop updates
        """
        with self._lock_for(session_id):
            session = self._load(session_id)
            subscription = Subscription(self, session_id, on_update, session.version)
            self._subscriptions.setdefault(session_id, []).append(subscription)
        return subscription

    def update_session_status(self,
                              session_id: str,
                              status: Union[SessionStatus, str],
                              started_at: Optional[int] = None,
                              ended_at: Optional[int] = None) -> GameSession:
        """
        Moves a session one step forward in its lifecycle.

        Args:
            session_id: Unique game identifier
            status: Target status, must be the direct successor of the current one
            started_at: Start time in epoch ms (defaults to now) when starting
            ended_at: End time in epoch ms (defaults to now) when finishing

        Returns:
            Updated session snapshot
        """
        try:
            target = SessionStatus(status)
        except ValueError:
            raise InvalidSessionState(f"Unknown game status: {status}")

        with self._lock_for(session_id):
            session = self._load(session_id)
            if TRANSITIONS.get(session.status) is not target:
                raise InvalidSessionState(
                    f"Cannot move game from {session.status.value} to {target.value}"
                )

            if target is SessionStatus.PLAYING:
                session.status = SessionStatus.PLAYING
                session.started_at = started_at if started_at is not None else self.clock()
            else:
                self._finish(session, ended_at if ended_at is not None else self.clock())
            self._commit(session)

        if target is SessionStatus.PLAYING:
            game_logger.log_game_event(session_id, 'session_started', session.host_id,
                                       players_count=len(session.players))
        else:
            game_logger.log_game_event(session_id, 'session_finished', session.host_id,
                                       winner_id=session.winner_id, reason='status_update')
        return session.copy()

    def start_session(self, session_id: str) -> GameSession:
        return self.update_session_status(session_id, SessionStatus.PLAYING)

    def finish_session(self, session_id: str) -> GameSession:
        return self.update_session_status(session_id, SessionStatus.FINISHED)

    def submit_guess(self, session_id: str, player_id: str, guess: str) -> List[LetterResult]:
        """Evaluates a guess and returns its per-letter results."""
        return self.submit_guess_with_state(session_id, player_id, guess)[0]

    def submit_guess_with_state(self, session_id: str, player_id: str,
                                guess: str) -> Tuple[List[LetterResult], GameSession]:
        """
        Evaluates a guess and appends it to the player's history.

        Args:
            session_id: Unique game identifier
            player_id: Player submitting the guess
            guess: The guessed word

        Returns:
            Per-letter results and the session snapshot this guess committed

        Raises:
            InvalidSessionState: Game not playing, player solved or out of attempts
            UnknownPlayer: Player is not part of the game
            InvalidGuessLength: Guess length differs from the word length
            InvalidGuessCharacters: Guess contains non-letters
        """
        with self._lock_for(session_id):
            session = self._load(session_id)
            if session.status is not SessionStatus.PLAYING:
                raise InvalidSessionState(f"Game is {session.status.value}, guesses are not accepted")

            player = session.get_player(player_id)
            if player is None:
                raise UnknownPlayer(session_id, player_id)
            if player.solved:
                raise PlayerAlreadySolved(player_id)
            if player.attempts >= session.max_attempts:
                raise AttemptsExhausted(player_id, session.max_attempts)

            stripped = (guess or '').strip()
            if stripped and not is_letters(stripped):
                raise InvalidGuessCharacters(stripped)
            normalized = stripped.upper()
            if len(normalized) != session.word_length:
                raise InvalidGuessLength(normalized, session.word_length)

            now = self.clock()
            result = evaluate(session.word, normalized)
            player.record(normalized, result)
            if is_solved(result):
                player.mark_solved(now)

            game_over = session.all_players_done()
            if game_over:
                self._finish(session, now)
            self._commit(session)
            committed = session.copy()

        game_logger.log_game_event(session_id, 'guess_submitted', player_id,
                                   attempt=player.attempts, result=[r.value for r in result])
        if player.solved:
            game_logger.log_game_event(session_id, 'player_solved', player_id,
                                       attempts=player.attempts, time_completed=player.time_completed)
        if game_over:
            game_logger.log_game_event(session_id, 'session_finished', 'system',
                                       winner_id=session.winner_id, reason='all_players_done')
        return result, committed

    def delete_session(self, session_id: str) -> bool:
        """
        Removes a session and drops its subscribers.

        Returns:
            bool: True if the session was deleted, False if not found
        """
        try:
            lock = self._lock_for(session_id)
        except SessionNotFound:
            return False
        with lock:
            deleted = self.store.delete(session_id)
            for subscription in self._subscriptions.pop(session_id, []):
                subscription.active = False
        with self._locks_guard:
            self._locks.pop(session_id, None)
        return deleted


# Global service instance
_game_service = None


def get_game_service() -> Optional[GameService]:
    """Get the global game service instance."""
    return _game_service


def initialize_game_service(store: Optional[SessionStore] = None,
                            word_length: int = WORD_LENGTH,
                            max_attempts: int = MAX_ATTEMPTS) -> GameService:
    """Initialize the global game service instance."""
    global _game_service
    _game_service = GameService(store, word_length, max_attempts)
    return _game_service
