"""
Game Data Models

Contains all game-related data structures and enums.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class LetterResult(Enum):
    """Per-position outcome of evaluating a guess."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


class SessionStatus(Enum):
    """Session lifecycle, strictly forward: waiting -> playing -> finished."""
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


# Allowed forward transitions
TRANSITIONS = {
    SessionStatus.WAITING: SessionStatus.PLAYING,
    SessionStatus.PLAYING: SessionStatus.FINISHED,
}


@dataclass
class Player:
    """A player and their guess history."""
    id: str
    name: str
    guesses: List[str] = field(default_factory=list)
    results: List[List[LetterResult]] = field(default_factory=list)
    solved: bool = False
    time_completed: Optional[int] = None  # epoch milliseconds

    @property
    def attempts(self) -> int:
        return len(self.guesses)

    def record(self, guess: str, result: List[LetterResult]) -> None:
        """Append a guess and its result together."""
        self.guesses.append(guess)
        self.results.append(list(result))

    def mark_solved(self, now: int) -> None:
        # solved never reverts, and the completion time is kept from the first solve
        if not self.solved:
            self.solved = True
            self.time_completed = now

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'guesses': list(self.guesses),
            'results': [[r.value for r in result] for result in self.results],
            'solved': self.solved,
            'timeCompleted': self.time_completed,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Player':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            guesses=list(data.get('guesses') or []),
            results=[[LetterResult(r) for r in result] for result in data.get('results') or []],
            solved=bool(data.get('solved', False)),
            time_completed=data.get('timeCompleted'),
        )


@dataclass
class GameSession:
    """Server-side state of one game instance."""
    id: str
    host_id: str
    word: str
    word_length: int
    max_attempts: int
    status: SessionStatus = SessionStatus.WAITING
    players: List[Player] = field(default_factory=list)
    created_at: Optional[int] = None
    started_at: Optional[int] = None
    ended_at: Optional[int] = None
    winner_id: Optional[str] = None
    version: int = 0
    host_key: Optional[str] = None  # handed to the host only, unlocks the word

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    @property
    def winner(self) -> Optional[Player]:
        if self.winner_id is None:
            return None
        return self.get_player(self.winner_id)

    def is_player_done(self, player: Player) -> bool:
        return player.solved or player.attempts >= self.max_attempts

    def all_players_done(self) -> bool:
        return bool(self.players) and all(self.is_player_done(p) for p in self.players)

    def pick_winner(self) -> Optional[str]:
        """Earliest solver wins; join order breaks ties."""
        solvers = [p for p in self.players if p.solved]
        if not solvers:
            return None
        return min(solvers, key=lambda p: p.time_completed or 0).id

    def copy(self) -> 'GameSession':
        return copy.deepcopy(self)

    def is_host_key(self, host_key: Optional[str]) -> bool:
        return bool(host_key) and self.host_key is not None and host_key == self.host_key

    def to_dict(self, host_key: Optional[str] = None, reveal_word: bool = False) -> Dict:
        """
        Snapshot for clients.

        The secret word is only included for a caller holding the host key,
        once the game is finished, or when reveal_word is set (used by the
        store layer, which also keeps the host key).
        """
        show_word = (
            reveal_word
            or self.status is SessionStatus.FINISHED
            or self.is_host_key(host_key)
        )
        winner = self.winner
        snapshot = {
            'id': self.id,
            'hostId': self.host_id,
            'word': self.word if show_word else None,
            'wordLength': self.word_length,
            'maxAttempts': self.max_attempts,
            'status': self.status.value,
            'players': [p.to_dict() for p in self.players],
            'createdAt': self.created_at,
            'startedAt': self.started_at,
            'endedAt': self.ended_at,
            'winner': winner.to_dict() if winner else None,
            'version': self.version,
        }
        if reveal_word:
            snapshot['hostKey'] = self.host_key
        return snapshot

    @classmethod
    def from_dict(cls, data: Dict) -> 'GameSession':
        winner = data.get('winner')
        return cls(
            id=data['id'],
            host_id=data['hostId'],
            word=data['word'],
            word_length=data['wordLength'],
            max_attempts=data['maxAttempts'],
            status=SessionStatus(data['status']),
            players=[Player.from_dict(p) for p in data.get('players') or []],
            created_at=data.get('createdAt'),
            started_at=data.get('startedAt'),
            ended_at=data.get('endedAt'),
            winner_id=winner['id'] if winner else None,
            version=data.get('version', 0),
            host_key=data.get('hostKey'),
        )
