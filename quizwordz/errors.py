"""
Game Errors

Exceptions raised by the game core. Every error is raised before any
session state is mutated, so callers can report it and carry on.
"""


class GameError(Exception):
    """Base class for all game errors."""
    code = "GAME_ERROR"
    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'success': False, 'error': self.message, 'code': self.code}


class InvalidGuess(GameError):
    code = "INVALID_GUESS"


class InvalidGuessLength(InvalidGuess):
    """Guess length differs from the session's word length."""
    code = "INVALID_GUESS_LENGTH"

    def __init__(self, guess: str, expected: int):
        super().__init__(f"Guess must be exactly {expected} letters (got {len(guess)})")
        self.guess = guess
        self.expected = expected


class InvalidGuessCharacters(InvalidGuess):
    code = "INVALID_GUESS_CHARACTERS"

    def __init__(self, guess: str):
        super().__init__("Guess must contain only letters")
        self.guess = guess


class InvalidWord(GameError):
    """Secret word rejected at session creation."""
    code = "INVALID_WORD"


class InvalidSessionState(GameError):
    """Operation not allowed in the session's current status."""
    code = "INVALID_SESSION_STATE"
    status = 409


class PlayerAlreadySolved(InvalidSessionState):
    code = "PLAYER_ALREADY_SOLVED"

    def __init__(self, player_id: str):
        super().__init__(f"Player {player_id} has already solved the word")
        self.player_id = player_id


class AttemptsExhausted(InvalidSessionState):
    code = "ATTEMPTS_EXHAUSTED"

    def __init__(self, player_id: str, max_attempts: int):
        super().__init__(f"Player {player_id} has used all {max_attempts} attempts")
        self.player_id = player_id
        self.max_attempts = max_attempts


class UnknownPlayer(GameError):
    code = "UNKNOWN_PLAYER"
    status = 404

    def __init__(self, session_id: str, player_id: str):
        super().__init__(f"Player {player_id} is not part of game {session_id}")
        self.session_id = session_id
        self.player_id = player_id


class SessionNotFound(GameError):
    code = "SESSION_NOT_FOUND"
    status = 404

    def __init__(self, session_id: str):
        super().__init__("Game not found")
        self.session_id = session_id
