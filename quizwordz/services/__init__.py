"""
Services Package

Contains all business logic and service classes.
"""

from .evaluator import evaluate, is_solved
from .game_service import GameService, Subscription, get_game_service, initialize_game_service
from .store import InMemorySessionStore, MongoSessionStore, SessionStore, create_store

__all__ = [
    'evaluate', 'is_solved',
    'GameService', 'Subscription', 'get_game_service', 'initialize_game_service',
    'InMemorySessionStore', 'MongoSessionStore', 'SessionStore', 'create_store'
]
