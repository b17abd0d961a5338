"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import GameSession, LetterResult, Player, SessionStatus

__all__ = ['GameSession', 'LetterResult', 'Player', 'SessionStatus']
