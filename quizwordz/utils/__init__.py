"""
Utilities Package

Contains logging and presentation helper modules.
"""

from .game_logger import game_logger
from .presentation import STATUS_MAP, canonical_status, keyboard_letter_states, build_board

__all__ = ['game_logger', 'STATUS_MAP', 'canonical_status', 'keyboard_letter_states', 'build_board']
