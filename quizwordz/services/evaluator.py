"""
Guess Evaluator

Implements the Wordle letter evaluation algorithm. Pure and stateless,
safe to call from any thread.
"""

from typing import List, Optional
from ..models.game import LetterResult


def evaluate(secret: str, guess: str) -> List[LetterResult]:
    """
    Classify each letter of a guess against the secret word.

    Args:
        secret: The target word
        guess: The guessed word, same length as the secret

    Returns:
        List of LetterResult, positionally aligned with the guess

    Raises:
        ValueError: If the lengths differ (callers validate beforehand)
    """
    if len(secret) != len(guess):
        raise ValueError(f"Cannot evaluate a {len(guess)}-letter guess against a {len(secret)}-letter word")

    secret = secret.upper()
    guess = guess.upper()

    # None marks a consumed secret position
    remaining: List[Optional[str]] = list(secret)
    result: List[Optional[LetterResult]] = [None] * len(guess)

    # First pass: exact position matches
    for i, letter in enumerate(guess):
        if letter == secret[i]:
            result[i] = LetterResult.CORRECT
            remaining[i] = None

    # Second pass: letters present elsewhere, each secret position credited once
    for i, letter in enumerate(guess):
        if result[i] is not None:
            continue
        if letter in remaining:
            result[i] = LetterResult.PRESENT
            remaining[remaining.index(letter)] = None
        else:
            result[i] = LetterResult.ABSENT

    return result  # type: ignore


def is_solved(result: List[LetterResult]) -> bool:
    """True when every position is correct."""
    return bool(result) and all(r is LetterResult.CORRECT for r in result)
