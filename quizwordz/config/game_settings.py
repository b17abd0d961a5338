"""
Game Configuration Constants Module

This module defines all game configuration constants following the
Single Responsibility Principle and Configuration Management best practices.
All game parameters are centralized here to enable easy modification

"""

import json
import os
import re
from typing import List, Final

from .app_config import Config

# Core Game Configuration Constants
WORD_LENGTH: Final[int] = Config.WORD_LENGTH
"""
Number of letters in the secret word and in every guess.
Type: Final[int] - Immutable to prevent accidental modification
"""

MAX_ATTEMPTS: Final[int] = Config.MAX_ATTEMPTS
"""
Maximum number of guess attempts allowed per player.
Type: Final[int] - Immutable to prevent accidental modification
"""


_LETTERS = re.compile(r"[A-Za-z]+")


def normalize_word(word: str) -> str:
    """Strip surrounding whitespace and uppercase a word for comparison."""
    return word.strip().upper()


def is_letters(word: str) -> bool:
    """True for a non-empty run of A-Z letters, either case."""
    return _LETTERS.fullmatch(word) is not None


# Load word list from JSON file
def _load_word_list() -> List[str]:
    """
    Load word list from wordles.json file.

    Returns:
        List[str]: List of uppercase words

    Raises:
        FileNotFoundError: If wordles.json file is not found
        ValueError: If word list is empty or contains invalid words
    """
    config_dir = os.path.dirname(os.path.abspath(__file__))
    json_file_path = os.path.join(config_dir, 'wordles.json')

    try:
        with open(json_file_path, 'r', encoding='utf-8') as f:
            word_list = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Word list file not found: {json_file_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in wordles.json: {e}")

    if not isinstance(word_list, list):
        raise ValueError("JSON file must contain an array of words")

    if not word_list:
        raise ValueError("Word list cannot be empty")

    # Validate before uppercasing, which can change length outside A-Z
    for word in word_list:
        if not isinstance(word, str) or not is_letters(word.strip()):
            raise ValueError(f"Word '{word}' contains non-alphabetic characters")

    return [normalize_word(word) for word in word_list]

# Curated Word Database loaded from JSON file
WORD_LIST: Final[List[str]] = _load_word_list()


def words_of_length(length: int) -> List[str]:
    """Words from the curated list usable as a secret of the given length."""
    return [word for word in WORD_LIST if len(word) == length]


def validate_word_list_integrity(length: int = WORD_LENGTH) -> bool:
    """
    Validates the integrity and consistency of the word database.

    This function performs validation to ensure:
    1. Availability: at least one word of the configured length
    2. Character validation: Only alphabetic characters allowed
    3. Uniqueness validation: No duplicate entries
    4. Format validation: Consistent uppercase formatting

    Returns:
        bool: True if word list passes all validation checks

    Raises:
        ValueError: If any validation check fails with detailed error message

    """
    if not words_of_length(length):
        raise ValueError(f"Word list has no {length}-letter words")

    for index, word in enumerate(WORD_LIST):
        if not is_letters(word):
            raise ValueError(f"Word at index {index} '{word}' contains non-alphabetic characters")

        if not word.isupper():
            raise ValueError(f"Word at index {index} '{word}' is not in uppercase format")

    # Validate uniqueness (no duplicates)
    if len(WORD_LIST) != len(set(WORD_LIST)):
        duplicates = sorted({word for word in WORD_LIST if WORD_LIST.count(word) > 1})
        raise ValueError(f"Duplicate words found in word list: {duplicates}")

    return True


def get_word_statistics() -> dict:
    """
    Analyzes word list and returns statistical information for game balancing.

    Returns:
        dict: Statistical analysis including:
            - total_words: Number of words in database
            - avg_vowel_count: Average vowels per word
            - letter_frequency: Distribution of letters across all words
            - most_common_letters: Top five letters by frequency

    """
    if not WORD_LIST:
        return {"error": "Word list is empty"}

    vowels = set('AEIOU')
    total_vowels = sum(len([char for char in word if char in vowels]) for word in WORD_LIST)

    # Calculate letter frequency distribution
    letter_frequency = {}
    for word in WORD_LIST:
        for char in word:
            letter_frequency[char] = letter_frequency.get(char, 0) + 1

    return {
        "total_words": len(WORD_LIST),
        "avg_vowel_count": round(total_vowels / len(WORD_LIST), 2),
        "letter_frequency": letter_frequency,
        "most_common_letters": sorted(letter_frequency.items(), key=lambda x: x[1], reverse=True)[:5]
    }
