"""
Presentation Helpers

Turns player histories into what a board UI needs: canonical status labels,
keyboard letter colours and the guess grid. Nothing here feeds back into
evaluation.
"""

from typing import Dict, List, Optional, Sequence, Union

from ..models.game import LetterResult, Player

# Legacy and abbreviated status codes from the external game API.
# 'r' has no documented meaning upstream and is shown as absent.
STATUS_MAP: Dict[str, str] = {
    'c': LetterResult.CORRECT.value,
    'p': LetterResult.PRESENT.value,
    'o': LetterResult.ABSENT.value,
    'r': LetterResult.ABSENT.value,
    'correct': LetterResult.CORRECT.value,
    'present': LetterResult.PRESENT.value,
    'absent': LetterResult.ABSENT.value,
}

_PRIORITY = {
    LetterResult.ABSENT.value: 0,
    LetterResult.PRESENT.value: 1,
    LetterResult.CORRECT.value: 2,
}

StatusCode = Union[LetterResult, str, None]


def canonical_status(code: StatusCode) -> str:
    """Map any known status code to correct/present/absent."""
    if isinstance(code, LetterResult):
        return code.value
    if code is None:
        return LetterResult.ABSENT.value
    return STATUS_MAP.get(str(code).lower(), LetterResult.ABSENT.value)


def keyboard_letter_states(guesses: Sequence[str],
                           results: Sequence[Sequence[StatusCode]]) -> Dict[str, str]:
    """
    Best status seen for each guessed letter.

    Priority is correct > present > absent, so a letter never goes back to
    a weaker colour once a stronger one was shown.
    """
    states: Dict[str, str] = {}
    for guess_index, guess in enumerate(guesses):
        row = results[guess_index] if guess_index < len(results) else []
        for letter_index, letter in enumerate(guess.upper()):
            status = canonical_status(row[letter_index] if letter_index < len(row) else None)
            current = states.get(letter)
            if current is None or _PRIORITY[status] > _PRIORITY[current]:
                states[letter] = status
    return states


def build_board(player: Player,
                word_length: int,
                max_attempts: int,
                current_guess: str = '',
                show_letters: bool = True) -> List[List[Dict[str, Optional[Union[str, bool]]]]]:
    """
    Build the guess grid for one player.

    Args:
        player: Player whose history is shown
        word_length: Cells per row
        max_attempts: Number of rows
        current_guess: Letters typed but not yet submitted, shown on the next row
        show_letters: False hides letters behind '?' (opponent boards)

    Returns:
        Rows of cells with 'letter', 'status' and 'has_result' keys
    """
    board = []
    current_row = len(player.guesses)
    for row_index in range(max_attempts):
        if row_index < current_row:
            guess = player.guesses[row_index]
            result = player.results[row_index]
        elif row_index == current_row:
            guess = current_guess.upper()[:word_length]
            result = []
        else:
            guess = ''
            result = []

        row = []
        for col_index in range(word_length):
            letter = guess[col_index] if col_index < len(guess) else ''
            has_result = col_index < len(result)
            if letter and not show_letters:
                letter = '?'
            row.append({
                'letter': letter,
                'status': canonical_status(result[col_index]) if has_result else None,
                'has_result': has_result,
            })
        board.append(row)
    return board
