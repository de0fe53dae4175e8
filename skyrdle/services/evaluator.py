"""
Guess Evaluator

Scores a guess against a target word, folds evaluations into the keyboard
aggregate, and renders the shareable plain-text summary of a finished game.

Duplicate letters are handled with the two-pass algorithm:
  1) Exact position matches are marked correct and consume their target letter.
  2) Remaining positions, left to right, claim the first unconsumed occurrence
     of their letter (present) or are marked absent.
Pass 1 must complete before pass 2 begins; the order decides the outcome.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from ..config.game_settings import MAX_GUESSES, SUMMARY_TITLE
from ..models.game import GameStatus, Guess, Verdict
from ..utils.errors import GameInProgress

SUMMARY_GLYPHS = {
    Verdict.CORRECT: '\U0001F7E9',  # green square
    Verdict.PRESENT: '\U0001F7E8',  # yellow square
    Verdict.ABSENT: '\u2B1B',      # black square
}

_PRIORITY = {Verdict.ABSENT: 0, Verdict.PRESENT: 1, Verdict.CORRECT: 2}


def evaluate(guess: Sequence[str], target: Sequence[str]) -> List[Verdict]:
    """
    Compute per-position verdicts for ``guess`` against ``target``.

    Preconditions:
      - len(guess) == len(target); the caller enforces this

    Examples:
      evaluate("SPEED", "SPACE") -> correct, correct, present, absent, absent
      evaluate("AAAAA", "SPACE") -> absent, absent, correct, absent, absent
    """
    guess_chars = [char.upper() for char in guess]
    remaining: List[Optional[str]] = [char.upper() for char in target]
    verdicts: List[Optional[Verdict]] = [None] * len(guess_chars)

    # Pass 1: exact positions
    for i, char in enumerate(guess_chars):
        if i < len(remaining) and char == remaining[i]:
            verdicts[i] = Verdict.CORRECT
            remaining[i] = None

    # Pass 2: first unconsumed occurrence, left to right
    for i, char in enumerate(guess_chars):
        if verdicts[i] is not None:
            continue
        if char in remaining:
            verdicts[i] = Verdict.PRESENT
            remaining[remaining.index(char)] = None
        else:
            verdicts[i] = Verdict.ABSENT

    return [verdict for verdict in verdicts if verdict is not None]


def keyboard_status(guesses: Iterable[Guess]) -> Dict[str, Verdict]:
    """
    Best known status per letter across all guesses so far.

    correct overrides present overrides absent; letters never guessed are absent
    from the mapping.
    """
    status: Dict[str, Verdict] = {}
    for guess in guesses:
        for letter, verdict in zip(guess.letters, guess.evaluation):
            current = status.get(letter)
            if current is None or _PRIORITY[verdict] > _PRIORITY[current]:
                status[letter] = verdict
    return status


def _grid(guesses: Sequence[Guess]) -> str:
    return '\n'.join(
        ''.join(SUMMARY_GLYPHS[verdict] for verdict in guess.evaluation)
        for guess in guesses
    )


def _tally(guesses: Sequence[Guess], status: GameStatus, max_guesses: int) -> str:
    if not status.is_terminal:
        raise GameInProgress("Results can only be shared once the game is over")
    count = str(len(guesses)) if status is GameStatus.WON else 'X'
    return f"{count}/{max_guesses}"


def summary_text(puzzle_number: int, guesses: Sequence[Guess], status: GameStatus,
                 max_guesses: int = MAX_GUESSES) -> str:
    """
    Shareable summary of a finished daily attempt::

        Skyrdle 3 2/6

        🟩🟨⬛⬛🟨
        🟩🟩🟩🟩🟩

    Raises:
        GameInProgress: If the attempt is still being played
    """
    tally = _tally(guesses, status, max_guesses)
    return f"{SUMMARY_TITLE} {puzzle_number} {tally}\n\n{_grid(guesses)}"


def custom_summary_text(guesses: Sequence[Guess], status: GameStatus, share_url: str,
                        max_guesses: int = MAX_GUESSES) -> str:
    """Shareable summary of a finished custom attempt, ending with the challenge link."""
    tally = _tally(guesses, status, max_guesses)
    return f"Custom {SUMMARY_TITLE} {tally}\n\n{_grid(guesses)}\n\nTry this challenge: {share_url}"
