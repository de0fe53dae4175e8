from collections import Counter

import pytest

from skyrdle.models.game import GameStatus, Guess, Verdict
from skyrdle.services.evaluator import (
    custom_summary_text, evaluate, keyboard_status, summary_text
)
from skyrdle.utils.errors import GameInProgress

_CODES = {Verdict.CORRECT: 'G', Verdict.PRESENT: 'Y', Verdict.ABSENT: '-'}
_FROM_CODE = {code: verdict for verdict, code in _CODES.items()}


def pattern(verdicts):
    return ''.join(_CODES[v] for v in verdicts)


def make_guess(word, code):
    return Guess(letters=tuple(word), evaluation=tuple(_FROM_CODE[c] for c in code))


# --- 5-letter goldens (duplicates + placements) ---
@pytest.mark.parametrize("guess,target,expected", [
    ("SPACE", "SPACE", "GGGGG"),
    ("AAAAA", "SPACE", "--G--"),
    ("SPEED", "SPACE", "GGY--"),
    ("STARE", "CRANE", "--GYG"),
    ("BELLE", "LEVEL", "-GYYY"),
    ("COOLS", "SCOOP", "YYG-Y"),
    ("RAISE", "CRANE", "YY--G"),
    ("LEMON", "LEVEL", "GG---"),
])
def test_evaluate_golden(guess, target, expected):
    assert pattern(evaluate(guess, target)) == expected


@pytest.mark.parametrize("guess,target,expected", [
    ("SETTLE", "LETTER", "-GGGYY"),
    ("LITTLE", "LETTER", "G-GG-Y"),
    ("KITTEN", "TINKET", "YGYYGY"),
])
def test_evaluate_other_lengths(guess, target, expected):
    assert pattern(evaluate(guess, target)) == expected


@pytest.mark.parametrize("guess,target", [
    ("SPEED", "SPACE"), ("CRANE", "CRANE"), ("SETTLE", "LETTER"), ("A", "B"),
])
def test_evaluate_preserves_length_and_is_deterministic(guess, target):
    first = evaluate(guess, target)
    assert len(first) == len(guess) == len(target)
    assert evaluate(guess, target) == first


def test_evaluate_is_case_insensitive():
    assert pattern(evaluate("crane", "CRANE")) == "GGGGG"
    assert evaluate("stare", "crane") == evaluate("STARE", "CRANE")


@pytest.mark.parametrize("guess,target", [
    ("SPEED", "SPACE"), ("AAAAA", "SPACE"), ("EERIE", "THREE"),
    ("LLAMA", "LOYAL"), ("ABBEY", "BABES"), ("BELLE", "LEVEL"),
])
def test_duplicate_letters_never_over_credited(guess, target):
    verdicts = evaluate(guess, target)
    credited = Counter(
        letter for letter, verdict in zip(guess, verdicts) if verdict is not Verdict.ABSENT
    )
    available = Counter(target)
    for letter, count in credited.items():
        assert count <= available[letter]


def test_exact_matches_take_priority_over_earlier_present():
    # The second E is an exact match, so the first E cannot claim it
    assert pattern(evaluate("EXXEX", "ABCEF")) == "---G-"


def test_keyboard_status_keeps_best_verdict():
    guesses = [
        make_guess("ABCDE", "-YG--"),
        make_guess("BAXYZ", "G----"),
        make_guess("CQRST", "-----"),
    ]
    status = keyboard_status(guesses)
    assert status['B'] is Verdict.CORRECT
    assert status['A'] is Verdict.ABSENT
    assert status['C'] is Verdict.CORRECT
    assert 'W' not in status


def test_keyboard_status_empty():
    assert keyboard_status([]) == {}


def test_summary_text_won():
    guesses = [make_guess("CRATE", "GY--Y"), make_guess("CRANE", "GGGGG")]
    assert summary_text(3, guesses, GameStatus.WON) == (
        "Skyrdle 3 2/6\n\n"
        "\U0001F7E9\U0001F7E8\u2B1B\u2B1B\U0001F7E8\n"
        "\U0001F7E9\U0001F7E9\U0001F7E9\U0001F7E9\U0001F7E9"
    )


def test_summary_text_lost_uses_x():
    guesses = [make_guess("BLIND", "-----")] * 6
    text = summary_text(5, guesses, GameStatus.LOST)
    assert text.startswith("Skyrdle 5 X/6\n\n")
    assert text.count("\n") == 2 + 5


def test_summary_text_requires_finished_game():
    with pytest.raises(GameInProgress):
        summary_text(1, [make_guess("BLIND", "-----")], GameStatus.PLAYING)


def test_custom_summary_text_links_challenge():
    guesses = [make_guess("CRANE", "GGGGG")]
    text = custom_summary_text(guesses, GameStatus.WON, "https://skyrdle.example/custom/Ab12Cd34")
    assert text == (
        "Custom Skyrdle 1/6\n\n"
        "\U0001F7E9\U0001F7E9\U0001F7E9\U0001F7E9\U0001F7E9\n\n"
        "Try this challenge: https://skyrdle.example/custom/Ab12Cd34"
    )
