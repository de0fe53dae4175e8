"""
Request Models

Request bodies are parsed into these typed structs once, at ingress.
Core operations never see raw JSON.
"""

from dataclasses import dataclass
from typing import Any, Optional

from ..utils.errors import InvalidPuzzleNumber, InvalidRequest


def parse_puzzle_number(raw: Any) -> int:
    """
    Parse a puzzle number from a URL segment or JSON value.

    Raises:
        InvalidPuzzleNumber: If the value is not a positive integer
    """
    if isinstance(raw, bool):
        raise InvalidPuzzleNumber()
    if isinstance(raw, int):
        number = raw
    elif isinstance(raw, str) and raw.strip().isdecimal():
        number = int(raw.strip())
    else:
        raise InvalidPuzzleNumber()
    if number <= 0:
        raise InvalidPuzzleNumber()
    return number


def _require_word(payload: Any, key: str) -> str:
    if not isinstance(payload, dict):
        raise InvalidRequest("Request body must be a JSON object")
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"'{key}' is required")
    word = value.strip().upper()
    if not word.isalpha():
        raise InvalidRequest(f"'{key}' must contain only letters")
    return word


@dataclass(frozen=True)
class GuessRequest:
    """A guess for a daily puzzle (or a custom puzzle when puzzle_number is None)."""
    guess: str
    puzzle_number: Optional[int] = None

    @classmethod
    def from_json(cls, payload: Any, require_puzzle_number: bool = True) -> "GuessRequest":
        guess = _require_word(payload, 'guess')
        puzzle_number = None
        if require_puzzle_number:
            if 'gameNumber' not in payload:
                raise InvalidRequest("'gameNumber' is required")
            puzzle_number = parse_puzzle_number(payload['gameNumber'])
        return cls(guess=guess, puzzle_number=puzzle_number)


@dataclass(frozen=True)
class CustomPuzzleRequest:
    word: str

    @classmethod
    def from_json(cls, payload: Any) -> "CustomPuzzleRequest":
        return cls(word=_require_word(payload, 'word'))


@dataclass(frozen=True)
class LoginRequest:
    identifier: str
    password: str

    @classmethod
    def from_json(cls, payload: Any) -> "LoginRequest":
        if not isinstance(payload, dict):
            raise InvalidRequest("Request body is required")
        identifier = payload.get('identifier')
        password = payload.get('password')
        if not isinstance(identifier, str) or not identifier.strip() \
                or not isinstance(password, str) or not password:
            raise InvalidRequest("Identifier and password are required")
        return cls(identifier=identifier.strip(), password=password)
