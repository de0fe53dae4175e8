"""
Game Configuration Constants Module

Game rule constants and the loader for the accepted-vocabulary word list.
All game parameters are centralized here to enable easy modification.
"""

import json
import os
from typing import Final, List, Optional

MAX_GUESSES: Final[int] = 6
"""Maximum number of guesses allowed per attempt."""

LOST_SCORE: Final[int] = -1
"""Numeric score committed for a lost attempt. Never collides with a guess count."""

DEFAULT_WORD_LENGTH: Final[int] = 5

CUSTOM_PUZZLE_ID_LENGTH: Final[int] = 8

SUMMARY_TITLE: Final[str] = "Skyrdle"

DEFAULT_VOCABULARY_PATH: Final[str] = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), 'words.json'
)


def load_word_list(path: Optional[str] = None) -> List[str]:
    """
    Load a word list from a JSON file.

    The file may hold either a bare array of words or an object with a
    ``words`` array. Words are returned upper-cased, in file order.

    Args:
        path: JSON file to read; defaults to the bundled vocabulary

    Returns:
        List[str]: Upper-cased words

    Raises:
        FileNotFoundError: If the file is not found
        ValueError: If the JSON is malformed, the list is empty, or a word
            contains non-alphabetic characters
    """
    json_file_path = path or DEFAULT_VOCABULARY_PATH

    try:
        with open(json_file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Word list file not found: {json_file_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {json_file_path}: {e}")

    if isinstance(data, dict):
        data = data.get('words')

    if not isinstance(data, list):
        raise ValueError("Word list file must contain an array of words")

    if not data:
        raise ValueError("Word list cannot be empty")

    words = [str(word).strip().upper() for word in data]
    for word in words:
        if not word.isalpha():
            raise ValueError(f"Word '{word}' contains non-alphabetic characters")

    return words
