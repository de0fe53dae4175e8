"""
Vocabulary

Accepted-word membership test used to reject guesses that are not words.
"""

from typing import FrozenSet, Iterable, Optional

from ..config.game_settings import load_word_list


class Vocabulary:
    """Fixed set of accepted words, compared case-insensitively."""

    def __init__(self, words: Iterable[str]):
        self._words: FrozenSet[str] = frozenset(word.strip().upper() for word in words)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Vocabulary":
        return cls(load_word_list(path))

    def is_accepted(self, word: str) -> bool:
        return word.strip().upper() in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, word: str) -> bool:
        return self.is_accepted(word)
