"""
Game Data Models

Contains all game-related data structures and enums, together with their
conversion to and from the stored document format.
"""

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config.game_settings import LOST_SCORE
from ..utils.errors import InvalidGameStatus


class Verdict(Enum):
    """Per-letter evaluation of a guess against the target word."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


class GameStatus(Enum):
    """Lifecycle of a single attempt. WON and LOST are terminal."""
    PLAYING = "Playing"
    WON = "Won"
    LOST = "Lost"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.PLAYING

    @classmethod
    def parse(cls, value: Any) -> "GameStatus":
        """
        Parse an external status string.

        Raises:
            InvalidGameStatus: If the value is not exactly one of the three statuses
        """
        for status in cls:
            if status.value == value:
                return status
        raise InvalidGameStatus(f"Unknown game status: {value!r}")


@dataclass(frozen=True)
class Guess:
    """One submitted word and its evaluation. Immutable once appended."""
    letters: Tuple[str, ...]
    evaluation: Tuple[Verdict, ...]

    @property
    def word(self) -> str:
        return ''.join(self.letters)

    @property
    def is_solved(self) -> bool:
        return all(verdict is Verdict.CORRECT for verdict in self.evaluation)

    def to_document(self) -> Dict[str, List[str]]:
        return {
            'letters': list(self.letters),
            'evaluation': [verdict.value for verdict in self.evaluation]
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Sequence[str]]) -> "Guess":
        return cls(
            letters=tuple(doc['letters']),
            evaluation=tuple(Verdict(value) for value in doc['evaluation'])
        )


def _guesses_from_documents(docs) -> List[Guess]:
    return [Guess.from_document(doc) for doc in docs or []]


def _as_utc(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    # Documents read without tz_aware come back naive but hold UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


@dataclass
class Attempt:
    """
    One player's progress on one daily puzzle.

    The pair (player_id, puzzle_number) is the natural key. ``revision`` counts
    successful saves and backs the store's compare-and-swap. ``stored`` tells a
    never-saved attempt from one read back from the store; documents written
    before revisions existed are stored with revision 0.
    """
    player_id: str
    puzzle_number: int
    target_word: str
    guesses: List[Guess] = field(default_factory=list)
    status: GameStatus = GameStatus.PLAYING
    completed_at: Optional[datetime.datetime] = None
    score_commitment: Optional[str] = None
    mirrored: bool = False
    revision: int = 0
    stored: bool = field(default=False, compare=False, repr=False)

    @property
    def key(self) -> Tuple[str, int]:
        return (self.player_id, self.puzzle_number)

    @property
    def score(self) -> Optional[int]:
        """Guess count when won, LOST_SCORE when lost, None while playing."""
        if self.status is GameStatus.WON:
            return len(self.guesses)
        if self.status is GameStatus.LOST:
            return LOST_SCORE
        return None

    def to_document(self) -> Dict[str, Any]:
        return {
            'did': self.player_id,
            'gameNumber': self.puzzle_number,
            'targetWord': self.target_word,
            'guesses': [guess.to_document() for guess in self.guesses],
            'status': self.status.value,
            'completedAt': self.completed_at,
            'scoreHash': self.score_commitment,
            'syncedToAtproto': self.mirrored,
            'revision': self.revision
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Attempt":
        return cls(
            player_id=doc['did'],
            puzzle_number=int(doc['gameNumber']),
            target_word=doc['targetWord'],
            guesses=_guesses_from_documents(doc.get('guesses')),
            status=GameStatus.parse(doc.get('status', GameStatus.PLAYING.value)),
            completed_at=_as_utc(doc.get('completedAt')),
            score_commitment=doc.get('scoreHash'),
            mirrored=bool(doc.get('syncedToAtproto', False)),
            revision=int(doc.get('revision') or 0),
            stored=True
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """API view; the target word is only revealed once the attempt is over."""
        return {
            'gameNumber': self.puzzle_number,
            'guesses': [guess.to_document() for guess in self.guesses],
            'status': self.status.value,
            'targetWord': self.target_word if self.status.is_terminal else None,
            'completedAt': self.completed_at.isoformat() if self.completed_at else None,
            'scoreHash': self.score_commitment
        }


@dataclass
class CustomPuzzle:
    """A player-authored puzzle, addressed by an opaque short identifier."""
    custom_puzzle_id: str
    creator_id: str
    target_word: str
    created_at: Optional[datetime.datetime] = None

    def to_document(self) -> Dict[str, Any]:
        return {
            'customGameId': self.custom_puzzle_id,
            'creatorDid': self.creator_id,
            'targetWord': self.target_word,
            'createdAt': self.created_at
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "CustomPuzzle":
        return cls(
            custom_puzzle_id=doc['customGameId'],
            creator_id=doc['creatorDid'],
            target_word=doc['targetWord'],
            created_at=_as_utc(doc.get('createdAt'))
        )


@dataclass
class CustomAttempt:
    """One participant's progress on one custom puzzle."""
    custom_puzzle_id: str
    player_id: str
    target_word: str
    guesses: List[Guess] = field(default_factory=list)
    status: GameStatus = GameStatus.PLAYING
    completed_at: Optional[datetime.datetime] = None
    revision: int = 0
    stored: bool = field(default=False, compare=False, repr=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.custom_puzzle_id, self.player_id)

    def to_document(self) -> Dict[str, Any]:
        # The target lives on the custom puzzle document; it is not duplicated here.
        return {
            'customGameId': self.custom_puzzle_id,
            'did': self.player_id,
            'guesses': [guess.to_document() for guess in self.guesses],
            'status': self.status.value,
            'completedAt': self.completed_at,
            'revision': self.revision
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any], target_word: str) -> "CustomAttempt":
        return cls(
            custom_puzzle_id=doc['customGameId'],
            player_id=doc['did'],
            target_word=target_word,
            guesses=_guesses_from_documents(doc.get('guesses')),
            status=GameStatus.parse(doc.get('status', GameStatus.PLAYING.value)),
            completed_at=_as_utc(doc.get('completedAt')),
            revision=int(doc.get('revision') or 0),
            stored=True
        )

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            'customGameId': self.custom_puzzle_id,
            'guesses': [guess.to_document() for guess in self.guesses],
            'status': self.status.value,
            'targetWord': self.target_word if self.status.is_terminal else None,
            'completedAt': self.completed_at.isoformat() if self.completed_at else None
        }
