"""
User Data Models

Contains player identity and statistics data structures.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlayerSession:
    """
    Authenticated player context.

    Built once per request from a verified session token and passed
    explicitly into every game operation.
    """
    did: str
    handle: Optional[str] = None


@dataclass
class PlayerStats:
    """Player statistics rollup."""
    games_won: int = 0
    games_lost: int = 0
    average_score: float = 0.0
    current_streak: int = 0
    max_streak: int = 0

    def to_dict(self):
        return {
            'gamesWon': self.games_won,
            'gamesLost': self.games_lost,
            'averageScore': self.average_score,
            'currentStreak': self.current_streak,
            'maxStreak': self.max_streak
        }
