"""
Score Commitment

Deterministic SHA-256 digest over a finished game's public result, used to
name and deduplicate mirrored records and to let anyone verify a claimed
(player, puzzle, score) triple. It is a commitment, not a MAC: no secret key.

The digest input is ``"{player_id}|{puzzle_number}|{score}"`` with decimal
integers and no whitespace. Both the primary persistence path and the
mirroring path must go through ``commit`` so the bytes always agree.
"""

import hashlib
import hmac
from typing import Optional

from ..models.game import Attempt


def commitment_input(player_id: str, puzzle_number: int, score: int) -> str:
    if isinstance(puzzle_number, bool) or not isinstance(puzzle_number, int):
        raise TypeError("puzzle_number must be an int")
    if isinstance(score, bool) or not isinstance(score, int):
        raise TypeError("score must be an int")
    return f"{player_id}|{puzzle_number:d}|{score:d}"


def commit(player_id: str, puzzle_number: int, score: int) -> str:
    """
    Hex SHA-256 digest committing to a game result.

    Examples:
      commit("playerX", 7, 2) == sha256(b"playerX|7|2").hexdigest()
    """
    payload = commitment_input(player_id, puzzle_number, score)
    return hashlib.sha256(payload.encode('utf-8')).hexdigest()


def verify(player_id: str, puzzle_number: int, score: int, digest: str) -> bool:
    """Recompute the commitment and compare it with a claimed digest."""
    return hmac.compare_digest(commit(player_id, puzzle_number, score), digest)


def commitment_for(attempt: Attempt) -> Optional[str]:
    """Commitment for a finished attempt; None while it is still being played."""
    score = attempt.score
    if score is None:
        return None
    return commit(attempt.player_id, attempt.puzzle_number, score)
