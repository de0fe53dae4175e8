"""
Puzzle Indexer

Maps calendar time to daily puzzle numbers and puzzle numbers to target words.

Day boundaries are computed on the wall clock of a single canonical timezone,
so every player sees the same puzzle number regardless of where they are.
Puzzle #1 is the epoch's calendar day; the word list cycles once exhausted.
"""

import datetime
import threading
from typing import Callable, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from ..utils.errors import ConfigurationError, EmptyPuzzleList
from ..utils.game_logger import game_logger
from ..utils.helpers import utc_now


def _to_zone(instant: datetime.datetime, tz: datetime.tzinfo) -> datetime.datetime:
    # Naive datetimes are read as canonical wall-clock time.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    return instant.astimezone(tz)


def parse_epoch(value: str, tz: datetime.tzinfo) -> datetime.datetime:
    """
    Parse the configured epoch (``YYYY-MM-DD`` or an ISO timestamp).

    A bare date means midnight of that day in the canonical timezone.

    Raises:
        ConfigurationError: If the value cannot be parsed
    """
    try:
        parsed = datetime.datetime.fromisoformat(value.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid puzzle epoch: {value!r}")
    return _to_zone(parsed, tz)


def puzzle_number_for_instant(instant: datetime.datetime, epoch: datetime.datetime,
                              tz: datetime.tzinfo) -> int:
    """
    Puzzle number for ``instant``: whole canonical days since the epoch's day, plus one.

    Instants before the epoch are not supported.
    """
    elapsed = _to_zone(instant, tz).date() - _to_zone(epoch, tz).date()
    return elapsed.days + 1


def puzzle_content(puzzle_number: int, puzzle_list: Sequence[str]) -> str:
    """
    Target word for a puzzle number; the list is indexed with ``(n - 1) mod len``.

    Raises:
        EmptyPuzzleList: If the list has no entries
    """
    if not puzzle_list:
        raise EmptyPuzzleList("Puzzle list is empty")
    return puzzle_list[(puzzle_number - 1) % len(puzzle_list)]


class PuzzleIndexer:
    """
    Sole authority for mapping time to puzzle numbers and puzzle numbers to words.

    Holds the canonical timezone, the epoch, and a read-mostly snapshot of the
    puzzle list that a background worker swaps in with ``replace_puzzles``.
    """

    def __init__(self, epoch: datetime.datetime, timezone: datetime.tzinfo,
                 puzzles: Sequence[str] = (),
                 clock: Callable[[], datetime.datetime] = utc_now):
        self.timezone = timezone
        self.epoch = _to_zone(epoch, timezone)
        self.clock = clock
        self._puzzles: Tuple[str, ...] = tuple(word.upper() for word in puzzles)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config, puzzles: Sequence[str] = (),
                    clock: Callable[[], datetime.datetime] = utc_now) -> "PuzzleIndexer":
        tz = ZoneInfo(config.CANONICAL_TIMEZONE)
        return cls(parse_epoch(config.PUZZLE_EPOCH, tz), tz, puzzles, clock)

    @property
    def puzzles(self) -> Tuple[str, ...]:
        return self._puzzles

    def replace_puzzles(self, puzzles: Sequence[str]) -> None:
        """
        Swap in a refreshed puzzle list snapshot.

        Raises:
            EmptyPuzzleList: If the new list is empty; the old snapshot is kept
        """
        snapshot = tuple(word.upper() for word in puzzles)
        if not snapshot:
            raise EmptyPuzzleList("Refusing to replace puzzle list with an empty list")
        with self._lock:
            changed = len(snapshot) != len(self._puzzles)
            self._puzzles = snapshot
        if changed:
            game_logger.logger.info(f"Puzzle list refreshed: {len(snapshot)} puzzles")

    def puzzle_number_for(self, instant: datetime.datetime) -> int:
        return puzzle_number_for_instant(instant, self.epoch, self.timezone)

    def current_puzzle_number(self, now: Optional[datetime.datetime] = None) -> int:
        """Today's puzzle number, which is also the maximum playable puzzle number."""
        return self.puzzle_number_for(now or self.clock())

    def target_word(self, puzzle_number: int) -> str:
        return puzzle_content(puzzle_number, self._puzzles)

    @property
    def word_length(self) -> Optional[int]:
        puzzles = self._puzzles
        return len(puzzles[0]) if puzzles else None
