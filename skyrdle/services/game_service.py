"""
Game Service

Owns the lifecycle of daily and custom attempts: Playing -> Won or Lost.

Guess submission validates state, length and vocabulary before touching the
attempt, so a rejected guess never mutates anything. The terminal transition
stamps ``completed_at`` and, for daily attempts, the score commitment, both
exactly once. Mutations of one natural key are serialized in-process and
guarded across processes by the store's revision compare-and-swap.
"""

import datetime
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Hashable, List, Optional, Union

from ..config.game_settings import DEFAULT_WORD_LENGTH, MAX_GUESSES
from ..models.game import Attempt, CustomAttempt, CustomPuzzle, GameStatus, Guess
from ..utils.errors import (
    AttemptConflict, AttemptNotFound, CustomPuzzleNotFound, GameAlreadyOver,
    InvalidGuessLength, InvalidPuzzleNumber, WordNotAccepted
)
from ..utils.game_logger import game_logger
from ..utils.helpers import generate_custom_puzzle_id, normalize_word, utc_now
from .evaluator import evaluate
from .puzzle_indexer import PuzzleIndexer
from .score_commitment import commitment_for
from .vocabulary import Vocabulary

_CUSTOM_ID_ATTEMPTS = 5


class KeyedLocks:
    """Registry of per-key mutexes; entries are dropped once nobody holds or waits on them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, List] = {}

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class GameService:
    """
    Core game service.

    This class handles:
    - Lazy creation of attempts keyed by (player, puzzle number)
    - Rejection of future or malformed puzzle numbers
    - Guess validation, evaluation and the Playing -> Won/Lost transition
    - Score commitments on terminal daily attempts
    - Custom puzzles authored by players
    """

    def __init__(self, store, indexer: PuzzleIndexer, vocabulary: Vocabulary,
                 max_guesses: int = MAX_GUESSES,
                 clock: Callable[[], datetime.datetime] = utc_now):
        self.store = store
        self.indexer = indexer
        self.vocabulary = vocabulary
        self.max_guesses = max_guesses
        self.clock = clock
        self._locks = KeyedLocks()

    # Daily puzzles

    def current_puzzle_number(self) -> int:
        return self.indexer.current_puzzle_number(self.clock())

    def _validate_puzzle_number(self, puzzle_number) -> int:
        if isinstance(puzzle_number, bool) or not isinstance(puzzle_number, int) or puzzle_number <= 0:
            raise InvalidPuzzleNumber("Puzzle number must be a positive integer")
        if puzzle_number > self.current_puzzle_number():
            raise InvalidPuzzleNumber("Cannot access future games")
        return puzzle_number

    def get_or_create_attempt(self, player_id: str, puzzle_number: int) -> Attempt:
        """
        Return the player's attempt for a puzzle, creating it if needed.

        Never mutates an existing attempt.

        Raises:
            InvalidPuzzleNumber: If the number is not positive or is in the future
            EmptyPuzzleList: If no puzzles are loaded
        """
        puzzle_number = self._validate_puzzle_number(puzzle_number)

        attempt = self.store.find_attempt(player_id, puzzle_number)
        if attempt is not None:
            return attempt

        attempt = Attempt(
            player_id=player_id,
            puzzle_number=puzzle_number,
            target_word=self.indexer.target_word(puzzle_number)
        )
        try:
            self.store.save_attempt(attempt, 0)
        except AttemptConflict:
            # Another request created it first
            existing = self.store.find_attempt(player_id, puzzle_number)
            if existing is None:
                raise
            return existing
        return attempt

    def get_attempt(self, player_id: str, puzzle_number: int) -> Attempt:
        """
        Return an existing attempt without creating one.

        Raises:
            InvalidPuzzleNumber: If the number is not positive or is in the future
            AttemptNotFound: If the player has not started this puzzle
        """
        puzzle_number = self._validate_puzzle_number(puzzle_number)
        attempt = self.store.find_attempt(player_id, puzzle_number)
        if attempt is None:
            raise AttemptNotFound()
        return attempt

    def get_today_attempt(self, player_id: str) -> Attempt:
        return self.get_or_create_attempt(player_id, self.current_puzzle_number())

    def submit_guess(self, attempt: Attempt, guess_word: str) -> Attempt:
        """
        Apply one guess to a daily attempt in memory.

        Args:
            attempt: Attempt to advance
            guess_word: The guessed word (any case)

        Returns:
            The same attempt, updated

        Raises:
            GameAlreadyOver: If the attempt is already Won or Lost
            InvalidGuessLength: If the guess length differs from the target's
            WordNotAccepted: If the guess is not in the vocabulary
        """
        self._apply_guess(attempt, guess_word)
        if attempt.status.is_terminal:
            attempt.score_commitment = commitment_for(attempt)
        return attempt

    def play(self, player_id: str, puzzle_number: int, guess_word: str) -> Attempt:
        """
        Submit a guess for a daily puzzle and persist the result.

        Raises:
            AttemptConflict: If another process saved the attempt in between
        """
        puzzle_number = self._validate_puzzle_number(puzzle_number)

        with self._locks.hold(('daily', player_id, puzzle_number)):
            attempt = self.get_or_create_attempt(player_id, puzzle_number)
            expected_revision = attempt.revision
            self.submit_guess(attempt, guess_word)
            self.store.save_attempt(attempt, expected_revision)

        self._log_transition(puzzle_number, attempt)
        return attempt

    # Custom puzzles

    def _custom_word_length(self) -> int:
        return self.indexer.word_length or DEFAULT_WORD_LENGTH

    def create_custom_puzzle(self, creator_id: str, word: str) -> CustomPuzzle:
        """
        Create a player-authored puzzle.

        Raises:
            InvalidGuessLength: If the word is not the deployment's word length
            WordNotAccepted: If the word is not in the vocabulary
        """
        word = normalize_word(word)
        expected_length = self._custom_word_length()
        if len(word) != expected_length:
            raise InvalidGuessLength(f"Custom words must be exactly {expected_length} letters")
        if not word.isalpha() or not self.vocabulary.is_accepted(word):
            raise WordNotAccepted()

        for _ in range(_CUSTOM_ID_ATTEMPTS):
            puzzle = CustomPuzzle(
                custom_puzzle_id=generate_custom_puzzle_id(),
                creator_id=creator_id,
                target_word=word,
                created_at=self.clock()
            )
            if self.store.insert_custom_puzzle(puzzle):
                game_logger.log_game_event(puzzle.custom_puzzle_id, 'custom_game_created', creator_id)
                return puzzle

        raise RuntimeError("Could not allocate a unique custom puzzle id")

    def get_custom_puzzle(self, custom_puzzle_id: str) -> CustomPuzzle:
        puzzle = self.store.find_custom_puzzle(custom_puzzle_id)
        if puzzle is None:
            raise CustomPuzzleNotFound()
        return puzzle

    def get_or_create_custom_attempt(self, custom_puzzle_id: str, player_id: str) -> CustomAttempt:
        puzzle = self.get_custom_puzzle(custom_puzzle_id)

        attempt = self.store.find_custom_attempt(puzzle, player_id)
        if attempt is not None:
            return attempt

        attempt = CustomAttempt(
            custom_puzzle_id=puzzle.custom_puzzle_id,
            player_id=player_id,
            target_word=puzzle.target_word
        )
        try:
            self.store.save_custom_attempt(attempt, 0)
        except AttemptConflict:
            existing = self.store.find_custom_attempt(puzzle, player_id)
            if existing is None:
                raise
            return existing
        return attempt

    def get_custom_attempt(self, custom_puzzle_id: str, player_id: str) -> CustomAttempt:
        puzzle = self.get_custom_puzzle(custom_puzzle_id)
        attempt = self.store.find_custom_attempt(puzzle, player_id)
        if attempt is None:
            raise AttemptNotFound()
        return attempt

    def play_custom(self, custom_puzzle_id: str, player_id: str, guess_word: str) -> CustomAttempt:
        """Submit a guess for a custom puzzle and persist the result."""
        with self._locks.hold(('custom', custom_puzzle_id, player_id)):
            attempt = self.get_or_create_custom_attempt(custom_puzzle_id, player_id)
            expected_revision = attempt.revision
            self._apply_guess(attempt, guess_word)
            self.store.save_custom_attempt(attempt, expected_revision)

        self._log_transition(custom_puzzle_id, attempt)
        return attempt

    # State machine

    def _apply_guess(self, attempt: Union[Attempt, CustomAttempt], guess_word: str) -> None:
        if attempt.status.is_terminal or len(attempt.guesses) >= self.max_guesses:
            raise GameAlreadyOver()

        word = normalize_word(guess_word)
        target_length = len(attempt.target_word)
        if len(word) != target_length:
            raise InvalidGuessLength(f"Guess must be exactly {target_length} letters")
        if not self.vocabulary.is_accepted(word):
            raise WordNotAccepted()

        verdicts = evaluate(word, attempt.target_word)
        guess = Guess(letters=tuple(word), evaluation=tuple(verdicts))
        attempt.guesses.append(guess)

        if guess.is_solved:
            attempt.status = GameStatus.WON
        elif len(attempt.guesses) >= self.max_guesses:
            attempt.status = GameStatus.LOST

        if attempt.status.is_terminal:
            attempt.completed_at = self.clock()

    def _log_transition(self, puzzle_ref, attempt: Union[Attempt, CustomAttempt]) -> None:
        if attempt.status is GameStatus.WON:
            game_logger.log_game_event(puzzle_ref, 'game_won', attempt.player_id,
                                       guesses_used=len(attempt.guesses))
        elif attempt.status is GameStatus.LOST:
            game_logger.log_game_event(puzzle_ref, 'game_lost', attempt.player_id,
                                       guesses_used=len(attempt.guesses))


# Global service instance
_game_service: Optional[GameService] = None


def get_game_service() -> Optional[GameService]:
    """Get the global game service instance."""
    return _game_service


def initialize_game_service(store, indexer: PuzzleIndexer, vocabulary: Vocabulary,
                            **kwargs) -> GameService:
    """Initialize the global game service instance."""
    global _game_service
    _game_service = GameService(store, indexer, vocabulary, **kwargs)
    return _game_service
