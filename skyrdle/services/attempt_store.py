"""
Attempt Store

MongoDB persistence for daily attempts, custom puzzles and their attempts,
and the scheduled puzzle words.

Every attempt document carries a ``revision`` counter. Saves are
compare-and-swap on that counter so two writers working from the same read
can never both succeed.
"""

from typing import Iterable, List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError
from pymongo.server_api import ServerApi

from ..models.game import Attempt, CustomAttempt, CustomPuzzle, GameStatus
from ..utils.errors import AttemptConflict
from ..utils.game_logger import game_logger

_TERMINAL = [GameStatus.WON.value, GameStatus.LOST.value]


class AttemptStore:
    """
    Persistence collaborator backed by MongoDB.

    Collections:
    - games: daily attempts, unique on (did, gameNumber)
    - custom_games: custom puzzles, unique on customGameId
    - custom_game_participants: custom attempts, unique on (customGameId, did)
    - words: scheduled puzzle words, unique on gameNumber
    """

    def __init__(self, mongo_uri: Optional[str] = None, db_name: str = 'skyrdle',
                 client: Optional[MongoClient] = None):
        """
        Initialize the store with a MongoDB connection.

        Args:
            mongo_uri: MongoDB connection string (ignored when client is given)
            db_name: Database name
            client: Pre-built client, mainly for tests
        """
        self.client = client or MongoClient(mongo_uri, server_api=ServerApi('1'), tz_aware=True)
        self.db = self.client[db_name]
        self.games = self.db.games
        self.custom_games = self.db.custom_games
        self.custom_participants = self.db.custom_game_participants
        self.words = self.db.words

    def ping(self) -> None:
        """Raise if the database is unreachable."""
        self.client.admin.command('ping')

    def ensure_indexes(self) -> None:
        self.games.create_index([("did", ASCENDING), ("gameNumber", ASCENDING)], unique=True)
        self.games.create_index([("status", ASCENDING), ("syncedToAtproto", ASCENDING)])
        self.custom_games.create_index("customGameId", unique=True)
        self.custom_participants.create_index(
            [("customGameId", ASCENDING), ("did", ASCENDING)], unique=True
        )
        self.words.create_index("gameNumber", unique=True)

    # Puzzle words

    def load_puzzle_words(self) -> List[str]:
        """Scheduled puzzle words ordered by puzzle number."""
        return [doc['word'] for doc in self.words.find({}, {'word': 1}).sort("gameNumber", ASCENDING)]

    # Daily attempts

    def find_attempt(self, player_id: str, puzzle_number: int) -> Optional[Attempt]:
        doc = self.games.find_one({"did": player_id, "gameNumber": puzzle_number})
        return Attempt.from_document(doc) if doc else None

    def save_attempt(self, attempt: Attempt, expected_revision: int) -> Attempt:
        """
        Upsert an attempt by its natural key, guarded by its revision.

        Args:
            attempt: Attempt to write
            expected_revision: Revision the caller read before mutating

        Returns:
            The attempt, with its revision advanced

        Raises:
            AttemptConflict: If another writer saved first
        """
        return self._compare_and_swap(
            self.games, {"did": attempt.player_id, "gameNumber": attempt.puzzle_number},
            attempt, expected_revision
        )

    def find_unmirrored_attempts(self) -> List[Attempt]:
        cursor = self.games.find({"status": {"$in": _TERMINAL}, "syncedToAtproto": {"$ne": True}})
        return [Attempt.from_document(doc) for doc in cursor]

    def mark_mirrored(self, attempt: Attempt) -> None:
        # Mirroring status is outside the revision protocol; terminal attempts no longer change.
        self.games.update_one(
            {"did": attempt.player_id, "gameNumber": attempt.puzzle_number},
            {"$set": {"syncedToAtproto": True}}
        )
        attempt.mirrored = True

    def find_attempts_for_player(self, player_id: str) -> List[Attempt]:
        cursor = self.games.find({"did": player_id}).sort("gameNumber", ASCENDING)
        return [Attempt.from_document(doc) for doc in cursor]

    def find_attempts_for_puzzle(self, puzzle_number: int) -> List[Attempt]:
        return [Attempt.from_document(doc) for doc in self.games.find({"gameNumber": puzzle_number})]

    def distinct_players(self) -> Iterable[str]:
        return self.games.distinct("did")

    # Custom puzzles

    def find_custom_puzzle(self, custom_puzzle_id: str) -> Optional[CustomPuzzle]:
        doc = self.custom_games.find_one({"customGameId": custom_puzzle_id})
        return CustomPuzzle.from_document(doc) if doc else None

    def insert_custom_puzzle(self, puzzle: CustomPuzzle) -> bool:
        """Insert a new custom puzzle; False when the id is already taken."""
        try:
            self.custom_games.insert_one(puzzle.to_document())
        except DuplicateKeyError:
            game_logger.logger.warning(f"Custom puzzle id collision: {puzzle.custom_puzzle_id}")
            return False
        return True

    def find_custom_attempt(self, puzzle: CustomPuzzle, player_id: str) -> Optional[CustomAttempt]:
        doc = self.custom_participants.find_one(
            {"customGameId": puzzle.custom_puzzle_id, "did": player_id}
        )
        return CustomAttempt.from_document(doc, puzzle.target_word) if doc else None

    def save_custom_attempt(self, attempt: CustomAttempt, expected_revision: int) -> CustomAttempt:
        """Compare-and-swap upsert of a custom attempt; see ``save_attempt``."""
        return self._compare_and_swap(
            self.custom_participants, {"customGameId": attempt.custom_puzzle_id, "did": attempt.player_id},
            attempt, expected_revision
        )

    def _compare_and_swap(self, collection, key: dict, attempt, expected_revision: int):
        doc = attempt.to_document()
        doc['revision'] = expected_revision + 1

        if not attempt.stored:
            try:
                collection.insert_one(doc)
            except DuplicateKeyError:
                raise AttemptConflict()
        else:
            # Documents written before revisions existed have no revision field
            current = expected_revision if expected_revision else {"$in": [0, None]}
            result = collection.replace_one({**key, "revision": current}, doc)
            if result.matched_count == 0:
                raise AttemptConflict()

        attempt.revision = expected_revision + 1
        attempt.stored = True
        return attempt
