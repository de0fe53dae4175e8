import copy
import datetime
import os
import tempfile
import threading

os.environ.setdefault('LOG_DIR', os.path.join(tempfile.gettempdir(), 'skyrdle-test-logs'))

import pytest
from zoneinfo import ZoneInfo

from skyrdle import create_app
from skyrdle.config import TestingConfig
from skyrdle.models.game import GameStatus
from skyrdle.services import auth_service as auth_module
from skyrdle.services import game_service as game_module
from skyrdle.services import stats_service as stats_module
from skyrdle.services.atproto_client import AtprotoError, AuthenticationRequired
from skyrdle.services.game_service import GameService
from skyrdle.services.puzzle_indexer import PuzzleIndexer
from skyrdle.services.vocabulary import Vocabulary
from skyrdle.utils.errors import AttemptConflict

EASTERN = ZoneInfo('America/New_York')
EPOCH = datetime.datetime(2025, 6, 13, tzinfo=EASTERN)

# Puzzle #7 is CRANE
PUZZLES = ['APPLE', 'BRAVE', 'SPACE', 'DRIVE', 'EAGLE', 'LEMON', 'CRANE']

WORDS = [
    'APPLE', 'BRAVE', 'SPACE', 'DRIVE', 'EAGLE', 'LEMON', 'CRANE', 'STARE',
    'SPEED', 'BLIND', 'FIGHT', 'MOUSE', 'TOUGH', 'WORLD', 'QUICK', 'PLACE',
]

LOSING_GUESSES = ['BLIND', 'FIGHT', 'MOUSE', 'TOUGH', 'WORLD', 'QUICK']


class FixedClock:
    """Settable clock; starts at noon Eastern on the day of puzzle #7."""

    def __init__(self, now=None):
        self.now = now or datetime.datetime(2025, 6, 19, 12, 0, tzinfo=EASTERN)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + datetime.timedelta(**kwargs)


class InMemoryAttemptStore:
    """Fake of AttemptStore with the same compare-and-swap contract."""

    def __init__(self, puzzle_words=()):
        self.puzzle_words = list(puzzle_words)
        self.attempts = {}
        self.custom_puzzles = {}
        self.custom_attempts = {}
        self._lock = threading.Lock()

    def load_puzzle_words(self):
        return list(self.puzzle_words)

    def find_attempt(self, player_id, puzzle_number):
        with self._lock:
            attempt = self.attempts.get((player_id, puzzle_number))
            return copy.deepcopy(attempt)

    def save_attempt(self, attempt, expected_revision):
        with self._lock:
            stored = self.attempts.get(attempt.key)
            if (stored is not None) != attempt.stored:
                raise AttemptConflict()
            if stored is not None and stored.revision != expected_revision:
                raise AttemptConflict()
            attempt.revision = expected_revision + 1
            attempt.stored = True
            self.attempts[attempt.key] = copy.deepcopy(attempt)
            return attempt

    def find_unmirrored_attempts(self):
        with self._lock:
            return [copy.deepcopy(a) for a in self.attempts.values()
                    if a.status.is_terminal and not a.mirrored]

    def mark_mirrored(self, attempt):
        with self._lock:
            self.attempts[attempt.key].mirrored = True
        attempt.mirrored = True

    def find_attempts_for_player(self, player_id):
        with self._lock:
            found = [copy.deepcopy(a) for a in self.attempts.values() if a.player_id == player_id]
        return sorted(found, key=lambda a: a.puzzle_number)

    def find_attempts_for_puzzle(self, puzzle_number):
        with self._lock:
            return [copy.deepcopy(a) for a in self.attempts.values() if a.puzzle_number == puzzle_number]

    def distinct_players(self):
        with self._lock:
            return sorted({a.player_id for a in self.attempts.values()})

    def find_custom_puzzle(self, custom_puzzle_id):
        return copy.deepcopy(self.custom_puzzles.get(custom_puzzle_id))

    def insert_custom_puzzle(self, puzzle):
        with self._lock:
            if puzzle.custom_puzzle_id in self.custom_puzzles:
                return False
            self.custom_puzzles[puzzle.custom_puzzle_id] = copy.deepcopy(puzzle)
            return True

    def find_custom_attempt(self, puzzle, player_id):
        with self._lock:
            return copy.deepcopy(self.custom_attempts.get((puzzle.custom_puzzle_id, player_id)))

    def save_custom_attempt(self, attempt, expected_revision):
        with self._lock:
            stored = self.custom_attempts.get(attempt.key)
            if (stored is not None) != attempt.stored:
                raise AttemptConflict()
            if stored is not None and stored.revision != expected_revision:
                raise AttemptConflict()
            attempt.revision = expected_revision + 1
            attempt.stored = True
            self.custom_attempts[attempt.key] = copy.deepcopy(attempt)
            return attempt


class FakeIdentityClient:
    """Stands in for the repository host's createSession endpoint."""

    def __init__(self, accounts=None):
        self.accounts = accounts or {
            'alice.test': ('app-pass-1234', 'did:plc:alice')
        }

    def create_session_for(self, identifier, password):
        account = self.accounts.get(identifier)
        if account is None or account[0] != password:
            raise AuthenticationRequired('Invalid identifier or password', 401, 'AuthenticationRequired')
        return {'did': account[1], 'handle': identifier, 'accessJwt': 'a', 'refreshJwt': 'r'}


class FakeRepositoryClient:
    """In-memory repository with createRecord/getRecord semantics."""

    def __init__(self):
        self.records = {}
        self.create_calls = []
        self.fail_creates = False

    def create_record(self, collection, rkey, record):
        self.create_calls.append((collection, rkey, record))
        if self.fail_creates:
            raise AtprotoError('Upstream unavailable', 502)
        if (collection, rkey) in self.records:
            raise AtprotoError('Record already exists', 400, 'InvalidRequest')
        self.records[(collection, rkey)] = record
        return {'uri': f'at://did:plc:server/{collection}/{rkey}'}

    def get_record(self, collection, rkey):
        record = self.records.get((collection, rkey))
        return {'value': record} if record is not None else None


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return InMemoryAttemptStore(PUZZLES)


@pytest.fixture
def indexer(clock):
    return PuzzleIndexer(EPOCH, EASTERN, PUZZLES, clock)


@pytest.fixture
def vocabulary():
    return Vocabulary(WORDS)


@pytest.fixture
def game_service(store, indexer, vocabulary, clock):
    return GameService(store, indexer, vocabulary, clock=clock)


@pytest.fixture
def finish_game(game_service):
    """Play a puzzle to the end; returns the final attempt."""
    def _finish(player_id, puzzle_number, guesses):
        attempt = None
        for guess in guesses:
            attempt = game_service.play(player_id, puzzle_number, guess)
        assert attempt.status is not GameStatus.PLAYING
        return attempt
    return _finish


@pytest.fixture
def app(store, indexer, vocabulary, clock):
    game_module.initialize_game_service(store, indexer, vocabulary, clock=clock)
    stats_module.initialize_stats_service(store)
    auth_module.initialize_auth_service(TestingConfig.JWT_SECRET, FakeIdentityClient())

    app = create_app(TestingConfig)
    yield app

    game_module._game_service = None
    stats_module._stats_service = None
    auth_module._auth_service = None


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    token = auth_module.get_auth_service().issue_token('did:plc:alice', 'alice.test')
    return {'Authorization': f'Bearer {token}'}
