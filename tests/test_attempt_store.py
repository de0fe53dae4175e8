import datetime
from unittest.mock import MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from skyrdle.models.game import Attempt, CustomAttempt, CustomPuzzle
from skyrdle.services.attempt_store import AttemptStore
from skyrdle.utils.errors import AttemptConflict


@pytest.fixture
def mongo_store():
    return AttemptStore(client=MagicMock())


def test_first_save_inserts(mongo_store):
    attempt = Attempt('playerX', 7, 'CRANE')
    mongo_store.save_attempt(attempt, 0)

    doc = mongo_store.games.insert_one.call_args[0][0]
    assert doc['did'] == 'playerX'
    assert doc['gameNumber'] == 7
    assert doc['revision'] == 1
    assert attempt.revision == 1


def test_duplicate_insert_is_a_conflict(mongo_store):
    mongo_store.games.insert_one.side_effect = DuplicateKeyError('E11000 duplicate key')
    attempt = Attempt('playerX', 7, 'CRANE')

    with pytest.raises(AttemptConflict):
        mongo_store.save_attempt(attempt, 0)
    assert attempt.revision == 0


def test_update_is_guarded_by_revision(mongo_store):
    mongo_store.games.replace_one.return_value = MagicMock(matched_count=1)
    attempt = Attempt('playerX', 7, 'CRANE', revision=3, stored=True)

    mongo_store.save_attempt(attempt, 3)

    query, doc = mongo_store.games.replace_one.call_args[0]
    assert query == {'did': 'playerX', 'gameNumber': 7, 'revision': 3}
    assert doc['revision'] == 4
    assert attempt.revision == 4


def test_stale_update_is_a_conflict(mongo_store):
    mongo_store.games.replace_one.return_value = MagicMock(matched_count=0)
    attempt = Attempt('playerX', 7, 'CRANE', revision=3, stored=True)

    with pytest.raises(AttemptConflict):
        mongo_store.save_attempt(attempt, 3)
    assert attempt.revision == 3


def test_document_without_revision_can_be_updated(mongo_store):
    mongo_store.games.find_one.return_value = {
        'did': 'playerX', 'gameNumber': 7, 'targetWord': 'CRANE',
        'guesses': [], 'status': 'Playing'
    }
    mongo_store.games.replace_one.return_value = MagicMock(matched_count=1)

    attempt = mongo_store.find_attempt('playerX', 7)
    assert attempt.revision == 0
    mongo_store.save_attempt(attempt, attempt.revision)

    mongo_store.games.insert_one.assert_not_called()
    query, doc = mongo_store.games.replace_one.call_args[0]
    assert query == {'did': 'playerX', 'gameNumber': 7, 'revision': {'$in': [0, None]}}
    assert doc['revision'] == 1
    assert attempt.revision == 1


def test_custom_attempt_update_is_guarded_by_revision(mongo_store):
    mongo_store.custom_participants.replace_one.return_value = MagicMock(matched_count=0)
    attempt = CustomAttempt('Ab12Cd34', 'playerX', 'LEMON', revision=1, stored=True)

    with pytest.raises(AttemptConflict):
        mongo_store.save_custom_attempt(attempt, 1)


def test_insert_custom_puzzle_reports_collisions(mongo_store):
    puzzle = CustomPuzzle('Ab12Cd34', 'did:plc:creator', 'LEMON')
    assert mongo_store.insert_custom_puzzle(puzzle) is True

    mongo_store.custom_games.insert_one.side_effect = DuplicateKeyError('E11000 duplicate key')
    assert mongo_store.insert_custom_puzzle(puzzle) is False


def test_find_attempt_missing(mongo_store):
    mongo_store.games.find_one.return_value = None
    assert mongo_store.find_attempt('playerX', 7) is None


def test_find_custom_attempt_takes_target_from_puzzle(mongo_store):
    mongo_store.custom_participants.find_one.return_value = {
        'customGameId': 'Ab12Cd34', 'did': 'playerX', 'guesses': [], 'status': 'Playing', 'revision': 1
    }
    puzzle = CustomPuzzle('Ab12Cd34', 'did:plc:creator', 'LEMON')

    attempt = mongo_store.find_custom_attempt(puzzle, 'playerX')
    assert attempt.target_word == 'LEMON'
    assert attempt.revision == 1


def test_naive_timestamps_are_read_as_utc(mongo_store):
    mongo_store.games.find_one.return_value = {
        'did': 'playerX', 'gameNumber': 7, 'targetWord': 'CRANE', 'guesses': [],
        'status': 'Won', 'completedAt': datetime.datetime(2025, 6, 19, 16, 0), 'revision': 2
    }

    attempt = mongo_store.find_attempt('playerX', 7)
    assert attempt.completed_at.tzinfo is not None
    assert attempt.completed_at.utcoffset() == datetime.timedelta(0)


def test_load_puzzle_words_in_schedule_order(mongo_store):
    mongo_store.words.find.return_value.sort.return_value = [{'word': 'APPLE'}, {'word': 'BRAVE'}]
    assert mongo_store.load_puzzle_words() == ['APPLE', 'BRAVE']
    mongo_store.words.find.return_value.sort.assert_called_once_with('gameNumber', 1)
