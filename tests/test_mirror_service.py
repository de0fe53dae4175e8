import pytest

from skyrdle.services.mirror_service import MirrorService
from skyrdle.services.score_commitment import commit

from conftest import LOSING_GUESSES, FakeRepositoryClient

COLLECTION = 'farm.smol.games.skyrdle.player.score'


@pytest.fixture
def repository():
    return FakeRepositoryClient()


@pytest.fixture
def mirror(store, repository, clock):
    sleeps = []
    service = MirrorService(store, repository, COLLECTION, clock=clock, sleep=sleeps.append)
    service.sleeps = sleeps
    return service


def test_finished_games_are_mirrored_once(mirror, repository, store, finish_game, clock):
    finish_game('playerX', 7, ['STARE', 'CRANE'])
    finish_game('playerY', 7, LOSING_GUESSES)
    finish_game('playerY', 1, ['APPLE'])

    assert mirror.sync_once() == {'synced': 3, 'failed': 0}
    assert len(repository.records) == 3
    assert mirror.sleeps == [0.5, 0.5]

    record = repository.records[(COLLECTION, commit('playerX', 7, 2))]
    assert record == {
        'playerDid': 'playerX',
        'gameNumber': 7,
        'score': 2,
        'timestamp': clock.now.isoformat(),
        'hash': commit('playerX', 7, 2),
        'isWin': True
    }
    lost = repository.records[(COLLECTION, commit('playerY', 7, -1))]
    assert lost['score'] == -1
    assert lost['isWin'] is False

    assert all(a.mirrored for a in store.attempts.values())
    assert mirror.sync_once() == {'synced': 0, 'failed': 0}
    assert len(repository.create_calls) == 3


def test_unfinished_games_are_not_mirrored(mirror, repository, game_service):
    game_service.play('playerX', 7, 'STARE')
    assert mirror.sync_once() == {'synced': 0, 'failed': 0}
    assert repository.create_calls == []


def test_existing_record_counts_as_mirrored(mirror, repository, store, finish_game):
    attempt = finish_game('playerX', 7, ['CRANE'])
    repository.records[(COLLECTION, attempt.score_commitment)] = {'hash': attempt.score_commitment}

    assert mirror.sync_once() == {'synced': 1, 'failed': 0}
    assert store.find_attempt('playerX', 7).mirrored
    assert len(repository.records) == 1


def test_failed_create_stays_pending(mirror, repository, store, finish_game):
    finish_game('playerX', 7, ['CRANE'])
    repository.fail_creates = True

    assert mirror.sync_once() == {'synced': 0, 'failed': 1}
    assert not store.find_attempt('playerX', 7).mirrored

    repository.fail_creates = False
    assert mirror.sync_once() == {'synced': 1, 'failed': 0}


def test_commitment_mismatch_is_refused(mirror, repository, store, finish_game):
    finish_game('playerX', 7, ['CRANE'])
    store.attempts[('playerX', 7)].score_commitment = commit('playerX', 7, 1) + 'tampered'

    assert mirror.sync_once() == {'synced': 0, 'failed': 1}
    assert repository.create_calls == []
    assert not store.find_attempt('playerX', 7).mirrored


def test_overlapping_runs_are_skipped(mirror, repository, finish_game):
    finish_game('playerX', 7, ['CRANE'])

    mirror._running.acquire()
    try:
        assert mirror.sync_once() is None
    finally:
        mirror._running.release()

    assert repository.create_calls == []
    assert mirror.sync_once() == {'synced': 1, 'failed': 0}
