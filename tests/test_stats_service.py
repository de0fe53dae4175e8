import pytest

from skyrdle.services.stats_service import StatsService

from conftest import LOSING_GUESSES


@pytest.fixture
def stats(store):
    return StatsService(store)


def test_player_stats_streaks(stats, finish_game, game_service):
    finish_game('playerX', 1, ['APPLE'])
    finish_game('playerX', 2, ['STARE', 'BRAVE'])
    finish_game('playerX', 3, LOSING_GUESSES)
    finish_game('playerX', 4, ['DRIVE'])
    finish_game('playerX', 5, ['SPEED', 'STARE', 'EAGLE'])
    game_service.play('playerX', 6, 'STARE')

    result = stats.player_stats('playerX')
    assert result.games_won == 4
    assert result.games_lost == 1
    assert result.current_streak == 2
    assert result.max_streak == 2
    assert result.average_score == 1.75


def test_player_stats_for_new_player(stats):
    assert stats.player_stats('nobody').to_dict() == {
        'gamesWon': 0, 'gamesLost': 0, 'averageScore': 0.0, 'currentStreak': 0, 'maxStreak': 0
    }


def test_puzzle_stats(stats, finish_game):
    finish_game('playerX', 7, ['STARE', 'CRANE'])
    finish_game('playerY', 7, ['CRANE'])
    finish_game('playerZ', 7, LOSING_GUESSES)

    assert stats.puzzle_stats(7) == {'gamesWon': 2, 'gamesLost': 1, 'avgScore': 1.5}
    assert stats.puzzle_stats(6) == {'gamesWon': 0, 'gamesLost': 0, 'avgScore': 0}


def test_leaderboard_orders_by_streak_then_wins(stats, finish_game):
    finish_game('playerX', 6, ['LEMON'])
    finish_game('playerX', 7, ['CRANE'])
    finish_game('playerY', 5, ['EAGLE'])
    finish_game('playerY', 6, LOSING_GUESSES)
    finish_game('playerZ', 7, ['CRANE'])

    board = stats.leaderboard()
    assert [row['did'] for row in board] == ['playerX', 'playerZ', 'playerY']
    assert board[0]['currentStreak'] == 2
    assert len(stats.leaderboard(limit=1)) == 1
