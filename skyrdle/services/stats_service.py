"""
Stats Service

Read-side rollups over stored attempts: per-player streaks and averages,
per-puzzle win/loss counts, and the streak leaderboard.
"""

from typing import Dict, List, Optional

from ..models.game import GameStatus
from ..models.user import PlayerStats


class StatsService:
    def __init__(self, store):
        self.store = store

    def player_stats(self, player_id: str) -> PlayerStats:
        """
        Stats over a player's attempts in puzzle order.

        The current streak counts consecutive wins backwards from the most
        recent finished attempt; attempts still being played are ignored.
        """
        attempts = [a for a in self.store.find_attempts_for_player(player_id) if a.status.is_terminal]
        attempts.sort(key=lambda a: a.puzzle_number)

        stats = PlayerStats()
        streak = 0
        total_guesses = 0
        for attempt in attempts:
            if attempt.status is GameStatus.WON:
                stats.games_won += 1
                total_guesses += len(attempt.guesses)
                streak += 1
                stats.max_streak = max(stats.max_streak, streak)
            else:
                stats.games_lost += 1
                streak = 0

        stats.current_streak = streak
        if stats.games_won:
            stats.average_score = round(total_guesses / stats.games_won, 2)
        return stats

    def puzzle_stats(self, puzzle_number: int) -> Dict[str, float]:
        attempts = self.store.find_attempts_for_puzzle(puzzle_number)
        won = [a for a in attempts if a.status is GameStatus.WON]
        lost = [a for a in attempts if a.status is GameStatus.LOST]
        avg = round(sum(len(a.guesses) for a in won) / len(won), 2) if won else 0
        return {'gamesWon': len(won), 'gamesLost': len(lost), 'avgScore': avg}

    def leaderboard(self, limit: Optional[int] = 50) -> List[Dict]:
        rows = []
        for player_id in self.store.distinct_players():
            stats = self.player_stats(player_id)
            rows.append({'did': player_id, **stats.to_dict()})
        rows.sort(key=lambda row: (-row['currentStreak'], -row['gamesWon']))
        return rows[:limit] if limit else rows


# Global service instance
_stats_service: Optional[StatsService] = None


def get_stats_service() -> Optional[StatsService]:
    return _stats_service


def initialize_stats_service(store) -> StatsService:
    global _stats_service
    _stats_service = StatsService(store)
    return _stats_service
