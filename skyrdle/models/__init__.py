"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import Attempt, CustomAttempt, CustomPuzzle, GameStatus, Guess, Verdict
from .requests import CustomPuzzleRequest, GuessRequest, LoginRequest, parse_puzzle_number
from .user import PlayerSession, PlayerStats

__all__ = [
    'Attempt', 'CustomAttempt', 'CustomPuzzle', 'GameStatus', 'Guess', 'Verdict',
    'CustomPuzzleRequest', 'GuessRequest', 'LoginRequest', 'parse_puzzle_number',
    'PlayerSession', 'PlayerStats'
]
