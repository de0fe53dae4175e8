"""
Services Package

Contains all business logic and service classes.
"""

from .auth_service import AuthService, get_auth_service
from .game_service import GameService, get_game_service
from .mirror_service import MirrorService, get_mirror_service
from .stats_service import StatsService, get_stats_service

__all__ = [
    'AuthService', 'get_auth_service',
    'GameService', 'get_game_service',
    'MirrorService', 'get_mirror_service',
    'StatsService', 'get_stats_service'
]
