"""
Utilities Package

Contains utility functions, decorators, error types and helper modules.
"""

from .decorators import require_auth, retry_on_expired_session
from .helpers import get_user_identity, utc_now
from .game_logger import game_logger

__all__ = ['require_auth', 'retry_on_expired_session', 'get_user_identity', 'utc_now', 'game_logger']
