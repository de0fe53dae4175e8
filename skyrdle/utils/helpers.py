"""
Helper Functions

Contains utility functions used throughout the application.
"""

import datetime
import secrets
import string
from typing import Dict

from ..config.game_settings import CUSTOM_PUZZLE_ID_LENGTH

_ID_ALPHABET = string.ascii_letters + string.digits


def utc_now() -> datetime.datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def normalize_word(word: str) -> str:
    return word.strip().upper()


def generate_custom_puzzle_id(length: int = CUSTOM_PUZZLE_ID_LENGTH) -> str:
    """Random alphanumeric identifier for a custom puzzle, e.g. ``A1b2C3d4``."""
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def get_user_identity(request_obj, player_id=None) -> Dict[str, str]:
    """Extract user identity information from request."""
    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'

    return {
        'user_ip': user_ip,
        'player_id': player_id
    }
