"""
Game Logger Module for Skyrdle Server

Structured JSON logging for HTTP traffic, game transitions and the
background jobs. One line per event, written to a dated file under LOG_DIR;
warnings and errors are echoed to the console.
"""

import logging
import json
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from ..config.app_config import Config
from .helpers import get_user_identity

EVENT_TYPES = ('USER_ACTION', 'SERVER_RESPONSE', 'GAME_EVENT', 'JOB_EVENT', 'ERROR')


class GameLogger:
    """
    Centralized logging system for the Skyrdle server.

    Every entry carries an ``event_type``, the ``action`` name, the acting
    party (remote address and player DID, or the job name) and free-form
    details. Session tokens never reach the log.
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        logger = logging.getLogger('skyrdle')
        logger.setLevel(self.level)

        # Re-initialisation (tests, reloads) must not stack handlers
        if logger.handlers:
            logger.handlers.clear()

        file_handler = logging.FileHandler(self._log_file(), encoding='utf-8')
        file_handler.setLevel(self.level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        return logger

    def _log_file(self) -> Path:
        return self.log_dir / f"skyrdle_{datetime.now().strftime('%Y-%m-%d')}.log"

    def _emit(self, event_type: str, action: str, actor: Dict[str, Any],
              details: Dict[str, Any], level: int = logging.INFO) -> None:
        entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'actor': actor,
            'details': details
        }
        self.logger.log(level, json.dumps(entry, ensure_ascii=False, default=str))

    def log_user_action(self, request, action: str, player_id: Optional[str] = None,
                        puzzle_ref=None, **kwargs):
        """
        Log an incoming API call.

        Args:
            request: Flask request object
            action: Handler name (e.g. 'submit_guess', 'create_custom_game')
            player_id: Authenticated player DID, if any
            puzzle_ref: Puzzle number or custom puzzle id, if any
            **kwargs: Extra details
        """
        details = {
            'puzzle': puzzle_ref,
            'endpoint': request.endpoint,
            'method': request.method,
            'path': request.path,
            **kwargs
        }
        self._emit('USER_ACTION', action, get_user_identity(request, player_id), details)

    def log_server_response(self, request, action: str, success: bool,
                            response_data: Dict[str, Any], player_id: Optional[str] = None,
                            puzzle_ref=None, **kwargs):
        """Log the envelope returned for an API call; failures are logged at ERROR."""
        details = {
            'puzzle': puzzle_ref,
            'success': success,
            'response': self._sanitize_response_data(response_data),
            **kwargs
        }
        self._emit('SERVER_RESPONSE', action, get_user_identity(request, player_id), details,
                   logging.INFO if success else logging.ERROR)

    def log_game_event(self, puzzle_ref, event: str, player_id: Optional[str], **kwargs):
        """Log a game transition such as 'game_won', 'game_lost' or 'custom_game_created'."""
        self._emit('GAME_EVENT', event, {'player_id': player_id}, {'puzzle': puzzle_ref, **kwargs})

    def log_job_event(self, job: str, event: str, **kwargs):
        self._emit('JOB_EVENT', event, {'job': job}, kwargs)

    def log_error(self, request, error: Exception, action: str,
                  player_id: Optional[str] = None, puzzle_ref=None):
        """Log an unexpected exception raised while handling an API call."""
        details = {
            'puzzle': puzzle_ref,
            'error_type': type(error).__name__,
            'error_message': str(error)
        }
        self._emit('ERROR', action, get_user_identity(request, player_id), details, logging.ERROR)

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask tokens and reduce game payloads to a short summary."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = dict(data)
        if 'token' in sanitized:
            sanitized['token'] = '***'

        game = sanitized.get('game')
        if isinstance(game, dict):
            sanitized['game'] = {
                'status': game.get('status'),
                'guesses_count': len(game.get('guesses', [])),
                'answer_revealed': game.get('targetWord') is not None
            }
        return sanitized

    def get_log_stats(self) -> Dict[str, Any]:
        """Count today's entries by event type, for the health endpoint."""
        log_file = self._log_file()
        if not log_file.exists():
            return {'error': 'No log file found for today'}

        counts = {event_type: 0 for event_type in EVENT_TYPES}
        total = 0
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    if not line.strip():
                        continue
                    total += 1
                    for event_type in EVENT_TYPES:
                        if f'"event_type": "{event_type}"' in line:
                            counts[event_type] += 1
                            break
            size_mb = round(log_file.stat().st_size / (1024 * 1024), 2)
        except OSError as e:
            return {'error': f'Failed to get stats: {e}'}

        return {
            'log_file': str(log_file),
            'file_size_mb': size_mb,
            'total_entries': total,
            **{event_type.lower(): count for event_type, count in counts.items()}
        }


# Global logger instance
game_logger = GameLogger(Config.LOG_DIR, Config.LOG_LEVEL)
