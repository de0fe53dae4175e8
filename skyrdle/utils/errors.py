"""
Error Taxonomy

Exceptions raised by the game core and its collaborators. Every error carries
a machine-readable ``code`` and the HTTP status the controllers answer with.
"""


class SkyrdleError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code = 400
    code = 'error'

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self):
        return {'success': False, 'error': self.message, 'code': self.code}


# Input validation errors (client-caused, recoverable)

class ValidationError(SkyrdleError):
    """Invalid input."""
    status_code = 400
    code = 'invalid_input'


class InvalidPuzzleNumber(ValidationError):
    """Puzzle number must be a positive integer not beyond today's puzzle."""
    code = 'invalid_puzzle_number'


class InvalidGuessLength(ValidationError):
    """Guess length does not match the puzzle word length."""
    code = 'invalid_guess_length'


class WordNotAccepted(ValidationError):
    """Word not in word list."""
    code = 'word_not_accepted'


class InvalidRequest(ValidationError):
    """Malformed request body."""
    code = 'invalid_request'


class InvalidGameStatus(ValidationError):
    """Unknown game status."""
    code = 'invalid_game_status'


# State conflict errors (stale view or duplicate submission)

class StateConflictError(SkyrdleError):
    """Attempt state changed; refetch and retry."""
    status_code = 409
    code = 'state_conflict'


class GameAlreadyOver(StateConflictError):
    """Game is already over (Won or Lost)."""
    code = 'game_already_over'


class AttemptConflict(StateConflictError):
    """Attempt was modified concurrently; refetch and retry."""
    code = 'attempt_conflict'


class GameInProgress(StateConflictError):
    """Game is still in progress."""
    code = 'game_in_progress'


class NotFoundError(SkyrdleError):
    """Resource not found."""
    status_code = 404
    code = 'not_found'


class CustomPuzzleNotFound(NotFoundError):
    """Custom game not found."""
    code = 'custom_puzzle_not_found'


class AttemptNotFound(NotFoundError):
    """Game has not been started."""
    code = 'attempt_not_found'


class AuthenticationError(SkyrdleError):
    """Authentication required."""
    status_code = 401
    code = 'unauthorized'


class UpstreamUnavailable(SkyrdleError):
    """Repository host is unavailable."""
    status_code = 502
    code = 'upstream_unavailable'


# Configuration errors (fatal, not recoverable at request time)

class ConfigurationError(SkyrdleError):
    """Service is misconfigured."""
    status_code = 503
    code = 'configuration_error'


class EmptyPuzzleList(ConfigurationError):
    """Puzzle list is empty."""
    code = 'empty_puzzle_list'
