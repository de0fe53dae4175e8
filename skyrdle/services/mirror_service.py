"""
Mirror Service

Copies finished daily results into the score collection of the player-owned
repository. Records are keyed by the score commitment, so re-running the job
never duplicates a result: an already-present record counts as mirrored.
"""

import threading
import time
from typing import Dict, Optional

from ..config.game_settings import LOST_SCORE
from ..models.game import Attempt
from ..utils.game_logger import game_logger
from ..utils.helpers import utc_now
from .atproto_client import AtprotoClient, AtprotoError
from .score_commitment import commitment_for

JOB_NAME = 'mirror_scores'


class MirrorService:
    """
    Periodic catch-up job from the attempt store to the repository.

    Runs are non-overlapping: a call made while another run is in progress
    returns immediately.
    """

    def __init__(self, store, client: AtprotoClient, collection: str,
                 pause_seconds: float = 0.5, clock=utc_now, sleep=time.sleep):
        self.store = store
        self.client = client
        self.collection = collection
        self.pause_seconds = pause_seconds
        self.clock = clock
        self.sleep = sleep
        self._running = threading.Lock()

    def build_record(self, attempt: Attempt, digest: str) -> Dict:
        score = attempt.score
        return {
            'playerDid': attempt.player_id,
            'gameNumber': attempt.puzzle_number,
            'score': score,
            'timestamp': self.clock().isoformat(),
            'hash': digest,
            'isWin': score != LOST_SCORE
        }

    def mirror_attempt(self, attempt: Attempt) -> bool:
        """
        Mirror one finished attempt.

        Returns:
            True when the repository holds the record afterwards
        """
        digest = commitment_for(attempt)
        if digest is None:
            game_logger.logger.error(
                f"Refusing to mirror unfinished game {attempt.puzzle_number} for {attempt.player_id}"
            )
            return False
        if attempt.score_commitment != digest:
            game_logger.logger.error(
                f"Stored commitment mismatch for game {attempt.puzzle_number} of {attempt.player_id}; not mirroring"
            )
            return False

        try:
            self.client.create_record(self.collection, digest, self.build_record(attempt, digest))
        except AtprotoError as create_error:
            # An existing record under the same key means an earlier run got there
            try:
                existing = self.client.get_record(self.collection, digest)
            except AtprotoError as lookup_error:
                game_logger.logger.error(
                    f"Failed to mirror game {attempt.puzzle_number} for {attempt.player_id}: "
                    f"{create_error}; lookup failed: {lookup_error}"
                )
                return False
            if existing is None:
                game_logger.logger.error(
                    f"Failed to mirror game {attempt.puzzle_number} for {attempt.player_id}: {create_error}"
                )
                return False
            game_logger.logger.info(
                f"Record exists for {attempt.player_id} game {attempt.puzzle_number}, marking as mirrored"
            )

        self.store.mark_mirrored(attempt)
        return True

    def sync_once(self) -> Optional[Dict[str, int]]:
        """
        Mirror every finished, not yet mirrored attempt.

        Returns:
            {"synced": n, "failed": m}, or None if a run was already in progress
        """
        if not self._running.acquire(blocking=False):
            game_logger.logger.info("Mirror sync already in progress, skipping this run")
            return None

        try:
            pending = self.store.find_unmirrored_attempts()
            game_logger.log_job_event(JOB_NAME, 'sync_started', pending=len(pending))

            synced = failed = 0
            for index, attempt in enumerate(pending):
                if self.mirror_attempt(attempt):
                    synced += 1
                else:
                    failed += 1
                if self.pause_seconds and index < len(pending) - 1:
                    self.sleep(self.pause_seconds)

            game_logger.log_job_event(JOB_NAME, 'sync_completed', synced=synced, failed=failed)
            return {'synced': synced, 'failed': failed}
        finally:
            self._running.release()


# Global service instance
_mirror_service: Optional[MirrorService] = None


def get_mirror_service() -> Optional[MirrorService]:
    """Get the global mirror service instance."""
    return _mirror_service


def initialize_mirror_service(store, client: AtprotoClient, collection: str, **kwargs) -> MirrorService:
    """Initialize the global mirror service instance."""
    global _mirror_service
    _mirror_service = MirrorService(store, client, collection, **kwargs)
    return _mirror_service
