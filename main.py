"""
Skyrdle Server - Main Entry Point

This is the main entry point for the Skyrdle server.
It initializes all services, starts the background worker and serves the
Flask application.
"""

import sys
import threading
import time

from skyrdle import create_app
from skyrdle.config import Config
from skyrdle.services.atproto_client import AtprotoClient
from skyrdle.services.attempt_store import AttemptStore
from skyrdle.services.auth_service import initialize_auth_service
from skyrdle.services.game_service import initialize_game_service
from skyrdle.services.mirror_service import initialize_mirror_service
from skyrdle.services.puzzle_indexer import PuzzleIndexer
from skyrdle.services.stats_service import initialize_stats_service
from skyrdle.services.vocabulary import Vocabulary
from skyrdle.utils.errors import EmptyPuzzleList, SkyrdleError
from skyrdle.utils.game_logger import game_logger


def background_worker(store, indexer, mirror_service):
    """
    Background worker that keeps the puzzle snapshot fresh and periodically
    mirrors finished games into player repositories.
    """
    print("Background worker started")
    next_refresh = time.monotonic() + Config.PUZZLE_REFRESH_SECONDS
    next_mirror = time.monotonic()

    while True:
        now = time.monotonic()

        if now >= next_refresh:
            try:
                indexer.replace_puzzles(store.load_puzzle_words())
            except EmptyPuzzleList:
                game_logger.logger.error("Puzzle refresh returned no puzzles; keeping previous snapshot")
            except Exception as e:
                game_logger.logger.error(f"Error refreshing puzzle list: {e}")
            next_refresh = now + Config.PUZZLE_REFRESH_SECONDS

        if mirror_service and now >= next_mirror:
            try:
                result = mirror_service.sync_once()
                if result and result['synced']:
                    print(f"Mirrored {result['synced']} game(s), {result['failed']} failed")
            except Exception as e:
                game_logger.logger.error(f"Error in mirror worker: {e}")
            next_mirror = now + Config.MIRROR_INTERVAL_SECONDS

        time.sleep(5)


def main():
    """Main function to initialize services and start the server."""
    try:
        print("Initializing services...")

        if not Config.MONGO_URI:
            print("✗ MongoDB URI not configured")
            sys.exit(1)

        store = AttemptStore(Config.MONGO_URI, Config.MONGO_DB_NAME)
        store.ping()
        store.ensure_indexes()
        print("✓ Connected to MongoDB")

        # Refuse to start without puzzles rather than serve broken games
        puzzles = store.load_puzzle_words()
        if not puzzles:
            raise EmptyPuzzleList("No puzzles scheduled in the words collection")
        indexer = PuzzleIndexer.from_config(Config, puzzles)
        print(f"✓ Loaded {len(puzzles)} puzzles; today is game #{indexer.current_puzzle_number()}")

        vocabulary = Vocabulary.load(Config.VOCABULARY_PATH)
        print(f"✓ Loaded {len(vocabulary)} words for validation")

        initialize_game_service(store, indexer, vocabulary, max_guesses=Config.MAX_GUESSES)
        initialize_stats_service(store)
        print("✓ Game service initialized successfully")

        identity_client = AtprotoClient(Config.ATPROTO_SERVICE)
        if initialize_auth_service(Config.JWT_SECRET, identity_client, Config.JWT_EXPIRATION_DAYS):
            print("✓ Authentication service initialized successfully")
        else:
            print("✗ JWT secret not configured; player routes are unavailable")

        mirror_service = None
        if Config.ATPROTO_SERVER_HANDLE and Config.ATPROTO_SERVER_APP_PASSWORD:
            mirror_client = AtprotoClient(
                Config.ATPROTO_SERVICE,
                Config.ATPROTO_SERVER_HANDLE,
                Config.ATPROTO_SERVER_APP_PASSWORD
            )
            mirror_service = initialize_mirror_service(store, mirror_client, Config.SCORE_COLLECTION)
            print("✓ Score mirroring enabled")
        else:
            print("✗ Repository credentials not configured; score mirroring disabled")

        app = create_app(Config)
        print("✓ Flask application created successfully")

        worker = threading.Thread(
            target=background_worker, args=(store, indexer, mirror_service), daemon=True
        )
        worker.start()

        game_logger.logger.info("Skyrdle Server Starting")

        print(f"\nStarting Skyrdle Server on {Config.HOST}:{Config.PORT}")
        print(f"Debug mode: {Config.DEBUG}")
        print("=" * 50)

        app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG, use_reloader=False)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Skyrdle Server shutting down (KeyboardInterrupt)")
    except SkyrdleError as e:
        print(f"Refusing to start: {e}")
        game_logger.logger.error(f"Refusing to start: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
