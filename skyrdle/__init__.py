"""
Skyrdle Server Application Package

Daily word-guessing puzzle bound to decentralized identity: deterministic
daily puzzles, player-authored custom puzzles, and verifiable score
commitments mirrored into each player's own repository.
"""

from flask import Flask
from flask_cors import CORS
from .config import Config


def create_app(config_class=Config):
    """
    Application factory pattern for creating Flask app instances.

    Services are initialized separately (see main.py) and looked up by the
    controllers through their module-level getters.

    Args:
        config_class: Configuration class to use

    Returns:
        Flask application instance with all extensions initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)

    # Register blueprints
    from .controllers.auth_controller import auth_bp
    from .controllers.game_controller import game_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(game_bp, url_prefix='/api')

    return app
