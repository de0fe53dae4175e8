"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env
load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.env'))


class Config:
    """Base configuration class with all settings."""

    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 4000))
    PUBLIC_ORIGIN = os.getenv('PUBLIC_ORIGIN', 'https://skyrdle.com')

    # Database Settings
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'skyrdle')

    # Authentication Settings
    JWT_SECRET = os.getenv('JWT_SECRET')
    JWT_EXPIRATION_DAYS = int(os.getenv('JWT_EXPIRATION_DAYS', 7))

    # Puzzle Settings
    PUZZLE_EPOCH = os.getenv('PUZZLE_EPOCH', '2025-06-13')
    CANONICAL_TIMEZONE = os.getenv('CANONICAL_TIMEZONE', 'America/New_York')
    MAX_GUESSES = int(os.getenv('MAX_GUESSES', 6))
    VOCABULARY_PATH = os.getenv('VOCABULARY_PATH')
    PUZZLE_REFRESH_SECONDS = int(os.getenv('PUZZLE_REFRESH_SECONDS', 300))

    # Repository Mirroring Settings
    ATPROTO_SERVICE = os.getenv('ATPROTO_SERVICE', 'https://bsky.social')
    ATPROTO_SERVER_HANDLE = os.getenv('ATPROTO_SERVER_HANDLE')
    ATPROTO_SERVER_APP_PASSWORD = os.getenv('ATPROTO_SERVER_APP_PASSWORD')
    SCORE_COLLECTION = os.getenv('SCORE_COLLECTION', 'farm.smol.games.skyrdle.player.score')
    MIRROR_INTERVAL_SECONDS = int(os.getenv('MIRROR_INTERVAL_SECONDS', 3600))

    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    JWT_SECRET = 'testing-jwt-secret-with-enough-length'


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
