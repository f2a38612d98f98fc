"""Configuration classes selected by name in create_app()."""

import os


def _database_url(default):
    url = os.getenv('DATABASE_URL', default)
    # Hosted Postgres providers still hand out postgres:// URLs
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


class Config:
    """Base configuration shared by every environment."""

    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///skillpact.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')

    REDIS_URL = os.getenv('REDIS_URL')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Page sizes
    UPCOMING_LIMIT = 5
    RECENT_ACTIVITY_LIMIT = 10
    NOTIFICATIONS_LIMIT = 20
    MESSAGES_DEFAULT_LIMIT = 50
    MESSAGES_MAX_LIMIT = 100
    NEARBY_DEFAULT_LIMIT = 10
    NEARBY_MAX_LIMIT = 50

    TESTING = False
    DEBUG = False


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'test-secret-key-for-testing'
    REDIS_URL = None


class ProductionConfig(Config):
    pass


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}
