import os
from pydantic_settings import BaseSettings
from pydantic import model_validator, field_validator
from typing import Optional

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DEFAULT_DB_URI = f'sqlite:///{os.path.join(BASE_DIR, "kaleereads.db")}'


class Config(BaseSettings):
    # Security configuration
    SECRET_KEY: str

    # Database
    DATABASE_URL: str = DEFAULT_DB_URI
    SQLALCHEMY_DATABASE_URI: Optional[str] = None
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}

    @model_validator(mode='after')
    def set_database_config(self) -> 'Config':
        """Set SQLALCHEMY_DATABASE_URI from DATABASE_URL and configure engine options"""
        self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL

        if 'mysql' in self.DATABASE_URL or 'postgresql' in self.DATABASE_URL:
            self.SQLALCHEMY_ENGINE_OPTIONS = {
                'pool_size': 10,
                'pool_recycle': 3600,
                'pool_pre_ping': True,
                'max_overflow': 20,
            }

        return self

    # Time-limited access links (hours). Default: 7 days
    TIME_LIMITED_ACCESS_HOURS: float = 168

    @field_validator('TIME_LIMITED_ACCESS_HOURS', mode='before')
    def _parse_access_hours(cls, v):
        """Accept values like '168  # one week' from .env files."""
        if isinstance(v, str):
            v = v.split('#', 1)[0].strip()
        return v

    @field_validator('TIME_LIMITED_ACCESS_HOURS')
    def _positive_access_hours(cls, v):
        if v <= 0:
            raise ValueError('TIME_LIMITED_ACCESS_HOURS must be positive')
        return v

    # Lifetime of the direct file URL handed out by the secure-view endpoint
    SECURE_URL_TTL_SECONDS: int = 3600

    # Bearer credential lifetime (seconds)
    AUTH_TOKEN_MAX_AGE: int = 7 * 24 * 3600

    # Where uploaded book files live; Book.file_key is relative to this
    BOOK_STORAGE_ROOT: str = os.path.join(BASE_DIR, 'storage', 'books')

    # Background cleanup of expired access links
    SCHEDULER_ENABLED: bool = True
    ACCESS_LINK_CLEANUP_MINUTES: int = 15

    # Audit trail (JSON lines)
    AUDIT_LOG_DIR: str = os.path.join(BASE_DIR, 'logs')

    # Internationalization
    LANGUAGES: list = ['en', 'sw']
    BABEL_DEFAULT_LOCALE: str = 'en'
    BABEL_DEFAULT_TIMEZONE: str = 'UTC'
    BABEL_TRANSLATION_DIRECTORIES: str = os.path.join(BASE_DIR, 'translations')

    # Application environment: development | staging | production
    APP_ENV: str = os.getenv('FLASK_ENV', 'development')

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        case_sensitive = False
        extra = 'ignore'  # Ignore extra fields from .env
