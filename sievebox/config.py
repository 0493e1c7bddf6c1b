"""
Centralized configuration — env vars and defaults.

create_app() copies these into app.config; tests override them there.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Web ──────────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
PORT = int(os.getenv('PORT', 3001))

# ── Storage ──────────────────────────────────────────────────────────────────
# "file" keeps one JSON file per user under DATA_DIR, "redis" one key per user.
FILTER_STORE = os.getenv('FILTER_STORE', 'file')
DATA_DIR = os.getenv('DATA_DIR', os.path.join(os.getcwd(), 'data'))
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── Users ────────────────────────────────────────────────────────────────────
USERS_CONFIG = os.getenv('USERS_CONFIG', os.path.join(os.getcwd(), 'config', 'users.yaml'))
DEFAULT_USERS = ['user1', 'user2']

# ── Sieve ────────────────────────────────────────────────────────────────────
EXTENSION_FILEINTO = 'fileinto'
EXTENSION_FLAGS = 'imap4flags'
EXTENSION_EXPIRE = 'vnd.proton.expire'


def as_dict():
    """Settings that create_app() loads into app.config."""
    return {
        'LOG_LEVEL': LOG_LEVEL,
        'LOG_FORMAT': LOG_FORMAT,
        'SECRET_KEY': SECRET_KEY,
        'FILTER_STORE': FILTER_STORE,
        'DATA_DIR': DATA_DIR,
        'REDIS_URL': REDIS_URL,
        'USERS_CONFIG': USERS_CONFIG,
    }
