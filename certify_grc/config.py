"""Configuration for CertifyGRC, loaded from the environment."""

import os

from dotenv import load_dotenv

from version import __application__, __version__

# Load environment variables
load_dotenv()


class Config:
    APP_NAME = __application__
    APP_VERSION = __version__
    APP_TAGLINE = "ISO/IEC 27001 Platform"
    SECRET_KEY = os.getenv('SECRET_KEY', 'certify-grc-dev-key')
    # sqlite, json or memory
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'sqlite').lower()
    DB_PATH = os.getenv('DB_PATH', 'certify.db')
    DATA_DIR = os.getenv('DATA_DIR', 'data')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    # Upload limit for evidence files (megabytes per request)
    MAX_EVIDENCE_MB = int(os.getenv('MAX_EVIDENCE_MB', '25'))
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', '5000'))
    DEBUG = os.getenv('FLASK_DEBUG', 'false').lower() == 'true'


config = Config()
