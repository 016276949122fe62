#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-harmonilink'

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'harmonilink', 'database', 'instance', 'harmonilink.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens
    JWT_SECRET = os.environ.get('JWT_SECRET') or SECRET_KEY
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    JWT_EXPIRES_MINUTES = _get_int('JWT_EXPIRES_MINUTES', 60 * 24)

    # Cloudinary (cover image hosting)
    CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET')

    # Only URLs on this host, inside this folder, may be attached as covers
    ASSET_HOST = os.getenv('ASSET_HOST', 'res.cloudinary.com')
    ASSET_FOLDER = os.getenv('ASSET_FOLDER', 'harmolinku_uploads')
    ASSET_MAX_BYTES = _get_int('ASSET_MAX_BYTES', 2 * 1024 * 1024)
    ASSET_UPLOAD_TIMEOUT_SECONDS = _get_int('ASSET_UPLOAD_TIMEOUT_SECONDS', 30)

    # Provenance tag stamped on mixtapes created through the API
    MIXTAPE_DEFAULT_SOURCE = os.getenv('MIXTAPE_DEFAULT_SOURCE', 'sidebar')

    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')

    # Runtime behavior
    DEBUG = _get_bool('DEBUG', False)
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)

    # OpenTelemetry (optional)
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'harmonilink')
