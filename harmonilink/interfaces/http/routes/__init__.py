"""HTTP route blueprints."""

from .auth import auth_bp
from .health import health_bp
from .mixtapes import mixtape_bp
from .upload import upload_bp

__all__ = ["auth_bp", "health_bp", "mixtape_bp", "upload_bp"]
