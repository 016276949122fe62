import os
import logging
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from flask import Flask, request, g
from flask_cors import CORS

from config import Config
from harmonilink.auth import init_auth
from harmonilink.database.db_manager import db, initialize_database
from harmonilink.domain.assets import CloudinaryAssetStore
from harmonilink.domain.mixtapes import AssetLinkValidator, MixtapeRepository, MixtapeService
from harmonilink.interfaces.http.routes import health_bp, mixtape_bp, upload_bp
from harmonilink.observability import configure_structured_logging, init_tracing, metrics_blueprint
from harmonilink.settings import load_asset_settings


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # Let Werkzeug/Flask propagate to root instead of printing on their own
    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def create_app(config_overrides: Optional[Dict[str, Any]] = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    configure_structured_logging(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config['CORS_ALLOWED_ORIGINS']
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    initialize_database(app)
    init_auth(app)

    with app.app_context():
        init_tracing(app, engine=db.engine)

    # Process-wide collaborators, built once and handed to the blueprints
    asset_settings = load_asset_settings(app.config)
    app.extensions['asset_store'] = CloudinaryAssetStore(asset_settings)
    app.extensions['mixtape_service'] = MixtapeService(
        repository=MixtapeRepository(db.session),
        link_validator=AssetLinkValidator(
            host=asset_settings.host,
            folder=asset_settings.folder,
            cloud_name=asset_settings.cloud_name,
        ),
        default_source=app.config.get('MIXTAPE_DEFAULT_SOURCE', 'sidebar'),
    )
    if not asset_settings.upload_enabled:
        app.logger.warning("Cloudinary credentials missing; cover uploads will fail until configured.")

    app.register_blueprint(mixtape_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(metrics_blueprint)
    app.register_blueprint(health_bp)

    return app


if __name__ == '__main__':
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'harmonilink', 'log')
    debug_mode = bool(Config.DEBUG)
    # With the reloader only the child process should open a log file
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    if Config.JWT_SECRET == Config.SECRET_KEY:
        logger.warning("JWT_SECRET not set; falling back to SECRET_KEY for token signing.")

    app = create_app()
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application...")
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=int(os.getenv('PORT', '5000')), threaded=True)
