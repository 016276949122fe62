from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from harmonilink.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as exc:  # pragma: no cover - DB failure path
        db.session.rollback()
        status = 503
        checks["database"] = f"error: {exc.__class__.__name__}"

    store = current_app.extensions.get("asset_store")
    if store is not None and store.settings.upload_enabled:
        checks["asset_store"] = "ok"
    else:
        checks["asset_store"] = "unconfigured"

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status
