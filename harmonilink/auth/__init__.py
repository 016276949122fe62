#!/usr/bin/env python
"""Bearer-token authentication through Flask-Login."""

from __future__ import annotations

import logging

from flask import current_app, g, jsonify
from flask_login import LoginManager

from .tokens import TokenAuthenticator, TokenError, bearer_token

logger = logging.getLogger(__name__)

login_manager = LoginManager()
login_manager.login_message = None


def init_auth(app):
    """Attach Flask-Login to the app, resolving users from bearer tokens only."""
    from harmonilink.database.db_manager import User, db
    from harmonilink.interfaces.http.routes.auth import auth_bp

    app.extensions["token_authenticator"] = TokenAuthenticator(
        secret=app.config["JWT_SECRET"],
        algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
        expires_minutes=int(app.config.get("JWT_EXPIRES_MINUTES", 60)),
    )
    login_manager.init_app(app)

    @login_manager.request_loader
    def load_user_from_request(req):
        token = bearer_token(req.headers.get("Authorization"))
        if token is None:
            g.auth_failure = "missing"
            return None
        try:
            user_id = current_app.extensions["token_authenticator"].verify(token)
        except TokenError as exc:
            logger.info("Rejected bearer token: %s", exc)
            g.auth_failure = "invalid"
            return None
        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            g.auth_failure = "invalid"
            return None
        g.auth_user_id = user.id
        return user

    @login_manager.unauthorized_handler
    def _unauthorized():
        if getattr(g, "auth_failure", "missing") == "invalid":
            return jsonify({"message": "Invalid token."}), 403
        return jsonify({"message": "Access token required."}), 401

    app.register_blueprint(auth_bp)

    return login_manager


__all__ = ["login_manager", "init_auth", "TokenAuthenticator", "TokenError", "bearer_token"]
