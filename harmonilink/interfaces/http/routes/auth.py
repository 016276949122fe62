#!/usr/bin/env python
"""Registration and login endpoints that hand out bearer tokens."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from harmonilink.database.db_manager import User, db


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def _validate_credentials(payload: Dict[str, Any]) -> Tuple[str, str, Dict[str, str]]:
    email = _text(payload, "email").lower()
    password = _text(payload, "password")
    errors: Dict[str, str] = {}
    if not email or not _EMAIL_RE.match(email):
        errors["email"] = "Please provide a valid email address."
    if len(password) < 8:
        errors["password"] = "Password must be at least 8 characters long."
    return email, password, errors


def _json_object() -> Optional[Dict[str, Any]]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _token_response(user: User, status: int):
    token = current_app.extensions["token_authenticator"].issue(user.id)
    return jsonify({"user": user.to_dict(), "access_token": token, "token_type": "Bearer"}), status


@auth_bp.route("/register", methods=["POST"])
def register_user():
    data = _json_object()
    if data is None:
        return jsonify({"errors": {"form": "Request body must be a JSON object."}}), 400
    email, password, errors = _validate_credentials(data)
    if errors:
        return jsonify({"errors": errors}), 400

    existing = User.query.filter_by(email=email).first()
    if existing:
        return jsonify({"errors": {"email": "An account with this email already exists."}}), 409

    user = User(email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"errors": {"email": "An account with this email already exists."}}), 409

    return _token_response(user, 201)


@auth_bp.route("/login", methods=["POST"])
def login():
    data = _json_object()
    if data is None:
        return jsonify({"errors": {"form": "Request body must be a JSON object."}}), 400
    email = _text(data, "email").lower()
    password = _text(data, "password")

    if not email or not password:
        return jsonify({"errors": {"form": "Email and password are required."}}), 400

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        return jsonify({"errors": {"form": "Invalid email or password."}}), 401

    if not user.is_active:
        return jsonify({"errors": {"form": "Account is disabled."}}), 403

    return _token_response(user, 200)


__all__ = ["auth_bp"]
