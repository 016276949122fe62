"""Mixtape CRUD routes; every call is scoped to the authenticated caller."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from harmonilink.domain.mixtapes import (
    MixtapeNotFound,
    MixtapeService,
    StoreFailure,
    ValidationError,
)


logger = logging.getLogger(__name__)

mixtape_bp = Blueprint('mixtape_bp', __name__, url_prefix='/api')

NOT_FOUND_MESSAGE = "Mixtape not found."
NOT_OWNED_MESSAGE = "Mixtape not found or not owned by user."


def _service() -> MixtapeService:
    return current_app.extensions['mixtape_service']


def _validation_response(exc: ValidationError):
    body = {'message': exc.message}
    if exc.details:
        body['errors'] = exc.details
    return jsonify(body), 400


def _failure_response(action: str, exc: StoreFailure):
    # Details stay in the log; the client only learns that the unit failed
    logger.error("Mixtape %s failed for user %s", action, current_user.id, exc_info=exc)
    return jsonify({'message': f'Failed to {action} mixtape.'}), 500


@mixtape_bp.route('/create-mixtape', methods=['POST'])
@login_required
def create_mixtape():
    payload = request.get_json(silent=True)
    try:
        saved = _service().create_mixtape(current_user.id, payload)
    except ValidationError as exc:
        return _validation_response(exc)
    except StoreFailure as exc:
        return _failure_response('create', exc)

    return (
        jsonify(
            {
                'message': 'Mixtape created successfully.',
                'id': saved.id,
                'photoUrl': saved.cover,
            }
        ),
        201,
    )


@mixtape_bp.route('/mixtapes', methods=['GET'])
@login_required
def list_mixtapes():
    try:
        mixtapes = _service().list_mixtapes(current_user.id)
    except StoreFailure as exc:
        return _failure_response('fetch', exc)
    return jsonify(mixtapes), 200


@mixtape_bp.route('/mixtapes/<int:mixtape_id>', methods=['PUT'])
@login_required
def update_mixtape(mixtape_id: int):
    payload = request.get_json(silent=True)
    try:
        saved = _service().update_mixtape(current_user.id, mixtape_id, payload)
    except ValidationError as exc:
        return _validation_response(exc)
    except MixtapeNotFound:
        return jsonify({'message': NOT_FOUND_MESSAGE}), 404
    except StoreFailure as exc:
        return _failure_response('update', exc)

    return jsonify({'message': 'Mixtape updated successfully.', 'photoUrl': saved.cover}), 200


@mixtape_bp.route('/mixtapes/<int:mixtape_id>', methods=['DELETE'])
@login_required
def delete_mixtape(mixtape_id: int):
    try:
        _service().delete_mixtape(current_user.id, mixtape_id)
    except MixtapeNotFound:
        return jsonify({'message': NOT_OWNED_MESSAGE}), 404
    except StoreFailure as exc:
        return _failure_response('delete', exc)

    return jsonify({'message': 'Mixtape deleted successfully.'}), 200


__all__ = ["mixtape_bp"]
