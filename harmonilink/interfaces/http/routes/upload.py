"""Cover image upload endpoint."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from harmonilink.domain.assets import AssetRejected, AssetStoreFailure
from harmonilink.observability.metrics import record_asset_upload


logger = logging.getLogger(__name__)

upload_bp = Blueprint('upload_bp', __name__, url_prefix='/api/upload')


@upload_bp.route('', methods=['POST'])
@upload_bp.route('/', methods=['POST'])
@login_required
def upload_photo():
    store = current_app.extensions['asset_store']
    photo = request.files.get('photo')
    if photo is None or not photo.filename:
        record_asset_upload(AssetRejected("No file uploaded"))
        return jsonify({'error': 'No file uploaded'}), 400

    # Read one byte past the limit so oversized files are detected without buffering them whole
    data = photo.stream.read(store.settings.max_bytes + 1)
    try:
        asset = store.upload(photo.filename, photo.mimetype, data)
    except AssetRejected as exc:
        record_asset_upload(exc)
        return jsonify({'error': exc.reason}), 400
    except AssetStoreFailure as exc:
        record_asset_upload(exc)
        logger.error("Cover upload failed: %s", exc)
        return jsonify({'error': 'Image upload failed. Please try again later.'}), 502

    record_asset_upload()
    return (
        jsonify(
            {
                'message': 'Image uploaded',
                'imageUrl': asset.url,
                'publicId': asset.public_id,
            }
        ),
        200,
    )


__all__ = ["upload_bp"]
