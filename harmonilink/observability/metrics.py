from __future__ import annotations

from typing import Optional

from flask import Blueprint, Response
from prometheus_client import Counter, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

MIXTAPE_OPERATIONS = Counter(
    "harmonilink_mixtape_operations_total",
    "Mixtape operations handled by the service, by outcome.",
    ["operation", "outcome"],
)
ASSET_UPLOADS = Counter(
    "harmonilink_asset_uploads_total",
    "Cover image uploads received by the API, by outcome.",
    ["outcome"],
)

_OUTCOMES = {
    "ValidationError": "invalid",
    "InvalidPhotoReference": "invalid",
    "MixtapeNotFound": "not_found",
    "StoreFailure": "store_failure",
    "AssetRejected": "rejected",
    "AssetStoreFailure": "store_failure",
}


def _outcome(error: Optional[BaseException]) -> str:
    if error is None:
        return "success"
    return _OUTCOMES.get(type(error).__name__, "error")


def record_mixtape_operation(operation: str, error: Optional[BaseException] = None) -> None:
    MIXTAPE_OPERATIONS.labels(operation=operation, outcome=_outcome(error)).inc()


def record_asset_upload(error: Optional[BaseException] = None) -> None:
    ASSET_UPLOADS.labels(outcome=_outcome(error)).inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
