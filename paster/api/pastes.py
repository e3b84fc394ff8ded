from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, current_app, request
from pydantic import ValidationError

from paster.api.schemas import (
    HealthResponse,
    ListQuery,
    PasteCreateRequest,
    PasteResponse,
    SearchQuery,
)
from paster.errors import InvalidPasteParameters, LockTimeout, PasteStoreError
from paster.store import PasteStore

api_bp = Blueprint("api", __name__)

STORE_EXTENSION = "paster.store"


def get_store() -> PasteStore:
    """Return the store opened by the application factory."""
    return current_app.extensions[STORE_EXTENSION]


def _store_failure(exc: PasteStoreError) -> tuple[dict, int]:
    if isinstance(exc, LockTimeout):
        return {"error": "Paste storage is busy, try again later"}, HTTPStatus.SERVICE_UNAVAILABLE
    return {"error": "Paste storage failure"}, HTTPStatus.INTERNAL_SERVER_ERROR


def _limit(query: ListQuery) -> int:
    if query.limit is None:
        return int(current_app.config["RECENT_LIMIT"])
    return min(query.limit, int(current_app.config["MAX_LIST_LIMIT"]))


def _listing(records) -> dict:
    return {
        "pastes": [PasteResponse.from_record(r).model_dump(mode="json") for r in records]
    }


@api_bp.route("/health", methods=["GET"])
def health() -> tuple[dict, int]:
    """Simple health check endpoint."""

    body = HealthResponse().model_dump()
    return body, HTTPStatus.OK


@api_bp.route("/pastes", methods=["POST"])
def create_paste() -> tuple[dict, int]:
    """
    Create a new paste.

    Validation is handled by Pydantic; persistence by the paste store.
    """
    try:
        payload = PasteCreateRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return {"error": "Invalid request body", "details": str(exc)}, HTTPStatus.BAD_REQUEST

    store = get_store()
    try:
        paste_id = store.insert(payload.to_new_paste())
        record = store.get(paste_id)
    except InvalidPasteParameters as exc:
        return {"error": str(exc)}, HTTPStatus.BAD_REQUEST
    except PasteStoreError as exc:
        return _store_failure(exc)

    if record is None:
        # Swept between insert and read back.
        return {"id": paste_id}, HTTPStatus.CREATED
    return PasteResponse.from_record(record).model_dump(mode="json"), HTTPStatus.CREATED


@api_bp.route("/pastes", methods=["GET"])
def recent_pastes() -> tuple[dict, int]:
    try:
        query = ListQuery.model_validate(request.args.to_dict())
    except ValidationError as exc:
        return {"error": "Invalid query", "details": str(exc)}, HTTPStatus.BAD_REQUEST

    try:
        records = get_store().recent(_limit(query))
    except PasteStoreError as exc:
        return _store_failure(exc)

    return _listing(records), HTTPStatus.OK


@api_bp.route("/search", methods=["GET"])
def search_pastes() -> tuple[dict, int]:
    try:
        query = SearchQuery.model_validate(request.args.to_dict())
    except ValidationError as exc:
        return {"error": "Invalid query", "details": str(exc)}, HTTPStatus.BAD_REQUEST

    try:
        records = get_store().search(
            _limit(query),
            title=query.title,
            author=query.author,
            language=query.language,
        )
    except PasteStoreError as exc:
        return _store_failure(exc)

    return _listing(records), HTTPStatus.OK


@api_bp.route("/pastes/<paste_id>", methods=["GET"])
def get_paste(paste_id: str) -> tuple[dict, int]:
    try:
        record = get_store().get(paste_id)
    except PasteStoreError as exc:
        return _store_failure(exc)

    if record is None:
        return {"error": f"Paste {paste_id} not found"}, HTTPStatus.NOT_FOUND
    return PasteResponse.from_record(record).model_dump(mode="json"), HTTPStatus.OK


@api_bp.route("/pastes/<paste_id>/raw", methods=["GET"])
def download_paste(paste_id: str):
    """Return the paste body as plain text."""
    try:
        record = get_store().get(paste_id)
    except PasteStoreError as exc:
        return _store_failure(exc)

    if record is None:
        return {"error": f"Paste {paste_id} not found"}, HTTPStatus.NOT_FOUND
    return Response(record.code, status=HTTPStatus.OK, mimetype="text/plain")
