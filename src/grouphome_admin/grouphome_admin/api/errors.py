"""Domain exceptions and HTTP errors -> `{"error": ...}` JSON bodies."""
from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.constants import SERVER_ERROR_MESSAGE
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.logging import get_logger

logger = get_logger(__name__)

HTTP_MESSAGES = {
    400: "リクエストが正しくありません",
    403: "この操作を行う権限がありません",
    404: "データが見つかりません",
    405: "許可されていないメソッドです",
    409: "他のデータから参照されているため実行できません",
}


def error_response(message: str, status: int, **extra):
    body = {"error": message}
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return error_response(str(e), 400, errors=e.errors)

    @app.errorhandler(AuthorizationError)
    def _forbidden(e: AuthorizationError):
        return error_response(str(e) or HTTP_MESSAGES[403], 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return error_response(str(e) or HTTP_MESSAGES[404], 404)

    @app.errorhandler(ConflictError)
    def _conflict(e: ConflictError):
        return error_response(str(e) or HTTP_MESSAGES[409], 409)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        status = e.code or 500
        return error_response(HTTP_MESSAGES.get(status, SERVER_ERROR_MESSAGE), status)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("unhandled error: %s", e)
        return error_response(SERVER_ERROR_MESSAGE, 500)
