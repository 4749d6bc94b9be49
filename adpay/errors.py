# adpay/errors.py
from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db


class ServiceError(Exception):
    """Business-rule or validation failure reported to the caller."""

    status_code = 400
    message = "Request could not be processed."

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(ServiceError):
    message = "Invalid request data."

    def __init__(self, message: str | None = None, errors: dict | None = None):
        super().__init__(message)
        self.errors = errors or {}


class DuplicateIdentity(ServiceError):
    message = "User with this email or phone already exists."


class InvalidToken(ServiceError):
    message = "Invalid or already used registration token."


class TokenTypeMismatch(ServiceError):
    message = "Token is not valid for this user type."


class InvalidReferralCode(ServiceError):
    message = "Invalid referral code."


class InvalidCredentials(ServiceError):
    message = "Invalid email or password."


class AccountInactive(ServiceError):
    message = "Account not active. Please contact admin after making payment."


class Unauthorized(ServiceError):
    status_code = 401
    message = "Authentication required."


class NotFound(ServiceError):
    status_code = 404
    message = "Not found."


class AlreadyActive(ServiceError):
    message = "User is already active."


class NoRegistrationToken(ServiceError):
    message = "No registration token found for this user."


class DailyLimitReached(ServiceError):
    message = "Daily ad limit reached. Upgrade to premium for unlimited ads."


class MissingBankDetails(ServiceError):
    message = "Please add your bank details before requesting withdrawal."


class BelowMinimum(ServiceError):
    message = "Amount is below the minimum withdrawal."


class InsufficientBalance(ServiceError):
    message = "Insufficient balance."


class OutsidePayoutWindow(ServiceError):
    message = "Withdrawals are only processed on payment days (5th & 17th)."


class InvalidStateTransition(ServiceError):
    message = "Invalid status transition."


class UpstreamError(ServiceError):
    status_code = 502
    message = "Upstream service unavailable."


class CodeGenerationExhausted(ServiceError):
    status_code = 500
    message = "Could not generate a unique code. Please try again."


def error_response(message: str, status_code: int, error=None):
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return jsonify(body), status_code


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(e: ServiceError):
        db.session.rollback()
        error = getattr(e, "errors", None) or None
        return error_response(e.message, e.status_code, error)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error: %s", e)
        # internals are only exposed in debug mode
        error = str(e) if current_app.debug else None
        return error_response("Internal server error.", 500, error)
