import random
import secrets
import string
from datetime import datetime, timedelta, timezone
from functools import wraps

from flask import current_app, jsonify, request

from .errors import CodeGenerationExhausted, Unauthorized

CODE_ALPHABET = string.ascii_uppercase + string.digits

_rng = random.SystemRandom()


def api_response(data=None, message: str | None = None, status_code: int = 200):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status_code


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def payout_tz() -> timezone:
    hours = current_app.config.get("PAYOUT_UTC_OFFSET_HOURS", 1)
    return timezone(timedelta(hours=hours))


def to_local(ts: datetime) -> datetime:
    """Convert a stored naive-UTC timestamp to platform local time."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(payout_tz())


def iso(ts: datetime | None) -> str | None:
    return ts.isoformat() + "Z" if ts else None


def generate_code(length: int) -> str:
    return "".join(_rng.choices(CODE_ALPHABET, k=length))


def generate_unique_code(exists, length: int, attempts: int | None = None) -> str:
    """
    Sample codes until `exists(code)` is False.

    Bounded by CODE_GENERATION_ATTEMPTS; raises CodeGenerationExhausted once
    every attempt collided.
    """
    if attempts is None:
        attempts = current_app.config.get("CODE_GENERATION_ATTEMPTS", 10)

    for _ in range(attempts):
        code = generate_code(length)
        if not exists(code):
            return code

    current_app.logger.error("Exhausted %s attempts generating a %s-char code", attempts, length)
    raise CodeGenerationExhausted()


def generate_reference(prefix: str) -> str:
    return f"{prefix}-{secrets.token_hex(8).upper()}"


def bearer_token(req=None) -> str | None:
    header = (req or request).headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        from .auth.utils import load_admin_token

        token = bearer_token()
        if not token or not load_admin_token(token):
            raise Unauthorized("Admin authentication required.")
        return fn(*args, **kwargs)
    return wrapper


def page_args(default_limit: int = 20, max_limit: int = 100) -> tuple[int, int]:
    page = max(1, request.args.get("page", 1, type=int) or 1)
    limit = request.args.get("limit", default_limit, type=int) or default_limit
    return page, min(max(1, limit), max_limit)


def bool_arg(name: str) -> bool | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return raw.strip().lower() == "true"
