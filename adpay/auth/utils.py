# adpay/auth/utils.py
import hmac

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash

USER_SALT = "user-session"
ADMIN_SALT = "admin-session"


def _serializer(salt: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=salt)


def generate_session_token(user) -> str:
    return _serializer(USER_SALT).dumps({"uid": user.id})


def load_session_token(token: str) -> int | None:
    """Return the user id carried by a valid, unexpired session token."""
    try:
        payload = _serializer(USER_SALT).loads(
            token, max_age=current_app.config["SESSION_TOKEN_MAX_AGE"]
        )
    except SignatureExpired:
        current_app.logger.info("Expired session token presented")
        return None
    except BadSignature:
        return None
    uid = payload.get("uid") if isinstance(payload, dict) else None
    return uid if isinstance(uid, int) else None


def check_admin_credentials(email: str, password: str) -> bool:
    cfg = current_app.config
    admin_email = (cfg.get("ADMIN_EMAIL") or "").strip().lower()
    if not admin_email or (email or "").strip().lower() != admin_email:
        return False

    if cfg.get("ADMIN_PASSWORD_HASH"):
        return check_password_hash(cfg["ADMIN_PASSWORD_HASH"], password or "")

    # legacy plaintext option
    legacy = cfg.get("ADMIN_PASSWORD") or ""
    if not legacy:
        return False
    return hmac.compare_digest(legacy.encode("utf-8"), (password or "").encode("utf-8"))


def generate_admin_token() -> str:
    return _serializer(ADMIN_SALT).dumps({"admin": current_app.config["ADMIN_EMAIL"].lower()})


def load_admin_token(token: str) -> bool:
    try:
        payload = _serializer(ADMIN_SALT).loads(
            token, max_age=current_app.config["ADMIN_TOKEN_MAX_AGE"]
        )
    except (SignatureExpired, BadSignature):
        return False
    admin_email = (current_app.config.get("ADMIN_EMAIL") or "").lower()
    return bool(admin_email) and isinstance(payload, dict) and payload.get("admin") == admin_email
