# adpay/services/tokens.py
from flask import current_app
from sqlalchemy.orm import joinedload

from adpay.errors import ValidationFailed
from adpay.models import Token
from adpay.models.token import token_expiry
from adpay.models.user import USER_TYPES
from adpay.utils import generate_unique_code, utcnow

TOKEN_CODE_LENGTH = 8
MAX_BATCH = 100


def token_price_for(user_type: str) -> int:
    cfg = current_app.config
    return cfg["TOKEN_PRICE_PREMIUM"] if user_type == "premium" else cfg["TOKEN_PRICE_BASIC"]


def generate_tokens(session, user_type: str, quantity: int = 1) -> list[Token]:
    if user_type not in USER_TYPES:
        raise ValidationFailed('Invalid user type. Must be "basic" or "premium".')
    if not 1 <= quantity <= MAX_BATCH:
        raise ValidationFailed(f"Quantity must be between 1 and {MAX_BATCH}.")

    price = token_price_for(user_type)
    issued: set[str] = set()
    tokens = []

    def taken(code):
        return code in issued or session.query(Token.id).filter_by(code=code).first() is not None

    now = utcnow()
    for _ in range(quantity):
        code = generate_unique_code(taken, TOKEN_CODE_LENGTH)
        issued.add(code)
        token = Token(
            code=code,
            user_type=user_type,
            price=price,
            created_at=now,
            expires_at=token_expiry(now),
        )
        session.add(token)
        tokens.append(token)

    session.commit()
    current_app.logger.info("Generated %s %s token(s)", quantity, user_type)
    return tokens


def list_tokens(session, page: int = 1, per_page: int = 20, used: bool | None = None):
    q = session.query(Token).options(joinedload(Token.used_by))
    if used is not None:
        q = q.filter(Token.is_used.is_(used))

    total = q.count()
    items = (
        q.order_by(Token.created_at.desc(), Token.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return items, total


def purge_expired_tokens(session, now=None) -> int:
    now = now or utcnow()
    deleted = (
        session.query(Token)
        .filter(Token.is_used.is_(False), Token.expires_at <= now)
        .delete(synchronize_session=False)
    )
    session.commit()
    return deleted
