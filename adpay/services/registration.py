# adpay/services/registration.py
from flask import current_app
from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError

from adpay.errors import (
    AccountInactive,
    AlreadyActive,
    CodeGenerationExhausted,
    DuplicateIdentity,
    InvalidCredentials,
    InvalidReferralCode,
    InvalidToken,
    NoRegistrationToken,
    NotFound,
    TokenTypeMismatch,
)
from adpay.models import Token, Transaction, User
from adpay.utils import generate_reference, generate_unique_code, utcnow

REFERRAL_CODE_LENGTH = 6


def referral_bonus_for(user_type: str) -> int:
    cfg = current_app.config
    return cfg["REFERRAL_BONUS_PREMIUM"] if user_type == "premium" else cfg["REFERRAL_BONUS_BASIC"]


def generate_unique_referral_code(session) -> str:
    return generate_unique_code(
        lambda code: session.query(User.id).filter_by(referral_code=code).first() is not None,
        REFERRAL_CODE_LENGTH,
    )


def _identity_taken(session, email, phone) -> bool:
    match = session.query(User.id).filter(or_(User.email == email, User.phone == phone)).first()
    return match is not None


def register_user(session, full_name, email, phone, password, user_type, token_code, referral_code=None):
    """
    Create an inactive account and consume its registration token.

    Returns (user, token). The user row and the token consumption are
    committed together; a token is consumed by exactly one caller.
    """
    email = email.strip().lower()
    phone = phone.strip()
    token_code = token_code.strip().upper()

    if _identity_taken(session, email, phone):
        raise DuplicateIdentity()

    now = utcnow()
    token = session.query(Token).filter_by(code=token_code, is_used=False).first()
    if not token or token.is_expired(now):
        raise InvalidToken()

    if token.user_type != user_type:
        raise TokenTypeMismatch(f"Token is for {token.user_type} users only.")

    referrer = None
    if referral_code:
        referrer = session.query(User).filter_by(referral_code=referral_code.strip().upper()).first()
        if not referrer:
            raise InvalidReferralCode()

    for _ in range(current_app.config.get("CODE_GENERATION_ATTEMPTS", 10)):
        user = User(
            full_name=full_name,
            email=email,
            phone=phone,
            user_type=user_type,
            referral_code=generate_unique_referral_code(session),
            referred_by=referrer,
            balance=0,
            total_earned=0,
            ads_watched_today=0,
            is_active=False,
            registration_date=now,
        )
        user.set_password(password)

        try:
            session.add(user)
            session.flush()
        except IntegrityError:
            session.rollback()
            if _identity_taken(session, email, phone):
                raise DuplicateIdentity()
            # a concurrent registration claimed the same referral code
            current_app.logger.warning("Referral code %s collided; retrying", user.referral_code)
            continue

        # compare-and-set: only an unused token flips
        consumed = session.execute(
            update(Token)
            .where(Token.id == token.id, Token.is_used.is_(False))
            .values(is_used=True, used_by_id=user.id, used_at=now)
            .execution_options(synchronize_session=False)
        )
        if consumed.rowcount != 1:
            session.rollback()
            raise InvalidToken()

        session.commit()
        break
    else:
        raise CodeGenerationExhausted()

    session.refresh(token)
    current_app.logger.info(
        "Registered user %s (%s) with token %s", user.id, user.user_type, token.code
    )
    return user, token


def authenticate_user(session, email, password):
    user = session.query(User).filter_by(email=(email or "").strip().lower()).first()
    if not user or not user.check_password(password or ""):
        raise InvalidCredentials()
    if not user.is_active:
        raise AccountInactive()
    return user


def activate_user(session, user_id):
    """
    Admin activation after manual payment verification.

    Flips is_active, records the registration fee and pays the referrer's
    bonus in a single commit. A second call fails with AlreadyActive.
    """
    user = (
        session.query(User)
        .filter(User.id == user_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not user:
        raise NotFound("User not found.")

    if user.is_active:
        raise AlreadyActive()

    token = session.query(Token).filter_by(used_by_id=user.id).first()
    if not token:
        raise NoRegistrationToken()

    now = utcnow()
    user.is_active = True

    session.add(Transaction(
        user_id=user.id,
        type="registration",
        amount=token.price,
        description=f"{user.user_type} registration fee",
        status="completed",
        reference=generate_reference("REG"),
        meta={"token": token.code},
        processed_at=now,
    ))

    bonus_paid = 0
    if user.referred_by_id:
        referrer = (
            session.query(User)
            .filter(User.id == user.referred_by_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if referrer and referrer.id != user.id:
            bonus_paid = referral_bonus_for(user.user_type)
            referrer.balance = (referrer.balance or 0) + bonus_paid
            session.add(Transaction(
                user_id=referrer.id,
                type="referral_bonus",
                amount=bonus_paid,
                description=f"Referral bonus for {user.user_type} user {user.full_name}",
                status="completed",
                reference=generate_reference("REF"),
                meta={"referredUser": user.id},
                processed_at=now,
            ))

    session.commit()

    current_app.logger.info(
        "Activated user %s (fee=%s, referral_bonus=%s)", user.id, token.price, bonus_paid
    )
    return user
