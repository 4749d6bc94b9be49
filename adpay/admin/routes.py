# adpay/admin/routes.py
import math

from flask import current_app, request
from sqlalchemy.orm import joinedload

from adpay.auth.utils import check_admin_credentials, generate_admin_token
from adpay.errors import InvalidCredentials
from adpay.extensions import db
from adpay.forms import AdminLoginForm, TokenGenerateForm, validate_or_raise
from adpay.models import Token, User
from adpay.services.notifications import send_activation_email
from adpay.services.registration import activate_user
from adpay.services.reporting import dashboard_stats
from adpay.services.tokens import generate_tokens, list_tokens
from adpay.utils import admin_required, api_response, bool_arg, iso, page_args
from . import admin_bp


def _paged(key, items, total, page, limit):
    return {
        key: items,
        "total": total,
        "currentPage": page,
        "totalPages": math.ceil(total / limit) if total else 0,
    }


def _admin_user_dict(user):
    data = user.to_dict(full=True)
    data["referredBy"] = (
        {
            "id": user.referred_by.id,
            "fullName": user.referred_by.full_name,
            "email": user.referred_by.email,
            "referralCode": user.referred_by.referral_code,
        }
        if user.referred_by
        else None
    )
    return data


@admin_bp.route("/login", methods=["POST"])
def login():
    form = validate_or_raise(AdminLoginForm())

    if not check_admin_credentials(form.email.data, form.password.data):
        current_app.logger.warning("Rejected admin login for %s from %s", form.email.data, request.remote_addr)
        raise InvalidCredentials("Invalid admin credentials.", status_code=401)

    current_app.logger.info("Admin logged in from %s", request.remote_addr)
    return api_response(
        {
            "admin": {"email": current_app.config["ADMIN_EMAIL"]},
            "token": generate_admin_token(),
        },
        message="Admin login successful.",
    )


@admin_bp.route("/tokens/generate", methods=["POST"])
@admin_required
def tokens_generate():
    form = validate_or_raise(TokenGenerateForm())
    quantity = form.quantity.data or 1
    tokens = generate_tokens(db.session, form.user_type.data, quantity)

    return api_response(
        {"tokens": [t.to_dict() for t in tokens]},
        message=f"{quantity} {form.user_type.data} token(s) generated successfully.",
        status_code=201,
    )


@admin_bp.route("/tokens", methods=["GET"])
@admin_required
def tokens():
    page, limit = page_args()
    items, total = list_tokens(db.session, page=page, per_page=limit, used=bool_arg("used"))
    return api_response(_paged("tokens", [t.to_dict() for t in items], total, page, limit))


@admin_bp.route("/users", methods=["GET"])
@admin_required
def users():
    page, limit = page_args()

    q = User.query.options(joinedload(User.referred_by))
    active = bool_arg("active")
    if active is not None:
        q = q.filter(User.is_active.is_(active))
    user_type = request.args.get("userType")
    if user_type:
        q = q.filter(User.user_type == user_type)

    pagination = q.order_by(User.registration_date.desc(), User.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return api_response(_paged(
        "users",
        [_admin_user_dict(u) for u in pagination.items],
        pagination.total,
        page,
        limit,
    ))


@admin_bp.route("/users/pending", methods=["GET"])
@admin_required
def pending_users():
    rows = (
        db.session.query(User, Token)
        .outerjoin(Token, Token.used_by_id == User.id)
        .options(joinedload(User.referred_by))
        .filter(User.is_active.is_(False))
        .order_by(User.registration_date.desc(), User.id.desc())
        .all()
    )

    users = []
    for user, token in rows:
        data = _admin_user_dict(user)
        data["registrationToken"] = (
            {"code": token.code, "price": token.price, "usedAt": iso(token.used_at)}
            if token
            else None
        )
        users.append(data)

    return api_response({"users": users})


@admin_bp.route("/users/<int:user_id>/activate", methods=["PUT"])
@admin_required
def activate(user_id: int):
    user = activate_user(db.session, user_id)
    send_activation_email(user)

    return api_response(
        {"user": user.to_dict()},
        message="User activated successfully.",
    )


@admin_bp.route("/dashboard", methods=["GET"])
@admin_required
def dashboard():
    recent = min(max(request.args.get("recent", 10, type=int) or 10, 1), 100)
    return api_response(dashboard_stats(db.session, recent=recent))
