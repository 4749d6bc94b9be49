from flask import current_app
from flask_login import current_user, login_required

from adpay.extensions import db
from adpay.forms import LoginForm, RegisterForm, validate_or_raise
from adpay.services.registration import authenticate_user, register_user
from adpay.utils import api_response
from . import auth_bp
from .utils import generate_session_token


@auth_bp.route("/register", methods=["POST"])
def register():
    form = validate_or_raise(RegisterForm())

    user, token = register_user(
        db.session,
        full_name=form.full_name.data,
        email=form.email.data,
        phone=form.phone.data,
        password=form.password.data,
        user_type=form.user_type.data,
        token_code=form.token_code.data,
        referral_code=form.referral_code.data or None,
    )

    return api_response(
        {
            "user": user.to_dict(),
            "token": generate_session_token(user),
            "paymentInstructions": (
                f"Please pay ₦{token.price:,} to admin and share your user ID: {user.id}"
            ),
        },
        message="User registered successfully. Please contact admin for activation.",
        status_code=201,
    )


@auth_bp.route("/login", methods=["POST"])
def login():
    form = validate_or_raise(LoginForm())
    user = authenticate_user(db.session, form.email.data, form.password.data)

    current_app.logger.info("User %s logged in", user.id)
    return api_response(
        {"user": user.to_dict(full=True), "token": generate_session_token(user)},
        message="Login successful.",
    )


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return api_response({"user": current_user.to_dict(full=True)})
