# adpay/users/routes.py
from flask import current_app
from flask_login import current_user, login_required

from adpay.extensions import db
from adpay.forms import BankDetailsForm, validate_or_raise
from adpay.models import Transaction
from adpay.services.paystack_banks import fetch_banks
from adpay.services.referral import referral_stats
from adpay.utils import api_response
from . import users_bp

TRANSACTIONS_LIMIT = 50


@users_bp.route("/bank-details", methods=["PUT"])
@login_required
def update_bank_details():
    form = validate_or_raise(BankDetailsForm())

    user = current_user._get_current_object()
    user.bank_name = form.bank_name.data
    user.account_number = form.account_number.data
    user.account_name = form.account_name.data
    db.session.commit()

    current_app.logger.info("User %s updated bank details", user.id)
    return api_response(
        {"bankAccount": user.bank_account},
        message="Bank details updated successfully.",
    )


@users_bp.route("/transactions", methods=["GET"])
@login_required
def transactions():
    rows = (
        Transaction.query
        .filter_by(user_id=current_user.id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(TRANSACTIONS_LIMIT)
        .all()
    )
    return api_response({"transactions": [t.to_dict() for t in rows]})


@users_bp.route("/referrals", methods=["GET"])
@login_required
def referrals():
    return api_response(referral_stats(db.session, current_user))


@users_bp.route("/banks", methods=["GET"])
@login_required
def banks():
    banks = fetch_banks(current_app.config.get("PAYSTACK_SECRET_KEY", ""))
    return api_response({"banks": banks})
