from flask_login import current_user, login_required

from adpay.auth.decorators import active_required
from adpay.extensions import db
from adpay.forms import WithdrawalForm, validate_or_raise
from adpay.services.withdrawal import request_withdrawal, withdrawal_history
from adpay.utils import api_response
from . import withdrawals_bp


@withdrawals_bp.route("/request", methods=["POST"])
@active_required
def request_payout():
    form = validate_or_raise(WithdrawalForm())
    txn = request_withdrawal(db.session, current_user.id, form.amount.data)

    return api_response(
        {
            "withdrawalId": txn.id,
            "reference": txn.reference,
            "status": txn.status,
        },
        message="Withdrawal request submitted successfully. It will be processed shortly.",
    )


@withdrawals_bp.route("/history", methods=["GET"])
@login_required
def history():
    rows = withdrawal_history(db.session, current_user.id)
    return api_response({"withdrawals": [t.to_dict() for t in rows]})
