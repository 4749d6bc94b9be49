# adpay/admin/withdrawals.py
from flask import request

from adpay.extensions import db
from adpay.forms import WithdrawalStatusForm, validate_or_raise
from adpay.services.withdrawal import list_withdrawals, settle_withdrawal
from adpay.utils import admin_required, api_response
from . import admin_bp


@admin_bp.route("/withdrawals", methods=["GET"])
@admin_required
def withdrawals():
    status = (request.args.get("status") or "").strip().lower() or None
    rows = list_withdrawals(db.session, status=status)
    return api_response({"withdrawals": [t.to_dict(with_user=True) for t in rows]})


@admin_bp.route("/withdrawals/<int:withdrawal_id>/status", methods=["PUT"])
@admin_required
def update_withdrawal_status(withdrawal_id: int):
    form = validate_or_raise(WithdrawalStatusForm())
    txn = settle_withdrawal(db.session, withdrawal_id, form.status.data, form.note.data or None)

    message = (
        "Withdrawal marked failed and refunded."
        if txn.status == "failed"
        else f"Withdrawal {txn.reference} completed."
    )
    return api_response({"withdrawal": txn.to_dict(with_user=True)}, message=message)
