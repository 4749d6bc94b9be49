# adpay/services/withdrawal.py
from flask import current_app

from adpay.errors import (
    BelowMinimum,
    InsufficientBalance,
    InvalidStateTransition,
    MissingBankDetails,
    NotFound,
    OutsidePayoutWindow,
)
from adpay.models import Transaction, User
from adpay.utils import generate_reference, to_local, utcnow

SETTLED_STATUSES = {"completed", "failed"}


def minimum_withdrawal_for(user_type: str) -> int:
    cfg = current_app.config
    return cfg["MIN_WITHDRAWAL_PREMIUM"] if user_type == "premium" else cfg["MIN_WITHDRAWAL_BASIC"]


def payout_window_for(user_type: str) -> tuple[int, int]:
    """Allowed local hours as a half-open [start, end) range."""
    cfg = current_app.config
    end = cfg["PAYOUT_END_HOUR_PREMIUM"] if user_type == "premium" else cfg["PAYOUT_END_HOUR_BASIC"]
    return cfg["PAYOUT_START_HOUR"], end


def in_payout_window(user_type: str, now=None) -> bool:
    local = to_local(now or utcnow())
    start, end = payout_window_for(user_type)
    return local.day in current_app.config["PAYOUT_DAYS"] and start <= local.hour < end


def request_withdrawal(session, user_id, amount: int, now=None):
    """
    Debit the balance and record a pending withdrawal.

    Checks run in order: bank details, tier minimum, balance, payout window.
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

    if not user.has_bank_details:
        raise MissingBankDetails()

    minimum = minimum_withdrawal_for(user.user_type)
    if amount < minimum:
        raise BelowMinimum(f"Minimum withdrawal amount is ₦{minimum:,}.")

    if amount > (user.balance or 0):
        raise InsufficientBalance()

    if not in_payout_window(user.user_type, now):
        start, end = payout_window_for(user.user_type)
        days = " & ".join(f"{d}th" for d in current_app.config["PAYOUT_DAYS"])
        raise OutsidePayoutWindow(
            f"Withdrawals are only processed on payment days ({days}) between {start}:00 and {end}:00."
        )

    user.balance = user.balance - amount

    txn = Transaction(
        user_id=user.id,
        type="withdrawal",
        amount=amount,
        description=f"Withdrawal request to {user.bank_name} ({user.account_number})",
        status="pending",
        reference=generate_reference("WD"),
        meta={"bankDetails": user.bank_account},
    )
    session.add(txn)
    session.commit()

    current_app.logger.info(
        "Withdrawal %s requested by user %s for %s", txn.reference, user.id, amount
    )
    return txn


def withdrawal_history(session, user_id):
    return (
        session.query(Transaction)
        .filter(Transaction.user_id == user_id, Transaction.type == "withdrawal")
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .all()
    )


def list_withdrawals(session, status=None, limit: int = 200):
    q = session.query(Transaction).filter(Transaction.type == "withdrawal")
    if status:
        q = q.filter(Transaction.status == status)
    return q.order_by(Transaction.created_at.desc(), Transaction.id.desc()).limit(limit).all()


def settle_withdrawal(session, transaction_id, new_status: str, note: str | None = None):
    """
    Finalize a pending withdrawal after the manual payout.

    `failed` refunds the debited amount in the same commit and records it as
    a `withdrawal_refund` transaction. Settled withdrawals are final.
    """
    if new_status not in SETTLED_STATUSES:
        raise InvalidStateTransition(f"Invalid status: {new_status}")

    txn = (
        session.query(Transaction)
        .filter(Transaction.id == transaction_id, Transaction.type == "withdrawal")
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not txn:
        raise NotFound("Withdrawal not found.")

    if not txn.is_pending:
        raise InvalidStateTransition(
            f"Invalid status transition: {txn.status} → {new_status}"
        )

    if new_status == "failed":
        user = (
            session.query(User)
            .filter(User.id == txn.user_id)
            .with_for_update()
            .populate_existing()
            .one()
        )
        user.balance = (user.balance or 0) + txn.amount
        session.add(Transaction(
            user_id=user.id,
            type="withdrawal_refund",
            amount=txn.amount,
            description=f"Refund of failed withdrawal {txn.reference}",
            status="completed",
            reference=generate_reference("RFD"),
            meta={"withdrawal": txn.reference},
            processed_at=utcnow(),
        ))

    txn.status = new_status
    txn.note = note
    txn.processed_at = utcnow()
    session.commit()

    current_app.logger.info("Withdrawal %s set to %s", txn.reference, new_status)
    return txn
