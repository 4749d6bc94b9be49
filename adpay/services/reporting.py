from sqlalchemy import func
from sqlalchemy.orm import joinedload

from adpay.models import Transaction, User


def _completed_sum(session, txn_type: str) -> int:
    total = (
        session.query(func.coalesce(func.sum(Transaction.amount), 0))
        .filter(Transaction.type == txn_type, Transaction.status == "completed")
        .scalar()
    )
    return int(total or 0)


def dashboard_stats(session, recent: int = 10) -> dict:
    total_users = session.query(func.count(User.id)).scalar()
    active_users = session.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar()
    basic_users = (
        session.query(func.count(User.id))
        .filter(User.is_active.is_(True), User.user_type == "basic")
        .scalar()
    )
    premium_users = (
        session.query(func.count(User.id))
        .filter(User.is_active.is_(True), User.user_type == "premium")
        .scalar()
    )

    recent_transactions = (
        session.query(Transaction)
        .options(joinedload(Transaction.user))
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(recent)
        .all()
    )

    return {
        "stats": {
            "totalUsers": total_users,
            "activeUsers": active_users,
            "pendingUsers": total_users - active_users,
            "basicUsers": basic_users,
            "premiumUsers": premium_users,
            "totalRevenue": _completed_sum(session, "registration"),
            "totalPayouts": _completed_sum(session, "withdrawal"),
            "totalReferralBonuses": _completed_sum(session, "referral_bonus"),
        },
        "recentTransactions": [t.to_dict(with_user=True) for t in recent_transactions],
    }
