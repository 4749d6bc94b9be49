# adpay/services/referral.py
from sqlalchemy import func

from adpay.models import Transaction, User
from adpay.services.registration import referral_bonus_for
from adpay.utils import iso


def referral_stats(session, user) -> dict:
    """
    Referral counts for `user`.

    potentialBonus counts every referral, actualBonus only activated ones;
    paidBonus is what the ledger actually credited.
    """
    referrals = (
        session.query(User)
        .filter(User.referred_by_id == user.id)
        .order_by(User.registration_date.desc())
        .all()
    )

    active = [r for r in referrals if r.is_active]
    paid = (
        session.query(func.coalesce(func.sum(Transaction.amount), 0))
        .filter(
            Transaction.user_id == user.id,
            Transaction.type == "referral_bonus",
            Transaction.status == "completed",
        )
        .scalar()
    )

    return {
        "referralCode": user.referral_code,
        "totalReferrals": len(referrals),
        "activeReferrals": len(active),
        "basicReferrals": sum(1 for r in referrals if r.user_type == "basic"),
        "premiumReferrals": sum(1 for r in referrals if r.user_type == "premium"),
        "potentialBonus": sum(referral_bonus_for(r.user_type) for r in referrals),
        "actualBonus": sum(referral_bonus_for(r.user_type) for r in active),
        "paidBonus": int(paid or 0),
        "referrals": [
            {
                "id": r.id,
                "fullName": r.full_name,
                "email": r.email,
                "userType": r.user_type,
                "isActive": r.is_active,
                "registrationDate": iso(r.registration_date),
            }
            for r in referrals
        ],
    }
