# adpay/services/ads.py
import random

from flask import current_app

from adpay.errors import DailyLimitReached, NotFound, ValidationFailed
from adpay.models import Transaction, User
from adpay.utils import generate_reference, utcnow

AD_CATALOG = [
    {
        "id": "ad_001",
        "title": "Amazing Product Launch",
        "description": "Discover our revolutionary new product that will change your life!",
        "imageUrl": "https://via.placeholder.com/300x200/333/FFD700?text=Product+Ad",
        "duration": 30,
        "category": "Technology",
    },
    {
        "id": "ad_002",
        "title": "Summer Sale - 50% Off",
        "description": "Don't miss our biggest sale of the year! Limited time offer.",
        "imageUrl": "https://via.placeholder.com/300x200/333/FFD700?text=Summer+Sale",
        "duration": 30,
        "category": "Shopping",
    },
    {
        "id": "ad_003",
        "title": "New Mobile App",
        "description": "Download our new app and get exclusive rewards and features.",
        "imageUrl": "https://via.placeholder.com/300x200/333/FFD700?text=Mobile+App",
        "duration": 30,
        "category": "Technology",
    },
    {
        "id": "ad_004",
        "title": "Travel Destination",
        "description": "Explore beautiful destinations around the world with special deals.",
        "imageUrl": "https://via.placeholder.com/300x200/333/FFD700?text=Travel+Ad",
        "duration": 30,
        "category": "Travel",
    },
    {
        "id": "ad_005",
        "title": "Fitness Program",
        "description": "Transform your body with our 30-day fitness challenge.",
        "imageUrl": "https://via.placeholder.com/300x200/333/FFD700?text=Fitness+Ad",
        "duration": 30,
        "category": "Health",
    },
]

AD_IDS = {ad["id"] for ad in AD_CATALOG}


def earnings_for(user_type: str) -> int:
    cfg = current_app.config
    return cfg["AD_EARNINGS_PREMIUM"] if user_type == "premium" else cfg["AD_EARNINGS_BASIC"]


def daily_limit_for(user_type: str) -> int | None:
    # premium users are uncapped
    if user_type == "premium":
        return None
    return current_app.config["BASIC_DAILY_AD_LIMIT"]


def _check_daily_cap(user):
    limit = daily_limit_for(user.user_type)
    if limit is not None and user.ads_watched_today >= limit:
        raise DailyLimitReached()


def load_ad(session, user, now=None):
    """Pick a random ad for the user without counting it as watched."""
    now = now or utcnow()
    if user.reset_daily_ads(now):
        session.commit()

    _check_daily_cap(user)

    ad = dict(random.choice(AD_CATALOG))
    ad["earnings"] = earnings_for(user.user_type)
    return ad


def complete_ad(session, user_id, ad_id, now=None):
    """
    Credit a watched ad.

    The cap is re-validated here under a row lock; clients cannot be trusted to
    have called load_ad first. Returns (user, earnings, transaction).
    """
    if ad_id not in AD_IDS:
        raise ValidationFailed("Unknown ad.")

    now = now or utcnow()
    user = (
        session.query(User)
        .filter(User.id == user_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not user:
        raise NotFound("User not found.")

    user.reset_daily_ads(now)
    _check_daily_cap(user)

    earnings = earnings_for(user.user_type)
    user.balance = (user.balance or 0) + earnings
    user.total_earned = (user.total_earned or 0) + earnings
    user.ads_watched_today = (user.ads_watched_today or 0) + 1
    user.last_ad_date = now

    txn = Transaction(
        user_id=user.id,
        type="ad_view",
        amount=earnings,
        description="Earnings from watching ad",
        status="completed",
        reference=generate_reference("AD"),
        meta={"adId": ad_id},
        processed_at=now,
    )
    session.add(txn)
    session.commit()

    return user, earnings, txn
