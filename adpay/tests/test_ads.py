from datetime import datetime, timedelta

import pytest
from sqlalchemy import update

from adpay.errors import DailyLimitReached
from adpay.extensions import db
from adpay.models import Transaction, User
from adpay.services.ads import AD_IDS, complete_ad, load_ad
from adpay.utils import utcnow

# 12:00 UTC is 13:00 in Lagos, well away from local midnight
NOON = datetime(2026, 3, 10, 12, 0)


def test_load_ad_reports_tier_earnings(client, make_user, auth_headers):
    basic = client.post("/api/ads/load", headers=auth_headers(make_user("basic")))
    assert basic.status_code == 200
    ad = basic.get_json()["data"]["ad"]
    assert ad["id"] in AD_IDS
    assert ad["earnings"] == 15
    assert basic.get_json()["data"]["adLimit"] == 50

    premium = client.post("/api/ads/load", headers=auth_headers(make_user("premium")))
    assert premium.get_json()["data"]["ad"]["earnings"] == 20
    assert premium.get_json()["data"]["adLimit"] == "Unlimited"


def test_load_ad_does_not_count_as_watched(client, make_user, auth_headers, fetch_user):
    user_id = make_user()
    headers = auth_headers(user_id)
    for _ in range(3):
        assert client.get("/api/ads/load", headers=headers).status_code == 200
    assert fetch_user(user_id).ads_watched_today == 0
    assert fetch_user(user_id).balance == 0


def test_complete_ad_credits_and_records_transaction(app, client, make_user, auth_headers, fetch_user):
    user_id = make_user(balance=10)

    resp = client.post("/api/ads/complete", json={"adId": "ad_003"}, headers=auth_headers(user_id))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["earnings"] == 15
    assert data["balance"] == 25

    user = fetch_user(user_id)
    assert user.balance == 25
    assert user.total_earned == 15
    assert user.ads_watched_today == 1
    assert user.last_ad_date is not None

    with app.app_context():
        txn = Transaction.query.filter_by(user_id=user_id).one()
        assert txn.type == "ad_view"
        assert txn.status == "completed"
        assert txn.amount == 15
        assert txn.meta == {"adId": "ad_003"}
        assert txn.reference == data["reference"]


def test_complete_ad_rejects_unknown_ad(client, make_user, auth_headers, fetch_user):
    user_id = make_user()
    resp = client.post("/api/ads/complete", json={"adId": "ad_999"}, headers=auth_headers(user_id))
    assert resp.status_code == 400
    assert fetch_user(user_id).balance == 0

    missing = client.post("/api/ads/complete", json={}, headers=auth_headers(user_id))
    assert missing.status_code == 400


def test_ads_require_active_account(client, make_user, auth_headers):
    headers = auth_headers(make_user(active=False))
    assert client.post("/api/ads/load", headers=headers).status_code == 403
    assert client.post("/api/ads/complete", json={"adId": "ad_001"}, headers=headers).status_code == 403


def test_ads_require_authentication(client):
    assert client.post("/api/ads/load").status_code == 401
    assert client.post("/api/ads/complete", json={"adId": "ad_001"}).status_code == 401


def test_basic_daily_cap(app, make_user):
    user_id = make_user("basic")

    with app.app_context():
        for _ in range(50):
            complete_ad(db.session, user_id, "ad_001", now=NOON)

        user = db.session.get(User, user_id)
        assert user.ads_watched_today == 50
        assert user.balance == 50 * 15

        with pytest.raises(DailyLimitReached):
            complete_ad(db.session, user_id, "ad_001", now=NOON + timedelta(minutes=5))
        db.session.rollback()

        user = db.session.get(User, user_id)
        assert user.balance == 750
        assert user.ads_watched_today == 50
        assert Transaction.query.filter_by(user_id=user_id).count() == 50

        with pytest.raises(DailyLimitReached):
            load_ad(db.session, user, now=NOON + timedelta(minutes=5))


def test_daily_cap_over_http(client, make_user, auth_headers, fetch_user):
    user_id = make_user("basic", ads_watched_today=50, last_ad_date=utcnow())
    headers = auth_headers(user_id)

    load = client.post("/api/ads/load", headers=headers)
    assert load.status_code == 400
    assert load.get_json()["message"].startswith("Daily ad limit reached")

    complete = client.post("/api/ads/complete", json={"adId": "ad_001"}, headers=headers)
    assert complete.status_code == 400
    assert fetch_user(user_id).balance == 0


def test_premium_has_no_cap(app, make_user):
    user_id = make_user("premium")

    with app.app_context():
        for _ in range(60):
            complete_ad(db.session, user_id, "ad_002", now=NOON)
        user = db.session.get(User, user_id)
        assert user.ads_watched_today == 60
        assert user.balance == 60 * 20
        assert user.total_earned == 60 * 20


def test_credit_applies_to_current_row(app, make_user):
    user_id = make_user("basic", balance=0)

    with app.app_context():
        stale = db.session.get(User, user_id)
        assert stale.balance == 0

        db.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(balance=1000, ads_watched_today=50, last_ad_date=NOON)
            .execution_options(synchronize_session=False)
        )

        # the cap is judged on the locked row, not the cached one
        with pytest.raises(DailyLimitReached):
            complete_ad(db.session, user_id, "ad_001", now=NOON)
        db.session.rollback()
        assert stale.balance == 0

        db.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(balance=1000, ads_watched_today=0)
            .execution_options(synchronize_session=False)
        )
        user, _, _ = complete_ad(db.session, user_id, "ad_001", now=NOON)
        assert user is stale
        assert user.balance == 1015
        assert user.ads_watched_today == 1


def test_counter_resets_on_new_day(app, make_user):
    user_id = make_user("basic", ads_watched_today=50, last_ad_date=NOON - timedelta(days=1))

    with app.app_context():
        user, earnings, _ = complete_ad(db.session, user_id, "ad_001", now=NOON)
        assert earnings == 15
        assert user.ads_watched_today == 1


def test_reset_uses_local_calendar_day(app, make_user):
    # 23:30 UTC on the 9th is already 00:30 on the 10th in Lagos
    late = datetime(2026, 3, 9, 23, 30)
    user_id = make_user("basic", ads_watched_today=50, last_ad_date=datetime(2026, 3, 9, 22, 0))

    with app.app_context():
        user, _, _ = complete_ad(db.session, user_id, "ad_001", now=late)
        assert user.ads_watched_today == 1


def test_load_persists_reset(app, make_user, fetch_user):
    user_id = make_user("basic", ads_watched_today=12, last_ad_date=NOON - timedelta(days=2))

    with app.app_context():
        user = db.session.get(User, user_id)
        load_ad(db.session, user, now=NOON)

    assert fetch_user(user_id).ads_watched_today == 0


def test_counter_is_monotonic_within_a_day(app, make_user):
    user_id = make_user("basic")
    seen = []
    with app.app_context():
        for minute in range(5):
            user, _, _ = complete_ad(db.session, user_id, "ad_004", now=NOON + timedelta(minutes=minute))
            seen.append(user.ads_watched_today)
    assert seen == [1, 2, 3, 4, 5]
