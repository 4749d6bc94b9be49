from werkzeug.security import generate_password_hash

from adpay.extensions import db
from adpay.models import Token, Transaction, User


def _register_and_get_id(register, code, **kwargs):
    resp = register(code, **kwargs)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]["user"]["id"]


def _activate(client, admin_headers, user_id):
    return client.put(f"/api/admin/users/{user_id}/activate", headers=admin_headers)


def test_admin_login_rejects_bad_credentials(client):
    resp = client.post("/api/admin/login", json={"email": "admin@adpay.ng", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid admin credentials."


def test_admin_login_with_password_hash(app, client):
    app.config["ADMIN_PASSWORD_HASH"] = generate_password_hash("hashed-secret")
    app.config["ADMIN_PASSWORD"] = ""

    ok = client.post("/api/admin/login", json={"email": "ADMIN@adpay.ng", "password": "hashed-secret"})
    assert ok.status_code == 200
    bad = client.post("/api/admin/login", json={"email": "admin@adpay.ng", "password": "admin-pass"})
    assert bad.status_code == 401


def test_admin_login_accepts_any_configured_address(app, client):
    app.config["ADMIN_EMAIL"] = "ops@adpay.test"

    resp = client.post("/api/admin/login", json={"email": "ops@adpay.test", "password": "admin-pass"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["token"]

    missing = client.post("/api/admin/login", json={"password": "admin-pass"})
    assert missing.status_code == 400


def test_admin_endpoints_require_admin_token(client, make_user, auth_headers):
    assert client.get("/api/admin/dashboard").status_code == 401
    # a user session token is not an admin token
    user_headers = auth_headers(make_user())
    assert client.get("/api/admin/dashboard", headers=user_headers).status_code == 401
    assert client.post(
        "/api/admin/tokens/generate", json={"userType": "basic"}, headers=user_headers
    ).status_code == 401


def test_generate_tokens(app, client, admin_headers):
    resp = client.post(
        "/api/admin/tokens/generate",
        json={"userType": "premium", "quantity": 3},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    tokens = resp.get_json()["data"]["tokens"]
    assert len(tokens) == 3
    assert {t["price"] for t in tokens} == {5000}
    assert len({t["code"] for t in tokens}) == 3
    assert all(t["code"] == t["code"].upper() and len(t["code"]) == 8 for t in tokens)
    assert all(t["expiresAt"] for t in tokens)


def test_generate_tokens_validates_input(client, admin_headers):
    bad_type = client.post("/api/admin/tokens/generate", json={"userType": "gold"}, headers=admin_headers)
    assert bad_type.status_code == 400
    too_many = client.post(
        "/api/admin/tokens/generate", json={"userType": "basic", "quantity": 500}, headers=admin_headers
    )
    assert too_many.status_code == 400


def test_list_tokens_filters_and_paginates(client, admin_headers, make_token, register):
    codes = [make_token() for _ in range(5)]
    _register_and_get_id(register, codes[0])

    resp = client.get("/api/admin/tokens?limit=2&page=1", headers=admin_headers)
    data = resp.get_json()["data"]
    assert data["total"] == 5
    assert data["totalPages"] == 3
    assert len(data["tokens"]) == 2

    used = client.get("/api/admin/tokens?used=true", headers=admin_headers).get_json()["data"]
    assert used["total"] == 1
    assert used["tokens"][0]["usedBy"]["email"] == "ada@example.com"

    unused = client.get("/api/admin/tokens?used=false", headers=admin_headers).get_json()["data"]
    assert unused["total"] == 4


def test_pending_users_include_registration_token(client, admin_headers, make_token, register):
    code = make_token()
    user_id = _register_and_get_id(register, code)

    resp = client.get("/api/admin/users/pending", headers=admin_headers)
    users = resp.get_json()["data"]["users"]
    assert [u["id"] for u in users] == [user_id]
    assert users[0]["registrationToken"]["code"] == code
    assert users[0]["registrationToken"]["price"] == 3000


def test_list_users_filters(client, admin_headers, make_user):
    make_user(user_type="basic", active=True)
    make_user(user_type="premium", active=True)
    make_user(user_type="basic", active=False)

    all_users = client.get("/api/admin/users", headers=admin_headers).get_json()["data"]
    assert all_users["total"] == 3

    premium = client.get("/api/admin/users?userType=premium", headers=admin_headers).get_json()["data"]
    assert premium["total"] == 1

    inactive = client.get("/api/admin/users?active=false", headers=admin_headers).get_json()["data"]
    assert inactive["total"] == 1


def test_activation_records_registration_fee(app, client, admin_headers, make_token, register):
    user_id = _register_and_get_id(register, make_token("basic"))

    resp = _activate(client, admin_headers, user_id)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["isActive"] is True

    with app.app_context():
        txns = Transaction.query.filter_by(user_id=user_id).all()
        assert len(txns) == 1
        assert txns[0].type == "registration"
        assert txns[0].amount == 3000
        assert txns[0].status == "completed"
        assert Transaction.query.filter_by(type="referral_bonus").count() == 0


def test_activation_pays_referral_bonus_once(app, client, admin_headers, make_token, register, make_user, fetch_user):
    referrer_id = make_user(balance=100)
    referral_code = fetch_user(referrer_id).referral_code

    user_id = _register_and_get_id(register, make_token("basic"), referral_code=referral_code)

    assert _activate(client, admin_headers, user_id).status_code == 200
    assert fetch_user(referrer_id).balance == 600

    again = _activate(client, admin_headers, user_id)
    assert again.status_code == 400
    assert again.get_json()["message"] == "User is already active."
    assert fetch_user(referrer_id).balance == 600

    with app.app_context():
        bonuses = Transaction.query.filter_by(user_id=referrer_id, type="referral_bonus").all()
        assert len(bonuses) == 1
        assert bonuses[0].amount == 500
        assert bonuses[0].meta["referredUser"] == user_id
        assert Transaction.query.filter_by(user_id=user_id, type="registration").count() == 1


def test_premium_referral_bonus(client, admin_headers, make_token, register, make_user, fetch_user):
    referrer_id = make_user()
    code = fetch_user(referrer_id).referral_code
    user_id = _register_and_get_id(register, make_token("premium"), user_type="premium", referral_code=code)

    assert _activate(client, admin_headers, user_id).status_code == 200
    assert fetch_user(referrer_id).balance == 1000


def test_activation_errors(client, admin_headers, make_user):
    missing = _activate(client, admin_headers, 9999)
    assert missing.status_code == 404

    # inserted directly, never consumed a token
    user_id = make_user(active=False)
    no_token = _activate(client, admin_headers, user_id)
    assert no_token.status_code == 400
    assert no_token.get_json()["message"] == "No registration token found for this user."


def test_activation_sends_email_when_configured(app, client, admin_headers, make_token, register, monkeypatch):
    sent = []

    class FakeResponse:
        status_code = 202

    class FakeClient:
        def __init__(self, api_key):
            self.api_key = api_key

        def send(self, message):
            sent.append(message)
            return FakeResponse()

    monkeypatch.setattr("adpay.services.notifications.SendGridAPIClient", FakeClient)
    app.config["SENDGRID_API_KEY"] = "SG.test"
    app.config["MAIL_DEFAULT_SENDER"] = "noreply@adpay.ng"

    user_id = _register_and_get_id(register, make_token())
    assert _activate(client, admin_headers, user_id).status_code == 200
    assert len(sent) == 1


def test_activation_survives_email_failure(app, client, admin_headers, make_token, register, fetch_user, monkeypatch):
    class BrokenClient:
        def __init__(self, api_key):
            pass

        def send(self, message):
            raise RuntimeError("sendgrid down")

    monkeypatch.setattr("adpay.services.notifications.SendGridAPIClient", BrokenClient)
    app.config["SENDGRID_API_KEY"] = "SG.test"
    app.config["MAIL_DEFAULT_SENDER"] = "noreply@adpay.ng"

    user_id = _register_and_get_id(register, make_token())
    assert _activate(client, admin_headers, user_id).status_code == 200
    assert fetch_user(user_id).is_active is True


def test_dashboard_stats(client, admin_headers, make_token, register, make_user, fetch_user):
    referrer_id = make_user(user_type="premium")
    code = fetch_user(referrer_id).referral_code
    make_user(active=False)

    user_id = _register_and_get_id(register, make_token(), referral_code=code)
    _activate(client, admin_headers, user_id)

    resp = client.get("/api/admin/dashboard", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    stats = data["stats"]
    assert stats["totalUsers"] == 3
    assert stats["activeUsers"] == 2
    assert stats["pendingUsers"] == 1
    assert stats["basicUsers"] == 1
    assert stats["premiumUsers"] == 1
    assert stats["totalRevenue"] == 3000
    assert stats["totalReferralBonuses"] == 500
    assert stats["totalPayouts"] == 0

    recent = data["recentTransactions"]
    assert len(recent) == 2
    assert {t["user"]["id"] for t in recent} == {user_id, referrer_id}


def test_purge_expired_tokens_command(app, make_token):
    fresh = make_token()
    stale = make_token()
    with app.app_context():
        token = Token.query.filter_by(code=stale).one()
        token.expires_at = token.created_at
        db.session.commit()

    result = app.test_cli_runner().invoke(args=["purge-expired-tokens"])
    assert "Deleted 1 expired token(s)." in result.output

    with app.app_context():
        assert [t.code for t in Token.query.all()] == [fresh]


def test_generate_tokens_command(app):
    result = app.test_cli_runner().invoke(args=["generate-tokens", "--type", "premium", "--quantity", "2"])
    assert result.exit_code == 0
    assert len(result.output.strip().splitlines()) == 2

    with app.app_context():
        assert Token.query.filter_by(user_type="premium").count() == 2
        assert User.query.count() == 0
