import pytest

from adpay import create_app
from adpay.auth.utils import generate_session_token
from adpay.extensions import db
from adpay.models import User
from adpay.services.registration import generate_unique_referral_code
from adpay.services.tokens import generate_tokens

ADMIN_EMAIL = "admin@adpay.ng"
ADMIN_PASSWORD = "admin-pass"


@pytest.fixture
def app():
    app = create_app("config.TestingConfig")
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(client):
    resp = client.post("/api/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.get_json()['data']['token']}"}


@pytest.fixture
def make_token(app):
    def _make(user_type="basic"):
        with app.app_context():
            return generate_tokens(db.session, user_type, 1)[0].code
    return _make


@pytest.fixture
def make_user(app):
    """Insert a user directly and return its id."""
    counter = {"n": 0}

    def _make(user_type="basic", active=True, balance=0, bank=True, referred_by_id=None, **extra):
        counter["n"] += 1
        n = counter["n"]
        with app.app_context():
            user = User(
                full_name=f"Test User {n}",
                email=f"user{n}@example.com",
                phone=f"0801000{n:04d}",
                user_type=user_type,
                referral_code=generate_unique_referral_code(db.session),
                referred_by_id=referred_by_id,
                balance=balance,
                is_active=active,
                **extra,
            )
            user.set_password("secret123")
            if bank:
                user.bank_name = "First Bank"
                user.account_number = "0123456789"
                user.account_name = f"Test User {n}"
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user_id):
        with app.app_context():
            user = db.session.get(User, user_id)
            return {"Authorization": f"Bearer {generate_session_token(user)}"}
    return _headers


@pytest.fixture
def register(client):
    def _register(token_code, user_type="basic", referral_code=None, **overrides):
        payload = {
            "fullName": "Ada Lovelace",
            "email": "ada@example.com",
            "phone": "08030000001",
            "password": "secret123",
            "userType": user_type,
            "tokenCode": token_code,
        }
        if referral_code:
            payload["referralCode"] = referral_code
        payload.update(overrides)
        return client.post("/api/auth/register", json=payload)
    return _register


@pytest.fixture
def fetch_user(app):
    """Fresh, detached copy of a user row."""
    def _fetch(user_id):
        with app.app_context():
            user = db.session.get(User, user_id)
            db.session.expunge(user)
            return user
    return _fetch
