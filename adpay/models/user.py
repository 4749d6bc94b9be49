from flask import current_app
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from adpay.extensions import db
from adpay.utils import iso, to_local, utcnow

USER_TYPES = ("basic", "premium")


class User(UserMixin, db.Model):
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    full_name = db.Column(db.String(120), nullable=False)
    user_type = db.Column(db.String(10), nullable=False, default="basic")

    referral_code = db.Column(db.String(10), unique=True, nullable=False, index=True)
    referred_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    # integer naira
    balance = db.Column(db.Integer, nullable=False, default=0)
    total_earned = db.Column(db.Integer, nullable=False, default=0)

    ads_watched_today = db.Column(db.Integer, nullable=False, default=0)
    last_ad_date = db.Column(db.DateTime, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=False, index=True)

    bank_name = db.Column(db.String(120), nullable=True)
    account_number = db.Column(db.String(20), nullable=True)
    account_name = db.Column(db.String(120), nullable=True)

    registration_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    referred_by = db.relationship(
        "User",
        remote_side=[id],
        backref=db.backref("referrals", lazy="dynamic"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} type={self.user_type} active={self.is_active}>"

    @property
    def is_authenticated(self):
        # is_active is the activation gate; unactivated accounts still hold sessions
        return True

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_premium(self) -> bool:
        return self.user_type == "premium"

    @property
    def has_bank_details(self) -> bool:
        return bool(self.bank_name and self.account_number and self.account_name)

    @property
    def bank_account(self) -> dict | None:
        if not self.has_bank_details:
            return None
        return {
            "bankName": self.bank_name,
            "accountNumber": self.account_number,
            "accountName": self.account_name,
        }

    def reset_daily_ads(self, now=None) -> bool:
        """Zero the daily counter when the last ad was on an earlier local day."""
        now = now or utcnow()
        if self.last_ad_date is not None and to_local(self.last_ad_date).date() == to_local(now).date():
            return False
        changed = self.ads_watched_today != 0
        self.ads_watched_today = 0
        return changed

    def to_dict(self, full: bool = False) -> dict:
        data = {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "userType": self.user_type,
            "referralCode": self.referral_code,
            "isActive": self.is_active,
        }
        if full:
            data.update({
                "phone": self.phone,
                "balance": self.balance,
                "totalEarned": self.total_earned,
                "adsWatchedToday": self.ads_watched_today,
                "adLimit": "Unlimited" if self.is_premium else current_app.config["BASIC_DAILY_AD_LIMIT"],
                "bankAccount": self.bank_account,
                "registrationDate": iso(self.registration_date),
            })
        return data
