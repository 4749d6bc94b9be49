from datetime import timedelta

from flask import current_app

from adpay.extensions import db
from adpay.utils import iso, utcnow


def token_expiry(created_at=None):
    created = created_at or utcnow()
    return created + timedelta(days=current_app.config.get("TOKEN_TTL_DAYS", 30))


class Token(db.Model):
    __tablename__ = "tokens"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    user_type = db.Column(db.String(10), nullable=False)
    price = db.Column(db.Integer, nullable=False)

    is_used = db.Column(db.Boolean, nullable=False, default=False, index=True)
    used_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, unique=True)
    used_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False, default=token_expiry)

    used_by = db.relationship("User", foreign_keys=[used_by_id])

    def __repr__(self) -> str:
        return f"<Token code={self.code} type={self.user_type} used={self.is_used}>"

    def is_expired(self, now=None) -> bool:
        return self.expires_at is not None and (now or utcnow()) >= self.expires_at

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "code": self.code,
            "userType": self.user_type,
            "price": self.price,
            "isUsed": self.is_used,
            "usedAt": iso(self.used_at),
            "createdAt": iso(self.created_at),
            "expiresAt": iso(self.expires_at),
            "usedBy": None,
        }
        if self.used_by is not None:
            data["usedBy"] = {
                "id": self.used_by.id,
                "fullName": self.used_by.full_name,
                "email": self.used_by.email,
            }
        return data
