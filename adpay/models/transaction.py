from adpay.extensions import db
from adpay.utils import iso, utcnow

TRANSACTION_TYPES = ("ad_view", "referral_bonus", "withdrawal", "registration")
TRANSACTION_STATUSES = ("pending", "completed", "failed")


class Transaction(db.Model):
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    type = db.Column(db.String(20), nullable=False, index=True)
    amount = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=False)

    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    # pending | completed | failed

    reference = db.Column(db.String(64), unique=True, nullable=False, index=True)
    meta = db.Column("metadata", db.JSON, nullable=False, default=dict)
    note = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    processed_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship(
        "User",
        backref=db.backref("transactions", lazy="dynamic"),
        foreign_keys=[user_id],
    )

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} user_id={self.user_id} type={self.type} amount={self.amount} status={self.status}>"

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    @property
    def is_final(self) -> bool:
        return self.status in {"completed", "failed"}

    def to_dict(self, with_user: bool = False) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "amount": self.amount,
            "description": self.description,
            "status": self.status,
            "reference": self.reference,
            "metadata": self.meta or {},
            "note": self.note,
            "createdAt": iso(self.created_at),
            "processedAt": iso(self.processed_at),
        }
        if with_user:
            data["user"] = {
                "id": self.user.id,
                "fullName": self.user.full_name,
                "email": self.user.email,
            } if self.user else None
        return data
