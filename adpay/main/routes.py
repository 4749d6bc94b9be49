from flask import current_app
from sqlalchemy import text

from adpay.extensions import db
from adpay.utils import api_response, utcnow
from . import main_bp


@main_bp.route("/health", methods=["GET"])
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        current_app.logger.warning("Health check database probe failed: %s", e)
        db.session.rollback()
        database = "unavailable"

    return api_response(
        {
            "timestamp": utcnow().isoformat() + "Z",
            "database": database,
            "environment": current_app.config.get("ENV", "development"),
        },
        message="AdPay API is live.",
    )
