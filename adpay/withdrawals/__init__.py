from flask import Blueprint

withdrawals_bp = Blueprint("withdrawals", __name__, url_prefix="/api/withdrawals")

from . import routes  # noqa: E402,F401
