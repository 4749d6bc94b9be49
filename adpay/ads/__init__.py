from flask import Blueprint

ads_bp = Blueprint("ads", __name__, url_prefix="/api/ads")

from . import routes  # noqa: E402,F401
