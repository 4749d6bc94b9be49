from flask import Blueprint

from adpay.extensions import db, login_manager
from adpay.models.user import User
from adpay.utils import bearer_token

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

from . import routes  # noqa: E402,F401  (ensures routes are imported)


@login_manager.request_loader
def load_user_from_request(request):
    from .utils import load_session_token

    token = bearer_token(request)
    if not token:
        return None
    user_id = load_session_token(token)
    if user_id is None:
        return None
    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    from adpay.errors import Unauthorized

    raise Unauthorized()
