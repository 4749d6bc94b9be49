from functools import wraps

from flask_login import current_user, login_required

from adpay.errors import AccountInactive


def active_required(f):
    """Registered but not yet activated accounts cannot earn or withdraw."""
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_active:
            raise AccountInactive(status_code=403)
        return f(*args, **kwargs)
    return decorated_function
