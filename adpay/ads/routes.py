from flask_login import current_user

from adpay.auth.decorators import active_required
from adpay.extensions import db
from adpay.forms import CompleteAdForm, validate_or_raise
from adpay.services.ads import complete_ad, daily_limit_for, load_ad
from adpay.utils import api_response
from . import ads_bp


@ads_bp.route("/load", methods=["GET", "POST"])
@active_required
def load():
    ad = load_ad(db.session, current_user._get_current_object())
    return api_response({
        "ad": ad,
        "adsWatchedToday": current_user.ads_watched_today,
        "adLimit": daily_limit_for(current_user.user_type) or "Unlimited",
    })


@ads_bp.route("/complete", methods=["POST"])
@active_required
def complete():
    form = validate_or_raise(CompleteAdForm())
    user, earnings, txn = complete_ad(db.session, current_user.id, form.ad_id.data)

    return api_response(
        {
            "earnings": earnings,
            "balance": user.balance,
            "adsWatchedToday": user.ads_watched_today,
            "reference": txn.reference,
        },
        message="Ad completed successfully.",
    )
