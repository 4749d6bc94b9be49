import logging

from flask import current_app
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail


def send_activation_email(user) -> bool:
    """
    Tell the user their account is live. Returns False when mail is not
    configured or SendGrid refuses; activation never depends on it.
    """
    api_key = current_app.config.get("SENDGRID_API_KEY")
    sender = current_app.config.get("MAIL_DEFAULT_SENDER")
    if not api_key or not sender:
        current_app.logger.info("Mail not configured; skipping activation email for user %s", user.id)
        return False

    message = Mail(
        from_email=sender,
        to_emails=user.email,
        subject="Your AdPay account is active",
        html_content=f"""
        <p>Hello {user.full_name},</p>
        <p>Your payment has been verified and your {user.user_type} account is now active.</p>
        <p>You can log in and start watching ads. Your referral code is
        <strong>{user.referral_code}</strong>.</p>
        """
    )

    try:
        resp = SendGridAPIClient(api_key=api_key).send(message)
    except Exception as e:
        body = getattr(e, "body", None)
        status = getattr(e, "status_code", None)
        logging.exception("SendGrid error: status=%s body=%s error=%s", status, body, e)
        return False

    # SendGrid typically returns 202 on success
    if resp.status_code not in (200, 202):
        current_app.logger.warning(
            "SendGrid rejected activation email for user %s. status=%s", user.id, resp.status_code
        )
        return False
    return True
