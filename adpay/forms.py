from flask_wtf import FlaskForm
from wtforms import IntegerField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional, Regexp

from adpay.errors import ValidationFailed

TIER_CHOICES = [("basic", "Basic"), ("premium", "Premium")]


def validate_or_raise(form):
    """Validate a JSON-backed form, raising ValidationFailed on the first problem."""
    if form.validate_on_submit():
        return form
    errors = {field.name: list(field.errors) for field in form if field.errors}
    if not errors:
        raise ValidationFailed()
    name, msgs = next(iter(errors.items()))
    raise ValidationFailed(f"{name}: {msgs[0]}", errors=errors)


def _strip(value):
    return str(value).strip() if value is not None else value


class RegisterForm(FlaskForm):
    full_name = StringField("Full name", name="fullName", filters=[_strip],
                            validators=[DataRequired(), Length(max=120)])
    email = StringField("Email", filters=[_strip], validators=[DataRequired(), Email(), Length(max=120)])
    phone = StringField("Phone", filters=[_strip], validators=[DataRequired(), Length(min=7, max=20)])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6, max=128)])
    user_type = SelectField("User type", name="userType", choices=TIER_CHOICES,
                            validators=[DataRequired()])
    token_code = StringField("Token code", name="tokenCode", filters=[_strip],
                             validators=[DataRequired(), Length(max=16)])
    referral_code = StringField("Referral code", name="referralCode", filters=[_strip],
                                validators=[Optional(), Length(max=10)])


class LoginForm(FlaskForm):
    email = StringField("Email", filters=[_strip], validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])


class AdminLoginForm(FlaskForm):
    # compared against ADMIN_EMAIL, not delivered to
    email = StringField("Email", filters=[_strip], validators=[DataRequired(), Length(max=120)])
    password = PasswordField("Password", validators=[DataRequired()])


class BankDetailsForm(FlaskForm):
    bank_name = StringField("Bank name", name="bankName", filters=[_strip],
                            validators=[DataRequired(message="All bank details are required."),
                                        Length(max=120)])
    account_number = StringField("Account number", name="accountNumber", filters=[_strip],
                                 validators=[DataRequired(message="All bank details are required."),
                                             Regexp(r"^\d{10,20}$", message="Invalid account number.")])
    account_name = StringField("Account name", name="accountName", filters=[_strip],
                               validators=[DataRequired(message="All bank details are required."),
                                           Length(max=120)])


class CompleteAdForm(FlaskForm):
    ad_id = StringField("Ad id", name="adId", filters=[_strip], validators=[DataRequired()])


class WithdrawalForm(FlaskForm):
    amount = IntegerField("Amount", validators=[DataRequired(), NumberRange(min=1)])


class TokenGenerateForm(FlaskForm):
    user_type = SelectField("User type", name="userType", choices=TIER_CHOICES,
                            validators=[DataRequired(message='Invalid user type. Must be "basic" or "premium".')])
    quantity = IntegerField("Quantity", default=1, validators=[Optional(), NumberRange(min=1, max=100)])


class WithdrawalStatusForm(FlaskForm):
    status = SelectField("Status", choices=[("completed", "Completed"), ("failed", "Failed")],
                         validators=[DataRequired()])
    note = StringField("Note", filters=[_strip], validators=[Optional(), Length(max=255)])
