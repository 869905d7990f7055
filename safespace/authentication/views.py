# safespace/authentication/views.py
import re
import random
from datetime import datetime, timedelta
from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash
from safespace.init_db import db
from safespace.authentication.models import User, OTP_PURPOSE_REGISTER, OTP_PURPOSE_RESET
from safespace.errors import (ValidationError, Mismatch, TooShort, NotFoundError, ConflictError,
                              InvalidCode, Expired, InvalidCredentials, Unverified, ResetNotAllowed)
from safespace.logging_config import setup_logging

logger = setup_logging()

EMAIL_PATTERN = r"[^@]+@[^@]+\.[^@]+"

OTP_SUBJECTS = {
    OTP_PURPOSE_REGISTER: 'Your OTP for Registration',
    OTP_PURPOSE_RESET: 'Your OTP for Password Reset',
}


def hash_password(password):
    return generate_password_hash(password, method='pbkdf2:sha256')

def validate_email(email):
    if not email:
        raise ValidationError('Email is required.')
    if not isinstance(email, str):
        raise ValidationError('Invalid email address.')
    if not re.match(EMAIL_PATTERN, email):
        raise ValidationError('Invalid email address.')

def validate_new_password(password):
    if not isinstance(password, str):
        raise ValidationError('Password must be a string.')
    min_length = current_app.config['MIN_PASSWORD_LENGTH']
    if len(password) < min_length:
        raise TooShort(f'Password must be at least {min_length} characters long.')


# Function to generate a numeric OTP.
# random is not a CSPRNG; the 6-digit space and the short expiry window are
# the only protection against guessing.
def generate_otp():
    length = current_app.config['OTP_LENGTH']
    return str(random.randint(10 ** (length - 1), 10 ** length - 1))

def _assign_otp(user, otp, purpose, now=None):
    now = now or datetime.utcnow()
    user.otp = otp
    user.otp_purpose = purpose
    user.otp_expired_at = now + timedelta(seconds=current_app.config['OTP_TTL_SECONDS'])
    if purpose == OTP_PURPOSE_RESET:
        user.reset_allowed = False

# Function to save the OTP and its expiry on the user's record, replacing any
# outstanding code
def save_otp(user, otp, purpose, now=None):
    _assign_otp(user, otp, purpose, now)
    db.session.commit()


def generate_code(email, purpose, now=None):
    """Issue a fresh code for an existing account. Returns ``(user, otp)``."""
    user = User.query.filter_by(email=email).first()
    if not user:
        raise NotFoundError('User not found.')

    otp = generate_otp()
    save_otp(user, otp, purpose, now)
    logger.info(f"Issued {purpose} OTP for {email}.")
    return user, otp


def dispatch_code(user, otp, purpose):
    """Email ``otp`` to the user.

    The code is already committed when this runs; a ``DeliveryFailed`` here
    leaves it stored and valid until it expires.
    """
    minutes = current_app.config['OTP_TTL_SECONDS'] // 60
    mailer = current_app.extensions['mailer']
    mailer.send(
        to=user.email,
        subject=OTP_SUBJECTS[purpose],
        text=f"Your OTP is: {otp}. It expires in {minutes} minutes."
    )


def register_account(email, password, now=None):
    """Create an unverified account holding a registration code.

    Returns ``(user, otp)``. A duplicate email is rejected before any code is
    generated; the UNIQUE constraint on ``users.email`` rejects a racing
    second writer the same way.
    """
    validate_email(email)
    if not password:
        raise ValidationError('Password is required.')
    validate_new_password(password)

    if User.query.filter_by(email=email).first():
        logger.warning(f"Signup attempt with existing email: {email}")
        raise ConflictError()

    otp = generate_otp()
    user = User(email=email, password=hash_password(password), is_verified=False)
    _assign_otp(user, otp, OTP_PURPOSE_REGISTER, now)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(f"Concurrent signup rejected by unique constraint: {email}")
        raise ConflictError()

    logger.info(f"New user {email} registered, awaiting verification.")
    return user, otp


def resend_code(email, now=None):
    validate_email(email)
    user = User.query.filter_by(email=email).first()
    if not user:
        raise NotFoundError('User not found.')
    if user.is_verified:
        raise ConflictError('Account already verified.')
    return generate_code(email, OTP_PURPOSE_REGISTER, now)


def request_password_reset(email, now=None):
    validate_email(email)
    return generate_code(email, OTP_PURPOSE_RESET, now)


def verify_code(email, submitted_code, now=None):
    """Check ``submitted_code`` against the stored one and consume it.

    Checks run in order: account exists, code matches, code not expired. The
    expiry instant itself is still valid. On success the code is cleared and
    the flow's gate opens: registration marks the account verified, reset
    allows one password change. Returns the purpose of the consumed code.
    """
    if not isinstance(email, str):
        raise ValidationError('Invalid email address.')

    user = User.query.filter_by(email=email).first()
    if not user:
        raise NotFoundError('User not found')

    if user.otp is None or str(submitted_code) != str(user.otp):
        logger.warning(f"Invalid OTP submitted for {email}")
        raise InvalidCode()

    now = now or datetime.utcnow()
    if user.otp_expired_at is None or now > user.otp_expired_at:
        logger.warning(f"Expired OTP submitted for {email}")
        raise Expired()

    purpose = user.otp_purpose or OTP_PURPOSE_REGISTER
    user.otp = None
    user.otp_expired_at = None
    user.otp_purpose = None
    if purpose == OTP_PURPOSE_RESET:
        user.reset_allowed = True
    else:
        user.is_verified = True
    db.session.commit()

    logger.info(f"OTP verified for {email} ({purpose}).")
    return purpose


def change_password(email, new_password, confirm_password):
    # Verification and the change happen in separate requests; nothing stops a
    # second change racing the first before reset_allowed is cleared.
    if not isinstance(new_password, str) or not isinstance(confirm_password, str):
        raise ValidationError('Password fields are required.')
    if new_password != confirm_password:
        raise Mismatch()
    validate_new_password(new_password)
    if not isinstance(email, str):
        raise ValidationError('Invalid email address.')

    user = User.query.filter_by(email=email).first()
    if not user:
        raise NotFoundError('User not found.')
    if not user.reset_allowed:
        logger.warning(f"Password reset attempted without verified OTP for {email}")
        raise ResetNotAllowed()

    user.password = hash_password(new_password)
    user.reset_allowed = False
    db.session.commit()

    logger.info(f"Password reset for {email}.")
    return user


def authenticate(email, password):
    if not email or not password:
        raise ValidationError('Please fill out all fields.')
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError('Email and password must be strings.')

    user = User.query.filter_by(email=email).first()
    if not user:
        raise NotFoundError('User not found.')

    # Unverified accounts are refused whatever the password
    if not user.is_verified:
        raise Unverified()

    if not check_password_hash(user.password, password):
        logger.warning(f"Failed login attempt for email: {email}")
        raise InvalidCredentials()

    return user
