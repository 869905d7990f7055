from datetime import datetime, timedelta
from unittest.mock import patch, MagicMock

import pytest

from safespace.authentication.models import User, OTP_PURPOSE_REGISTER, OTP_PURPOSE_RESET
from safespace.authentication.views import (register_account, generate_code, generate_otp, verify_code,
                                            change_password, authenticate, resend_code)
from safespace.errors import (ConflictError, NotFoundError, InvalidCode, Expired, Mismatch, TooShort,
                              ValidationError, Unverified, InvalidCredentials, ResetNotAllowed)

START = datetime(2024, 5, 1, 12, 0, 0)


def test_generate_otp_is_six_digits(app):
    for _ in range(50):
        otp = generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()


def test_register_stores_unverified_account_with_code(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)

    assert user.is_verified is False
    assert user.otp == otp
    assert user.otp_purpose == OTP_PURPOSE_REGISTER
    assert user.otp_expired_at == START + timedelta(seconds=180)
    assert user.password != 'pw123456'


def test_register_duplicate_email_is_rejected_before_new_code(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)

    with pytest.raises(ConflictError):
        register_account('a@x.com', 'another-password')

    assert User.query.filter_by(email='a@x.com').first().otp == otp


@pytest.mark.parametrize('email, password, error', [
    (None, 'pw123456', ValidationError),
    ('not-an-email', 'pw123456', ValidationError),
    ('a@x.com', None, ValidationError),
    ('a@x.com', 'short', TooShort),
])
def test_register_rejects_bad_input(app, email, password, error):
    with pytest.raises(error):
        register_account(email, password)
    assert User.query.count() == 0


def test_verify_example_scenario(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)

    with pytest.raises(InvalidCode):
        verify_code('a@x.com', '000000', now=START + timedelta(seconds=10))

    with pytest.raises(Expired):
        verify_code('a@x.com', otp, now=START + timedelta(seconds=181))

    assert verify_code('a@x.com', otp, now=START + timedelta(seconds=60)) == OTP_PURPOSE_REGISTER
    assert User.query.filter_by(email='a@x.com').first().is_verified is True


def test_verify_accepts_code_at_exact_expiry_instant(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)
    expiry = START + timedelta(seconds=180)

    with pytest.raises(Expired):
        verify_code('a@x.com', otp, now=expiry + timedelta(microseconds=1))

    assert verify_code('a@x.com', otp, now=expiry) == OTP_PURPOSE_REGISTER


def test_verify_checks_code_before_expiry(app):
    register_account('a@x.com', 'pw123456', now=START)

    with pytest.raises(InvalidCode):
        verify_code('a@x.com', '000000', now=START + timedelta(hours=1))


def test_verify_unknown_email(app):
    with pytest.raises(NotFoundError):
        verify_code('nobody@x.com', '123456')


def test_verify_compares_as_strings(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)
    assert verify_code('a@x.com', int(otp), now=START) == OTP_PURPOSE_REGISTER


def test_code_is_single_use(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)
    verify_code('a@x.com', otp, now=START)

    user = User.query.filter_by(email='a@x.com').first()
    assert user.otp is None
    with pytest.raises(InvalidCode):
        verify_code('a@x.com', otp, now=START)


def test_failed_verification_leaves_account_pending(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)

    with pytest.raises(InvalidCode):
        verify_code('a@x.com', '000000', now=START)

    user = User.query.filter_by(email='a@x.com').first()
    assert user.is_verified is False
    assert user.otp == otp


def test_generate_code_overwrites_outstanding_code(app):
    user, first = register_account('a@x.com', 'pw123456', now=START)
    later = START + timedelta(minutes=5)
    user, second = generate_code('a@x.com', OTP_PURPOSE_REGISTER, now=later)

    assert user.otp == second
    assert user.otp_expired_at == later + timedelta(seconds=180)
    if first != second:
        with pytest.raises(InvalidCode):
            verify_code('a@x.com', first, now=later)


def test_generate_code_unknown_email(app):
    with pytest.raises(NotFoundError):
        generate_code('nobody@x.com', OTP_PURPOSE_RESET)


def test_resend_refused_for_verified_account(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)
    verify_code('a@x.com', otp, now=START)

    with pytest.raises(ConflictError):
        resend_code('a@x.com')


def test_authenticate_unverified_regardless_of_password(app):
    register_account('a@x.com', 'pw123456')

    with pytest.raises(Unverified):
        authenticate('a@x.com', 'pw123456')
    with pytest.raises(Unverified):
        authenticate('a@x.com', 'wrong-password')


def test_authenticate_verified_account(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)
    verify_code('a@x.com', otp, now=START)

    assert authenticate('a@x.com', 'pw123456').email == 'a@x.com'
    with pytest.raises(InvalidCredentials):
        authenticate('a@x.com', 'wrong-password')
    with pytest.raises(NotFoundError):
        authenticate('nobody@x.com', 'pw123456')


def test_password_reset_flow(app):
    user, otp = register_account('a@x.com', 'pw123456', now=START)
    verify_code('a@x.com', otp, now=START)

    with pytest.raises(ResetNotAllowed):
        change_password('a@x.com', 'newpass1', 'newpass1')

    user, reset_otp = generate_code('a@x.com', OTP_PURPOSE_RESET, now=START)
    assert verify_code('a@x.com', reset_otp, now=START) == OTP_PURPOSE_RESET

    change_password('a@x.com', 'newpass1', 'newpass1')
    assert authenticate('a@x.com', 'newpass1')

    with pytest.raises(ResetNotAllowed):
        change_password('a@x.com', 'newpass2', 'newpass2')


def test_change_password_preconditions(app):
    with pytest.raises(Mismatch):
        change_password('a@x.com', 'abcdef', 'abcdeg')
    with pytest.raises(TooShort):
        change_password('a@x.com', 'abc', 'abc')
    with pytest.raises(TooShort):
        change_password('a@x.com', '', '')
    with pytest.raises(Mismatch):
        change_password('a@x.com', '', 'abcdef')
    with pytest.raises(ValidationError):
        change_password('a@x.com', None, None)


def test_unique_constraint_rejects_racing_registration(app):
    register_account('a@x.com', 'pw123456')

    # Another request commits the same email after this one's existence check
    missed_check = MagicMock()
    missed_check.filter_by.return_value.first.return_value = None
    with patch.object(User, 'query', missed_check):
        with pytest.raises(ConflictError):
            register_account('a@x.com', 'other-password')

    assert User.query.filter_by(email='a@x.com').count() == 1
