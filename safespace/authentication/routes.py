# safespace/authentication/routes.py
from flask import Blueprint, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from safespace.init_db import db
from safespace.errors import DependencyError
from safespace.logging_config import setup_logging
from safespace.authentication.models import OTP_PURPOSE_REGISTER, OTP_PURPOSE_RESET
from safespace.authentication.views import (register_account, resend_code, request_password_reset, dispatch_code,
                                            verify_code, change_password, authenticate)


auth_bp = Blueprint('auth', __name__)

# Setup logging
logger = setup_logging()


def _database_error(action, e):
    db.session.rollback()
    logger.error(f"Database error during {action}: {e}")
    return DependencyError()


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    password = data.get('password')

    try:
        user, otp = register_account(email, password)
    except SQLAlchemyError as e:
        raise _database_error('registration', e)

    dispatch_code(user, otp, OTP_PURPOSE_REGISTER)
    return jsonify({'success': True, 'message': 'OTP sent successfully'}), 200

@auth_bp.route('/resend-otp', methods=['POST'])
def resend_otp():
    data = request.get_json(silent=True) or {}
    email = data.get('email')

    try:
        user, otp = resend_code(email)
    except SQLAlchemyError as e:
        raise _database_error('OTP resend', e)

    dispatch_code(user, otp, OTP_PURPOSE_REGISTER)
    return jsonify({'success': True, 'message': 'OTP sent successfully'}), 200

@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    password = data.get('password')

    try:
        user = authenticate(email, password)
    except SQLAlchemyError as e:
        logger.error(f"Server error during login: {e}")
        raise DependencyError('Internal server error.')

    logger.info(f"User {email} logged in successfully.")
    return jsonify({
        'success': True,
        'message': 'Login successful',
        'user': user.to_dict(),
    }), 200

@auth_bp.route('/verify-otp', methods=['POST'])
def verify_otp():
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    otp = data.get('otp')

    if not email or not otp:
        return jsonify({'success': False, 'message': 'Email and OTP are required.'}), 400

    try:
        purpose = verify_code(email, otp)
    except SQLAlchemyError as e:
        raise _database_error('OTP verification', e)

    return jsonify({'success': True, 'message': 'OTP verified successfully', 'purpose': purpose}), 200

@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    data = request.get_json(silent=True) or {}
    email = data.get('email')

    try:
        user, otp = request_password_reset(email)
    except SQLAlchemyError as e:
        raise _database_error('password reset request', e)

    dispatch_code(user, otp, OTP_PURPOSE_RESET)
    return jsonify({'success': True, 'message': 'OTP sent to your email address.'}), 200

@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    new_password = data.get('newPassword')
    confirm_password = data.get('confirmPassword')

    if not email:
        return jsonify({'success': False, 'message': 'Email is required.'}), 400

    try:
        change_password(email, new_password, confirm_password)
    except SQLAlchemyError as e:
        raise _database_error('password reset', e)

    return jsonify({'success': True, 'message': 'Password reset successfully.'}), 200
