# safespace/errors.py
from flask import jsonify


class SafeSpaceError(Exception):
    """Base error carrying the HTTP status it maps to at the request boundary."""
    status_code = 500
    message = 'An unexpected error occurred.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'success': False, 'message': self.message}


class ValidationError(SafeSpaceError):
    status_code = 400
    message = 'Invalid input.'

class Mismatch(ValidationError):
    message = 'Passwords do not match.'

class TooShort(ValidationError):
    message = 'Password must be at least 6 characters long.'


class NotFoundError(SafeSpaceError):
    status_code = 404
    message = 'Not found.'


class ConflictError(SafeSpaceError):
    status_code = 400
    message = 'Email already registered'


class InvalidCode(SafeSpaceError):
    status_code = 400
    message = 'Invalid OTP'

class Expired(SafeSpaceError):
    status_code = 400
    message = 'OTP expired'


class AuthError(SafeSpaceError):
    status_code = 401
    message = 'Authentication failed.'

class InvalidCredentials(AuthError):
    message = 'Invalid password.'

class Unverified(AuthError):
    status_code = 403
    message = 'Account not verified.'

class ResetNotAllowed(AuthError):
    status_code = 403
    message = 'OTP not verified. Cannot reset password.'


class DependencyError(SafeSpaceError):
    status_code = 500
    message = 'Database error'

class DeliveryFailed(DependencyError):
    message = 'Failed to send email'


def handle_safespace_error(error):
    return jsonify(error.to_dict()), error.status_code
