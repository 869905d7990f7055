# safespace/authentication/models.py
from datetime import datetime
from safespace.init_db import db

OTP_PURPOSE_REGISTER = 'register'
OTP_PURPOSE_RESET = 'reset'

class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(100), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    otp = db.Column(db.String(6), nullable=True)
    otp_expired_at = db.Column(db.DateTime, nullable=True)
    otp_purpose = db.Column(db.String(16), nullable=True)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    reset_allowed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {'id': self.id, 'email': self.email}
