# safespace/config.py
import os
import binascii

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or binascii.hexlify(os.urandom(24)).decode()

    BASE_DIR = os.path.abspath(os.path.dirname(__file__))

    DATABASE_PATH = os.path.join(BASE_DIR, 'safespace.db')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', f'sqlite:///{DATABASE_PATH}')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JSON file holding the Brevo api_key and sender identity
    EMAIL_CONFIG_PATH = os.environ.get('EMAIL_CONFIG_PATH', os.path.join(BASE_DIR, 'email_config.json'))

    OTP_TTL_SECONDS = int(os.environ.get('OTP_TTL_SECONDS', 180))
    OTP_LENGTH = 6
    MIN_PASSWORD_LENGTH = 6

    REQUIRE_VERIFIED_AUTHOR = os.environ.get('REQUIRE_VERIFIED_AUTHOR', 'false').lower() == 'true'

    LOG_TIMEZONE = os.environ.get('LOG_TIMEZONE', 'UTC')


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    EMAIL_CONFIG_PATH = None
    REQUIRE_VERIFIED_AUTHOR = False
