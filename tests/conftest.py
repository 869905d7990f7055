import pytest

from safespace.app_factory import create_app
from safespace.init_db import db
from safespace.errors import DeliveryFailed


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, text):
        if self.fail:
            raise DeliveryFailed()
        self.sent.append({'to': to, 'subject': subject, 'text': text})


@pytest.fixture
def app():
    app = create_app('safespace.config.TestingConfig')
    app.extensions['mailer'] = FakeMailer()
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(app):
    return app.extensions['mailer']
