# safespace/mailer.py
import json
import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException
from urllib3.exceptions import HTTPError
from safespace.errors import DeliveryFailed
from safespace.logging_config import setup_logging

logger = setup_logging()


# Function to load email configuration
def load_email_config(json_path):
    if not json_path:
        return None
    try:
        with open(json_path, 'r') as f:
            email_data = json.load(f)
            return email_data
    except FileNotFoundError:
        logger.error("Email configuration file not found.")
        return None
    except json.JSONDecodeError:
        logger.error("Error decoding the email configuration file.")
        return None


class Mailer:
    """Brevo transactional email transport, bound to the app like ``db``.

    The API client is built once in ``init_app`` and reused for every send.
    Provider and transport errors surface as ``DeliveryFailed``; nothing is retried.
    """

    def __init__(self, app=None):
        self.api_instance = None
        self.sender = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        email_config = load_email_config(app.config.get('EMAIL_CONFIG_PATH'))
        if email_config:
            # Initialize Brevo API client
            configuration = sib_api_v3_sdk.Configuration()
            configuration.api_key['api-key'] = email_config.get('api_key')
            api_client = sib_api_v3_sdk.ApiClient(configuration)
            self.api_instance = sib_api_v3_sdk.TransactionalEmailsApi(api_client)
            self.sender = {
                'name': email_config.get('sender_name', 'SafeSpace'),
                'email': email_config.get('sender_email'),
            }
        else:
            logger.warning("Mailer initialised without email configuration; sends will fail.")
        app.extensions['mailer'] = self

    def send(self, to, subject, text):
        if self.api_instance is None:
            raise DeliveryFailed('Email delivery is not configured.')

        send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
            to=[{"email": to}],
            sender=self.sender,
            subject=subject,
            text_content=text
        )

        try:
            api_response = self.api_instance.send_transac_email(send_smtp_email)
            logger.info(f"Email sent to {to}: {api_response}")
        except (ApiException, HTTPError) as e:
            logger.error(f"Exception when calling TransactionalEmailsApi->send_transac_email: {e}")
            raise DeliveryFailed() from e


mailer = Mailer()
