# safespace/app_factory.py
from flask import Flask, jsonify
from sqlalchemy.exc import OperationalError
from safespace.init_db import db
from safespace.mailer import mailer
from safespace.errors import SafeSpaceError, handle_safespace_error
from safespace.logging_config import setup_logging

def create_app(config_class='safespace.config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(app.config.get('LOG_TIMEZONE'))

    db.init_app(app)
    mailer.init_app(app)

    app.register_error_handler(SafeSpaceError, handle_safespace_error)

    # Import and register blueprints
    from safespace.authentication.routes import auth_bp as auth_blueprint
    app.register_blueprint(auth_blueprint)

    from safespace.community.routes import community_bp as community_blueprint
    app.register_blueprint(community_blueprint)

    @app.route('/')
    def index():
        return jsonify({'status': 'SafeSpace backend running'}), 200

    with app.app_context():
        try:
            db.create_all()
        except OperationalError as e:
            app.logger.error(f"OperationalError during database initialization: {e}")

    return app
