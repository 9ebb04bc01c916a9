from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect, generate_csrf
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException
from config import Config

# App version, reported by GET /csrf-token alongside the token
APP_VERSION = '0.1.0'

# Create the database object here, but don't attach it to an app yet
db = SQLAlchemy()

# Schema changes go through migrations/ (flask db upgrade), not db.create_all()
migrate = Migrate()

# Login manager: session-based user authentication
login_manager = LoginManager()

# CSRF protection. JSON clients fetch a token from GET /csrf-token and send
# it back in the X-CSRFToken header on every write.
csrf = CSRFProtect()

# Rate limiter for login/signup.
limiter = Limiter(key_func=get_remote_address, default_limits=[])


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Attach the database and migration engine to this app instance
    db.init_app(app)
    migrate.init_app(app, db)

    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        from forge.models import User
        return db.session.get(User, int(user_id))

    # Every endpoint is JSON, so no redirect to a login page
    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required.'}), 401

    register_error_handlers(app)

    # Register blueprints
    from forge.routes.auth import auth_bp
    from forge.routes.campaigns import campaigns_bp
    from forge.routes.nodes import nodes_bp
    from forge.routes.edges import edges_bp
    from forge.routes.sessions import sessions_bp
    from forge.routes.setup import setup_bp
    from forge.routes.search import search_bp
    from forge.routes.tags import tags_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(campaigns_bp)
    app.register_blueprint(nodes_bp)
    app.register_blueprint(edges_bp)
    app.register_blueprint(sessions_bp)
    app.register_blueprint(setup_bp)
    app.register_blueprint(search_bp)
    app.register_blueprint(tags_bp)

    @app.route('/csrf-token')
    def csrf_token():
        return jsonify({'csrf_token': generate_csrf(), 'version': APP_VERSION})

    return app


def register_error_handlers(app):
    """Render store errors and werkzeug HTTP errors as JSON bodies."""
    from forge.errors import ForgeError

    @app.errorhandler(ForgeError)
    def handle_forge_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.exception(f'Unhandled error: {e}')
        return jsonify({'error': 'Internal server error.'}), 500
