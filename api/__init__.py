import logging

import click
from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, DEV_ACCESS_SECRET, DEV_REFRESH_SECRET
from .errors import register_error_handlers
from models.base_model import utcnow
from models.db_storage import DBStorage
from models.session_store import SessionStore
from models.user import Role
from models.user_store import UserStore
from utils.security import hash_password, password_too_short
from utils.session_manager import SessionManager
from utils.tokens import TokenCodec

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Storefront API",
        "version": "1.0.0",
        "description": "REST API for accounts, sessions, products, carts, orders and addresses.",
    },
    "basePath": "/",  # Blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

logger = logging.getLogger(__name__)


def _check_secrets(app: Flask) -> None:
    if app.config["JWT_ACCESS_SECRET"] == app.config["JWT_REFRESH_SECRET"]:
        raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
    if app.debug or app.testing:
        return
    if app.config["JWT_ACCESS_SECRET"] == DEV_ACCESS_SECRET or app.config["JWT_REFRESH_SECRET"] == DEV_REFRESH_SECRET:
        raise RuntimeError("Refusing to start with development JWT secrets; set JWT_ACCESS_SECRET and JWT_REFRESH_SECRET")


def init_services(app: Flask, clock=utcnow) -> None:
    """Build storage, stores, codec and session manager once for this app."""
    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()

    users = UserStore(storage)
    sessions = SessionStore(storage, ttl=app.config["SESSION_TTL"])
    codec = TokenCodec(
        access_secret=app.config["JWT_ACCESS_SECRET"],
        refresh_secret=app.config["JWT_REFRESH_SECRET"],
        algorithm=app.config["JWT_ALGORITHM"],
        issuer=app.config["JWT_ISSUER"],
        clock=clock,
    )
    manager = SessionManager(
        codec=codec,
        storage=storage,
        sessions=sessions,
        users=users,
        access_ttl=app.config["ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=app.config["REFRESH_TOKEN_EXPIRES"],
        touch_interval=app.config["SESSION_TOUCH_INTERVAL"],
        clock=clock,
    )

    app.extensions["storage"] = storage
    app.extensions["user_store"] = users
    app.extensions["session_manager"] = manager


def register_commands(app: Flask) -> None:
    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Delete session records older than SESSION_TTL."""
        count = app.extensions["session_manager"].purge_expired()
        click.echo(f"Purged {count} session record(s)")

    @app.cli.command("create-admin")
    @click.option("--name", required=True)
    @click.option("--email", required=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--phone", default=None)
    def create_admin(name, email, password, phone):
        """Create an administrator account."""
        users = app.extensions["user_store"]
        if users.email_taken(email):
            raise click.ClickException("Email already exists")
        if password_too_short(password):
            raise click.ClickException("Password must be at least 8 characters long.")
        user = users.create(name=name, email=email, password_hash=hash_password(password), role=Role.ADMIN, phone=phone)
        app.extensions["storage"].save()
        click.echo(f"Created admin {user.email} ({user.id})")


def create_app(config_name: str | None = None, overrides: dict | None = None, clock=utcnow) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `overrides` are applied on top of the selected config class, and `clock`
    is shared by the token codec and the session manager.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _check_secrets(app)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    init_services(app, clock=clock)
    register_commands(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .admin import bp as admin_bp
    from .products import bp as products_bp
    from .cart import bp as cart_bp
    from .orders import bp as orders_bp
    from .addresses import bp as addresses_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(admin_bp, url_prefix="/api/v1/admin")
    app.register_blueprint(products_bp, url_prefix="/api/v1")
    app.register_blueprint(cart_bp, url_prefix="/api/v1")
    app.register_blueprint(orders_bp, url_prefix="/api/v1")
    app.register_blueprint(addresses_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        app.extensions["storage"].close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Storefront API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    logger.info("Storefront API created (env=%s)", app.config.get("APP_ENV"))
    return app
