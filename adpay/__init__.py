import logging
import os

from flask import Flask

from .extensions import db, login_manager, migrate


def create_app(config_object: str | None = None):
    app = Flask(__name__, instance_relative_config=True)

    # ensure instance folder exists (Flask-managed)
    os.makedirs(app.instance_path, exist_ok=True)

    # Load config by environment
    env = os.getenv("FLASK_ENV", "development").lower()
    if config_object is None:
        if env == "production":
            config_object = "config.ProductionConfig"
        elif env == "testing":
            config_object = "config.TestingConfig"
        else:
            config_object = "config.DevelopmentConfig"
    app.config.from_object(config_object)

    if app.config.get("ENV") == "production":
        missing = []
        if not os.getenv("SECRET_KEY"):
            missing.append("SECRET_KEY")
        if not os.getenv("DATABASE_URL"):
            missing.append("DATABASE_URL")
        if not app.config.get("ADMIN_EMAIL") or not (
            app.config.get("ADMIN_PASSWORD_HASH") or app.config.get("ADMIN_PASSWORD")
        ):
            missing.append("ADMIN_EMAIL/ADMIN_PASSWORD_HASH")

        if missing:
            raise RuntimeError("Missing required production settings: " + ", ".join(missing))

        if not app.config.get("ADMIN_PASSWORD_HASH"):
            app.logger.warning("ADMIN_PASSWORD is plaintext; set ADMIN_PASSWORD_HASH instead")

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # If using sqlite and path is relative, force it into instance_path
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if uri.startswith("sqlite:///") and not uri.startswith("sqlite:////"):
        db_file = os.path.join(app.instance_path, os.path.basename(uri[len("sqlite:///"):]))
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + db_file.replace("\\", "/")

    # Init extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    from . import models  # noqa: F401  (register tables for migrations)
    from .errors import register_error_handlers
    register_error_handlers(app)

    # Blueprints
    from adpay.auth import auth_bp
    from adpay.users import users_bp
    from adpay.ads import ads_bp
    from adpay.withdrawals import withdrawals_bp
    from adpay.admin import admin_bp
    from adpay.main import main_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(ads_bp)
    app.register_blueprint(withdrawals_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(main_bp)

    from .cli import register_cli
    register_cli(app)

    return app
