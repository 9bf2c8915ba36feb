# app.py: Flask app factory
import os
import logging

import click
from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from errors import RepoCertiError
from extensions import db, migrate, cors, limiter
from routes import register_blueprints
from services.ai import init_ai

# -----------------------
# Load .env explicitly
# -----------------------
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
dotenv_path = os.path.join(BASE_DIR, ".env")


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off")


def load_config():
    load_dotenv(dotenv_path=dotenv_path)
    return {
        # Secret must exist for the session cookie
        "SECRET_KEY": os.environ.get("FLASK_SECRET") or "dev-secret-change-me",
        "SQLALCHEMY_DATABASE_URI": os.environ.get(
            "DATABASE_URI", f"sqlite:///{os.path.join(BASE_DIR, 'repocerti.db')}"),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "MAX_CONTENT_LENGTH": 50 * 1024 * 1024,
        "GOOGLE_API_KEY": os.environ.get("GOOGLE_API_KEY"),
        "GEMINI_MODEL": os.environ.get("GEMINI_MODEL"),
        "CLOUD_UPLOAD_URL": os.environ.get("CLOUD_UPLOAD_URL"),
        "CLOUD_UPLOAD_TIMEOUT": float(os.environ.get("CLOUD_UPLOAD_TIMEOUT", "30")),
        "CORS_ORIGINS": os.environ.get("CORS_ORIGINS", "*"),
        "SEED_DEMO_USERS": _env_flag("SEED_DEMO_USERS", True),
        "RATELIMIT_ENABLED": _env_flag("RATELIMIT_ENABLED", True),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
    }


def create_app(test_config=None):
    app = Flask(__name__, template_folder="templates")
    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    # Logging
    level = getattr(logging, app.config["LOG_LEVEL"], logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger('werkzeug').setLevel(level)

    # -----------------------
    # Extensions
    # -----------------------
    db.init_app(app)
    migrate.init_app(app, db)
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip() and o.strip() != "*"]
    # the session cookie only crosses origins that are named explicitly
    cors.init_app(app, resources={r"/api/*": {"origins": origins or "*"}}, supports_credentials=bool(origins))
    limiter.init_app(app)

    # -----------------------
    # AI init (optional)
    # -----------------------
    init_ai(app)

    register_error_handlers(app)
    register_blueprints(app)
    register_cli_commands(app)

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok", "database": "connected"})

    with app.app_context():
        db.create_all()
        if app.config["SEED_DEMO_USERS"]:
            from seed import seed_demo_users
            seed_demo_users()

    return app


# -----------------------
# Errors -> {"error": message}
# -----------------------
def register_error_handlers(app):

    @app.errorhandler(RepoCertiError)
    def handle_domain_error(e):
        db.session.rollback()
        if e.status_code >= 500:
            app.logger.warning("%s: %s", e.__class__.__name__, e.message)
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        app.logger.exception("Unhandled error")
        if isinstance(e, SQLAlchemyError):
            # statement and parameters stay in the log
            return jsonify({"error": "Server error: database error"}), 500
        return jsonify({"error": f"Server error: {e}"}), 500


# -----------------------
# CLI
# -----------------------
def register_cli_commands(app):

    @app.cli.command("init-db")
    def init_db_command():
        """Creates database tables."""
        db.create_all()
        click.echo("Initialized the database.")

    @app.cli.command("seed-demo")
    @click.option("--with-files", is_flag=True, help="Also add two sample repository files.")
    def seed_demo_command(with_files):
        """Seeds the demo accounts (password: password123)."""
        from seed import seed_demo_files, seed_demo_users
        added = seed_demo_users()
        click.echo(f"Seeded {added} demo user(s).")
        if with_files:
            click.echo(f"Seeded {seed_demo_files()} sample file(s).")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        print("\n=== Registered routes ===")
        for rule in app.url_map.iter_rules():
            print(f"{rule.endpoint:30} -> {rule.rule}")
        print("=========================\n")
    app.run(port=int(os.environ.get("PORT", "3002")), debug=True)
