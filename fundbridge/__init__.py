"""FundBridge API: investment and loan proposals between business owners,
investors and bankers.

create_app() builds the Flask app; every endpoint speaks JSON, including
errors (see register_error_handlers).
"""

import logging
import os
from datetime import datetime, timezone

import click
from flask import Flask, jsonify
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from fundbridge.config import config_by_name
from fundbridge.errors import ApiError, Internal
from fundbridge.extensions import db, migrate, login_manager, csrf, limiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    # JSON only: nothing may be loaded or framed
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Cache-Control": "no-store",
}


def create_app(config_name=None):
    """Build the app for `config_name` (defaults to $FLASK_ENV, then development)."""

    config_name = config_name or os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name[config_name]

    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.testing:
        try:
            config_class.validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")
        logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    for extension in (db, login_manager, csrf, limiter):
        extension.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported before Alembic or create_all() inspect metadata
    with app.app_context():
        from fundbridge import models  # noqa: F401

    from fundbridge.blueprints.investments import investments_bp
    from fundbridge.blueprints.loans import loans_bp
    from fundbridge.blueprints.notifications import notifications_bp
    from fundbridge.blueprints.ideas import ideas_bp
    from fundbridge.blueprints.profile import profile_bp
    from fundbridge.blueprints.users import users_bp

    for blueprint in (
        investments_bp, loans_bp, notifications_bp, profile_bp, ideas_bp, users_bp
    ):
        app.register_blueprint(blueprint)

    @app.route("/health")
    def health():
        return jsonify(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            version=app.config.get("APP_VERSION", "1.0.0"),
        )

    register_error_handlers(app)
    register_security_headers(app)
    register_cli(app)

    return app


def register_security_headers(app):
    """Attach SECURITY_HEADERS (plus HSTS outside debug) to every response."""

    @app.after_request
    def add_security_headers(response):
        response.headers.update(SECURITY_HEADERS)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response


def register_error_handlers(app):
    """Render every failure as {"success": false, "error": {...}}."""

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        db.session.rollback()
        if e.status_code >= 500:
            logger.error(f"{e.code}: {e.message}")
        else:
            logger.info(f"{e.code}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(e):
        db.session.rollback()
        logger.error(f"Storage failure: {e}")
        return jsonify(Internal("A storage error occurred.").to_dict()), 500

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        return jsonify(
            success=False,
            error={"code": "permission-denied", "message": e.description},
        ), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify(
            success=False,
            error={"code": e.name.lower().replace(" ", "-"), "message": e.description},
        ), e.code


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("cleanup-notifications")
    @click.option("--days", type=int, default=None, help="Retention window in days.")
    @click.option("--batch-size", type=int, default=None, help="Max rows deleted per run.")
    def cleanup_notifications(days, batch_size):
        """Delete notifications older than the retention window (one batch).

        Schedule daily, e.g. cron: 0 2 * * * flask cleanup-notifications
        """
        from fundbridge.services.notification_service import cleanup_old_notifications

        deleted = cleanup_old_notifications(days=days, batch_size=batch_size)
        db.session.commit()
        click.echo(f"Deleted {deleted} old notifications")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Create a business person with an idea, an investor, and a banker.

        Usage:
            flask seed-demo
        """
        from fundbridge.models.user import User
        from fundbridge.models.business_idea import BusinessIdea

        def get_or_create(email, **fields):
            user = User.query.filter_by(email=email).first()
            if user:
                click.echo(f"User already exists: {email}")
                return user
            user = User(email=email, **fields)
            db.session.add(user)
            db.session.flush()
            click.echo(f"Created {fields.get('role')}: {email}")
            return user

        owner = get_or_create(
            "owner@fundbridge.local",
            display_name="Asha Owner",
            role="business_person",
            is_complete=True,
            profile={"fullName": "Asha Owner", "companyName": "Chai Co"},
        )
        investor = get_or_create(
            "investor@fundbridge.local",
            display_name="Ravi Investor",
            role="investor",
            is_complete=True,
            profile={
                "fullName": "Ravi Investor",
                "mobileNumber": "+91 98765 43210",
                "companyName": "Ravi Capital",
            },
        )
        banker = get_or_create(
            "banker@fundbridge.local",
            display_name="Meera Banker",
            role="banker",
            is_complete=True,
        )

        idea = BusinessIdea(
            user_id=owner.id,
            title="Cloud kitchen for office lunches",
            description="Subscription lunches delivered to tech parks.",
            category="Food & Beverage",
            budget="10 lakh",
        )
        db.session.add(idea)
        db.session.commit()

        click.echo("\nDemo data ready. Log in with a Firebase token whose uid matches:")
        for label, user in (("owner", owner), ("investor", investor), ("banker", banker)):
            click.echo(f"  {label:<9} {user.email}  uid={user.id}")
        click.echo(f"  idea      {idea.title}  id={idea.id}")
