"""Extension singletons, bound to the app by create_app().

Identity comes from two places: the cookie session (user_loader) and a
Firebase ID token in the Authorization header (request_loader). Either way
the user id is the identity provider's uid.
"""

from flask import request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
# Per-route limits only, counted in-process
limiter = Limiter(key_func=get_remote_address, default_limits=[], storage_uri="memory://")


@login_manager.user_loader
def load_user(user_id):
    """Session login: the stored id is the user's uid."""
    from fundbridge.models.user import User

    return db.session.get(User, user_id)


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve the caller from an `Authorization: Bearer <ID token>` header.

    The verified token uid is the user's primary key. A first-time uid is
    provisioned a users row. Returns None (anonymous) when the header is
    missing, the token does not verify, or the account is deactivated.
    """
    from fundbridge.services.firebase_service import bearer_token, verify_id_token
    from fundbridge.services.user_service import provision_user
    from fundbridge.models.user import User

    token = bearer_token(req or request)
    if not token:
        return None

    claims = verify_id_token(token)
    if claims is None:
        return None

    user = db.session.get(User, claims["uid"])
    if user is None:
        user = provision_user(claims)
        if user is None:
            return None
        db.session.commit()
    if not user.is_active:
        return None
    return user
