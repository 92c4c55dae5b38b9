"""Firebase Admin integration — ID token verification and Cloud Messaging.

The Admin SDK app is initialised lazily from config on first use and cached
for the life of the process. When credentials are not configured both
helpers degrade to no-ops: tokens don't verify, pushes aren't sent.
"""

import logging

import firebase_admin
from firebase_admin import auth, credentials, messaging
from firebase_admin.exceptions import FirebaseError
from flask import current_app

logger = logging.getLogger(__name__)

_firebase_app = None


def get_firebase_app():
    """Get or initialize the Firebase Admin app. Returns None if unconfigured."""
    global _firebase_app

    if _firebase_app is not None:
        return _firebase_app

    project_id = current_app.config.get("FIREBASE_PROJECT_ID")
    client_email = current_app.config.get("FIREBASE_CLIENT_EMAIL")
    private_key = current_app.config.get("FIREBASE_PRIVATE_KEY")

    if not all([project_id, client_email, private_key]):
        logger.warning("Firebase credentials not fully configured")
        return None

    # Handle escaped newlines in private key
    private_key = private_key.replace("\\n", "\n")

    try:
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": project_id,
            "private_key": private_key,
            "client_email": client_email,
            "token_uri": "https://oauth2.googleapis.com/token",
        })
        _firebase_app = firebase_admin.initialize_app(cred, {"projectId": project_id})
        logger.info("Firebase Admin SDK initialized")
        return _firebase_app
    except ValueError as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        return None


def bearer_token(req):
    """Extract the token from an `Authorization: Bearer ...` header, or None."""
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_id_token(token):
    """Verify a Firebase ID token.

    Returns the decoded claims (always carrying "uid"), or None when the
    token does not verify or Firebase is not configured.
    """
    app = get_firebase_app()
    if app is None:
        return None

    try:
        decoded = auth.verify_id_token(token, app=app)
    except auth.ExpiredIdTokenError:
        logger.warning("Expired Firebase token")
        return None
    except auth.InvalidIdTokenError as e:
        logger.warning(f"Invalid Firebase token: {e}")
        return None
    except (auth.CertificateFetchError, ValueError) as e:
        logger.error(f"Firebase token verification failed: {e}")
        return None

    uid = decoded.get("uid") or decoded.get("user_id")
    if not uid:
        return None
    return dict(decoded, uid=uid)


def set_role_claim(uid, role):
    """Mirror `role` into the user's token claims. Best-effort.

    The users table stays the source of truth; the claim only saves clients
    a lookup. Returns True when Firebase accepted the update.
    """
    app = get_firebase_app()
    if app is None:
        return False

    try:
        auth.set_custom_user_claims(uid, {"role": role}, app=app)
    except (FirebaseError, ValueError) as e:
        logger.error(f"Failed to set role claim for {uid}: {e}")
        return False
    return True


def send_push(token, title, body, data=None):
    """Send one push message to a device token. Best-effort.

    Returns True when FCM accepted the message. Failures are logged,
    never raised.
    """
    if not token:
        return False
    if not current_app.config.get("PUSH_NOTIFICATIONS_ENABLED"):
        return False

    app = get_firebase_app()
    if app is None:
        return False

    message = messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        # FCM data payloads are string -> string
        data={k: str(v) for k, v in (data or {}).items() if v is not None},
    )
    try:
        message_id = messaging.send(message, app=app)
    except (FirebaseError, ValueError) as e:
        logger.error(f"FCM send error: {e}")
        return False

    logger.info(f"Push sent: {title} ({message_id})")
    return True
