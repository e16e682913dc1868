"""
CSRF nonces for the dismiss endpoint.

A nonce is the action name and a random per-session id, signed with the app's
SECRET_KEY. It is only valid for the session that requested it and expires
after NONCE_MAX_AGE seconds.
"""
import logging
import secrets

from flask import current_app, session
from itsdangerous import BadSignature, URLSafeTimedSerializer

log = logging.getLogger("adminnotices.nonce")

DISMISS_ACTION = "dismiss_admin_notice"
_SALT = "adminnotices-nonce"
_SESSION_KEY = "_notice_nonce_uid"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=_SALT)


def _session_uid() -> str:
    uid = session.get(_SESSION_KEY)
    if not uid:
        uid = secrets.token_hex(16)
        session[_SESSION_KEY] = uid
    return uid


def create_nonce(action: str = DISMISS_ACTION) -> str:
    return _serializer().dumps({"action": action, "uid": _session_uid()})


def verify_nonce(token, action: str = DISMISS_ACTION) -> bool:
    if not token or not isinstance(token, str):
        return False
    max_age = current_app.config.get("NONCE_MAX_AGE", 86400)
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except BadSignature as exc:
        # SignatureExpired is a BadSignature subclass
        log.debug("Rejected nonce: %s", exc)
        return False
    if not isinstance(payload, dict) or payload.get("action") != action:
        return False
    uid = session.get(_SESSION_KEY)
    return bool(uid) and secrets.compare_digest(str(payload.get("uid", "")), uid)
