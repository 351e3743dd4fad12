"""Bearer credentials for the JSON API."""

import logging

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

AUTH_SALT = 'kaleereads-auth'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=AUTH_SALT)


def issue_bearer_token(user) -> str:
    return _serializer().dumps({'uid': user.id})


def verify_bearer_token(token: str):
    """Return the user id carried by ``token`` or None when invalid/expired."""
    try:
        payload = _serializer().loads(token, max_age=current_app.config['AUTH_TOKEN_MAX_AGE'])
    except SignatureExpired:
        logger.info("Expired bearer credential presented")
        return None
    except BadSignature:
        return None
    return payload.get('uid')


def load_bearer_user(req):
    """Flask-Login request loader: ``Authorization: Bearer <token>``."""
    header = req.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None

    user_id = verify_bearer_token(token.strip())
    if user_id is None:
        return None

    from kaleereads import db
    from kaleereads.models import User
    return db.session.get(User, user_id)
