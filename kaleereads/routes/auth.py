import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from kaleereads import db
from kaleereads.models import User
from kaleereads.utils.auth_tokens import issue_bearer_token
from kaleereads.utils.messages import INVALID_CREDENTIALS, INVALID_INPUT

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _user_dict(user):
    return {'id': user.id, 'name': user.name, 'email': user.email, 'role': user.role}


@bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        return jsonify({'error': str(INVALID_INPUT)}), 400

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        logger.info(f"Failed login attempt for {email}")
        return jsonify({'error': str(INVALID_CREDENTIALS)}), 401

    # check_password may have upgraded a legacy hash
    db.session.commit()
    return jsonify({'token': issue_bearer_token(user), 'user': _user_dict(user)})


@bp.route('/me')
@login_required
def me():
    return jsonify({'user': _user_dict(current_user)})
