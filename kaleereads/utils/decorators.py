from functools import wraps
from flask import jsonify
from flask_login import current_user

from kaleereads.utils.messages import AUTH_REQUIRED, PRIVILEGES_REQUIRED


def role_required(*roles):
    """Decorator to require specific user roles for an API route."""
    def wrapper(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': str(AUTH_REQUIRED)}), 401
            if current_user.role not in roles:
                return jsonify({'error': str(PRIVILEGES_REQUIRED)}), 403
            return f(*args, **kwargs)
        return decorated_function
    return wrapper
