import logging

from flask import Blueprint, jsonify, request, url_for

from kaleereads import db
from kaleereads.models import User, Book
from kaleereads.services.access_links import (
    create_access_link, validate_access_token, revoke_access_token, get_remaining_time
)
from kaleereads.utils import role_required
from kaleereads.utils.messages import (
    ACCESS_DENIED, INVALID_INPUT, INVALID_EXPIRY, USER_NOT_FOUND, BOOK_NOT_FOUND, LINK_REVOKED
)

logger = logging.getLogger(__name__)

bp = Blueprint('access_links', __name__, url_prefix='/api/access-links')


def _isoformat(value):
    return value.isoformat() + 'Z'


def _link_dict(link):
    return {
        'token': link.token,
        'userId': link.user_id,
        'bookId': link.book_id,
        'bookTitle': link.book.title if link.book else None,
        'createdAt': _isoformat(link.created_at),
        'expiresAt': _isoformat(link.expires_at),
        'state': link.state.value,
        'remaining': get_remaining_time(link.expires_at).to_dict(),
    }


def _is_id(value):
    # JSON true/1.9/"1" are not ids
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@bp.route('', methods=['POST'])
@role_required('admin')
def grant():
    """Grant a user time-limited access to a book (purchase completion, admin preview)."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': str(INVALID_INPUT)}), 400

    user_id = data.get('userId')
    book_id = data.get('bookId')
    if not (_is_id(user_id) and _is_id(book_id)):
        return jsonify({'error': str(INVALID_INPUT)}), 400

    if db.session.get(User, user_id) is None:
        return jsonify({'error': str(USER_NOT_FOUND)}), 404
    if db.session.get(Book, book_id) is None:
        return jsonify({'error': str(BOOK_NOT_FOUND)}), 404

    try:
        link = create_access_link(user_id, book_id, data.get('expiresInHours'))
    except ValueError:
        return jsonify({'error': str(INVALID_EXPIRY)}), 400

    payload = _link_dict(link)
    payload['viewUrl'] = url_for('books.secure_view', book_id=book_id, access=link.token, _external=True)
    return jsonify(payload), 201


@bp.route('/<token>')
def check(token):
    result = validate_access_token(token)
    if not result.valid:
        logger.info(f"Access link check denied: {result.reason}")
        return jsonify({'valid': False, 'error': str(ACCESS_DENIED)}), 404

    payload = _link_dict(result.access_link)
    payload.pop('token')
    payload['valid'] = True
    return jsonify(payload)


@bp.route('/<token>/revoke', methods=['POST'])
@role_required('admin')
def revoke(token):
    # Same answer whether or not the token exists
    revoke_access_token(token)
    return jsonify({'success': True, 'message': str(LINK_REVOKED)})
