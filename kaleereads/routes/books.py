import os
import logging

from flask import Blueprint, jsonify, request, send_file
from flask_login import login_required, current_user

from kaleereads import db
from kaleereads.models import Book
from kaleereads.services.access_links import validate_access_token, find_active_link
from kaleereads.services.secure_urls import make_secure_url, load_secure_payload, resolve_book_path
from kaleereads.utils.audit_log import log_action
from kaleereads.utils.messages import ACCESS_DENIED, FILE_UNAVAILABLE

logger = logging.getLogger(__name__)

bp = Blueprint('books', __name__)

MIMETYPES = {
    'pdf': 'application/pdf',
    'epub': 'application/epub+zip',
}


def _deny(book_id, reason):
    logger.warning(f"Secure view denied for book {book_id}, user {current_user.id}: {reason}")
    log_action('SECURE_VIEW_DENIED', 'Secure view denied',
               additional_info={'book_id': book_id, 'reason': reason})
    return jsonify({'error': str(ACCESS_DENIED)}), 403


def _check_access(book):
    """Return a denial reason, or None when the current user may read ``book``."""
    if current_user.is_admin:
        return None

    token = request.args.get('access')
    if token:
        result = validate_access_token(token)
        if not result.valid:
            return result.reason
        link = result.access_link
        if link.user_id != current_user.id or link.book_id != book.id:
            return 'Token does not match user or book'
        return None

    if find_active_link(current_user.id, book.id) is None:
        return 'No active access link'
    return None


@bp.route('/api/books/<int:book_id>/secure-view')
@login_required
def secure_view(book_id):
    """Exchange a bearer credential (and optional access token) for a short-lived file URL."""
    book = db.session.get(Book, book_id)
    if book is None:
        return _deny(book_id, 'Book not found')

    reason = _check_access(book)
    if reason:
        return _deny(book_id, reason)

    log_action('SECURE_VIEW_GRANTED', 'Secure view granted', subject=book)
    return jsonify({'data': {
        'book': book.to_viewer_dict(),
        'secureUrl': make_secure_url(book, current_user.id),
    }})


@bp.route('/files/<signed>')
def secure_file(signed):
    payload = load_secure_payload(signed)
    if payload is None:
        return jsonify({'error': str(ACCESS_DENIED)}), 403

    book_id, _user_id = payload
    book = db.session.get(Book, book_id)
    path = resolve_book_path(book) if book else None
    if not path or not os.path.exists(path):
        return jsonify({'error': str(FILE_UNAVAILABLE)}), 404

    response = send_file(path, mimetype=MIMETYPES.get(book.file_type, 'application/octet-stream'),
                         as_attachment=False, max_age=0)
    response.headers['Cache-Control'] = 'no-store'
    response.headers['Content-Disposition'] = 'inline'
    return response
