"""
Short-lived direct URLs for book files.

The secure-view endpoint hands the viewer a signed URL instead of the storage
path. The signature carries the book and user ids and expires after
SECURE_URL_TTL_SECONDS.
"""

import os
import logging
from typing import Optional, Tuple

from flask import current_app, url_for
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

SECURE_FILE_SALT = 'kaleereads-secure-file'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=SECURE_FILE_SALT)


def make_secure_url(book, user_id: int) -> str:
    """Absolute URL for streaming ``book`` to ``user_id``."""
    signed = _serializer().dumps({'book_id': book.id, 'uid': user_id})
    return url_for('books.secure_file', signed=signed, _external=True)


def load_secure_payload(signed: str) -> Optional[Tuple[int, int]]:
    """Return ``(book_id, user_id)`` for a valid, unexpired signature, else None."""
    try:
        payload = _serializer().loads(signed, max_age=current_app.config['SECURE_URL_TTL_SECONDS'])
    except SignatureExpired:
        logger.info("Secure file URL expired")
        return None
    except BadSignature:
        logger.warning("Secure file URL with bad signature")
        return None
    return payload.get('book_id'), payload.get('uid')


def resolve_book_path(book) -> Optional[str]:
    """Absolute path of the book file, refusing keys that escape the storage root."""
    if not book.file_key:
        return None
    root = os.path.abspath(current_app.config['BOOK_STORAGE_ROOT'])
    path = os.path.abspath(os.path.join(root, book.file_key))
    if not path.startswith(root + os.sep):
        logger.warning(f"Book {book.id} file key points outside storage root")
        return None
    return path
