"""Normalizer for the secure-view endpoint payload."""

from dataclasses import dataclass
from typing import Any, Optional

BOOK_MISSING = 'Book data not found in response'
URL_MISSING = 'Secure URL not found in response'
UNKNOWN_AUTHOR = 'Unknown Author'


class SecureViewParseError(ValueError):
    """The payload does not carry a usable book and secure URL."""


@dataclass(frozen=True)
class ViewerBook:
    id: Any
    title: str
    file_type: Optional[str]
    author_name: str


@dataclass(frozen=True)
class SecureViewPayload:
    book: ViewerBook
    secure_url: str


def _author_name(book: dict) -> str:
    author = book.get('author')
    if isinstance(author, dict):
        user = author.get('user')
        if isinstance(user, dict) and user.get('name'):
            return user['name']
    return UNKNOWN_AUTHOR


def parse_secure_view_response(payload) -> SecureViewPayload:
    """
    Accept ``{"data": {"book": ..., "secureUrl": ...}}`` or the same object
    without the envelope.

    Raises:
        SecureViewParseError: ``book`` or ``secureUrl`` missing
    """
    if not isinstance(payload, dict):
        raise SecureViewParseError(BOOK_MISSING)

    body = payload.get('data') or payload
    if not isinstance(body, dict):
        raise SecureViewParseError(BOOK_MISSING)

    book = body.get('book')
    if not isinstance(book, dict) or not book:
        raise SecureViewParseError(BOOK_MISSING)

    secure_url = body.get('secureUrl')
    if not isinstance(secure_url, str) or not secure_url:
        raise SecureViewParseError(URL_MISSING)

    return SecureViewPayload(
        book=ViewerBook(
            id=book.get('id'),
            title=book.get('title') or '',
            file_type=book.get('fileType'),
            author_name=_author_name(book),
        ),
        secure_url=secure_url,
    )
