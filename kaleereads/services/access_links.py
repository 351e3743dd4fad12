"""
Time-limited access links.

An access link grants one user access to one book until ``expires_at``.
Links can be revoked (one way) and are purged by a periodic sweep once
expired. Expected outcomes (unknown, revoked, expired) are returned as
values; only persistence failures raise.

Usage:
    link = create_access_link(user.id, book.id)
    result = validate_access_token(link.token)
    if result.valid:
        ...
"""

import logging
import math
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from kaleereads import db
from kaleereads.models import AccessLink, Book, Author
from kaleereads.utils.audit_log import log_action

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
DEFAULT_ACCESS_HOURS = 168

REASON_NOT_FOUND = 'Token not found'
REASON_REVOKED = 'Token has been revoked'
REASON_EXPIRED = 'Token has expired'


def _now() -> datetime:
    return datetime.utcnow()


@dataclass(frozen=True)
class AccessValidation:
    valid: bool
    reason: Optional[str] = None
    access_link: Optional[AccessLink] = None

    def __bool__(self):
        return self.valid


@dataclass(frozen=True)
class RemainingTime:
    expired: bool
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def to_dict(self):
        return {
            'expired': self.expired,
            'hours': self.hours,
            'minutes': self.minutes,
            'seconds': self.seconds,
        }


def generate_token() -> str:
    """64 hex characters (256 bits) from the OS CSPRNG."""
    return secrets.token_hex(TOKEN_BYTES)


def default_access_hours() -> float:
    return current_app.config.get('TIME_LIMITED_ACCESS_HOURS', DEFAULT_ACCESS_HOURS)


def _check_hours(expires_in_hours):
    if isinstance(expires_in_hours, bool) or not isinstance(expires_in_hours, (int, float)):
        raise ValueError('expires_in_hours must be a number')
    if not math.isfinite(expires_in_hours) or expires_in_hours <= 0:
        raise ValueError('expires_in_hours must be positive')


def _with_relations(query):
    return query.options(
        joinedload(AccessLink.book).joinedload(Book.author).joinedload(Author.user),
        joinedload(AccessLink.user),
    )


def create_access_link(user_id: int, book_id: int, expires_in_hours: Optional[float] = None) -> AccessLink:
    """
    Create a time-limited access link for a book.

    Args:
        user_id: Owner of the grant
        book_id: Book being granted
        expires_in_hours: Lifetime; defaults to TIME_LIMITED_ACCESS_HOURS

    Returns:
        The persisted AccessLink with ``book`` and ``user`` loaded

    Raises:
        ValueError: expires_in_hours is not a positive number
        IntegrityError: insert failed twice (token collision or bad foreign key)
    """
    if expires_in_hours is None:
        expires_in_hours = default_access_hours()
    _check_hours(expires_in_hours)

    expires_at = _now() + timedelta(hours=expires_in_hours)

    for attempt in (1, 2):
        link = AccessLink(token=generate_token(), user_id=user_id, book_id=book_id,
                          expires_at=expires_at, is_revoked=False)
        db.session.add(link)
        try:
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
            if attempt == 2:
                raise
            logger.warning("Access link insert rejected, retrying with a fresh token")

    link = _with_relations(AccessLink.query).filter_by(id=link.id).one()
    logger.info(f"Access link {link.id} created: book {book_id} for user {user_id} until {expires_at}")
    log_action('ACCESS_LINK_CREATED', 'Access link created', subject=link,
               additional_info={'book_id': book_id, 'user_id': user_id,
                                'expires_at': expires_at.isoformat() + 'Z'})
    return link


def validate_access_token(token: str) -> AccessValidation:
    """
    Check whether a token currently grants access.

    Revocation is reported before expiry. No side effects.
    """
    if not token:
        return AccessValidation(valid=False, reason=REASON_NOT_FOUND)

    link = _with_relations(AccessLink.query).filter_by(token=token).first()

    if link is None:
        return AccessValidation(valid=False, reason=REASON_NOT_FOUND)

    if link.is_revoked:
        return AccessValidation(valid=False, reason=REASON_REVOKED)

    if link.is_expired(_now()):
        return AccessValidation(valid=False, reason=REASON_EXPIRED)

    return AccessValidation(valid=True, access_link=link)


def revoke_access_token(token: str) -> bool:
    """
    Revoke an access token.

    Unknown tokens are a silent no-op so callers cannot probe for existence.

    Returns:
        True if a link with this token exists (now revoked), False otherwise
    """
    link = AccessLink.query.filter_by(token=token).first() if token else None
    if link is None:
        logger.info("Revoke requested for unknown access token")
        return False

    if not link.is_revoked:
        link.revoke()
        db.session.commit()
        logger.info(f"Access link {link.id} revoked")
        log_action('ACCESS_LINK_REVOKED', 'Access link revoked', subject=link,
                   additional_info={'book_id': link.book_id, 'user_id': link.user_id})
    return True


def find_active_link(user_id: int, book_id: int) -> Optional[AccessLink]:
    """Newest unrevoked, unexpired link a user holds for a book."""
    return (AccessLink.query
            .filter(AccessLink.user_id == user_id,
                    AccessLink.book_id == book_id,
                    AccessLink.is_revoked.is_(False),
                    AccessLink.expires_at > _now())
            .order_by(AccessLink.expires_at.desc())
            .first())


def get_remaining_time(expires_at: datetime, now: Optional[datetime] = None) -> RemainingTime:
    """Countdown until ``expires_at``, floored to whole seconds."""
    diff = expires_at - (now or _now())
    total_seconds = int(diff.total_seconds())

    if diff.total_seconds() <= 0:
        return RemainingTime(expired=True)

    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return RemainingTime(expired=False, hours=hours, minutes=minutes, seconds=seconds)


def cleanup_expired_links() -> int:
    """Delete every link whose deadline has passed. Returns the number deleted."""
    try:
        deleted_count = (AccessLink.query
                         .filter(AccessLink.expires_at < _now())
                         .delete(synchronize_session=False))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Cleanup complete: Deleted {deleted_count} expired access links")
    if deleted_count:
        log_action('ACCESS_LINKS_CLEANED', 'Expired access links deleted',
                   additional_info={'count': deleted_count})
    return deleted_count
