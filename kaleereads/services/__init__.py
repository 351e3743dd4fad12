"""Server-side services: access links and signed file URLs."""

from kaleereads.services.access_links import (
    AccessValidation,
    RemainingTime,
    create_access_link,
    validate_access_token,
    revoke_access_token,
    cleanup_expired_links,
    get_remaining_time,
)

__all__ = [
    'AccessValidation',
    'RemainingTime',
    'create_access_link',
    'validate_access_token',
    'revoke_access_token',
    'cleanup_expired_links',
    'get_remaining_time',
]
