"""Client side of the secure book viewer."""

from kaleereads.viewer.client import SecureViewClient, SecureViewError
from kaleereads.viewer.hardening import DomEvent, HardeningSession, is_blocked_shortcut
from kaleereads.viewer.response import (
    SecureViewParseError, SecureViewPayload, ViewerBook, parse_secure_view_response
)
from kaleereads.viewer.session import AuthContext, ViewerSession, ViewerState
from kaleereads.viewer.settings import ViewerSettings

__all__ = [
    'AuthContext',
    'DomEvent',
    'HardeningSession',
    'SecureViewClient',
    'SecureViewError',
    'SecureViewParseError',
    'SecureViewPayload',
    'ViewerBook',
    'ViewerSession',
    'ViewerSettings',
    'ViewerState',
    'is_blocked_shortcut',
    'parse_secure_view_response',
]
