"""
User-facing API messages.
Denials are deliberately generic; the precise reason only goes to the logs.
"""

from flask_babel import lazy_gettext as _

ACCESS_DENIED = _("Access Denied")
AUTH_REQUIRED = _("Authentication required")
PRIVILEGES_REQUIRED = _("You do not have the required privileges to access this resource.")
INVALID_CREDENTIALS = _("Invalid email or password.")
INVALID_INPUT = _("Invalid input provided.")
INVALID_EXPIRY = _("expiresInHours must be a positive number.")
USER_NOT_FOUND = _("User not found.")
BOOK_NOT_FOUND = _("Book not found.")
FILE_UNAVAILABLE = _("File unavailable.")
LINK_REVOKED = _("Access link revoked.")
