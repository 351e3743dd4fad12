"""
Protected viewer session.

Lifecycle of one visit to the secure viewer:

    UNAUTHENTICATED -> AUTHENTICATING -> FETCHING -> READY | ERROR
    UNAUTHENTICATED -> AUTHENTICATING -> REDIRECTED (no principal, sent to login)

``mount()`` arms the hardening layer and starts the flow; ``unmount()``
disarms it and discards any result that arrives afterwards. Every failure
ends in ERROR with one message; nothing propagates out of the session.
"""

import enum
import logging

from kaleereads.viewer.client import SecureViewClient, SecureViewError, LOAD_FAILED
from kaleereads.viewer.hardening import HardeningSession
from kaleereads.viewer.response import SecureViewParseError, parse_secure_view_response
from kaleereads.viewer.settings import ViewerSettings

logger = logging.getLogger(__name__)

AUTH_REQUIRED = 'Authentication required'
DENIED_HEADING = 'Access Denied'


class ViewerState(enum.Enum):
    UNAUTHENTICATED = 'unauthenticated'
    AUTHENTICATING = 'authenticating'
    FETCHING = 'fetching'
    READY = 'ready'
    ERROR = 'error'
    REDIRECTED = 'redirected'


class AuthContext:
    """Ambient authentication state shared by the client.

    Starts loading; ``resolve()`` settles it (``user=None`` means signed out)
    and notifies subscribers once.
    """

    def __init__(self, user=None, is_loading=True):
        self.user = user
        self.is_loading = is_loading
        self._subscribers = []

    @property
    def is_authenticated(self):
        return self.user is not None

    def subscribe(self, callback):
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def resolve(self, user=None):
        self.user = user
        self.is_loading = False
        for callback in list(self._subscribers):
            callback()


class ViewerSession:
    """One mounted secure viewer for ``book_id``.

    Args:
        book_id: Book from the route
        auth: AuthContext (or anything with ``is_loading``, ``user``, ``subscribe``)
        credentials: Mapping-like store holding the cached bearer credential
        router: Object with ``push(url)`` and ``back()``
        host: Hardening host (see ``kaleereads.viewer.hardening``)
        client: SecureViewClient; built from settings when omitted
        settings: ViewerSettings
    """

    def __init__(self, book_id, auth, credentials, router, host, client=None, settings=None):
        self.settings = settings or ViewerSettings()
        self.book_id = book_id
        self.auth = auth
        self.credentials = credentials
        self.router = router
        self.client = client or SecureViewClient(self.settings.API_BASE_URL, self.settings.API_TIMEOUT)
        self.hardening = HardeningSession(
            host,
            threshold=self.settings.DEVTOOLS_THRESHOLD,
            poll_interval_ms=self.settings.DEVTOOLS_POLL_MS,
            redirect_url=self.settings.DEVTOOLS_REDIRECT,
            blur_filter=self.settings.BLUR_FILTER,
        )

        self.state = ViewerState.UNAUTHENTICATED
        self.error = None
        self.book = None
        self.resource_url = None
        self.mounted = False
        self._unsubscribe = None

    def __enter__(self):
        return self.mount()

    def __exit__(self, exc_type, exc, tb):
        self.unmount()
        return False

    @property
    def status_message(self):
        if self.state == ViewerState.AUTHENTICATING:
            return 'Checking authentication...'
        if self.state == ViewerState.FETCHING:
            return 'Loading secure viewer...'
        if self.state == ViewerState.ERROR:
            return DENIED_HEADING
        return None

    def mount(self):
        if self.mounted:
            return self
        self.mounted = True
        try:
            self.hardening.arm()
        except Exception:
            # never show content unprotected
            logger.exception("Viewer: could not arm content protection")
            self._fail(LOAD_FAILED)
            return self

        if self.auth.is_loading:
            self.state = ViewerState.AUTHENTICATING
            self._unsubscribe = self.auth.subscribe(self._on_auth_resolved)
            return self

        self._on_auth_resolved()
        return self

    def unmount(self):
        self.mounted = False
        self._drop_subscription()
        self.hardening.disarm()

    def go_back(self):
        self.router.back()

    def _drop_subscription(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_auth_resolved(self):
        if not self.mounted or self.auth.is_loading:
            return
        if self.state not in (ViewerState.UNAUTHENTICATED, ViewerState.AUTHENTICATING):
            return
        self._drop_subscription()

        if self.auth.user is None:
            logger.info("Viewer: not authenticated, redirecting to login")
            self.state = ViewerState.REDIRECTED
            self.router.push(self.settings.LOGIN_ROUTE)
            return

        self._load()

    def _load(self):
        self.state = ViewerState.FETCHING

        token = self.credentials.get(self.settings.TOKEN_STORAGE_KEY)
        if not token:
            self._fail(AUTH_REQUIRED)
            return

        try:
            payload = parse_secure_view_response(self.client.fetch(self.book_id, token))
        except (SecureViewError, SecureViewParseError) as e:
            logger.error(f"Viewer: error fetching book {self.book_id}: {e}")
            self._fail(str(e))
            return
        except Exception:
            logger.exception(f"Viewer: unexpected error fetching book {self.book_id}")
            self._fail(LOAD_FAILED)
            return

        if not self.mounted:
            logger.debug("Viewer: unmounted before secure view resolved, discarding result")
            return

        self.book = payload.book
        self.resource_url = payload.secure_url
        self.state = ViewerState.READY

    def _fail(self, message):
        if not self.mounted:
            return
        self.error = message
        self.state = ViewerState.ERROR
