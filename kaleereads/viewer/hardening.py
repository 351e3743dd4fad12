"""
Client-side hardening for the secure viewer.

These countermeasures only discourage casual copying. Access control is the
server-side access link validation; nothing here is a security boundary and
no authorization decision may depend on it.

The host is whatever embeds the viewer (browser bridge, desktop web view).
It must provide:

    add_event_listener(target, event, handler)     target: 'document' | 'window'
    remove_event_listener(target, event, handler)
    set_interval(callback, milliseconds) -> handle
    clear_interval(handle)
    window_size() -> (outer_width, outer_height, inner_width, inner_height)
    navigate(url)                                  full navigation, no confirmation
    set_region_filter(css_filter)                  filter of the viewer region

Event objects passed to handlers need ``key``, ``ctrl_key``, ``shift_key``
and ``prevent_default()``; ``DomEvent`` is a plain implementation.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

SUPPRESSED_DOCUMENT_EVENTS = ('contextmenu', 'selectstart', 'dragstart', 'copy')

# F12, PrintScreen; Ctrl+Shift+I / J (dev tools); Ctrl+U (source), Ctrl+S (save), Ctrl+P (print)
BARE_KEYS = frozenset(['F12', 'PrintScreen'])
CTRL_SHIFT_KEYS = frozenset(['i', 'j'])
CTRL_KEYS = frozenset(['u', 's', 'p'])


@dataclass
class DomEvent:
    type: str
    key: Optional[str] = None
    ctrl_key: bool = False
    shift_key: bool = False
    default_prevented: bool = False

    def prevent_default(self):
        self.default_prevented = True


def is_blocked_shortcut(event) -> bool:
    key = getattr(event, 'key', None) or ''
    if key in BARE_KEYS:
        return True
    if not getattr(event, 'ctrl_key', False):
        return False
    key = key.lower()
    if getattr(event, 'shift_key', False) and key in CTRL_SHIFT_KEYS:
        return True
    return key in CTRL_KEYS


class HardeningSession:
    """Scoped set of listeners and the dev-tools poll.

    ``arm()`` attaches everything, ``disarm()`` removes everything. Use as a
    context manager or pair the calls explicitly on mount/unmount.
    """

    def __init__(self, host, threshold=160, poll_interval_ms=500,
                 redirect_url='/dashboard', blur_filter='blur(5px)'):
        self.host = host
        self.threshold = threshold
        self.poll_interval_ms = poll_interval_ms
        self.redirect_url = redirect_url
        self.blur_filter = blur_filter

        self.armed = False
        self.blurred = False
        self.devtools_open = False
        self._listeners = []
        self._interval = None

    def __enter__(self):
        return self.arm()

    def __exit__(self, exc_type, exc, tb):
        self.disarm()
        return False

    @property
    def listener_count(self):
        return len(self._listeners)

    def _listen(self, target, event, handler):
        self.host.add_event_listener(target, event, handler)
        self._listeners.append((target, event, handler))

    def arm(self):
        if self.armed:
            return self
        try:
            for event in SUPPRESSED_DOCUMENT_EVENTS:
                self._listen('document', event, self._suppress)
            self._listen('document', 'keydown', self._on_keydown)
            self._listen('window', 'blur', self._on_blur)
            self._listen('window', 'focus', self._on_focus)
            self._interval = self.host.set_interval(self.check_devtools, self.poll_interval_ms)
        except Exception:
            self.disarm()
            raise
        self.armed = True
        logger.debug(f"Viewer hardening armed with {len(self._listeners)} listeners")
        return self

    def disarm(self):
        while self._listeners:
            target, event, handler = self._listeners.pop()
            self.host.remove_event_listener(target, event, handler)
        if self._interval is not None:
            self.host.clear_interval(self._interval)
            self._interval = None
        if self.blurred:
            self.host.set_region_filter('none')
            self.blurred = False
        self.armed = False
        self.devtools_open = False

    def _suppress(self, event):
        event.prevent_default()

    def _on_keydown(self, event):
        if is_blocked_shortcut(event):
            event.prevent_default()

    def _on_blur(self, event=None):
        self.host.set_region_filter(self.blur_filter)
        self.blurred = True

    def _on_focus(self, event=None):
        self.host.set_region_filter('none')
        self.blurred = False

    def check_devtools(self):
        """Window-size heuristic; docked panels and some window chrome trip it too."""
        outer_width, outer_height, inner_width, inner_height = self.host.window_size()
        gap_exceeded = (outer_height - inner_height > self.threshold
                        or outer_width - inner_width > self.threshold)
        if not gap_exceeded:
            self.devtools_open = False
            return False

        if not self.devtools_open:
            self.devtools_open = True
            logger.warning("Developer tools suspected, leaving the viewer")
            self.host.navigate(self.redirect_url)
        return True
