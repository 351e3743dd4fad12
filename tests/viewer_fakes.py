"""Test doubles for the viewer host, router and secure-view client."""


class FakeHost:
    """In-memory stand-in for the page hosting the viewer."""

    def __init__(self, size=(1200, 900, 1200, 820)):
        self.listeners = []
        self.intervals = {}
        self.next_handle = 0
        self.size = size
        self.navigations = []
        self.region_filter = 'none'

    def add_event_listener(self, target, event, handler):
        self.listeners.append((target, event, handler))

    def remove_event_listener(self, target, event, handler):
        self.listeners.remove((target, event, handler))

    def set_interval(self, callback, milliseconds):
        self.next_handle += 1
        self.intervals[self.next_handle] = (callback, milliseconds)
        return self.next_handle

    def clear_interval(self, handle):
        del self.intervals[handle]

    def window_size(self):
        return self.size

    def navigate(self, url):
        self.navigations.append(url)

    def set_region_filter(self, css_filter):
        self.region_filter = css_filter

    def dispatch(self, target, event):
        for t, name, handler in list(self.listeners):
            if t == target and name == event.type:
                handler(event)
        return event

    def tick(self):
        for callback, _ms in list(self.intervals.values()):
            callback()



class FakeRouter:

    def __init__(self):
        self.pushed = []
        self.back_calls = 0

    def push(self, url):
        self.pushed.append(url)

    def back(self):
        self.back_calls += 1


class RecordingClient:
    """SecureViewClient stand-in returning a canned payload."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    def fetch(self, book_id, bearer_token):
        self.calls.append((book_id, bearer_token))
        if self.error is not None:
            raise self.error
        return self.payload
