import pytest

from kaleereads.viewer.hardening import DomEvent, HardeningSession, is_blocked_shortcut
from viewer_fakes import FakeHost


@pytest.mark.parametrize('key,ctrl,shift', [
    ('F12', False, False),
    ('PrintScreen', False, False),
    ('I', True, True),
    ('i', True, True),
    ('J', True, True),
    ('u', True, False),
    ('s', True, False),
    ('p', True, False),
])
def test_blocked_shortcuts(key, ctrl, shift):
    assert is_blocked_shortcut(DomEvent('keydown', key=key, ctrl_key=ctrl, shift_key=shift))


@pytest.mark.parametrize('key,ctrl,shift', [
    ('a', False, False),
    ('i', True, False),
    ('c', True, False),
    ('u', False, False),
    ('ArrowDown', False, False),
])
def test_allowed_keys(key, ctrl, shift):
    assert not is_blocked_shortcut(DomEvent('keydown', key=key, ctrl_key=ctrl, shift_key=shift))


def test_arm_suppresses_copy_paths_and_shortcuts():
    host = FakeHost()
    with HardeningSession(host) as session:
        assert session.armed
        for name in ('contextmenu', 'selectstart', 'dragstart', 'copy'):
            assert host.dispatch('document', DomEvent(name)).default_prevented

        assert host.dispatch('document', DomEvent('keydown', key='s', ctrl_key=True)).default_prevented
        assert not host.dispatch('document', DomEvent('keydown', key='ArrowRight')).default_prevented


def test_blur_and_focus_toggle_region_filter():
    host = FakeHost()
    session = HardeningSession(host).arm()
    host.dispatch('window', DomEvent('blur'))
    assert host.region_filter == 'blur(5px)'
    assert session.blurred
    host.dispatch('window', DomEvent('focus'))
    assert host.region_filter == 'none'
    session.disarm()


def test_disarm_removes_every_listener_and_timer():
    host = FakeHost()
    session = HardeningSession(host, poll_interval_ms=500).arm()
    assert session.listener_count == 7
    assert list(host.intervals.values())[0][1] == 500

    host.dispatch('window', DomEvent('blur'))
    session.disarm()
    assert host.listeners == []
    assert host.intervals == {}
    assert host.region_filter == 'none'
    assert not session.armed

    # idempotent; events after teardown are not intercepted
    session.disarm()
    assert not host.dispatch('document', DomEvent('copy')).default_prevented


def test_arm_twice_does_not_duplicate_listeners():
    host = FakeHost()
    session = HardeningSession(host).arm()
    session.arm()
    assert len(host.listeners) == 7
    assert len(host.intervals) == 1
    session.disarm()


def test_failed_arm_releases_partial_registrations():
    class BrokenHost(FakeHost):
        def set_interval(self, callback, milliseconds):
            raise RuntimeError('no timers')

    host = BrokenHost()
    with pytest.raises(RuntimeError):
        HardeningSession(host).arm()
    assert host.listeners == []


def test_devtools_heuristic_navigates_once_per_episode():
    host = FakeHost()
    session = HardeningSession(host, threshold=160, redirect_url='/dashboard').arm()

    host.tick()
    assert host.navigations == []

    host.size = (1200, 900, 1200, 600)  # docked panel, 300px tall
    host.tick()
    host.tick()
    assert host.navigations == ['/dashboard']

    host.size = (1200, 900, 1200, 820)
    host.tick()
    assert not session.devtools_open

    host.size = (1400, 900, 1000, 820)  # side panel, 400px wide
    host.tick()
    assert host.navigations == ['/dashboard', '/dashboard']
    session.disarm()


def test_gap_at_threshold_is_tolerated():
    host = FakeHost(size=(1360, 960, 1200, 800))
    session = HardeningSession(host, threshold=160).arm()
    assert session.check_devtools() is False
    assert host.navigations == []
    session.disarm()
