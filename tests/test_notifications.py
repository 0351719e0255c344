"""Tests for the push-monitor notification."""

import urllib.error

from backup_local import notifications
from backup_local.notifications import send_monitor_notification


class FakeResponse:
    def __init__(self, code):
        self.code = code

    def getcode(self):
        return self.code

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def install_urlopen(monkeypatch, outcomes):
    """Replace urlopen with a fake that returns or raises each outcome in turn."""
    requested = []

    def fake_urlopen(url, timeout=None):
        requested.append(url)
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)

    monkeypatch.setattr(notifications.urllib.request, "urlopen", fake_urlopen)
    monkeypatch.setattr(notifications.time, "sleep", lambda seconds: None)
    return requested


class TestSendMonitorNotification:
    """Tests for send_monitor_notification function."""

    def test_success_first_try(self, monkeypatch):
        """Test a single request on success."""
        requested = install_urlopen(monkeypatch, [200])
        assert send_monitor_notification("http://monitor/api/push/abc", "up", "OK")
        assert requested == ["http://monitor/api/push/abc?status=up&msg=OK&ping="]

    def test_existing_query_string(self, monkeypatch):
        """Test parameters are appended to an existing query string."""
        requested = install_urlopen(monkeypatch, [200])
        send_monitor_notification("http://monitor/push?token=x", "down", "FAILED")
        assert requested == ["http://monitor/push?token=x&status=down&msg=FAILED&ping="]

    def test_retry_after_failure(self, monkeypatch):
        """Test one retry follows a failed request."""
        requested = install_urlopen(monkeypatch, [urllib.error.URLError("refused"), 200])
        assert send_monitor_notification("http://monitor/push", "up", "OK", retry_delay=0)
        assert len(requested) == 2

    def test_gives_up_after_retry(self, monkeypatch):
        """Test failures are not raised after the retry."""
        requested = install_urlopen(monkeypatch, [500, urllib.error.URLError("refused")])
        assert not send_monitor_notification("http://monitor/push", "up", "OK", retry_delay=0)
        assert len(requested) == 2
