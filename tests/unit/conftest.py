"""
Unit test configuration.

Every unit test runs against its own config directory under tmp_path, so
no real accounts, tokens or scheduled emails are ever touched.
"""

from datetime import datetime, timedelta, timezone

import pytest

from gcli.sdk import accounts
from gcli.sdk.mail.scheduled import ScheduledEmailStore

T0 = datetime(2024, 12, 24, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    """Point gcli at an empty config directory for the duration of a test."""
    config_dir = tmp_path / "gcli-config"
    monkeypatch.setenv("GCLI_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("GCLI_CONFIG_FILE", raising=False)
    monkeypatch.delenv("GCLI_SCHEDULED_FILE", raising=False)
    monkeypatch.delenv("GCLI_FANOUT_TIMEOUT", raising=False)
    return config_dir


@pytest.fixture
def two_accounts(config_dir):
    """Configure 'work' (default) and 'personal' accounts."""
    accounts.add_account("work", "work-client-id", "work-secret")
    accounts.add_account("personal", "personal-client-id", "personal-secret")
    return ["personal", "work"]


class FakeClock:
    """Controllable clock for the scheduled-email store."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def store(tmp_path, clock):
    return ScheduledEmailStore(tmp_path / "scheduled.json", clock=clock)


@pytest.fixture
def make_email():
    """Factory for the dicts passed to ScheduledEmailStore.add."""
    def factory(account="work", scheduled_at=None, subject="Hello", **overrides):
        email = {
            "account": account,
            "draft_id": f"draft-{subject}",
            "to": ["someone@example.com"],
            "cc": [],
            "bcc": [],
            "subject": subject,
            "body": "Body text",
            "is_html": False,
            "scheduled_at": scheduled_at or T0 + timedelta(hours=1),
        }
        email.update(overrides)
        return email
    return factory
