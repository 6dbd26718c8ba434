"""
Unit tests for the scheduled-email dispatcher.

The Gmail "send draft" call is replaced by a recording fake.
"""

from datetime import timedelta

import pytest

from gcli.sdk.mail.dispatch import ScheduledEmailDispatcher
from gcli.sdk.exceptions import AccountNotFoundError, AuthError


class FakeSender:
    """Records send_draft calls; fails for the given draft ids."""

    def __init__(self, failures=None):
        self.calls = []
        self.failures = failures or {}

    def __call__(self, draft_id, account=None):
        self.calls.append((draft_id, account))
        if draft_id in self.failures:
            raise self.failures[draft_id]
        return {"id": f"msg-{draft_id}", "threadId": "thread-1", "labelIds": ["SENT"]}


@pytest.fixture
def due_at(clock):
    return clock.now - timedelta(minutes=5)


def test_nothing_due_is_a_noop(store, make_email):
    store.add(make_email(subject="later"))
    sender = FakeSender()

    result = ScheduledEmailDispatcher(store, send_draft=sender).run()

    assert result["due"] == []
    assert result["sent_count"] == 0
    assert result["error_count"] == 0
    assert sender.calls == []


def test_sends_due_emails_in_store_order(store, make_email, due_at):
    first = store.add(make_email(subject="one", scheduled_at=due_at))
    store.add(make_email(subject="future", scheduled_at=due_at + timedelta(hours=2)))
    second = store.add(make_email(account="personal", subject="two", scheduled_at=due_at))
    sender = FakeSender()

    result = ScheduledEmailDispatcher(store, send_draft=sender).run()

    assert sender.calls == [("draft-one", "work"), ("draft-two", "personal")]
    assert result["sent_count"] == 2
    assert result["error_count"] == 0
    records = {e["id"]: e for e in store.load()}
    assert records[first["id"]]["sent"] is True
    assert records[first["id"]]["message_id"] == "msg-draft-one"
    assert records[second["id"]]["sent"] is True
    assert [e["subject"] for e in store.load() if not e["sent"]] == ["future"]


def test_second_run_sends_nothing(store, make_email, due_at):
    store.add(make_email(subject="a", scheduled_at=due_at))
    store.add(make_email(subject="b", scheduled_at=due_at))
    sender = FakeSender(failures={"draft-b": RuntimeError("quota exceeded")})
    dispatcher = ScheduledEmailDispatcher(store, send_draft=sender)

    first = dispatcher.run()
    second = dispatcher.run()

    assert (first["sent_count"], first["error_count"]) == (1, 1)
    assert (second["sent_count"], second["error_count"]) == (0, 0)
    assert second["due"] == []
    assert len(sender.calls) == 2


def test_one_failure_does_not_stop_the_others(store, make_email, due_at):
    for subject in ("a", "b", "c"):
        store.add(make_email(subject=subject, scheduled_at=due_at))
    sender = FakeSender(failures={"draft-b": RuntimeError("backend error")})

    result = ScheduledEmailDispatcher(store, send_draft=sender).run()

    assert [c[0] for c in sender.calls] == ["draft-a", "draft-b", "draft-c"]
    assert result["sent_count"] == 2
    assert result["error_count"] == 1
    by_subject = {e["subject"]: e for e in store.load()}
    assert by_subject["a"]["sent"] and by_subject["c"]["sent"]
    assert by_subject["b"]["sent"] is False
    assert by_subject["b"]["error"] == "backend error"
    assert result["errors"][0]["error"] == "backend error"


def test_account_and_auth_failures_are_recorded(store, make_email, due_at):
    store.add(make_email(account="ghost", subject="unknown", scheduled_at=due_at))
    store.add(make_email(account="expired", subject="expired", scheduled_at=due_at))
    sender = FakeSender(failures={
        "draft-unknown": AccountNotFoundError("account 'ghost' does not exist"),
        "draft-expired": AuthError("failed to refresh token: invalid_grant"),
    })

    result = ScheduledEmailDispatcher(store, send_draft=sender).run()

    assert result["sent_count"] == 0
    assert result["error_count"] == 2
    errors = {e["subject"]: e["error"] for e in store.load()}
    assert errors["unknown"] == "account 'ghost' does not exist"
    assert "invalid_grant" in errors["expired"]


def test_dry_run_changes_nothing(store, make_email, due_at):
    record = store.add(make_email(subject="due", scheduled_at=due_at))
    before = store.path.read_bytes()
    sender = FakeSender()

    result = ScheduledEmailDispatcher(store, send_draft=sender).run(dry_run=True)

    assert result["dry_run"] is True
    assert [e["id"] for e in result["due"]] == [record["id"]]
    assert result["sent_count"] == 0
    assert result["error_count"] == 0
    assert sender.calls == []
    assert store.path.read_bytes() == before


def test_account_filter(store, make_email, due_at):
    store.add(make_email(account="work", subject="w", scheduled_at=due_at))
    store.add(make_email(account="personal", subject="p", scheduled_at=due_at))
    sender = FakeSender()

    result = ScheduledEmailDispatcher(store, send_draft=sender).run(account="personal")

    assert sender.calls == [("draft-p", "personal")]
    assert result["sent_count"] == 1
    assert [e["subject"] for e in store.list_pending()] == ["w"]


def test_explicit_now_controls_what_is_due(store, make_email, clock):
    store.add(make_email(subject="tomorrow", scheduled_at=clock.now + timedelta(days=1)))
    sender = FakeSender()
    dispatcher = ScheduledEmailDispatcher(store, send_draft=sender)

    assert dispatcher.run()["due"] == []
    result = dispatcher.run(now=clock.now + timedelta(days=2))

    assert result["sent_count"] == 1


def test_store_write_failure_propagates(store, make_email, due_at, monkeypatch):
    store.add(make_email(subject="a", scheduled_at=due_at))

    def broken_mark_sent(email_id, message_id=None):
        raise OSError("read-only file system")

    monkeypatch.setattr(store, "mark_sent", broken_mark_sent)

    with pytest.raises(OSError):
        ScheduledEmailDispatcher(store, send_draft=FakeSender()).run()


def test_default_sender_uses_gmail_send_draft(store, make_email, due_at, monkeypatch):
    store.add(make_email(subject="a", scheduled_at=due_at))
    calls = []

    def fake_send_draft(draft_id, account=None):
        calls.append((draft_id, account))
        return {"id": "msg-1", "threadId": "t", "labelIds": []}

    monkeypatch.setattr("gcli.sdk.mail.send.send_draft", fake_send_draft)

    result = ScheduledEmailDispatcher(store).run()

    assert calls == [("draft-a", "work")]
    assert result["sent_count"] == 1


@pytest.mark.parametrize("failure", [TimeoutError(), RuntimeError("")])
def test_failure_without_message_is_not_retried(store, make_email, due_at, failure):
    store.add(make_email(subject="a", scheduled_at=due_at))
    sender = FakeSender(failures={"draft-a": failure})
    dispatcher = ScheduledEmailDispatcher(store, send_draft=sender)

    first = dispatcher.run()
    second = dispatcher.run()

    assert (first["sent_count"], first["error_count"]) == (0, 1)
    assert (second["sent_count"], second["error_count"]) == (0, 0)
    assert sender.calls == [("draft-a", "work")]
    assert store.load()[0]["error"] == type(failure).__name__


def test_record_without_account_is_not_sent(store, make_email, due_at):
    record = store.add(make_email(account="", subject="orphan", scheduled_at=due_at))
    sender = FakeSender()

    result = ScheduledEmailDispatcher(store, send_draft=sender).run()

    assert sender.calls == []
    assert result["error_count"] == 1
    stored = store.load()[0]
    assert stored["id"] == record["id"]
    assert stored["sent"] is False
    assert stored["error"] == "scheduled email has no account"
