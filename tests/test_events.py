"""
Rule Event Tests

Sinks are exercised with the database and HTTP collaborators mocked.

Version: rule_events_v1
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi import BackgroundTasks

from netrules.events import (
    AuditLogSink,
    EventPublisher,
    EventSeverity,
    LoggingSink,
    NotificationSink,
    RuleEvent,
    RuleEventType,
    build_publisher,
)


@pytest.fixture
def event():
    return RuleEvent(
        event_type=RuleEventType.RULE_CREATED,
        title="Traffic Rule Created",
        message='New traffic rule "Stream-Priority" has been created and enabled.',
        target_roles=["admin", "operator"],
        details={"rule_id": "r1"},
    )


class TestPublisher:

    def test_delivers_to_every_sink(self, event, recording_sink):
        other = MagicMock()
        EventPublisher([recording_sink, other]).publish(event)
        assert recording_sink.events == [event]
        other.deliver.assert_called_once_with(event)

    def test_sink_failure_is_swallowed(self, event, recording_sink):
        failing = MagicMock()
        failing.name = "failing"
        failing.deliver.side_effect = RuntimeError("smtp down")
        EventPublisher([failing, recording_sink]).publish(event)
        assert recording_sink.events == [event]

    def test_background_tasks_defer_delivery(self, event, recording_sink):
        tasks = BackgroundTasks()
        EventPublisher([recording_sink]).publish(event, tasks)
        assert recording_sink.events == []
        assert len(tasks.tasks) == 1

    def test_no_sinks_is_noop(self, event):
        EventPublisher().publish(event, BackgroundTasks())


class TestAuditLogSink:

    def test_inserts_audit_row(self, event):
        conn = MagicMock()
        with patch("netrules.events.sinks.get_db", return_value=conn):
            assert AuditLogSink("postgresql://x").record("traffic_rule_created", {"rule_id": "r1"}, "info")
        sql, params = conn.cursor.return_value.execute.call_args[0]
        assert "INSERT INTO audit_logs" in sql
        assert params[0] == "traffic_rule_created"
        assert params[1] == "network_management"
        conn.commit.assert_called_once()
        conn.close.assert_called_once()

    def test_no_connection_returns_false(self, event):
        with patch("netrules.events.sinks.get_db", return_value=None):
            assert AuditLogSink().record("traffic_rule_created", {}) is False


class TestNotificationSink:

    def test_posts_to_webhook(self, event):
        client = MagicMock()
        client.__enter__.return_value = client
        with patch("netrules.events.sinks.httpx.Client", return_value=client):
            NotificationSink(webhook_url="https://hooks.local/notify").deliver(event)
        url = client.post.call_args[0][0]
        body = client.post.call_args[1]["json"]
        assert url == "https://hooks.local/notify"
        assert body["title"] == "Traffic Rule Created"
        assert body["target_roles"] == ["admin", "operator"]
        assert body["severity"] == "info"

    def test_webhook_error_raises_for_publisher(self, event):
        client = MagicMock()
        client.__enter__.return_value = client
        client.post.return_value.raise_for_status.side_effect = httpx.HTTPError("502")
        with patch("netrules.events.sinks.httpx.Client", return_value=client):
            with pytest.raises(httpx.HTTPError):
                NotificationSink(webhook_url="https://hooks.local/notify").deliver(event)

    def test_inserts_notification_without_webhook(self, event):
        conn = MagicMock()
        with patch("netrules.events.sinks.get_db", return_value=conn):
            NotificationSink(database_url="postgresql://x").deliver(event)
        sql, params = conn.cursor.return_value.execute.call_args[0]
        assert "INSERT INTO notifications" in sql
        assert params[4] == ["admin", "operator"]

    def test_events_without_roles_skipped(self):
        quiet = RuleEvent(
            event_type=RuleEventType.RULES_VALIDATED,
            title="Traffic Rules Validated",
            message="1/1 rules passed validation.",
        )
        with patch("netrules.events.sinks.get_db") as get_db:
            NotificationSink().deliver(quiet)
        get_db.assert_not_called()


class TestBuildPublisher:

    def test_dev_mode_logs_only(self):
        publisher = build_publisher(database_url="")
        assert [type(s) for s in publisher.sinks] == [LoggingSink]

    def test_database_mode_audits_and_notifies(self):
        with patch("netrules.events.publisher.config") as config:
            config.AUDIT_ENABLED = True
            config.NOTIFICATIONS_ENABLED = True
            config.NOTIFICATION_WEBHOOK_URL = ""
            publisher = build_publisher(database_url="postgresql://x")
        assert [type(s) for s in publisher.sinks] == [AuditLogSink, NotificationSink]

    def test_severity_serialized(self, event):
        assert event.to_api()["severity"] == EventSeverity.INFO.value
        assert event.to_api()["eventType"] == "traffic_rule_created"
