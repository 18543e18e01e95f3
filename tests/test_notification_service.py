"""Unit tests for NotificationService — match notification payloads."""
import pytest
from datetime import datetime, timezone

from someday.schemas.match import MatchRecord
from someday.services.notification_service import NotificationService


@pytest.fixture
def match():
    return MatchRecord(
        id="match-1",
        user_id="bob",
        counterparty_id="alice",
        compatibility_score=82.0,
        explanation="Aesthetic harmony - your venue preferences reveal aligned personality traits and values.",
        matched_at=datetime.now(timezone.utc),
    )


class TestBuildNotification:

    def test_payload_shape(self, match):
        payload = NotificationService().build_notification(match, "alice", "Bob")
        assert payload["user_id"] == "alice"
        assert payload["type"] == "match"
        assert payload["title"] == "New Match! \U0001f49c"
        assert payload["body"] == "You and Bob matched! Start a conversation now."
        assert payload["read"] is False
        assert payload["data"] == {"match_id": "match-1"}

    def test_ids_unique(self, match):
        service = NotificationService()
        first = service.build_notification(match, "alice", "Bob")
        second = service.build_notification(match, "alice", "Bob")
        assert first["id"] != second["id"]


class TestNotifyMatch:

    @pytest.mark.asyncio
    async def test_one_notification_per_side(self, match):
        delivered = []

        async def capture(notification):
            delivered.append(notification)

        sent = await NotificationService(deliver=capture).notify_match(
            match, user_name="Bob", counterparty_name="Alice"
        )
        assert sent == delivered
        assert [n["user_id"] for n in sent] == ["bob", "alice"]
        assert sent[0]["body"] == "You and Alice matched! Start a conversation now."
        assert sent[1]["body"] == "You and Bob matched! Start a conversation now."

    @pytest.mark.asyncio
    async def test_default_channel_logs(self, match):
        sent = await NotificationService().notify_match(
            match, user_name="Bob", counterparty_name="Alice"
        )
        assert len(sent) == 2

    @pytest.mark.asyncio
    async def test_delivery_error_propagates(self, match):
        async def broken(notification):
            raise ConnectionError("push gateway down")

        with pytest.raises(ConnectionError):
            await NotificationService(deliver=broken).notify_match(
                match, user_name="Bob", counterparty_name="Alice"
            )
