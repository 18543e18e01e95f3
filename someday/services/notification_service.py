"""
Someday — Match notification dispatcher.

Builds one "New Match!" notification per side of a match and hands it to
the delivery channel.  The default channel only logs; push or in-app
delivery is wired in by passing a different ``deliver`` coroutine.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import structlog

from someday.schemas.match import MatchRecord

logger = structlog.get_logger("someday.notification_service")

DeliverFn = Callable[[dict], Awaitable[None]]


async def _log_delivery(notification: dict) -> None:
    logger.info(
        "notification_delivered",
        notification_id=notification["id"],
        user_id=notification["user_id"],
        type=notification["type"],
    )


class NotificationService:

    TITLE = "New Match! \U0001f49c"
    BODY_TEMPLATE = "You and {name} matched! Start a conversation now."

    def __init__(self, deliver: Optional[DeliverFn] = None) -> None:
        self._deliver: DeliverFn = deliver or _log_delivery

    def build_notification(self, match: MatchRecord, recipient_id: str, other_name: str) -> dict:
        return {
            "id": str(uuid.uuid4()),
            "user_id": recipient_id,
            "type": "match",
            "title": self.TITLE,
            "body": self.BODY_TEMPLATE.format(name=other_name),
            "read": False,
            "data": {"match_id": match.id},
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

    async def notify_match(
        self,
        match: MatchRecord,
        user_name: str,
        counterparty_name: str,
    ) -> list[dict]:
        """Notify both parties of ``match`` and return the payloads sent."""
        notifications = [
            self.build_notification(match, match.user_id, counterparty_name),
            self.build_notification(match, match.counterparty_id, user_name),
        ]
        for notification in notifications:
            await self._deliver(notification)
        return notifications
