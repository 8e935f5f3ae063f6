"""Claim conversation: sending messages and day grouping."""

from municipal_portal.messaging.grouping import MessageGroup, format_day, group_messages_by_date
from municipal_portal.messaging.service import MessagingService, can_send

__all__ = [
    "MessageGroup",
    "MessagingService",
    "can_send",
    "format_day",
    "group_messages_by_date",
]
