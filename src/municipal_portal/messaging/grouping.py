"""Group a claim's messages by calendar day for display."""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Sequence

from pydantic import BaseModel

from municipal_portal.claims.models import ClaimMessage


class MessageGroup(BaseModel):
    day: date
    label: str
    messages: list[ClaimMessage]


_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_day(day: date) -> str:
    """Format a day as e.g. ``June 9, 2025``, whatever the process locale."""
    return f"{_MONTHS[day.month - 1]} {day.day}, {day.year}"


def _local_day(timestamp: datetime, tz: tzinfo | None) -> date:
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone(tz).date()


def group_messages_by_date(
    messages: Sequence[ClaimMessage], tz: tzinfo | None = None
) -> list[MessageGroup]:
    """Split messages into contiguous runs that share a calendar day.

    Days are taken in ``tz``, or the viewer's local zone when ``tz`` is None.
    The input order is kept. Pure: the same input always yields the same
    groups.
    """
    groups: list[MessageGroup] = []
    for message in messages:
        day = _local_day(message.timestamp, tz)
        if groups and groups[-1].day == day:
            groups[-1].messages.append(message)
        else:
            groups.append(MessageGroup(day=day, label=format_day(day), messages=[message]))
    return groups
