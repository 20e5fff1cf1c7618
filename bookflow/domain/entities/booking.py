"""Booking domain entities (workflow trigger sources).

These are the shapes the booking side hands to the workflow engine when
it fires a trigger. They carry only what a workflow context needs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class OrganizationRef:
    """Owning tenant of an event type and its bookings."""

    id: str
    name: str = ""
    slug: str = ""


@dataclass(frozen=True)
class HostRef:
    """User who created (hosts) an event type."""

    id: str
    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class ScheduledEventEntity:
    """A bookable event type (e.g. 'Discovery Call')."""

    id: str
    organization: OrganizationRef
    name: str = ""
    slug: str = ""
    description: str | None = None
    # Duration options as configured (e.g. ["30", "60"])
    duration: Any = None
    # Free text, {"type": ...} or a list of such mappings
    location: Any = None
    created_by: HostRef | None = None


@dataclass(frozen=True)
class BookingEntity:
    """A booking of a scheduled event; the source of booking.* triggers."""

    id: str
    event: ScheduledEventEntity
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str = "confirmed"
    cancelled: bool = False
    form_data: dict[str, Any] = field(default_factory=dict)

    @property
    def organization_id(self) -> str:
        """Tenant that scopes workflow lookup for triggers fired by this booking."""
        return self.event.organization.id
