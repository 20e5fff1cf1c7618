"""Workflow context builder: trigger source -> execution context.

The context is what actions see, e.g. {{ booking.customer_email }} in an
email step. It is built once per trigger, is plain JSON-serializable data
(stored verbatim on the execution record) and never raises on partial
source data: missing values become "" or are omitted.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from bookflow.shared.telemetry.logging import get_logger
from bookflow.shared.utils.datetime import format_datetime

logger = get_logger(__name__)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

CONTEXT_KEYS = ("booking", "event", "organization", "host")

_LOCATION_LABELS = {
    "google_meet": "Google Meet",
    "zoom": "Zoom",
    "teams": "Microsoft Teams",
}


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _json_or_empty(value: Any) -> str:
    # Non-string keys or circular data cannot be encoded
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return ""


class WorkflowContextBuilder:
    """Builds execution contexts from bookings (implements IContextBuilder)."""

    def build(self, source: Any) -> dict[str, Any]:
        """Return the context for any trigger source.

        Bookings (anything with an ``event``) get the full booking context;
        other sources get the same top-level keys with only the
        organization id filled in.
        """
        if getattr(source, "event", None) is not None:
            return self.build_from_booking(source)
        logger.warning(
            "No context mapping for trigger source %s; using empty context",
            type(source).__name__,
        )
        return {
            "booking": {},
            "event": {},
            "organization": {"id": _str(getattr(source, "organization_id", None))},
        }

    def build_from_booking(self, booking: Any) -> dict[str, Any]:
        """Return booking.*, event.*, organization.* and, when the event has a creator, host.*."""
        event = getattr(booking, "event", None)
        organization = getattr(event, "organization", None)
        form_data = self._form_data(getattr(booking, "form_data", None))
        contact = form_data.get("primary_contact")
        if not isinstance(contact, Mapping):
            contact = {}
        start_time = getattr(booking, "start_time", None)
        end_time = getattr(booking, "end_time", None)

        context: dict[str, Any] = {
            "booking": {
                "id": _str(getattr(booking, "id", None)),
                "status": _str(getattr(booking, "status", None)),
                "start_time": format_datetime(start_time, DATETIME_FORMAT),
                "end_time": format_datetime(end_time, DATETIME_FORMAT),
                "date": format_datetime(start_time, DATE_FORMAT),
                "time": format_datetime(start_time, TIME_FORMAT),
                "cancelled": bool(getattr(booking, "cancelled", False)),
                "customer_name": _str(contact.get("name")),
                "customer_email": _str(contact.get("email")),
                "customer_phone": _str(contact.get("phone")),
                "form_data": form_data,
            },
            "event": {
                "id": _str(getattr(event, "id", None)),
                "name": _str(getattr(event, "name", None)),
                "slug": _str(getattr(event, "slug", None)),
                "description": _str(getattr(event, "description", None)),
                "duration": copy.deepcopy(getattr(event, "duration", None)),
                "location": self.format_location(getattr(event, "location", None)),
            },
            "organization": {
                "id": _str(getattr(organization, "id", None)),
                "name": _str(getattr(organization, "name", None)),
                "slug": _str(getattr(organization, "slug", None)),
            },
        }

        host = getattr(event, "created_by", None)
        if host is not None:
            context["host"] = {
                "id": _str(getattr(host, "id", None)),
                "name": _str(getattr(host, "name", None)),
                "email": _str(getattr(host, "email", None)),
            }
        return context

    @staticmethod
    def _form_data(raw: Any) -> dict[str, Any]:
        """Return a private copy of the booking form data as a dict ({} when unusable)."""
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError:
                return {}
        if not isinstance(raw, Mapping):
            return {}
        return copy.deepcopy(dict(raw))

    def format_location(self, location: Any) -> str:
        """Return a display label for an event location.

        Accepts free text, a {"type": ...} mapping, or a list whose first
        element is such a mapping. Anything else is JSON-encoded.
        """
        if not location:
            return ""
        if isinstance(location, str):
            return location
        if isinstance(location, Mapping):
            location_type = location.get("type")
            if location_type:
                location_type = str(location_type)
                if location_type in _LOCATION_LABELS:
                    return _LOCATION_LABELS[location_type]
                if location_type == "in_person":
                    return _str(location.get("address")) or "In Person"
                if location_type == "phone":
                    return _str(location.get("phone")) or "Phone Call"
                return location_type.capitalize()
            return _json_or_empty(dict(location))
        if isinstance(location, list | tuple):
            first = location[0]
            if isinstance(first, Mapping) and first.get("type"):
                return self.format_location(first)
            return _json_or_empty(list(location))
        return ""

    def build_fake_context(self) -> dict[str, Any]:
        """Return sample data shaped like build_from_booking() (host included)."""
        return {
            "booking": {
                "id": "123",
                "status": "confirmed",
                "start_time": "2025-11-15 14:00:00",
                "end_time": "2025-11-15 15:00:00",
                "date": "2025-11-15",
                "time": "14:00",
                "cancelled": False,
                "customer_name": "John Doe",
                "customer_email": "john@example.com",
                "customer_phone": "+1234567890",
                "form_data": {},
            },
            "event": {
                "id": "45",
                "name": "Discovery Call",
                "slug": "discovery-call",
                "description": "Initial consultation meeting",
                "duration": ["30"],
                "location": "Google Meet",
            },
            "organization": {
                "id": "1",
                "name": "Acme Corp",
                "slug": "acme-corp",
            },
            "host": {
                "id": "1",
                "name": "Jane Smith",
                "email": "jane@acme.com",
            },
        }
