"""Shared utilities: datetime and generators."""

from bookflow.shared.utils.datetime import ensure_utc, format_datetime, utc_now
from bookflow.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "format_datetime",
]
