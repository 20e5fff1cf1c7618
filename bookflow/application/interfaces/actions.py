"""Action capability protocol (port).

An action is a pluggable unit of work a workflow step invokes by id
(e.g. 'email.send'). The engine only relies on id, validate() and
execute(); the descriptive attributes feed the action catalog.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IAction(Protocol):
    """Protocol for workflow actions, resolved from ActionRegistry by id."""

    @property
    def id(self) -> str:
        """Stable identifier used in workflow steps (e.g. 'webhook.send')."""

    @property
    def name(self) -> str:
        """Human-readable name (e.g. 'Send Webhook')."""

    @property
    def description(self) -> str:
        """Short description for the action catalog."""

    @property
    def category(self) -> str:
        """Catalog grouping (e.g. 'communication', 'integration')."""

    @property
    def icon(self) -> str:
        """Icon identifier for builders (e.g. 'PhEnvelope')."""

    @property
    def config_schema(self) -> dict[str, dict[str, Any]]:
        """Field definitions for the step config (field name -> attributes)."""

    def validate(self, config: Mapping[str, Any]) -> list[str]:
        """Return configuration error messages; empty when the config is valid."""

    async def execute(
        self, config: Mapping[str, Any], context: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Run the action and return its result payload. Raises on failure."""
