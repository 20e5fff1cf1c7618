"""Action registry: action id -> action, plus the action catalog."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from bookflow.application.interfaces.actions import IAction
from bookflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class ActionRegistry:
    """In-memory lookup of workflow actions by id.

    Built once at startup from every compiled-in action and read-only while
    workflows run. Registering an id twice replaces the earlier action.
    """

    def __init__(self, actions: Iterable[Any] = ()) -> None:
        self._actions: dict[str, IAction] = {}
        for action in actions:
            if isinstance(action, IAction):
                self.register(action)
            else:
                logger.warning(
                    "Skipping %s: does not implement the action protocol",
                    type(action).__name__,
                )

    def register(self, action: IAction) -> None:
        """Add an action under its id (last registration for an id wins)."""
        if action.id in self._actions:
            logger.info("Action %r re-registered; replacing previous", action.id)
        self._actions[action.id] = action

    def get_action(self, action_id: str) -> IAction | None:
        """Return the action for action_id, or None."""
        return self._actions.get(action_id)

    def get_all_actions(self) -> dict[str, IAction]:
        return dict(self._actions)

    def get_actions_by_category(self) -> dict[str, list[dict[str, Any]]]:
        """Return catalog descriptors grouped by category (registration order)."""
        categorized: dict[str, list[dict[str, Any]]] = {}
        for action in self._actions.values():
            descriptor = self._describe(action)
            del descriptor["category"]
            categorized.setdefault(action.category, []).append(descriptor)
        return categorized

    def to_list(self) -> list[dict[str, Any]]:
        """Return catalog descriptors for every action (e.g. for an API response)."""
        return [self._describe(action) for action in self._actions.values()]

    @staticmethod
    def _describe(action: IAction) -> dict[str, Any]:
        return {
            "id": action.id,
            "name": action.name,
            "description": action.description,
            "category": action.category,
            "icon": action.icon,
            "config_schema": action.config_schema,
        }

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._actions

    def __len__(self) -> int:
        return len(self._actions)
