"""Context template rendering for action configs: {{ booking.customer_email }} -> value (Jinja)."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from jinja2 import ChainableUndefined, Template, TemplateError
from jinja2.sandbox import SandboxedEnvironment

# Plain dotted placeholders, e.g. {{ booking.customer_email }} or {{host.name}}
_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_]\w*(?:\.\w+)*)\s*\}\}")


def lookup_path(context: Mapping[str, Any], path: str) -> Any:
    """Return the value at a dotted path (mapping keys, list indexes), or None."""
    value: Any = context
    for key in path.split("."):
        if isinstance(value, Mapping):
            value = value.get(key)
        elif isinstance(value, Sequence) and not isinstance(value, str) and key.isdigit():
            index = int(key)
            value = value[index] if index < len(value) else None
        else:
            return None
        if value is None:
            return None
    return value


class ContextTemplateRenderer:
    """Renders {{ path }} placeholders in action config strings against a workflow context.

    A plain placeholder whose path does not resolve (or resolves to None) is
    left in the output exactly as written, so a typo stays visible in the
    delivered message. Other Jinja expressions render normally.
    """

    def __init__(self, *, cache_size: int = 256) -> None:
        self._env = SandboxedEnvironment(
            autoescape=False, undefined=ChainableUndefined, keep_trailing_newline=True
        )
        self._cache_size = cache_size
        self._compiled: dict[str, Template] = {}

    def render(self, template: str, context: dict[str, Any]) -> str:
        """Render template against context. Raises ValueError on template syntax errors."""
        if "{{" not in template and "{%" not in template:
            return template

        def _keep_unresolved(match: re.Match[str]) -> str:
            if lookup_path(context, match.group(1)) is None:
                return "{% raw %}" + match.group(0) + "{% endraw %}"
            return match.group(0)

        source = _PLACEHOLDER_RE.sub(_keep_unresolved, template)
        try:
            return self._compile(source).render(**context)
        except TemplateError as e:
            raise ValueError(f"Invalid template: {e}") from e

    def _compile(self, source: str) -> Template:
        compiled = self._compiled.get(source)
        if compiled is None:
            compiled = self._env.from_string(source)
            if len(self._compiled) >= self._cache_size:
                self._compiled.clear()
            self._compiled[source] = compiled
        return compiled
