"""Core: config and composition root.

Single place for settings and for wiring the workflow engine
(bookflow.core.container).
"""

from bookflow.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
