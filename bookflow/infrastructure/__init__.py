"""Infrastructure layer: persistence, built-in actions and delivery services.

Implements the application interfaces (repositories, actions, notifier).
"""
