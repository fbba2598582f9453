"""
Games module - Game-specific implementations.

Each game has its own subpackage with:
- Board geometry helpers
- Transition functions registered on an ActionRegistry
"""
