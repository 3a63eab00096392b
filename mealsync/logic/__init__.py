"""Core business logic layer.

Subpackages:
- calendar: archiving draft plans into the calendar (with one-step revert)
- learning: learning summary digested from calendar history
- session: start-up workspace load for a session

generation.py declares the AI plan-generation collaborator interface.
"""
__all__ = ["calendar", "learning", "session", "generation"]
