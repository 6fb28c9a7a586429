"""
Table editing sessions.
"""

from .session import SessionState, TableSession

__all__ = ["SessionState", "TableSession"]
