"""
SQLAlchemy ORM models for the Hyperliquid action service.
"""

from .action import ActionRecord

__all__ = [
    "ActionRecord",
]
