"""Margin protocol facade."""
from .adapter import Margin

__all__ = ["Margin"]
