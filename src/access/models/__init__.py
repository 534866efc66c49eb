"""Data models shared by access guards."""

from src.access.models.principal import Principal

__all__ = ["Principal"]
